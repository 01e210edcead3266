"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from chronosnap.api.models import (
    ActionResponse,
    EditRequest,
    EraView,
    InstructionRequest,
    NoticeView,
    SessionView,
)
from chronosnap.app_logging import configure_logging
from chronosnap.containers import AppContainer
from chronosnap.domain.eras import get_era, list_eras
from chronosnap.errors import (
    DeviceUnavailableError,
    InvalidTransitionError,
    MissingCredentialError,
    UnknownEraError,
    UnsupportedImageError,
)
from chronosnap.services.capture import CAMERA_ERROR_MESSAGE
from chronosnap.services.session import SessionNotice

DOWNLOAD_FILENAME = "chronosnap_time_travel.png"


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await run_in_threadpool(app.state.container.image_source.start)
        except DeviceUnavailableError:
            logger.warning("Camera not available at startup; uploads only")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition(
        request: Request, exc: InvalidTransitionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(UnknownEraError)
    async def unknown_era(request: Request, exc: UnknownEraError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(UnsupportedImageError)
    async def unsupported_image(
        request: Request, exc: UnsupportedImageError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(MissingCredentialError)
    async def missing_credential(
        request: Request, exc: MissingCredentialError
    ) -> JSONResponse:
        logger.error("Model API key is not configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "API key not configured"},
        )

    def _action(notice: SessionNotice | None = None) -> ActionResponse:
        state_container: AppContainer = app.state.container
        return ActionResponse(
            session=SessionView.build(
                state_container.session_controller.state,
                state_container.image_source,
            ),
            notice=NoticeView.from_notice(notice),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/eras")
    async def eras() -> dict[str, list[EraView]]:
        """List the time travel destinations."""
        return {"eras": [EraView.from_preset(era) for era in list_eras()]}

    @app.get("/session")
    async def session(request: Request, include_image: bool = False) -> SessionView:
        """Return the current session state."""
        state_container: AppContainer = request.app.state.container
        return SessionView.build(
            state_container.session_controller.state,
            state_container.image_source,
            include_image=include_image,
        )

    @app.post("/session/capture/camera")
    async def capture_camera(request: Request) -> ActionResponse:
        """Capture a frame from the live camera feed."""
        state_container: AppContainer = request.app.state.container
        try:
            payload = await run_in_threadpool(
                state_container.image_source.capture_from_live_feed
            )
        except DeviceUnavailableError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=state_container.image_source.device_error
                or CAMERA_ERROR_MESSAGE,
            ) from exc
        state_container.session_controller.on_image_captured(payload)
        return _action()

    @app.post("/session/capture/upload")
    async def capture_upload(request: Request) -> ActionResponse:
        """Capture an uploaded image sent as raw bytes or a data URL."""
        state_container: AppContainer = request.app.state.container
        body = await request.body()
        if not body:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Empty upload"
            )
        source = state_container.image_source
        if body.lstrip().startswith(b"data:"):
            try:
                url = body.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise UnsupportedImageError("Upload is not a valid data URL") from exc
            payload = source.capture_from_data_url(url)
        else:
            payload = source.capture_from_file(body)
        state_container.session_controller.on_image_captured(payload)
        return _action()

    @app.post("/session/camera/restart")
    async def restart_camera(request: Request) -> ActionResponse:
        """Release and re-acquire the camera stream."""
        state_container: AppContainer = request.app.state.container
        try:
            await run_in_threadpool(state_container.image_source.restart)
        except DeviceUnavailableError:
            logger.warning("Camera restart failed")
        return _action()

    @app.post("/session/reset")
    async def reset(request: Request) -> ActionResponse:
        """Start over with a new photo."""
        state_container: AppContainer = request.app.state.container
        await run_in_threadpool(state_container.session_controller.on_reset)
        return _action()

    @app.put("/session/instruction")
    async def set_instruction(
        body: InstructionRequest, request: Request
    ) -> ActionResponse:
        """Store the free-form edit text being typed."""
        state_container: AppContainer = request.app.state.container
        state_container.session_controller.set_pending_instruction(body.text)
        return _action()

    @app.post("/session/eras/{era_id}")
    async def time_travel(era_id: str, request: Request) -> ActionResponse:
        """Transform the original photo into the selected era."""
        state_container: AppContainer = request.app.state.container
        era = get_era(era_id)
        notice = await state_container.session_controller.on_preset_selected(era)
        return _action(notice)

    @app.post("/session/edit")
    async def magic_edit(
        request: Request, body: EditRequest | None = None
    ) -> ActionResponse:
        """Apply a free-form edit to the latest image."""
        state_container: AppContainer = request.app.state.container
        text = body.text if body is not None else None
        notice = await state_container.session_controller.on_freeform_edit_requested(
            text
        )
        return _action(notice)

    @app.post("/session/analyze")
    async def analyze(request: Request) -> ActionResponse:
        """Request a scene analysis of the latest image."""
        state_container: AppContainer = request.app.state.container
        notice = await state_container.session_controller.on_analysis_requested()
        return _action(notice)

    @app.get("/session/image")
    async def current_image(request: Request) -> Response:
        """Return the image currently on display."""
        state_container: AppContainer = request.app.state.container
        image = state_container.session_controller.state.display_image
        if image is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(content=image.to_bytes(), media_type=image.mime_type)

    @app.get("/session/download")
    async def download(request: Request) -> Response:
        """Download the transformed image as a PNG attachment."""
        state_container: AppContainer = request.app.state.container
        image = state_container.session_controller.state.current_result_image
        if image is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(
            content=image.to_bytes(),
            media_type=image.mime_type,
            headers={
                "Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"'
            },
        )

    return app
