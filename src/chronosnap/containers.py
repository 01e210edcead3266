"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial

from chronosnap.adapters.gemini_client import HttpxGeminiClient
from chronosnap.adapters.openai_image_client import OpenAIImageClient
from chronosnap.adapters.opencv_camera import OpenCvCamera
from chronosnap.config import Settings, resolve_api_key
from chronosnap.services.capture import (
    CameraDevice,
    ImageSourceAdapter,
    camera_disabled,
)
from chronosnap.services.session import SessionController
from chronosnap.services.transform import ModelClient, TransformService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    model_client: ModelClient
    transform_service: TransformService
    image_source: ImageSourceAdapter
    session_controller: SessionController
    close_resources: Callable[[], Awaitable[None]]


def build_model_client(settings: Settings) -> HttpxGeminiClient | OpenAIImageClient:
    """Create the model client for the configured provider."""
    if settings.ai_provider == "openai":
        return OpenAIImageClient(timeout=settings.request_timeout_seconds)
    if settings.ai_provider != "gemini":
        raise ValueError(f"Unknown model provider: {settings.ai_provider}")
    return HttpxGeminiClient.create(
        base_url=settings.gemini_base_url,
        timeout=settings.request_timeout_seconds,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    model_client = build_model_client(resolved_settings)
    analysis_model, image_model = resolved_settings.provider_models()
    transform_service = TransformService(
        client=model_client,
        analysis_model=analysis_model,
        image_model=image_model,
        api_key=partial(resolve_api_key, resolved_settings),
    )
    open_camera: Callable[[], CameraDevice] = camera_disabled
    if resolved_settings.camera_enabled:
        open_camera = partial(
            OpenCvCamera.open,
            index=resolved_settings.camera_index,
            width=resolved_settings.camera_width,
            height=resolved_settings.camera_height,
        )
    image_source = ImageSourceAdapter(
        open_camera=open_camera,
        mirror=resolved_settings.camera_mirror,
    )
    session_controller = SessionController(
        transform_service=transform_service,
        image_source=image_source,
    )

    async def close_resources() -> None:
        image_source.close()
        await model_client.close()

    return AppContainer(
        settings=resolved_settings,
        model_client=model_client,
        transform_service=transform_service,
        image_source=image_source,
        session_controller=session_controller,
        close_resources=close_resources,
    )
