"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from chronosnap.config import Settings
from chronosnap.containers import AppContainer
from chronosnap.domain.content import ContentPart, InlineImagePart, Modality, TextPart
from chronosnap.domain.images import ImagePayload
from chronosnap.errors import DeviceUnavailableError
from chronosnap.services.capture import CameraDevice, ImageSourceAdapter
from chronosnap.services.session import SessionController
from chronosnap.services.transform import ModelClient, TransformService

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


def png_payload(marker: bytes) -> ImagePayload:
    """Build a small PNG-typed payload tagged with `marker`."""
    return ImagePayload.from_bytes(PNG_HEADER + marker, "image/png")


@dataclass
class FakeModelClient(ModelClient):
    """Model client returning queued responses and recording calls."""

    responses: list[list[ContentPart] | Exception] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        api_key: str,
        model: str,
        image: ImagePayload,
        instruction: str,
        modality: Modality,
    ) -> list[ContentPart]:
        self.calls.append(
            {
                "api_key": api_key,
                "model": model,
                "image": image,
                "instruction": instruction,
                "modality": modality,
            }
        )
        if not self.responses:
            if modality is Modality.TEXT:
                return [TextPart(text="A person in modern clothing.")]
            return [InlineImagePart(data=png_payload(b"generated").data)]
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        return None


@dataclass
class GatedModelClient(FakeModelClient):
    """Model client that blocks until the gate is opened."""

    gate: asyncio.Event | None = None

    async def generate(self, **kwargs) -> list[ContentPart]:  # type: ignore[override]
        if self.gate is not None:
            await self.gate.wait()
        return await super().generate(**kwargs)


@dataclass
class FakeCamera(CameraDevice):
    frame: bytes = PNG_HEADER + b"frame"
    fail_on_grab: bool = False
    released: bool = False
    mirror_flags: list[bool] = field(default_factory=list)

    def grab_png(self, *, mirror: bool) -> bytes:
        self.mirror_flags.append(mirror)
        if self.fail_on_grab:
            raise DeviceUnavailableError("stream ended")
        return self.frame

    def release(self) -> None:
        self.released = True


@dataclass
class FakeCameraFactory:
    """Camera opener that records every device it hands out."""

    fail: bool = False
    opened: list[FakeCamera] = field(default_factory=list)

    def __call__(self) -> FakeCamera:
        if self.fail:
            raise DeviceUnavailableError("permission denied")
        camera = FakeCamera()
        self.opened.append(camera)
        return camera


def build_transform_service(
    client: ModelClient, api_key: str | None = "test-key"
) -> TransformService:
    return TransformService(
        client=client,
        analysis_model="analysis-model",
        image_model="image-model",
        api_key=lambda: api_key,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", camera_enabled=False, _env_file=None)


@pytest.fixture
def model_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def camera_factory() -> FakeCameraFactory:
    return FakeCameraFactory()


@pytest.fixture
def container(
    settings: Settings,
    model_client: FakeModelClient,
    camera_factory: FakeCameraFactory,
) -> AppContainer:
    transform_service = build_transform_service(model_client)
    image_source = ImageSourceAdapter(open_camera=camera_factory)
    session_controller = SessionController(
        transform_service=transform_service,
        image_source=image_source,
    )

    async def close_resources() -> None:
        image_source.close()

    return AppContainer(
        settings=settings,
        model_client=model_client,
        transform_service=transform_service,
        image_source=image_source,
        session_controller=session_controller,
        close_resources=close_resources,
    )
