"""Image transform and scene analysis requests against a generative model."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from chronosnap.domain.content import ContentPart, Modality, first_image, joined_text
from chronosnap.domain.images import ImagePayload
from chronosnap.errors import (
    AnalysisFailedError,
    MissingCredentialError,
    ModelServiceError,
    NoImageProducedError,
    TransformFailedError,
)

logger = logging.getLogger(__name__)

DEFAULT_ANALYSIS_INSTRUCTION = (
    "Analyze this image in detail. Describe the subject's appearance, clothing, "
    "facial expression, and the setting. Also identify any historical "
    "anachronisms if present."
)
NO_ANALYSIS_TEXT = "No analysis available."


class ModelClient(Protocol):
    """Interface for a remote generative model."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        api_key: str,
        model: str,
        image: ImagePayload,
        instruction: str,
        modality: Modality,
    ) -> list[ContentPart]:
        """Send an image and instruction and return the response parts."""


@dataclass
class TransformService:
    """Stateless client for the model's analysis and edit capabilities."""

    client: ModelClient
    analysis_model: str
    image_model: str
    api_key: Callable[[], str | None]

    async def analyze(self, image: ImagePayload, instruction: str | None = None) -> str:
        """Describe the scene in an image."""
        api_key = self._require_api_key()
        try:
            parts = await self.client.generate(
                api_key=api_key,
                model=self.analysis_model,
                image=image,
                instruction=instruction or DEFAULT_ANALYSIS_INSTRUCTION,
                modality=Modality.TEXT,
            )
        except ModelServiceError as exc:
            raise AnalysisFailedError(
                "Failed to analyze image. Please try again."
            ) from exc
        return joined_text(parts) or NO_ANALYSIS_TEXT

    async def transform(self, image: ImagePayload, instruction: str) -> ImagePayload:
        """Generate a new image from a source image and an instruction."""
        api_key = self._require_api_key()
        try:
            parts = await self.client.generate(
                api_key=api_key,
                model=self.image_model,
                image=image,
                instruction=instruction,
                modality=Modality.IMAGE,
            )
        except ModelServiceError as exc:
            raise TransformFailedError(
                "Failed to generate image. Please try again."
            ) from exc
        part = first_image(parts)
        if part is None:
            logger.warning(
                "Model returned no image part",
                extra={"model": self.image_model, "parts": len(parts)},
            )
            raise NoImageProducedError("No image generated in response.")
        return ImagePayload(data=part.data, mime_type="image/png")

    def _require_api_key(self) -> str:
        api_key = self.api_key()
        if not api_key:
            raise MissingCredentialError("API Key not found")
        return api_key
