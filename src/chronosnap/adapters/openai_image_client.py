"""OpenAI Responses API client for image edits and scene analysis."""

from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from chronosnap.domain.content import ContentPart, InlineImagePart, Modality, TextPart
from chronosnap.domain.images import ImagePayload
from chronosnap.errors import ModelServiceError
from chronosnap.services.transform import ModelClient


@dataclass
class OpenAIImageClient(ModelClient):
    """Model client backed by OpenAI Responses API."""

    client: AsyncOpenAI | None = None
    timeout: float = 120.0

    async def generate(  # noqa: PLR0913
        self,
        *,
        api_key: str,
        model: str,
        image: ImagePayload,
        instruction: str,
        modality: Modality,
    ) -> list[ContentPart]:
        """Call OpenAI Responses API with an input image and instruction."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": instruction},
                        {"type": "input_image", "image_url": image.data_url},
                    ],
                }
            ],
            "store": False,
        }
        if modality is Modality.IMAGE:
            request_payload["tools"] = [{"type": "image_generation"}]

        try:
            response = await self._client(api_key).responses.create(**request_payload)
        except OpenAIError as exc:
            raise ModelServiceError(f"OpenAI request failed: {exc}") from exc

        parts: list[ContentPart] = []
        for item in response.output or []:
            if getattr(item, "type", None) == "image_generation_call":
                result = getattr(item, "result", None)
                if result:
                    parts.append(InlineImagePart(data=result, mime_type="image/png"))
        if response.output_text:
            parts.append(TextPart(text=response.output_text))
        return parts

    def _client(self, api_key: str) -> AsyncOpenAI:
        if self.client is None:
            self.client = AsyncOpenAI(api_key=api_key, timeout=self.timeout)
        # The key is resolved per call and may have been rotated since creation.
        return self.client.with_options(api_key=api_key)

    async def close(self) -> None:
        """Close the underlying OpenAI client, if one was created."""
        if self.client is not None:
            await self.client.close()
