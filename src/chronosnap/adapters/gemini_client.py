"""Google Generative Language API client."""

from dataclasses import dataclass

import httpx

from chronosnap.domain.content import ContentPart, InlineImagePart, Modality, TextPart
from chronosnap.domain.images import ImagePayload
from chronosnap.errors import ModelServiceError
from chronosnap.services.transform import ModelClient


@dataclass
class HttpxGeminiClient(ModelClient):
    """Gemini generateContent client using httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 120.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 120.0) -> "HttpxGeminiClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def generate(  # noqa: PLR0913
        self,
        *,
        api_key: str,
        model: str,
        image: ImagePayload,
        instruction: str,
        modality: Modality,
    ) -> list[ContentPart]:
        """Call generateContent with an inline image and a text instruction."""
        url = f"{self.base_url}/models/{model}:generateContent"
        payload: dict[str, object] = {
            "contents": [
                {
                    "parts": [
                        {
                            "inlineData": {
                                "mimeType": image.mime_type,
                                "data": image.data,
                            }
                        },
                        {"text": instruction},
                    ]
                }
            ]
        }
        if modality is Modality.IMAGE:
            payload["generationConfig"] = {"responseModalities": ["TEXT", "IMAGE"]}
        try:
            response = await self.http_client.post(
                url,
                headers={"x-goog-api-key": api_key},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ModelServiceError(f"Gemini request failed: {exc}") from exc
        return _parse_parts(body)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _parse_parts(body: dict[str, object]) -> list[ContentPart]:
    """Flatten the first candidate's content into typed parts."""
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return []
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    raw_parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(raw_parts, list):
        return []

    parts: list[ContentPart] = []
    for raw in raw_parts:
        if not isinstance(raw, dict) or raw.get("thought"):
            continue
        inline = raw.get("inlineData") or raw.get("inline_data")
        if isinstance(inline, dict) and inline.get("data"):
            parts.append(
                InlineImagePart(
                    data=str(inline["data"]),
                    mime_type=str(
                        inline.get("mimeType") or inline.get("mime_type") or "image/png"
                    ),
                )
            )
        elif isinstance(raw.get("text"), str):
            parts.append(TextPart(text=raw["text"]))
    return parts
