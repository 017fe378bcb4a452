"""Gemini generateContent REST client."""

from dataclasses import dataclass

import httpx

from niume_ai.domain.errors import ProviderError
from niume_ai.domain.generation import GenerationRequest, RawResponse
from niume_ai.services.providers import ProviderClient, call_with_deadline

PROVIDER_NAME = "gemini"

_SAFETY_FINISH_REASONS = frozenset(
    {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "IMAGE_SAFETY"}
)
_RELAXED_SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_NONE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


@dataclass
class HttpxGeminiClient(ProviderClient):
    """Gemini client using httpx."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxGeminiClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def call(self, model: str, request: GenerationRequest) -> RawResponse:
        """Call generateContent for one model."""
        return await call_with_deadline(
            self._generate(model, request),
            timeout_seconds=request.timeout_seconds,
            provider=PROVIDER_NAME,
            model=model,
        )

    async def _generate(self, model: str, request: GenerationRequest) -> RawResponse:
        url = f"{self.base_url}/models/{model}:generateContent"
        try:
            response = await self.http_client.post(
                url,
                headers={"x-goog-api-key": self.api_key},
                json=build_gemini_payload(request),
                timeout=request.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                PROVIDER_NAME, model, f"HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderError(PROVIDER_NAME, model, str(exc) or repr(exc)) from exc
        return parse_gemini_response(payload, model)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def build_gemini_payload(request: GenerationRequest) -> dict[str, object]:
    """Build a generateContent request body."""
    parts: list[dict[str, object]] = []
    if request.image is not None:
        parts.append(
            {
                "inlineData": {
                    "data": request.image.data_base64,
                    "mimeType": request.image.mime_type,
                }
            }
        )
    parts.append({"text": request.prompt})

    generation_config: dict[str, object] = {"temperature": request.temperature}
    if request.max_output_tokens:
        generation_config["maxOutputTokens"] = request.max_output_tokens
    if request.expects_json:
        generation_config["responseMimeType"] = "application/json"

    payload: dict[str, object] = {
        "contents": [{"parts": parts}],
        "generationConfig": generation_config,
    }
    if request.relax_safety:
        payload["safetySettings"] = _RELAXED_SAFETY_SETTINGS
    return payload


def parse_gemini_response(payload: dict[str, object], model: str) -> RawResponse:
    """Return the first candidate's text, or a suppression marker."""
    feedback = payload.get("promptFeedback") or {}
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        return RawResponse.safety_suppressed(PROVIDER_NAME, model)

    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return RawResponse(text="", provider=PROVIDER_NAME, model=model)
    candidate = candidates[0]
    if candidate.get("finishReason") in _SAFETY_FINISH_REASONS:
        return RawResponse.safety_suppressed(PROVIDER_NAME, model)

    content = candidate.get("content") or {}
    texts = [
        part["text"]
        for part in content.get("parts") or []
        if isinstance(part.get("text"), str)
    ]
    return RawResponse(text="".join(texts), provider=PROVIDER_NAME, model=model)
