"""OpenAI Chat Completions client."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from niume_ai.domain.errors import ProviderError, ProviderTimeout
from niume_ai.domain.generation import GenerationRequest, RawResponse
from niume_ai.services.providers import ProviderClient, call_with_deadline

PROVIDER_NAME = "openai"


@dataclass
class OpenAIChatClient(ProviderClient):
    """Provider client backed by the OpenAI Chat Completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIChatClient":
        """Create an OpenAI chat client."""
        return cls(client=AsyncOpenAI(api_key=api_key, max_retries=0))

    async def call(self, model: str, request: GenerationRequest) -> RawResponse:
        """Call Chat Completions for one model."""
        return await call_with_deadline(
            self._complete(model, request),
            timeout_seconds=request.timeout_seconds,
            provider=PROVIDER_NAME,
            model=model,
        )

    async def _complete(self, model: str, request: GenerationRequest) -> RawResponse:
        request_payload = build_chat_payload(model, request)
        try:
            completion = await self.client.chat.completions.create(**request_payload)
        except openai.APITimeoutError as exc:
            raise ProviderTimeout(
                PROVIDER_NAME, model, request.timeout_seconds
            ) from exc
        except openai.APIStatusError as exc:
            raise ProviderError(
                PROVIDER_NAME, model, f"HTTP {exc.status_code}"
            ) from exc
        except openai.OpenAIError as exc:
            raise ProviderError(PROVIDER_NAME, model, str(exc)) from exc

        if not completion.choices:
            return RawResponse(text="", provider=PROVIDER_NAME, model=model)
        choice = completion.choices[0]
        message = choice.message
        refused = getattr(message, "refusal", None)
        if choice.finish_reason == "content_filter" or refused:
            return RawResponse.safety_suppressed(PROVIDER_NAME, model)
        return RawResponse(
            text=message.content or "", provider=PROVIDER_NAME, model=model
        )

    async def close(self) -> None:
        """Close the underlying SDK client."""
        await self.client.close()


def build_chat_payload(model: str, request: GenerationRequest) -> dict[str, object]:
    """Build keyword arguments for ``chat.completions.create``."""
    content: object = request.prompt
    if request.image is not None:
        content = [
            {"type": "text", "text": request.prompt},
            {"type": "image_url", "image_url": {"url": request.image.data_url()}},
        ]
    request_payload: dict[str, object] = {
        "model": model,
        "messages": [{"role": "user", "content": content}],
        "temperature": request.temperature,
        "timeout": request.timeout_seconds,
    }
    if request.max_output_tokens:
        request_payload["max_tokens"] = request.max_output_tokens
    if request.expects_json:
        request_payload["response_format"] = {"type": "json_object"}
    return request_payload
