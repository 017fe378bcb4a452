"""Error taxonomy for the structured-generation pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from niume_ai.domain.generation import AttemptResult


class GenerationError(Exception):
    """Base class for every failure the pipeline reports to callers."""


class ProviderError(GenerationError):
    """A single provider call failed (HTTP error, bad envelope, transport)."""

    def __init__(self, provider: str, model: str, message: str) -> None:
        super().__init__(f"{provider}/{model}: {message}")
        self.provider = provider
        self.model = model


class ProviderTimeout(ProviderError):
    """A single provider call exceeded its deadline and was cancelled."""

    def __init__(self, provider: str, model: str, timeout_seconds: float) -> None:
        super().__init__(provider, model, f"timed out after {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class AllProvidersExhausted(GenerationError):
    """Every configured provider/model tier was tried without success."""

    def __init__(self, attempts: list[AttemptResult]) -> None:
        if attempts:
            tried = ", ".join(
                f"{attempt.spec.name}/{attempt.spec.model} ({attempt.error})"
                for attempt in attempts
            )
            message = f"All providers failed: {tried}"
        else:
            message = "No provider is configured for this request"
        super().__init__(message)
        self.attempts = attempts


class SafetySuppressed(AllProvidersExhausted):
    """Every attempted provider's own safety system refused to answer."""


class UnparseableResponse(GenerationError):
    """No usable JSON could be recovered from a provider response."""


class ObjectFetchError(GenerationError):
    """A stored object (e.g. a photo to moderate) could not be downloaded."""
