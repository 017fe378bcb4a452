"""Sequential fallback across provider/model tiers."""

import logging
from dataclasses import dataclass

from niume_ai.domain.errors import AllProvidersExhausted, SafetySuppressed
from niume_ai.domain.generation import AttemptResult, GenerationRequest, RawResponse
from niume_ai.services.providers import ProviderTier

_logger = logging.getLogger(__name__)


@dataclass
class FallbackOrchestrator:
    """Try each tier in order until one returns usable text.

    Tiers are called one at a time; a failed, timed-out or empty attempt is
    logged and the next tier is tried. ``AllProvidersExhausted`` is raised
    only after every eligible tier has been attempted, as ``SafetySuppressed``
    when each of them refused on safety grounds.
    """

    tiers: list[ProviderTier]

    async def generate(
        self, request: GenerationRequest, *, accept_suppressed: bool = False
    ) -> RawResponse:
        """Return the first usable response.

        With ``accept_suppressed`` a provider safety refusal counts as a
        result (moderation treats it as a verdict); otherwise it is a
        failure to fall back from.
        """
        attempts: list[AttemptResult] = []
        for tier in self._eligible(request):
            attempt = await self._attempt(tier, request, accept_suppressed)
            if attempt.response is not None:
                return attempt.response
            _logger.warning(
                "Provider %s/%s failed, trying next: %s",
                tier.spec.name,
                tier.spec.model,
                attempt.error,
            )
            attempts.append(attempt)
        if attempts and all(attempt.suppressed for attempt in attempts):
            raise SafetySuppressed(attempts)
        raise AllProvidersExhausted(attempts)

    def _eligible(self, request: GenerationRequest) -> list[ProviderTier]:
        if request.image is None:
            return list(self.tiers)
        return [tier for tier in self.tiers if tier.spec.supports_vision]

    @staticmethod
    async def _attempt(
        tier: ProviderTier, request: GenerationRequest, accept_suppressed: bool
    ) -> AttemptResult:
        try:
            response = await tier.client.call(tier.spec.model, request)
        except Exception as exc:  # noqa: BLE001
            return AttemptResult(spec=tier.spec, error=f"{type(exc).__name__}: {exc}")
        if response.suppressed:
            if accept_suppressed:
                return AttemptResult(spec=tier.spec, response=response)
            return AttemptResult(
                spec=tier.spec, error="suppressed by provider safety", suppressed=True
            )
        if response.is_empty:
            return AttemptResult(spec=tier.spec, error="empty response")
        return AttemptResult(spec=tier.spec, response=response)
