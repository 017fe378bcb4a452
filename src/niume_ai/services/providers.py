"""Provider client contract and tier ordering."""

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from niume_ai.domain.errors import ProviderTimeout
from niume_ai.domain.generation import GenerationRequest, ProviderSpec, RawResponse

T = TypeVar("T")


class ProviderClient(Protocol):
    """Interface for one text/vision generation provider."""

    async def call(self, model: str, request: GenerationRequest) -> RawResponse:
        """Make one call and return raw text or a suppression marker."""


@dataclass(frozen=True)
class ProviderTier:
    """A provider/model pair bound to the client that serves it."""

    spec: ProviderSpec
    client: ProviderClient


def order_provider_specs(
    specs: Iterable[ProviderSpec], primary: str | None = None
) -> list[ProviderSpec]:
    """Primary provider first, then the rest; cheaper tiers first within each."""
    ordered = list(specs)
    provider_rank: dict[str, int] = {}
    for spec in ordered:
        provider_rank.setdefault(spec.name, len(provider_rank))
    if primary is not None and primary in provider_rank:
        provider_rank[primary] = -1
    return sorted(ordered, key=lambda spec: (provider_rank[spec.name], spec.priority))


async def call_with_deadline(
    awaitable: Awaitable[T], *, timeout_seconds: float, provider: str, model: str
) -> T:
    """Await a provider call, cancelling it once the deadline passes."""
    try:
        async with asyncio.timeout(timeout_seconds):
            return await awaitable
    except TimeoutError as exc:
        raise ProviderTimeout(provider, model, timeout_seconds) from exc
