"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from niume_ai.config import Settings
from niume_ai.containers import AppContainer
from niume_ai.domain.generation import GenerationRequest, ProviderSpec, RawResponse
from niume_ai.domain.nutrition import FactCacheEntry, Provenance
from niume_ai.services.cache import InMemoryCache
from niume_ai.services.fact_cache import FactCacheRepository, FactCacheService
from niume_ai.services.moderation import (
    BlocklistRepository,
    FetchedObject,
    ModerationService,
    ObjectFetcher,
)
from niume_ai.services.orchestrator import FallbackOrchestrator
from niume_ai.services.pipeline import GenerationPipeline
from niume_ai.services.providers import ProviderClient, ProviderTier

ScriptedReply = RawResponse | str | Exception

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@dataclass
class FakeProviderClient(ProviderClient):
    """Provider client that replays scripted replies and records calls."""

    name: str = "fake"
    replies: list[ScriptedReply] = field(default_factory=list)
    default: ScriptedReply = ""
    calls: list[tuple[str, GenerationRequest]] = field(default_factory=list)

    async def call(self, model: str, request: GenerationRequest) -> RawResponse:
        self.calls.append((model, request))
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str):
            return RawResponse(text=reply, provider=self.name, model=model)
        return reply


def make_tier(
    client: FakeProviderClient, model: str = "model-a", supports_vision: bool = True
) -> ProviderTier:
    return ProviderTier(
        spec=ProviderSpec(
            name=client.name, model=model, supports_vision=supports_vision
        ),
        client=client,
    )


@dataclass
class InMemoryFactCacheRepository(FactCacheRepository):
    """In-memory fact cache repository for tests."""

    entries: list[FactCacheEntry] = field(default_factory=list)
    inserted: list[FactCacheEntry] = field(default_factory=list)
    lookups: list[str] = field(default_factory=list)
    fail_inserts: bool = False
    fail_lookups: bool = False

    def find_by_name(self, name: str) -> FactCacheEntry | None:
        self.lookups.append(name)
        if self.fail_lookups:
            raise RuntimeError("database unavailable")
        for entry in self.entries:
            if entry.name.casefold() == name.casefold():
                return entry
        return None

    def insert(self, entry: FactCacheEntry) -> None:
        if self.fail_inserts:
            raise RuntimeError("duplicate key value violates unique constraint")
        self.inserted.append(entry)
        self.entries.append(entry)


def curated(
    name: str, calories: int, protein: int = 0, carbs: int = 0, fat: int = 0
) -> FactCacheEntry:
    return FactCacheEntry(
        name=name,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        unit_weight=100,
        provenance=Provenance.CURATED,
    )


@dataclass
class InMemoryBlocklistRepository(BlocklistRepository):
    """In-memory blocklist for tests."""

    words: list[str] = field(default_factory=list)
    calls: int = 0
    fail: bool = False

    def list_words(self) -> list[str]:
        self.calls += 1
        if self.fail:
            raise RuntimeError("blocklist table missing")
        return list(self.words)


@dataclass
class FakeObjectFetcher(ObjectFetcher):
    """Object fetcher returning fixed bytes."""

    content: bytes = PNG_SIGNATURE + b"\x00" * 64
    content_type: str = "image/png"
    urls: list[str] = field(default_factory=list)

    async def fetch(self, url: str) -> FetchedObject:
        self.urls.append(url)
        return FetchedObject(content=self.content, content_type=self.content_type)


@dataclass
class FakeClock:
    now: float = 1000.0

    def __call__(self) -> float:
        return self.now


@dataclass
class PipelineParts:
    """A pipeline wired from fakes, with handles to each fake."""

    provider: FakeProviderClient
    repository: InMemoryFactCacheRepository
    blocklist: InMemoryBlocklistRepository
    fetcher: FakeObjectFetcher
    cache: InMemoryCache
    pipeline: GenerationPipeline


def build_pipeline(
    replies: list[ScriptedReply] | None = None,
    entries: list[FactCacheEntry] | None = None,
    clock: Callable[[], float] | None = None,
) -> PipelineParts:
    provider = FakeProviderClient(name="gemini", replies=list(replies or []))
    repository = InMemoryFactCacheRepository(entries=list(entries or []))
    blocklist = InMemoryBlocklistRepository()
    fetcher = FakeObjectFetcher()
    cache = InMemoryCache(clock=clock) if clock else InMemoryCache()
    orchestrator = FallbackOrchestrator(tiers=[make_tier(provider)])
    pipeline = GenerationPipeline(
        orchestrator=orchestrator,
        fact_cache=FactCacheService(repository=repository, cache=cache),
        moderation=ModerationService(
            orchestrator=orchestrator,
            blocklist_repository=blocklist,
            object_fetcher=fetcher,
            cache=cache,
        ),
    )
    return PipelineParts(
        provider=provider,
        repository=repository,
        blocklist=blocklist,
        fetcher=fetcher,
        cache=cache,
        pipeline=pipeline,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        gemini_api_key="gemini-key",
        openai_api_key="openai-key",
    )


@pytest.fixture
def parts() -> PipelineParts:
    return build_pipeline()


@pytest.fixture
def container(settings: Settings, parts: PipelineParts) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        pipeline=parts.pipeline,
        close_resources=close_resources,
    )
