"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from niume_ai.adapters.gemini_client import HttpxGeminiClient
from niume_ai.adapters.object_fetcher import HttpxObjectFetcher
from niume_ai.adapters.openai_client import OpenAIChatClient
from niume_ai.adapters.supabase_blocklist_repository import (
    SupabaseBlocklistRepository,
)
from niume_ai.adapters.supabase_fact_cache_repository import (
    SupabaseFactCacheRepository,
)
from niume_ai.config import Settings, parse_model_list
from niume_ai.domain.generation import ProviderSpec
from niume_ai.services.cache import InMemoryCache
from niume_ai.services.fact_cache import FactCacheService
from niume_ai.services.moderation import ModerationService
from niume_ai.services.orchestrator import FallbackOrchestrator
from niume_ai.services.pipeline import GenerationPipeline
from niume_ai.services.providers import (
    ProviderClient,
    ProviderTier,
    order_provider_specs,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    pipeline: GenerationPipeline
    close_resources: Callable[[], Awaitable[None]]


def build_provider_tiers(
    settings: Settings, clients: dict[str, ProviderClient]
) -> list[ProviderTier]:
    """Expand configured providers into ordered provider/model tiers."""
    model_lists = {
        "gemini": parse_model_list(settings.gemini_models),
        "openai": parse_model_list(settings.openai_models),
    }
    specs = [
        ProviderSpec(name=name, model=model, supports_vision=True, priority=index)
        for name, models in model_lists.items()
        if name in clients
        for index, model in enumerate(models)
    ]
    ordered = order_provider_specs(specs, primary=settings.primary_provider)
    return [ProviderTier(spec=spec, client=clients[spec.name]) for spec in ordered]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    cache = InMemoryCache()

    gemini_client: HttpxGeminiClient | None = None
    openai_client: OpenAIChatClient | None = None
    clients: dict[str, ProviderClient] = {}
    if resolved_settings.gemini_api_key:
        gemini_client = HttpxGeminiClient.create(
            api_key=resolved_settings.gemini_api_key,
            base_url=resolved_settings.gemini_base_url,
        )
        clients["gemini"] = gemini_client
    if resolved_settings.openai_api_key:
        openai_client = OpenAIChatClient.create(resolved_settings.openai_api_key)
        clients["openai"] = openai_client

    orchestrator = FallbackOrchestrator(
        tiers=build_provider_tiers(resolved_settings, clients)
    )
    object_fetcher = HttpxObjectFetcher.create(
        timeout_seconds=resolved_settings.object_fetch_timeout_seconds
    )
    fact_cache = FactCacheService(
        repository=SupabaseFactCacheRepository(
            supabase_client, table_name=resolved_settings.fact_cache_table
        ),
        cache=cache,
        hit_ttl_seconds=resolved_settings.fact_cache_ttl_seconds,
    )
    moderation = ModerationService(
        orchestrator=orchestrator,
        blocklist_repository=SupabaseBlocklistRepository(
            supabase_client, table_name=resolved_settings.blocklist_table
        ),
        object_fetcher=object_fetcher,
        cache=cache,
        timeout_seconds=resolved_settings.moderation_timeout_seconds,
        blocklist_ttl_seconds=resolved_settings.blocklist_ttl_seconds,
    )
    pipeline = GenerationPipeline(
        orchestrator=orchestrator,
        fact_cache=fact_cache,
        moderation=moderation,
        timeout_seconds=resolved_settings.provider_timeout_seconds,
    )

    async def close_resources() -> None:
        await object_fetcher.close()
        if gemini_client is not None:
            await gemini_client.close()
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        pipeline=pipeline,
        close_resources=close_resources,
    )
