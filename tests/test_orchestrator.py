"""Tests for provider fallback."""

import asyncio
import logging

import pytest

from niume_ai.domain.errors import (
    AllProvidersExhausted,
    ProviderError,
    ProviderTimeout,
    SafetySuppressed,
)
from niume_ai.domain.generation import (
    GenerationRequest,
    ImagePayload,
    ProviderSpec,
    RawResponse,
)
from niume_ai.services.orchestrator import FallbackOrchestrator
from niume_ai.services.providers import call_with_deadline, order_provider_specs
from tests.conftest import FakeProviderClient, make_tier


class _RecordingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def orchestrator_logs():
    logger = logging.getLogger("niume_ai.services.orchestrator")
    handler = _RecordingHandler()
    logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)


def test_falls_back_until_a_tier_succeeds(orchestrator_logs) -> None:
    calls: list[str] = []

    class Recording(FakeProviderClient):
        async def call(self, model, request):  # type: ignore[no-untyped-def]
            calls.append(f"{self.name}/{model}")
            return await super().call(model, request)

    first = Recording(
        name="gemini", replies=[ProviderError("gemini", "a", "HTTP 500")]
    )
    second = Recording(name="gemini", replies=[""])
    third = Recording(name="openai", replies=['{"ok": true}'])
    orchestrator = FallbackOrchestrator(
        tiers=[
            make_tier(first, "flash-lite"),
            make_tier(second, "flash"),
            make_tier(third, "gpt-4o-mini"),
        ]
    )

    response = asyncio.run(orchestrator.generate(GenerationRequest(prompt="p")))

    assert response.text == '{"ok": true}'
    assert response.provider == "openai"
    assert calls == ["gemini/flash-lite", "gemini/flash", "openai/gpt-4o-mini"]
    warnings = [r for r in orchestrator_logs if r.levelno == logging.WARNING]
    assert len(warnings) == 2


def test_first_success_stops_the_chain() -> None:
    first = FakeProviderClient(name="gemini", replies=["primeiro"])
    second = FakeProviderClient(name="openai", replies=["segundo"])
    orchestrator = FallbackOrchestrator(tiers=[make_tier(first), make_tier(second)])

    response = asyncio.run(orchestrator.generate(GenerationRequest(prompt="p")))

    assert response.text == "primeiro"
    assert second.calls == []


def test_all_tiers_failing_raises_exhausted() -> None:
    first = FakeProviderClient(name="gemini", replies=[RuntimeError("boom")])
    second = FakeProviderClient(name="openai", replies=["   "])
    orchestrator = FallbackOrchestrator(tiers=[make_tier(first), make_tier(second)])

    with pytest.raises(AllProvidersExhausted) as excinfo:
        asyncio.run(orchestrator.generate(GenerationRequest(prompt="p")))

    attempts = excinfo.value.attempts
    assert [attempt.spec.name for attempt in attempts] == ["gemini", "openai"]
    assert attempts[0].error == "RuntimeError: boom"
    assert attempts[1].error == "empty response"


def test_no_tiers_raises_exhausted() -> None:
    orchestrator = FallbackOrchestrator(tiers=[])

    with pytest.raises(AllProvidersExhausted, match="No provider"):
        asyncio.run(orchestrator.generate(GenerationRequest(prompt="p")))


def test_suppressed_response_falls_back_by_default() -> None:
    first = FakeProviderClient(
        name="gemini", replies=[RawResponse.safety_suppressed("gemini", "m")]
    )
    second = FakeProviderClient(name="openai", replies=["ok"])
    orchestrator = FallbackOrchestrator(tiers=[make_tier(first), make_tier(second)])

    response = asyncio.run(orchestrator.generate(GenerationRequest(prompt="p")))

    assert response.text == "ok"


def test_suppressed_response_is_returned_when_accepted() -> None:
    first = FakeProviderClient(
        name="gemini", replies=[RawResponse.safety_suppressed("gemini", "m")]
    )
    second = FakeProviderClient(name="openai", replies=["ok"])
    orchestrator = FallbackOrchestrator(tiers=[make_tier(first), make_tier(second)])

    response = asyncio.run(
        orchestrator.generate(GenerationRequest(prompt="p"), accept_suppressed=True)
    )

    assert response.suppressed is True
    assert second.calls == []


def test_image_requests_skip_text_only_tiers() -> None:
    text_only = FakeProviderClient(name="text", replies=["nope"])
    vision = FakeProviderClient(name="vision", replies=["sim"])
    orchestrator = FallbackOrchestrator(
        tiers=[make_tier(text_only, supports_vision=False), make_tier(vision)]
    )
    request = GenerationRequest(
        prompt="p", image=ImagePayload(data_base64="ZmFrZQ==", mime_type="image/png")
    )

    response = asyncio.run(orchestrator.generate(request))

    assert response.text == "sim"
    assert text_only.calls == []


def test_slow_tier_times_out_and_next_tier_answers() -> None:
    class Slow(FakeProviderClient):
        async def call(self, model, request):  # type: ignore[no-untyped-def]
            return await call_with_deadline(
                asyncio.sleep(5, result=RawResponse(text="late")),
                timeout_seconds=request.timeout_seconds,
                provider=self.name,
                model=model,
            )

    slow = Slow(name="gemini")
    fast = FakeProviderClient(name="openai", replies=["on time"])
    orchestrator = FallbackOrchestrator(tiers=[make_tier(slow), make_tier(fast)])

    response = asyncio.run(
        orchestrator.generate(GenerationRequest(prompt="p", timeout_seconds=0.01))
    )

    assert response.text == "on time"


def test_call_with_deadline_raises_provider_timeout() -> None:
    with pytest.raises(ProviderTimeout) as excinfo:
        asyncio.run(
            call_with_deadline(
                asyncio.sleep(5),
                timeout_seconds=0.01,
                provider="gemini",
                model="flash",
            )
        )

    assert excinfo.value.provider == "gemini"
    assert "timed out" in str(excinfo.value)


def test_order_provider_specs_puts_primary_first() -> None:
    specs = [
        ProviderSpec(name="openai", model="gpt-4o", priority=1),
        ProviderSpec(name="gemini", model="flash", priority=1),
        ProviderSpec(name="openai", model="gpt-4o-mini", priority=0),
        ProviderSpec(name="gemini", model="flash-lite", priority=0),
    ]

    ordered = order_provider_specs(iter(specs), primary="gemini")

    assert [(spec.name, spec.model) for spec in ordered] == [
        ("gemini", "flash-lite"),
        ("gemini", "flash"),
        ("openai", "gpt-4o-mini"),
        ("openai", "gpt-4o"),
    ]


def test_order_provider_specs_ignores_unknown_primary() -> None:
    specs = [
        ProviderSpec(name="openai", model="m"),
        ProviderSpec(name="gemini", model="n"),
    ]

    ordered = order_provider_specs(specs, primary="anthropic")

    assert [spec.name for spec in ordered] == ["openai", "gemini"]


def test_all_tiers_refusing_raises_safety_suppressed() -> None:
    first = FakeProviderClient(
        name="gemini", replies=[RawResponse.safety_suppressed("gemini", "m")]
    )
    second = FakeProviderClient(
        name="openai", replies=[RawResponse.safety_suppressed("openai", "m")]
    )
    orchestrator = FallbackOrchestrator(tiers=[make_tier(first), make_tier(second)])

    with pytest.raises(SafetySuppressed) as excinfo:
        asyncio.run(orchestrator.generate(GenerationRequest(prompt="p")))

    assert isinstance(excinfo.value, AllProvidersExhausted)
    assert all(attempt.suppressed for attempt in excinfo.value.attempts)
