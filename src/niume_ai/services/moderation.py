"""Content moderation for user-submitted names and photos."""

import logging
import re
from dataclasses import dataclass, field
from typing import Protocol

from niume_ai.domain.generation import (
    GenerationRequest,
    ImagePayload,
    detect_image_mime_type,
)
from niume_ai.domain.moderation import ModerationVerdict, parse_verdict
from niume_ai.services import prompts
from niume_ai.services.cache import Cache
from niume_ai.services.orchestrator import FallbackOrchestrator

_logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 60
FALLBACK_BLOCKLIST = (
    "teste",
    "asdf",
    "merda",
    "caralho",
    "porra",
    "buceta",
    "piroca",
    "puta",
)

_REPEATED_CHARS = re.compile(r"([a-z])\1{4,}", re.IGNORECASE)
_URL_LIKE = re.compile(r"(http|www\.|\w+\.(?:com|net|org|br|io)\b)", re.IGNORECASE)
_BLOCKLIST_CACHE_KEY = "moderation:blocklist"


class BlocklistRepository(Protocol):
    """Source of administrator-maintained blocked words."""

    def list_words(self) -> list[str]:
        """Return every blocked word, lowercased."""


@dataclass(frozen=True)
class FetchedObject:
    """Raw bytes of a stored object and its content type."""

    content: bytes
    content_type: str

    @property
    def mime_type(self) -> str:
        """Declared image type, or one sniffed from the bytes."""
        declared = self.content_type.split(";", 1)[0].strip().lower()
        if declared.startswith("image/"):
            return declared
        return detect_image_mime_type(self.content)


class ObjectFetcher(Protocol):
    """Fetches stored objects by public URL."""

    async def fetch(self, url: str) -> FetchedObject:
        """Download the object at ``url``."""


@dataclass
class ModerationService:
    """Local checks first, then a provider verdict on the single-line convention."""

    orchestrator: FallbackOrchestrator
    blocklist_repository: BlocklistRepository
    object_fetcher: ObjectFetcher
    cache: Cache
    timeout_seconds: float = 30
    blocklist_ttl_seconds: float = 600
    _last_blocklist: list[str] = field(default_factory=list, repr=False)

    async def moderate_text(
        self, value: str, context: str = "exercício"
    ) -> ModerationVerdict:
        """Moderate a user-provided name."""
        local = self.check_locally(value)
        if local is not None:
            return local
        request = GenerationRequest(
            prompt=prompts.moderate_text_prompt(value.strip(), context),
            expects_json=False,
            timeout_seconds=self.timeout_seconds,
        )
        response = await self.orchestrator.generate(request, accept_suppressed=True)
        if response.suppressed:
            return ModerationVerdict.block()
        return parse_verdict(response.text)

    async def moderate_photo_url(self, url: str) -> ModerationVerdict:
        """Moderate a stored photo by its public URL."""
        fetched = await self.object_fetcher.fetch(url)
        request = GenerationRequest(
            prompt=prompts.moderate_photo_prompt(),
            image=ImagePayload.from_bytes(fetched.content, fetched.mime_type),
            expects_json=False,
            timeout_seconds=self.timeout_seconds,
            relax_safety=True,
        )
        response = await self.orchestrator.generate(request, accept_suppressed=True)
        if response.suppressed:
            return ModerationVerdict.block()
        return parse_verdict(response.text)

    def check_locally(self, value: str) -> ModerationVerdict | None:
        """Return a block verdict from cheap checks, or None to ask a provider."""
        lowered = value.strip().lower()
        if len(lowered) < MIN_NAME_LENGTH:
            return ModerationVerdict.block(
                f"O nome precisa ter pelo menos {MIN_NAME_LENGTH} caracteres."
            )
        if len(lowered) > MAX_NAME_LENGTH:
            return ModerationVerdict.block(
                f"O nome não pode ter mais de {MAX_NAME_LENGTH} caracteres."
            )
        if any(word in lowered for word in self._blocklist()):
            return ModerationVerdict.block("O nome contém um termo não permitido.")
        if _REPEATED_CHARS.search(lowered) or _URL_LIKE.search(lowered):
            return ModerationVerdict.block("O conteúdo parece conter spam ou links.")
        if any(word in lowered for word in FALLBACK_BLOCKLIST):
            return ModerationVerdict.block(
                "O conteúdo contém palavras inapropriadas."
            )
        return None

    def _blocklist(self) -> list[str]:
        cached = self.cache.get(_BLOCKLIST_CACHE_KEY)
        if isinstance(cached, list):
            return cached
        try:
            words = [word for word in self.blocklist_repository.list_words() if word]
        except Exception:
            _logger.exception("Failed to load moderation blocklist")
            return self._last_blocklist
        self._last_blocklist = words
        self.cache.set(
            _BLOCKLIST_CACHE_KEY, words, ttl_seconds=self.blocklist_ttl_seconds
        )
        return words
