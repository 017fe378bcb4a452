"""Transient models passed between the pipeline stages."""

import base64
from dataclasses import dataclass

BASE64_CHUNK_BYTES = 3 * 4096


@dataclass(frozen=True)
class ProviderSpec:
    """One provider/model tier."""

    name: str
    model: str
    supports_vision: bool = True
    priority: int = 0


@dataclass(frozen=True)
class ImagePayload:
    """Inline image sent alongside a prompt."""

    data_base64: str
    mime_type: str

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "ImagePayload":
        """Build a payload from raw image bytes."""
        return cls(data_base64=encode_base64_chunked(data), mime_type=mime_type)

    def data_url(self) -> str:
        """Return the image as a data URL."""
        return f"data:{self.mime_type};base64,{self.data_base64}"


@dataclass(frozen=True)
class GenerationRequest:
    """A single prompt to be answered by the first willing provider."""

    prompt: str
    image: ImagePayload | None = None
    expects_json: bool = True
    timeout_seconds: float = 60.0
    temperature: float = 0.2
    max_output_tokens: int | None = None
    relax_safety: bool = False


@dataclass(frozen=True)
class RawResponse:
    """Unprocessed provider output or a safety-suppression marker."""

    text: str
    provider: str = ""
    model: str = ""
    suppressed: bool = False

    @classmethod
    def safety_suppressed(cls, provider: str, model: str) -> "RawResponse":
        """Marker for a provider that refused to answer."""
        return cls(text="", provider=provider, model=model, suppressed=True)

    @property
    def is_empty(self) -> bool:
        """True when the provider answered with no usable text."""
        return not self.suppressed and not self.text.strip()


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of one orchestrator attempt against one tier."""

    spec: ProviderSpec
    response: RawResponse | None = None
    error: str | None = None
    suppressed: bool = False


def encode_base64_chunked(data: bytes, chunk_size: int = BASE64_CHUNK_BYTES) -> str:
    """Base64-encode in bounded chunks; chunk_size must be a multiple of 3."""
    if chunk_size <= 0 or chunk_size % 3:
        raise ValueError("chunk_size must be a positive multiple of 3")
    parts = [
        base64.b64encode(data[offset : offset + chunk_size]).decode("ascii")
        for offset in range(0, len(data), chunk_size)
    ]
    return "".join(parts)


def detect_image_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return "image/jpeg"
