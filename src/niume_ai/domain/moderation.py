"""Moderation verdict model and the single-line verdict convention."""

from dataclasses import dataclass

APPROVED_MARKERS = ("APPROVED", "APROVADO")
BLOCKED_MARKERS = ("BLOCKED", "BLOQUEADO")
UNSPECIFIED_REASON = "unspecified"


@dataclass(frozen=True)
class ModerationVerdict:
    """Result of a moderation check."""

    approved: bool
    reason: str | None = None

    @classmethod
    def approve(cls) -> "ModerationVerdict":
        return cls(approved=True)

    @classmethod
    def block(cls, reason: str | None = None) -> "ModerationVerdict":
        return cls(approved=False, reason=reason or UNSPECIFIED_REASON)


def parse_verdict(text: str) -> ModerationVerdict:
    """Parse ``APPROVED`` or ``BLOCKED: <reason>`` from a provider reply.

    Only the first non-empty line is considered. Anything that is not an
    explicit approval is treated as a block.
    """
    line = _first_line(text)
    upper = line.upper()
    for marker in BLOCKED_MARKERS:
        if upper.startswith(marker):
            reason = line[len(marker) :].lstrip(" :-").strip()
            return ModerationVerdict.block(reason or None)
    for marker in APPROVED_MARKERS:
        if upper.startswith(marker):
            return ModerationVerdict.approve()
    if not line:
        return ModerationVerdict.block()
    return ModerationVerdict.block(f"unrecognized verdict: {line}")


def _first_line(text: str) -> str:
    for raw_line in text.splitlines():
        line = raw_line.strip().strip("*`\"'").strip()
        if line:
            return line
    return ""
