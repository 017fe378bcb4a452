"""Extraction and deterministic repair of JSON embedded in model output."""

import json
import logging
import re

from niume_ai.domain.errors import UnparseableResponse

_logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",\s*$")
_CLOSERS = {"{": "}", "[": "]"}


def extract(text: str) -> object:
    """Return the JSON payload found in ``text``.

    Tries a strict parse of everything from the first ``{`` or ``[``, then a
    structural repair of truncated output, then a salvage that keeps only
    the text up to the last closing brace or bracket.
    """
    cleaned = _CODE_FENCE.sub("", text).strip()
    start = _first_container_index(cleaned)
    if start is None:
        raise UnparseableResponse("Response contains no JSON object or array")
    fragment = cleaned[start:]

    try:
        return json.loads(fragment)
    except json.JSONDecodeError:
        pass

    try:
        return json.loads(close_truncated_json(fragment))
    except json.JSONDecodeError as exc:
        _logger.debug("Structural repair failed: %s", exc)

    salvaged = _salvage(fragment)
    if salvaged is not None:
        return salvaged
    raise UnparseableResponse("Response JSON could not be repaired")


def close_truncated_json(fragment: str) -> str:
    """Close an unterminated string and every open container.

    Scans once, tracking a stack of open ``{``/``[`` plus string and escape
    state, so brackets inside quoted text never change the nesting depth.
    """
    stack: list[str] = []
    in_string = False
    escaped = False
    for char in fragment:
        if escaped:
            escaped = False
            continue
        if in_string:
            if char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(char)
        elif char in ("}", "]") and stack:
            stack.pop()

    repaired = fragment
    if in_string:
        repaired += '"'
    repaired = _TRAILING_COMMA.sub("", repaired)
    return repaired + "".join(_CLOSERS[opener] for opener in reversed(stack))


def _salvage(fragment: str) -> object | None:
    boundary = max(fragment.rfind("}"), fragment.rfind("]"))
    if boundary <= 0:
        return None
    prefix = fragment[: boundary + 1]
    for candidate in (prefix, close_truncated_json(prefix)):
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    _logger.debug("Salvage failed at boundary %s", boundary)
    return None


def _first_container_index(text: str) -> int | None:
    positions = [index for index in (text.find("{"), text.find("[")) if index != -1]
    if not positions:
        return None
    return min(positions)
