"""Normalization of loosely-typed macro fields in parsed payloads."""

import math
import re

MACRO_FIELDS = ("calories", "protein", "carbs", "fat")

_LEADING_NUMBER = re.compile(r"^\d*\.?\d+")


def coerce(tree: object) -> object:
    """Return a copy of ``tree`` with every macro field as an ``int``.

    Objects and arrays are walked recursively; anything else is returned
    unchanged.
    """
    if isinstance(tree, list):
        return [coerce(item) for item in tree]
    if isinstance(tree, dict):
        normalized = {key: coerce(value) for key, value in tree.items()}
        for field in MACRO_FIELDS:
            if field in tree:
                normalized[field] = coerce_number(tree[field])
        return normalized
    return tree


def coerce_number(value: object) -> int:
    """Coerce a single value to a rounded integer, defaulting to zero."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return round_half_up(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value.strip())
        return round_half_up(float(match.group(0))) if match else 0
    return 0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)
