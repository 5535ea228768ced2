"""Widen values ``json`` cannot encode losslessly before serialization."""

from __future__ import annotations

from decimal import Decimal
from fractions import Fraction
from typing import Any, Mapping


def normalize(value: Any) -> Any:
    """Return a copy of ``value`` with arbitrary-precision numbers as text.

    Mappings become dicts and tuples become lists; everything else passes
    through unchanged. A container already being normalized higher up the
    tree is returned as-is so cycles reach the serializer, which rejects them.
    """

    return _normalize(value, set())


def _normalize(value: Any, active: set[int]) -> Any:
    if isinstance(value, Decimal):
        return str(value)

    if isinstance(value, Fraction):
        return str(value)

    if isinstance(value, Mapping):
        marker = id(value)
        if marker in active:
            return value
        active.add(marker)
        try:
            return {key: _normalize(item, active) for key, item in value.items()}
        finally:
            active.discard(marker)

    if isinstance(value, (list, tuple)):
        marker = id(value)
        if marker in active:
            return value
        active.add(marker)
        try:
            return [_normalize(item, active) for item in value]
        finally:
            active.discard(marker)

    return value
