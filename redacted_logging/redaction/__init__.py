"""Redaction subsystem for structured logging."""

from __future__ import annotations

from .normalize import normalize
from .paths import (
    WILDCARD,
    ComputedCensor,
    FixedCensor,
    PathRedactor,
    parse_path,
    resolve_censor,
)
from .patterns import PHONE_NUMBER_PATTERN, build_global_replace, mask_phone_numbers
from .pipeline import RedactingSink, RedactionPipeline

__all__ = [
    "WILDCARD",
    "ComputedCensor",
    "FixedCensor",
    "PHONE_NUMBER_PATTERN",
    "PathRedactor",
    "RedactingSink",
    "RedactionPipeline",
    "build_global_replace",
    "mask_phone_numbers",
    "normalize",
    "parse_path",
    "resolve_censor",
]
