"""Text-level redaction applied to the serialized record."""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Pattern, Tuple, Union

from ..exceptions import RedactionConfigError

GlobalReplace = Callable[[str], str]

Replacement = Union[str, Callable[["re.Match[str]"], str]]
Rule = Tuple[Union[str, Pattern[str]], Replacement]

# E.164 numbers prefixed by "+" or its URL encoded form "%2B".
PHONE_NUMBER_PATTERN = re.compile(r"(?:\+|%2B)[1-9]\d{1,14}", re.IGNORECASE)


def _mask_last_four(match: "re.Match[str]") -> str:
    return match.group(0)[:-4] + "XXXX"


def mask_phone_numbers(text: str) -> str:
    """Replace the last four digits of every phone number with ``XXXX``."""

    return PHONE_NUMBER_PATTERN.sub(_mask_last_four, text)


def identity(text: str) -> str:
    return text


def build_global_replace(rules: Iterable[Rule]) -> GlobalReplace:
    """Compose ``(pattern, replacement)`` rules into a single rewrite.

    Rules apply in order. A replacement may be substitution text or a callable
    receiving the match, as with :func:`re.sub`.
    """

    compiled: List[Tuple[Pattern[str], Replacement]] = []

    for pattern, replacement in rules:
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as exc:
                raise RedactionConfigError(f"Invalid global replace pattern {pattern!r}: {exc}") from exc
        compiled.append((pattern, replacement))

    def _global_replace(text: str) -> str:
        for pattern, replacement in compiled:
            text = pattern.sub(replacement, text)
        return text

    return _global_replace
