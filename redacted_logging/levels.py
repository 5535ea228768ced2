"""Numeric severity levels shared by the logger and its sinks."""

from __future__ import annotations

from typing import Dict

from .exceptions import LoggingConfigError

TRACE = 10
DEBUG = 20
INFO = 30
WARN = 40
ERROR = 50
FATAL = 60

LEVELS: Dict[str, int] = {
    "trace": TRACE,
    "debug": DEBUG,
    "info": INFO,
    "warn": WARN,
    "error": ERROR,
    "fatal": FATAL,
}

_ALIASES = {
    "warning": "warn",
    "critical": "fatal",
}

_NAMES = {number: name for name, number in LEVELS.items()}


def resolve_level(value: str | int) -> int:
    """Resolve a level name or number to its numeric severity."""

    if isinstance(value, bool):
        raise LoggingConfigError(f"Unknown log level: {value!r}")

    if isinstance(value, int):
        if value not in _NAMES:
            raise LoggingConfigError(f"Unknown log level: {value!r}")
        return value

    name = str(value).strip().lower()
    name = _ALIASES.get(name, name)

    try:
        return LEVELS[name]
    except KeyError:
        raise LoggingConfigError(f"Unknown log level: {value!r}") from None


def level_name(value: int) -> str:
    """Return the canonical name for a numeric level."""

    return _NAMES.get(value, str(value))
