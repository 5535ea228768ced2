"""Configuration utilities for the logging library."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping

from .environment import EnvironmentProbe
from .exceptions import RedactionConfigError

DEFAULT_CENSOR = "[REDACTED]"

GlobalReplace = Callable[[str], str]


def _comma_tuple(value: str | None, *, default: tuple[str, ...]) -> tuple[str, ...]:
    """Convert a comma-separated string to a tuple."""

    if not value:
        return default

    return tuple(filter(None, (part.strip() for part in value.split(","))))


def _bool_env(value: str | None, default: bool) -> bool:
    """Convert a string to a boolean."""

    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RedactionSettings:
    """Redaction applied to every record before it reaches a sink.

    ``censor`` is either the replacement value itself or a callable receiving
    the matched value. ``global_replace`` rewrites the JSON text of the record
    before path redaction runs.
    """

    paths: tuple[str, ...] = ()
    censor: Any = DEFAULT_CENSOR
    global_replace: GlobalReplace | None = None
    remove: bool = False

    def with_overrides(self, **kwargs: Any) -> "RedactionSettings":
        return replace(self, **kwargs)


@dataclass(frozen=True)
class LoggingSettings:
    """Immutable runtime configuration."""

    level: str
    sinks: tuple[str, ...]
    gcl_project: str | None
    gcl_log_name: str | None
    redaction: RedactionSettings
    environment: EnvironmentProbe = field(default_factory=EnvironmentProbe)

    @property
    def service(self) -> str:
        return self.environment.service_name() or "default"

    def with_overrides(self, **kwargs: Any) -> "LoggingSettings":
        return replace(self, **kwargs)


def load_settings(env: Mapping[str, str] | None = None) -> LoggingSettings:
    source = os.environ if env is None else env
    environment = EnvironmentProbe(source)

    default_sinks = ("cloud",) if environment.is_managed else ("stdout",)

    redaction = RedactionSettings(
        paths=_comma_tuple(source.get("LOG_REDACT_PATHS"), default=()),
        censor=source.get("LOG_REDACT_CENSOR", DEFAULT_CENSOR),
        global_replace=_builtin_global_replace(source),
        remove=_bool_env(source.get("LOG_REDACT_REMOVE"), False),
    )

    return LoggingSettings(
        level=source.get("LOG_LEVEL") or "info",
        sinks=_comma_tuple(source.get("LOG_SINKS"), default=default_sinks),
        gcl_project=source.get("LOG_GCL_PROJECT") or source.get("GOOGLE_CLOUD_PROJECT"),
        gcl_log_name=source.get("LOG_GCL_LOG_NAME"),
        redaction=redaction,
        environment=environment,
    )


def coerce_redaction(
    value: RedactionSettings | Mapping[str, Any] | None,
    base: RedactionSettings | None = None,
) -> RedactionSettings:
    """Merge programmatic redaction options over ``base``."""

    base = base or RedactionSettings()

    if value is None:
        return base

    if isinstance(value, RedactionSettings):
        return value

    if not isinstance(value, Mapping):
        raise RedactionConfigError(
            f"redact options must be a mapping or RedactionSettings, got {type(value).__name__}"
        )

    options = dict(value)
    if "globalReplace" in options:
        options.setdefault("global_replace", options.pop("globalReplace"))

    unknown = set(options) - {"paths", "censor", "global_replace", "remove"}
    if unknown:
        raise RedactionConfigError(f"Unknown redact options: {sorted(unknown)}")

    if "paths" in options:
        paths = options["paths"]
        if isinstance(paths, str):
            raise RedactionConfigError("redact paths must be a sequence of strings")
        options["paths"] = tuple(paths or ())

    global_replace = options.get("global_replace")
    if global_replace is not None and not callable(global_replace):
        raise RedactionConfigError("global_replace must be callable")

    return base.with_overrides(**options)


def _builtin_global_replace(source: Mapping[str, str]) -> GlobalReplace | None:
    if not _bool_env(source.get("LOG_REDACT_PHONE_NUMBERS"), False):
        return None

    from .redaction.patterns import mask_phone_numbers

    return mask_phone_numbers
