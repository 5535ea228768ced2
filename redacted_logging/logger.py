"""Structured logging facade."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from .config import LoggingSettings, RedactionSettings, coerce_redaction, load_settings
from .environment import EnvironmentProbe
from .exceptions import LoggingConfigError
from .levels import DEBUG, ERROR, FATAL, INFO, TRACE, WARN, level_name, resolve_level
from .metrics import record_emission
from .redaction import RedactingSink, RedactionPipeline
from .schema import build_log_record
from .serializers import Serializer, create_detailed_request_serializers
from .sinks import CloudStructuredSink, FanoutSink, InMemorySink, Sink, StdoutSink


class StructuredLogger:
    """Leveled logger whose records are redacted before reaching any sink."""

    def __init__(
        self,
        *,
        name: str,
        level: int,
        sink: Sink,
        serializers: Mapping[str, Serializer],
        environment: EnvironmentProbe,
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        self._name = name # Service name stamped on every record
        self._level = level # Numeric threshold
        self._sink = sink # Redacting sink chain, shared with children
        self._serializers = dict(serializers) # Field name -> display view builder
        self._environment = environment # Managed hosting signals
        self._fields = dict(fields or {}) # Fields bound by child()

    @property
    def name(self) -> str:
        return self._name

    @property
    def level(self) -> int:
        return self._level

    @property
    def environment(self) -> EnvironmentProbe:
        return self._environment

    @property
    def sink(self) -> Sink:
        return self._sink

    def is_enabled(self, level: str | int) -> bool:
        """Return True when records at ``level`` would be emitted."""

        return resolve_level(level) >= self._level

    def trace(self, message: str, /, **fields: Any) -> None:
        self._log(TRACE, message, fields)

    def debug(self, message: str, /, **fields: Any) -> None:
        self._log(DEBUG, message, fields)

    def info(self, message: str, /, **fields: Any) -> None:
        self._log(INFO, message, fields)

    def warn(self, message: str, /, **fields: Any) -> None:
        self._log(WARN, message, fields)

    def error(self, message: str, /, **fields: Any) -> None:
        self._log(ERROR, message, fields)

    def fatal(self, message: str, /, **fields: Any) -> None:
        self._log(FATAL, message, fields)

    def log(self, level: str | int, message: str, /, **fields: Any) -> None:
        """Log ``message`` at an arbitrary level name or number."""

        self._log(resolve_level(level), message, fields)

    def child(self, /, **fields: Any) -> "StructuredLogger":
        """Return a logger sharing this one's sinks with ``fields`` bound to every record."""

        bound = dict(self._fields)
        bound.update(fields)

        return StructuredLogger(
            name=self._name,
            level=self._level,
            sink=self._sink,
            serializers=self._serializers,
            environment=self._environment,
            fields=bound,
        )

    def _log(self, level: int, message: str, fields: Mapping[str, Any]) -> None:
        if level < self._level:
            record_emission(level_name(level), False)
            return

        merged: Dict[str, Any] = dict(self._fields)
        merged.update(fields)

        for key, serializer in self._serializers.items():
            if key in merged:
                merged[key] = serializer(merged[key])

        record = build_log_record(
            level=level,
            message=str(message),
            name=self._name,
            fields=merged,
        )

        self._sink.emit(record)
        record_emission(level_name(level), True)


def _build_sink(name: str, settings: LoggingSettings) -> Sink:
    normalized = name.strip().lower()

    if normalized == "stdout":
        return StdoutSink()

    if normalized == "cloud":
        return CloudStructuredSink(project=settings.gcl_project)

    if normalized == "memory":
        return InMemorySink()

    if normalized == "gcl":
        from .sinks.gcl_api import GoogleCloudLoggingSink

        return GoogleCloudLoggingSink(
            project=settings.gcl_project,
            log_name=settings.gcl_log_name or settings.service,
            labels={"service": settings.service},
        )

    raise LoggingConfigError(f"Unknown log sink: {name!r}")


def create_logger(
    level: str | int | None = None,
    redact: RedactionSettings | Mapping[str, Any] | None = None,
    *,
    settings: LoggingSettings | None = None,
    sinks: Optional[Iterable[Sink]] = None,
    serializers: Mapping[str, Serializer] | None = None,
    env: Mapping[str, str] | None = None,
) -> StructuredLogger:
    """Create a logger whose records are redacted before they reach ``sinks``.

    ``level`` defaults to ``LOG_LEVEL`` and then ``info``. ``redact`` accepts
    ``paths``, ``censor``, ``global_replace`` and ``remove`` and overrides the
    ``LOG_REDACT_*`` settings. Malformed paths raise ``RedactionConfigError``
    here, not at the first log call.
    """

    settings = settings or load_settings(env)
    redaction = coerce_redaction(redact, settings.redaction)
    threshold = resolve_level(level if level is not None else settings.level)

    if sinks is not None:
        sink_list = list(sinks)
    else:
        sink_list = [_build_sink(name, settings) for name in settings.sinks]

    if not sink_list:
        sink_list.append(StdoutSink())

    pipeline = RedactionPipeline(redaction)

    return StructuredLogger(
        name=settings.service,
        level=threshold,
        sink=RedactingSink(FanoutSink(sink_list), pipeline),
        serializers=create_detailed_request_serializers() if serializers is None else serializers,
        environment=settings.environment,
    )
