"""Record interception: every record is redacted before any sink sees it."""

from __future__ import annotations

import datetime as _dt
import json
import logging
import uuid
from typing import Any, Dict, Mapping, MutableMapping

from ..config import RedactionSettings
from ..metrics import record_redaction
from ..schema import PROTOCOL_FIELDS, split_protocol_fields
from ..sinks.base import Sink
from .normalize import normalize
from .paths import PathRedactor
from .patterns import identity


LOGGER = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class RedactionPipeline:
    """Normalize, text-rewrite and path-redact a mapping of log fields."""

    def __init__(self, settings: RedactionSettings) -> None:
        self._settings = settings
        self._global_replace = settings.global_replace or identity
        self._paths = PathRedactor(
            settings.paths,
            censor=settings.censor,
            remove=settings.remove,
        )

    @property
    def settings(self) -> RedactionSettings:
        return self._settings

    def apply(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Return a redacted copy of ``fields``; the input is left untouched."""

        text = json.dumps(normalize(fields), default=_json_default, ensure_ascii=False)
        redacted = json.loads(self._global_replace(text))

        count = self._paths.redact(redacted)
        record_redaction(count)

        return redacted


class RedactingSink:
    """Sink wrapper that redacts every non-protocol field of a record."""

    def __init__(self, inner: Sink, pipeline: RedactionPipeline) -> None:
        self._inner = inner
        self._pipeline = pipeline

    @property
    def inner(self) -> Sink:
        return self._inner

    def emit(self, record: MutableMapping[str, Any]) -> None:
        """Redact ``record`` in place, then hand it to the wrapped sink."""

        _protocol, rest = split_protocol_fields(record)

        try:
            redacted = self._pipeline.apply(rest)
        except Exception:
            record_redaction(0, errors=1)
            LOGGER.debug("Redaction failed for record with fields %s", sorted(rest))
            raise

        for key in rest:
            if key not in redacted:
                del record[key]
        record.update(
            (key, value) for key, value in redacted.items() if key not in PROTOCOL_FIELDS
        )

        self._inner.emit(record)
