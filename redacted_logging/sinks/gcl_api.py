"""Google Cloud Logging API sink."""

from __future__ import annotations

import datetime as _dt
import json
import sys
from typing import Any, Dict, Mapping

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import logging as gcl_logging

from .cloud import (
    LOGGING_SAMPLED_KEY,
    LOGGING_SPAN_KEY,
    LOGGING_TRACE_KEY,
    cloud_severity,
    trace_resource_name,
)


def _parse_time(value: Any) -> _dt.datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return _dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class GoogleCloudLoggingSink:
    """Send records through the Cloud Logging API as structured entries."""

    def __init__(
        self,
        *,
        project: str | None,
        log_name: str,
        labels: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the sink for ``log_name`` in ``project``."""

        self._client = gcl_logging.Client(project=project) # The client for the sink
        self._logger = self._client.logger(log_name) # The API logger entries are written to
        self._project = project or self._client.project # The project used for trace names
        self._labels = dict(labels or {}) # Labels attached to every entry

    def emit(self, record: Mapping[str, object]) -> None:
        """Write one record as a structured log entry."""

        payload: Dict[str, Any] = dict(record)

        options: Dict[str, Any] = {
            "severity": cloud_severity(payload.get("level")),
        }

        if self._labels:
            options["labels"] = self._labels

        timestamp = _parse_time(payload.get("time"))
        if timestamp is not None:
            options["timestamp"] = timestamp

        trace = payload.pop(LOGGING_TRACE_KEY, None)
        if trace:
            options["trace"] = trace_resource_name(str(trace), self._project)

        span_id = payload.pop(LOGGING_SPAN_KEY, None)
        if span_id:
            options["span_id"] = str(span_id)

        sampled = payload.pop(LOGGING_SAMPLED_KEY, None)
        if sampled is not None:
            options["trace_sampled"] = bool(sampled)

        http_request = payload.pop("httpRequest", None)
        if isinstance(http_request, Mapping):
            options["http_request"] = dict(http_request)

        payload["message"] = payload.pop("msg", "")

        try:
            self._logger.log_struct(payload, **options)
        except GoogleAPICallError:  # pragma: no cover - network error
            print(
                "google cloud logging emission failed: " + json.dumps(payload, default=str),
                file=sys.stderr,
            )
            raise
