"""Stdout sink in the structured format Cloud Logging ingests.

App Engine, Cloud Functions and Cloud Run forward stdout to Cloud Logging and
parse JSON lines, so writing there guarantees logs are flushed before the
instance is frozen. ``message`` must be a top-level string for Logs Explorer to
show it as the entry summary.
"""

from __future__ import annotations

import json
import sys
import threading
from typing import Any, Dict, Mapping

from ..levels import DEBUG, ERROR, INFO, WARN

LOGGING_TRACE_KEY = "logging.googleapis.com/trace"
LOGGING_SPAN_KEY = "logging.googleapis.com/spanId"
LOGGING_SAMPLED_KEY = "logging.googleapis.com/trace_sampled"


def cloud_severity(level: Any) -> str:
    """Map a numeric level to a Cloud Logging severity name."""

    try:
        number = int(level)
    except (TypeError, ValueError):
        return "DEFAULT"

    if number <= DEBUG:
        return "DEBUG"
    if number <= INFO:
        return "INFO"
    if number <= WARN:
        return "WARNING"
    if number <= ERROR:
        return "ERROR"
    return "CRITICAL"


def trace_resource_name(trace: str, project: str | None) -> str:
    """Expand a bare trace id into ``projects/<project>/traces/<id>``."""

    if not project or trace.startswith("projects/"):
        return trace
    return f"projects/{project}/traces/{trace}"


class CloudStructuredSink:
    """Write Cloud Logging structured JSON lines to stdout."""

    def __init__(self, *, project: str | None = None, stream=None) -> None:
        self._project = project
        self._stream = stream or sys.stdout
        self._lock = threading.Lock()

    def format(self, record: Mapping[str, object]) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(record)

        payload["severity"] = cloud_severity(payload.get("level"))
        payload["message"] = payload.pop("msg", "")
        if "time" in payload:
            payload["timestamp"] = payload.pop("time")

        trace = payload.get(LOGGING_TRACE_KEY)
        if isinstance(trace, str) and trace:
            payload[LOGGING_TRACE_KEY] = trace_resource_name(trace, self._project)

        return payload

    def emit(self, record: Mapping[str, object]) -> None:
        line = json.dumps(self.format(record), separators=(",", ":"), ensure_ascii=False)

        with self._lock:
            self._stream.write(line + "\n")
            self._stream.flush()
