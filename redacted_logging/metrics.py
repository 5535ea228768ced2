"""In-process metrics for the logging runtime."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class RuntimeMetrics:
    """Runtime metrics for the logging library."""

    emitted_levels: Dict[str, int] = field(default_factory=dict) # Records handed to sinks, by level
    suppressed_levels: Dict[str, int] = field(default_factory=dict) # Records below the threshold, by level
    redacted_total: int = 0 # Count of values censored or removed by path redaction
    redaction_errors: int = 0 # Failures while redacting

    @property
    def emitted_total(self) -> int:
        return sum(self.emitted_levels.values())

    def as_dict(self) -> dict[str, object]:
        """Return the metrics as a dictionary."""

        return {
            "emitted_levels": dict(self.emitted_levels),
            "suppressed_levels": dict(self.suppressed_levels),
            "redacted_total": self.redacted_total,
            "redaction_errors": self.redaction_errors,
        }


_LOCK = threading.RLock()
_METRICS = RuntimeMetrics()


def record_emission(level: str, emitted: bool) -> None:
    """Record whether a record at ``level`` was emitted or suppressed."""

    with _LOCK:
        bucket = _METRICS.emitted_levels if emitted else _METRICS.suppressed_levels
        bucket[level] = bucket.get(level, 0) + 1


def record_redaction(count: int, *, errors: int = 0) -> None:
    """Record aggregate redaction metrics."""

    if count <= 0 and errors <= 0:
        return

    with _LOCK:
        if count > 0:
            _METRICS.redacted_total += count
        if errors > 0:
            _METRICS.redaction_errors += errors


def reset_metrics() -> None:
    """Reset the metrics."""

    with _LOCK:
        _METRICS.emitted_levels = {}
        _METRICS.suppressed_levels = {}
        _METRICS.redacted_total = 0
        _METRICS.redaction_errors = 0


def get_metrics() -> RuntimeMetrics:
    """Get a snapshot of the metrics."""

    with _LOCK:
        return RuntimeMetrics(
            emitted_levels=dict(_METRICS.emitted_levels),
            suppressed_levels=dict(_METRICS.suppressed_levels),
            redacted_total=_METRICS.redacted_total,
            redaction_errors=_METRICS.redaction_errors,
        )
