"""Public API for the redacting structured logging library."""

from __future__ import annotations

from .config import LoggingSettings, RedactionSettings, load_settings
from .environment import EnvironmentProbe
from .exceptions import LoggingConfigError, LoggingError, RedactionConfigError
from .levels import LEVELS, resolve_level
from .logger import StructuredLogger, create_logger
from .metrics import get_metrics
from .redaction import build_global_replace, mask_phone_numbers
from .serializers import create_detailed_request_serializers, register_error_adapter
from .sinks.cloud import LOGGING_SAMPLED_KEY, LOGGING_SPAN_KEY, LOGGING_TRACE_KEY

__all__ = [
    "LEVELS",
    "LOGGING_SAMPLED_KEY",
    "LOGGING_SPAN_KEY",
    "LOGGING_TRACE_KEY",
    "EnvironmentProbe",
    "LoggingConfigError",
    "LoggingError",
    "LoggingSettings",
    "RedactionConfigError",
    "RedactionSettings",
    "StructuredLogger",
    "build_global_replace",
    "create_detailed_request_serializers",
    "create_logger",
    "get_metrics",
    "load_settings",
    "mask_phone_numbers",
    "register_error_adapter",
    "resolve_level",
]
