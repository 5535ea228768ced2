"""Fixtures for logging library unit tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest

import redacted_logging.schema as schema_module
from redacted_logging import create_logger
from redacted_logging.logger import StructuredLogger
from redacted_logging.sinks.memory import InMemorySink

from tests.utils.logging import reset_logging_metrics

FROZEN_TIME = "2022-10-18T23:36:07.071Z"


def pytest_collection_modifyitems(config, items):  # pragma: no cover - Pytest hook
    """Tag every test in this directory with the `logging` marker."""

    for item in items:
        item.add_marker(pytest.mark.logging)


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Reset logging metrics around each test."""

    reset_logging_metrics()
    yield
    reset_logging_metrics()


@pytest.fixture(autouse=True)
def frozen_time(monkeypatch):
    """Pin record timestamps so whole records can be compared."""

    monkeypatch.setattr(schema_module, "_utc_now", lambda: FROZEN_TIME)
    return FROZEN_TIME


@pytest.fixture
def memory_sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def make_logger(memory_sink) -> Callable[..., StructuredLogger]:
    """Build loggers writing to ``memory_sink`` with an isolated environment."""

    def _make(*, env: dict[str, str] | None = None, **kwargs: Any) -> StructuredLogger:
        return create_logger(env=env or {}, sinks=[memory_sink], **kwargs)

    return _make
