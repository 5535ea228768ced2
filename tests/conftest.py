"""Top-level pytest configuration for redacted_logging tests."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolate_service_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host's managed-hosting and logging variables out of tests."""

    for name in (
        "GAE_SERVICE",
        "K_SERVICE",
        "LOG_LEVEL",
        "LOG_SINKS",
        "LOG_REDACT_PATHS",
        "LOG_REDACT_CENSOR",
        "LOG_REDACT_REMOVE",
        "LOG_REDACT_PHONE_NUMBERS",
    ):
        monkeypatch.delenv(name, raising=False)
