"""Managed hosting environment detection."""

from __future__ import annotations

import os
from typing import Mapping


class EnvironmentProbe:
    """Snapshot of the environment signals used to name the service.

    ``GAE_SERVICE`` is set by App Engine and ``K_SERVICE`` by Cloud Functions
    and Cloud Run. Either one means we run inside a managed Google environment.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        source = os.environ if env is None else env

        self._app_engine_service = source.get("GAE_SERVICE") or None
        self._function_name = source.get("K_SERVICE") or None

    def service_name(self) -> str | None:
        """Return the managed service name, if any."""

        return self._app_engine_service or self._function_name

    def cloud_function_name(self) -> str | None:
        """Return the Cloud Function (or Cloud Run service) name, if any."""

        return self._function_name

    @property
    def is_managed(self) -> bool:
        return self.service_name() is not None

    def __repr__(self) -> str:
        return f"EnvironmentProbe(service={self.service_name()!r})"
