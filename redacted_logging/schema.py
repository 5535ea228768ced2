"""Structured log record schema."""

from __future__ import annotations

import datetime as _dt
import os
import socket
from typing import Any, Dict, Mapping

LOG_VERSION = 0

# Fields owned by the record format itself. Redaction never touches them.
PROTOCOL_FIELDS = ("v", "level", "name", "hostname", "pid", "time", "src")

_RESERVED = frozenset(PROTOCOL_FIELDS) | {"msg"}

_HOSTNAME = socket.gethostname()


def _utc_now() -> str:
    return (
        _dt.datetime.now(tz=_dt.timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def build_log_record(
    *,
    level: int,
    message: str,
    name: str,
    fields: Mapping[str, Any] | None = None,
) -> Dict[str, Any]:
    """Build a fresh record: identity first, caller fields, then message and time."""

    record: Dict[str, Any] = {
        "name": name,
        "hostname": _HOSTNAME,
        "pid": os.getpid(),
        "level": level,
    }

    if fields:
        for key, value in fields.items():
            if key not in _RESERVED:
                record[key] = value

    record["msg"] = message
    record["time"] = _utc_now()
    record["v"] = LOG_VERSION

    return record


def split_protocol_fields(
    record: Mapping[str, Any],
) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """Split a record into (protocol fields, everything else)."""

    protocol: Dict[str, Any] = {}
    rest: Dict[str, Any] = {}

    for key, value in record.items():
        if key in PROTOCOL_FIELDS:
            protocol[key] = value
        else:
            rest[key] = value

    return protocol, rest
