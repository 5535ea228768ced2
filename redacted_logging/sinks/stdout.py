"""Stdout sink emitting one JSON document per record."""

from __future__ import annotations

import json
import sys
import threading
from typing import Mapping


class StdoutSink:
    """Write structured records to stdout as NDJSON."""

    def __init__(self, stream=None) -> None:
        self._stream = stream or sys.stdout # The stream to write to
        self._lock = threading.Lock() # Serializes writes from concurrent requests

    def emit(self, record: Mapping[str, object]) -> None:
        """Emit a record to the stream."""

        line = json.dumps(dict(record), separators=(",", ":"), ensure_ascii=False)

        with self._lock:
            self._stream.write(line + "\n")
            self._stream.flush()
