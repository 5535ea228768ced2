"""Sink protocol and fan-out."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Protocol


class Sink(Protocol):
    """A destination for finished log records."""

    def emit(self, record: Mapping[str, object]) -> None:  # pragma: no cover - protocol
        ...


class FanoutSink:
    """Emit each record to every registered sink, in registration order."""

    def __init__(self, sinks: Iterable[Sink]) -> None:
        self._sinks: List[Sink] = list(sinks)

    @property
    def sinks(self) -> List[Sink]:
        return list(self._sinks)

    def register_sink(self, sink: Sink) -> None:
        self._sinks.append(sink)

    def emit(self, record: Mapping[str, object]) -> None:
        for sink in self._sinks:
            sink.emit(record)
