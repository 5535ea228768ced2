"""Sink implementations."""

from .base import FanoutSink, Sink
from .cloud import CloudStructuredSink
from .memory import InMemorySink
from .stdout import StdoutSink

__all__ = ["CloudStructuredSink", "FanoutSink", "InMemorySink", "Sink", "StdoutSink"]
