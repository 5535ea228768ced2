"""Tests for value normalization, text patterns and the redacting sink."""

from __future__ import annotations

import datetime as dt
import json
import uuid
from collections import OrderedDict
from decimal import Decimal
from fractions import Fraction

import pytest

from redacted_logging.config import RedactionSettings
from redacted_logging.exceptions import RedactionConfigError
from redacted_logging.metrics import get_metrics
from redacted_logging.redaction import (
    PHONE_NUMBER_PATTERN,
    RedactingSink,
    RedactionPipeline,
    build_global_replace,
    mask_phone_numbers,
    normalize,
)
from redacted_logging.schema import build_log_record
from redacted_logging.sinks import InMemorySink


def test_normalize_widens_arbitrary_precision_numbers():
    assert normalize(Decimal(10)) == "10"
    assert normalize(Decimal("3.14")) == "3.14"
    assert normalize(Fraction(1, 3)) == "1/3"
    assert normalize(7) == 7
    assert normalize(1.5) == 1.5


def test_normalize_rebuilds_containers():
    value = OrderedDict(a=(1, Decimal(2)), b=[{"c": Decimal(3)}])

    result = normalize(value)

    assert result == {"a": [1, "2"], "b": [{"c": "3"}]}
    assert type(result) is dict
    assert value == OrderedDict(a=(1, Decimal(2)), b=[{"c": Decimal(3)}])


def test_normalize_is_idempotent():
    value = {"n": Decimal(10), "items": [Decimal("0.1"), "x", None]}

    once = normalize(value)

    assert normalize(once) == once


def test_normalize_leaves_cycles_for_the_encoder():
    cyclic: list = [1]
    cyclic.append(cyclic)

    result = normalize(cyclic)

    with pytest.raises(ValueError):
        json.dumps(result)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("+1234567890", "+123456XXXX"),
        ("call %2B1234567890 now", "call %2B123456XXXX now"),
        ("call %2b1234567890 now", "call %2b123456XXXX now"),
        ("+0123", "+0123"),
        ("a +15551234567 b", "a +1555123XXXX b"),
        ("no numbers here", "no numbers here"),
    ],
)
def test_mask_phone_numbers(text, expected):
    assert mask_phone_numbers(text) == expected


def test_phone_pattern_caps_e164_length():
    match = PHONE_NUMBER_PATTERN.search("+1234567890123456789")

    assert match is not None
    assert match.group(0) == "+123456789012345"


def test_build_global_replace_applies_rules_in_order():
    replace = build_global_replace(
        [
            (r"secret-\w+", "secret-***"),
            (r"\*\*\*", lambda match: "[hidden]"),
        ]
    )

    assert replace('{"token": "secret-abc"}') == '{"token": "secret-[hidden]"}'


def test_build_global_replace_rejects_invalid_patterns():
    with pytest.raises(RedactionConfigError):
        build_global_replace([("(unclosed", "x")])


def test_pipeline_renders_dates_and_uuids():
    pipeline = RedactionPipeline(RedactionSettings())
    identifier = uuid.UUID("12345678-1234-5678-1234-567812345678")

    result = pipeline.apply(
        {
            "at": dt.datetime(2022, 10, 18, 23, 36, 7, tzinfo=dt.timezone.utc),
            "on": dt.date(2022, 10, 18),
            "id": identifier,
            "amount": Decimal("9.99"),
        }
    )

    assert result == {
        "at": "2022-10-18T23:36:07+00:00",
        "on": "2022-10-18",
        "id": "12345678-1234-5678-1234-567812345678",
        "amount": "9.99",
    }


def test_pipeline_keeps_non_ascii_text_intact():
    pipeline = RedactionPipeline(RedactionSettings(global_replace=lambda text: text.replace("ü", "u")))

    assert pipeline.apply({"city": "Zürich"}) == {"city": "Zurich"}


def test_pipeline_does_not_mutate_its_input():
    pipeline = RedactionPipeline(RedactionSettings(paths=("user.password",)))
    fields = {"user": {"name": "ada", "password": "pw"}}

    result = pipeline.apply(fields)

    assert result == {"user": {"name": "ada", "password": "[REDACTED]"}}
    assert fields == {"user": {"name": "ada", "password": "pw"}}


def test_redacting_sink_spares_protocol_fields(frozen_time):
    """Test that protocol fields bypass both redaction strategies."""

    inner = InMemorySink()
    sink = RedactingSink(
        inner,
        RedactionPipeline(
            RedactionSettings(
                paths=("*", "v", "level", "name", "hostname", "pid", "time"),
                global_replace=lambda text: text.replace("30", "99"),
            )
        ),
    )
    record = build_log_record(level=30, message="hello 30", name="svc", fields={"token": "abc"})
    pid = record["pid"]

    sink.emit(record)

    emitted = inner.records[0]
    assert emitted["level"] == 30
    assert emitted["name"] == "svc"
    assert emitted["pid"] == pid
    assert emitted["time"] == frozen_time
    assert emitted["v"] == 0
    assert emitted["msg"] == "[REDACTED]"
    assert emitted["token"] == "[REDACTED]"


def test_redacting_sink_counts_failures():
    inner = InMemorySink()
    sink = RedactingSink(inner, RedactionPipeline(RedactionSettings()))
    record = build_log_record(level=30, message="m", name="svc", fields={"bad": object()})

    with pytest.raises(TypeError):
        sink.emit(record)

    assert inner.records == []
    assert get_metrics().redaction_errors == 1


def test_redacting_sink_ignores_rewrites_onto_protocol_fields(frozen_time):
    """A global replace that renames a field to a protocol key cannot override it."""

    inner = InMemorySink()
    sink = RedactingSink(
        inner,
        RedactionPipeline(
            RedactionSettings(
                global_replace=lambda text: text.replace('"token"', '"level"').replace('"stamp"', '"time"'),
            )
        ),
    )
    record = build_log_record(level=30, message="m", name="svc", fields={"token": "abc", "stamp": "x"})

    sink.emit(record)

    emitted = inner.records[0]
    assert emitted["level"] == 30
    assert emitted["time"] == frozen_time
    assert "token" not in emitted
    assert "stamp" not in emitted
    assert emitted["msg"] == "m"
