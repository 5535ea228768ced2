"""Tests for path parsing and path redaction."""

from __future__ import annotations

import pytest

from redacted_logging.exceptions import RedactionConfigError
from redacted_logging.redaction import (
    WILDCARD,
    ComputedCensor,
    FixedCensor,
    PathRedactor,
    parse_path,
    resolve_censor,
)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("a", ("a",)),
        ("a.b.c", ("a", "b", "c")),
        ("a.*.c", ("a", WILDCARD, "c")),
        ("*", (WILDCARD,)),
        ('req.headers["x-api-key"]', ("req", "headers", "x-api-key")),
        ("req.headers['set-cookie']", ("req", "headers", "set-cookie")),
        ("items[0].token", ("items", 0, "token")),
        ("items[*]", ("items", WILDCARD)),
        ('["a.b"].c', ("a.b", "c")),
    ],
)
def test_parse_path(path, expected):
    assert parse_path(path) == expected


@pytest.mark.parametrize(
    "path",
    ["", "a..b", "a.", ".a", "a[", 'a["b"', "a[b]", "a]b", 'a["b"]c'],
)
def test_parse_path_rejects_malformed(path):
    with pytest.raises(RedactionConfigError):
        parse_path(path)


def test_malformed_path_fails_at_construction():
    with pytest.raises(RedactionConfigError):
        PathRedactor(["ok", "a..b"])


def test_resolve_censor_variants():
    assert resolve_censor() == FixedCensor("[REDACTED]")
    assert resolve_censor("xxx") == FixedCensor("xxx")
    assert resolve_censor(0) == FixedCensor(0)

    computed = resolve_censor(lambda value: f"<{len(value)}>")
    assert isinstance(computed, ComputedCensor)
    assert computed.apply("secret") == "<6>"

    fixed = FixedCensor("kept")
    assert resolve_censor(fixed) is fixed


def test_wildcard_matches_every_key_at_its_depth():
    value = {"a": {"b": {"c": 1}, "d": {"c": 2}, "e": {"f": 3}}}

    count = PathRedactor(["a.*.c"]).redact(value)

    assert count == 2
    assert value == {"a": {"b": {"c": "[REDACTED]"}, "d": {"c": "[REDACTED]"}, "e": {"f": 3}}}


def test_missing_paths_are_ignored():
    value = {"a": {"b": "text"}, "list": [1]}

    count = PathRedactor(["missing", "a.b.c", "a.x.y", "list[5]", "list.name"]).redact(value)

    assert count == 0
    assert value == {"a": {"b": "text"}, "list": [1]}


def test_paths_are_case_sensitive():
    value = {"Authorization": "Bearer abc", "authorization": "Bearer def"}

    PathRedactor(["authorization"]).redact(value)

    assert value == {"Authorization": "Bearer abc", "authorization": "[REDACTED]"}


def test_list_elements_by_index_and_wildcard():
    value = {"items": [{"token": "t1"}, {"token": "t2"}], "tags": ["a", "b"]}

    PathRedactor(["items[*].token", "tags[1]"]).redact(value)

    assert value == {
        "items": [{"token": "[REDACTED]"}, {"token": "[REDACTED]"}],
        "tags": ["a", "[REDACTED]"],
    }


def test_dotted_digits_index_lists():
    value = {"tags": ["a", "b"]}

    PathRedactor(["tags.0"]).redact(value)

    assert value == {"tags": ["[REDACTED]", "b"]}


def test_overlapping_patterns_redact_each_location_once():
    seen = []

    def censor(matched):
        seen.append(matched)
        return "***"

    value = {"a": {"b": "secret"}}
    count = PathRedactor(["a.b", "a.*", "*.b"], censor=censor).redact(value)

    assert count == 1
    assert seen == ["secret"]
    assert value == {"a": {"b": "***"}}


def test_descendants_are_redacted_before_ancestors():
    seen = []

    def censor(matched):
        seen.append(matched)
        return "gone"

    value = {"a": {"b": "secret"}}
    PathRedactor(["a", "a.b"], censor=censor).redact(value)

    assert seen == ["secret", {"b": "gone"}]
    assert value == {"a": "gone"}


def test_censor_may_be_any_value():
    value = {"a": 1, "b": 2}

    PathRedactor(["a"], censor=None).redact(value)
    PathRedactor(["b"], censor={"hidden": True}).redact(value)

    assert value == {"a": "[REDACTED]", "b": {"hidden": True}}


def test_remove_deletes_keys_and_nulls_list_elements():
    value = {"secret": "s", "nested": {"password": "p", "user": "ada"}, "tags": ["a", "b"]}

    count = PathRedactor(["secret", "nested.password", "tags[0]"], remove=True).redact(value)

    assert count == 3
    assert value == {"nested": {"user": "ada"}, "tags": [None, "b"]}


def test_scalars_are_left_alone():
    value = "just text"

    assert PathRedactor(["*"]).redact(value) == 0
    assert value == "just text"


def test_no_paths_is_a_no_op():
    redactor = PathRedactor([])
    value = {"a": 1}

    assert redactor.redact(value) == 0
    assert redactor.paths == ()
    assert value == {"a": 1}
