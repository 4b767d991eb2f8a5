"""Tests for subgraph identifier validation."""

from __future__ import annotations

import pytest

from conftest import DEPLOYMENT_ID, SUBGRAPH_NAME
from toboro.errors import ValidationError
from toboro.identifiers import (
    Identifier,
    IdentifierKind,
    classify,
    is_valid,
    is_valid_id,
    is_valid_name,
    parse_identifier,
)


@pytest.mark.parametrize(
    "value",
    [
        DEPLOYMENT_ID,
        "Qm" + "x" * 44,
        "Qm" + "/" * 44,
        "QmYQKz7w8cQNpwEQkq1fLV4jMBNTR6KDeWhr2gwN4UhDzJ",
    ],
)
def test_46_char_qm_strings_are_content_ids(value: str) -> None:
    assert len(value) == 46
    assert classify(value) is IdentifierKind.CONTENT


@pytest.mark.parametrize(
    "value",
    [
        "Qm" + "x" * 43,
        "Qm" + "x" * 45,
        "qm" + "x" * 44,
        "Xm" + "x" * 44,
        "QmTransparentBig1111111111111111111111111111",
    ],
)
def test_near_miss_content_ids_are_not_content(value: str) -> None:
    assert not is_valid_id(value)


def test_subgraph_name_is_named_form() -> None:
    assert classify(SUBGRAPH_NAME) is IdentifierKind.NAMED
    assert classify("org/name") is IdentifierKind.NAMED


@pytest.mark.parametrize(
    "value",
    ["", "/", "a/b/c", "/abc", "abc/", "org/name/extra", "abc", "a//", "//", "/a/"],
)
def test_invalid_inputs(value: str) -> None:
    assert classify(value) is IdentifierKind.INVALID
    assert not is_valid(value)


def test_name_check_only_looks_at_split_count_and_boundaries() -> None:
    # A single inner separator with both boundary characters non-slash.
    assert is_valid_name("a/b")
    assert is_valid_name(" / ")
    assert not is_valid_name("a/")
    assert not is_valid_name("/b")


def test_content_id_with_single_slash_still_counts_as_content() -> None:
    value = "Qm" + "a" * 20 + "/" + "b" * 23
    assert classify(value) is IdentifierKind.CONTENT


def test_parse_identifier_returns_value_object() -> None:
    identifier = parse_identifier(DEPLOYMENT_ID)
    assert identifier == Identifier(DEPLOYMENT_ID, IdentifierKind.CONTENT)
    assert identifier.is_content and not identifier.is_named
    assert str(identifier) == DEPLOYMENT_ID

    named = parse_identifier(SUBGRAPH_NAME)
    assert named.is_named


def test_parse_identifier_rejects_invalid_input() -> None:
    with pytest.raises(ValidationError) as excinfo:
        parse_identifier("a/b/c")
    assert excinfo.value.value == "a/b/c"
    assert isinstance(excinfo.value, ValueError)


def test_identifier_is_immutable() -> None:
    identifier = parse_identifier(SUBGRAPH_NAME)
    with pytest.raises(AttributeError):
        identifier.value = "other/name"  # type: ignore[misc]
