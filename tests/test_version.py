from __future__ import annotations

import pytest

from versiongate.errors import MalformedVersionError, UnknownOperatorError
from versiongate.version import VersionSpec, compare, parse_version


def test_compare_uses_numeric_segments_not_strings() -> None:
    assert compare("ge", "5.13.0", "5.9.0") is True
    assert compare("lt", "5.8.8", "5.13.0") is True
    assert compare("gt", "3.10", "3.9") is True


def test_decimal_and_dotted_spellings_compare_equal_under_auto() -> None:
    assert compare("eq", "5.13.0", "5.013000") is True
    assert compare("eq", "5.020000", "5.20") is True
    assert compare("lt", "5.010000", "5.013000") is True


def test_missing_trailing_segments_are_zero() -> None:
    assert compare("eq", "3.12", "3.12.0") is True
    assert compare("eq", "3", "3.0.0.0") is True
    assert compare("ne", "3.12", "3.12.1") is True
    assert compare("le", "3.12", "3.12.0") is True


@pytest.mark.parametrize(
    ("op", "expected"),
    [("gt", False), ("ge", False), ("eq", False), ("ne", True), ("le", True), ("lt", True)],
)
def test_every_operator(op: str, expected: bool) -> None:
    assert compare(op, "3.9.18", "3.11.0") is expected


def test_operator_tokens_are_case_insensitive() -> None:
    assert compare(" GE ", "3.11", "3.11") is True


def test_unknown_operator() -> None:
    with pytest.raises(UnknownOperatorError) as exc_info:
        compare(">=", "3.11", "3.10")
    assert exc_info.value.context["operator"] == ">="


@pytest.mark.parametrize("bad", ["5.a.0", "", "   ", "5..1", ".5", "5.", "v5.1", "5.1-rc1", "-1.0"])
def test_malformed_versions_raise(bad: str) -> None:
    with pytest.raises(MalformedVersionError):
        compare("eq", bad, "5.0")
    with pytest.raises(MalformedVersionError):
        compare("eq", "5.0", bad)


def test_parse_version_conventions() -> None:
    assert parse_version("5.013000", "decimal").segments == (5, 13, 0)
    assert parse_version("5.013000", "dotted").segments == (5, 13000)
    assert parse_version("5.013000", "auto").segments == (5, 13, 0)
    # Short fractions stay dotted under auto, so interpreter versions read naturally.
    assert parse_version("3.12", "auto").segments == (3, 12)
    assert parse_version("5.01", "decimal").segments == (5, 10)
    # Two or more dots are always dotted.
    assert parse_version("5.013.000", "decimal").segments == (5, 13, 0)


def test_dotted_convention_keeps_wide_groups() -> None:
    assert compare("gt", "5.013000", "5.13.0", convention="dotted") is True


def test_unknown_convention() -> None:
    with pytest.raises(MalformedVersionError):
        parse_version("3.12", "semver")


def test_version_spec_is_hashable_and_normalized() -> None:
    a = parse_version("3.12")
    b = parse_version("3.12.0")
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
    assert str(a) == "3.12"
    assert str(VersionSpec(segments=(1, 2))) == "1.2"


def test_whitespace_is_stripped() -> None:
    assert parse_version(" 3.11.2\n").segments == (3, 11, 2)
