"""
Version parsing and comparison.

Versions are compared segment by segment as integers, never as strings:
``5.13.0 > 5.9.0``. Missing trailing segments compare as zero.

Two spellings of the same version are common in the wild: dotted
(``5.13.0``) and decimal (``5.013000``, three digits per fractional group).
Which one a single-dot string means is a parsing convention:

- ``dotted``: every group is an arbitrary-width integer.
- ``decimal``: the fractional part is split into three-digit groups,
  right-padded with zeros (``5.01`` is ``5.10``).
- ``auto``: single-dot strings with four or more fractional digits are
  decimal, everything else is dotted. Three-digit fractions read the same
  either way.
"""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Callable, Literal

from .errors import MalformedVersionError, UnknownOperatorError

Convention = Literal["auto", "dotted", "decimal"]
CONVENTIONS: tuple[str, ...] = ("auto", "dotted", "decimal")

_VERSION_RE = re.compile(r"[0-9]+(?:\.[0-9]+)*")
_DECIMAL_GROUP = 3
_AUTO_DECIMAL_MIN_DIGITS = 4


@total_ordering
@dataclass(frozen=True, eq=False)
class VersionSpec:
    segments: tuple[int, ...]
    text: str = field(default="")

    def _padded(self, length: int) -> tuple[int, ...]:
        return self.segments + (0,) * (length - len(self.segments))

    def _normalized(self) -> tuple[int, ...]:
        segments = list(self.segments)
        while segments and segments[-1] == 0:
            segments.pop()
        return tuple(segments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionSpec):
            return NotImplemented
        return self._normalized() == other._normalized()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VersionSpec):
            return NotImplemented
        length = max(len(self.segments), len(other.segments))
        return self._padded(length) < other._padded(length)

    def __hash__(self) -> int:
        return hash(self._normalized())

    def __str__(self) -> str:
        return self.text or ".".join(str(s) for s in self.segments)


def _split_decimal(fraction: str) -> tuple[int, ...]:
    padded = fraction + "0" * (-len(fraction) % _DECIMAL_GROUP)
    return tuple(int(padded[i : i + _DECIMAL_GROUP]) for i in range(0, len(padded), _DECIMAL_GROUP))


def _uses_decimal(groups: list[str], convention: str) -> bool:
    if len(groups) != 2:
        return False
    if convention == "decimal":
        return True
    return convention == "auto" and len(groups[1]) >= _AUTO_DECIMAL_MIN_DIGITS


def parse_version(text: str, convention: Convention | str = "auto") -> VersionSpec:
    """
    Parse a version string into a VersionSpec.

    Raises:
        MalformedVersionError: empty input, anything other than digits
            separated by single dots, or an unknown convention.
    """
    if convention not in CONVENTIONS:
        raise MalformedVersionError("unknown version convention", convention=convention)
    if not isinstance(text, str):
        raise MalformedVersionError("version must be a string", version=text)

    raw = text.strip()
    if not raw:
        raise MalformedVersionError("empty version string", version=text)
    if not _VERSION_RE.fullmatch(raw):
        raise MalformedVersionError("version must be dot-separated non-negative integers", version=text)

    groups = raw.split(".")
    if _uses_decimal(groups, convention):
        segments = (int(groups[0]), *_split_decimal(groups[1]))
    else:
        segments = tuple(int(g) for g in groups)
    return VersionSpec(segments=segments, text=raw)


ComparisonFn = Callable[[VersionSpec, VersionSpec], bool]

OPERATORS: dict[str, ComparisonFn] = {
    "gt": operator.gt,
    "ge": operator.ge,
    "eq": operator.eq,
    "ne": operator.ne,
    "le": operator.le,
    "lt": operator.lt,
}


def normalize_operator(op: str) -> str:
    """Return the canonical operator token or raise UnknownOperatorError."""
    token = str(op).strip().lower()
    if token not in OPERATORS:
        raise UnknownOperatorError(
            f"unknown comparison operator {op!r}; expected one of {', '.join(OPERATORS)}",
            operator=op,
        )
    return token


def compare(
    op: str,
    current: str | VersionSpec,
    reference: str | VersionSpec,
    *,
    convention: Convention | str = "auto",
) -> bool:
    """Evaluate ``current <op> reference`` under segment-wise numeric ordering."""
    fn = OPERATORS[normalize_operator(op)]
    cur = current if isinstance(current, VersionSpec) else parse_version(current, convention)
    ref = reference if isinstance(reference, VersionSpec) else parse_version(reference, convention)
    return fn(cur, ref)
