from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union


Operator = Literal["gt", "ge", "eq", "ne", "le", "lt"]


@dataclass(frozen=True)
class ConditionalClause:
    operator: Operator
    reference: str
    target: str

    def describe(self) -> str:
        return f"if {self.operator} {self.reference} -> {self.target}"


@dataclass(frozen=True)
class FallbackClause:
    target: str

    def describe(self) -> str:
        return f"else -> {self.target}"


Clause = Union[ConditionalClause, FallbackClause]


@dataclass(frozen=True)
class RuleSet:
    clauses: tuple[Clause, ...] = ()
    source: str | None = None  # file path or consumer name, for diagnostics

    @property
    def conditionals(self) -> list[ConditionalClause]:
        return [c for c in self.clauses if isinstance(c, ConditionalClause)]

    @property
    def fallbacks(self) -> list[FallbackClause]:
        return [c for c in self.clauses if isinstance(c, FallbackClause)]

    @property
    def targets(self) -> list[str]:
        return [c.target for c in self.clauses]

    def __len__(self) -> int:
        return len(self.clauses)


@dataclass(frozen=True)
class Comparison:
    operator: str
    current: str
    reference: str
    result: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "operator": self.operator,
            "current": self.current,
            "reference": self.reference,
            "result": self.result,
        }


@dataclass(frozen=True)
class Selection:
    target: str
    clause: Clause
    comparison: Comparison | None = None
    source: str | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, object]:
        return {
            "target": self.target,
            "clause": self.clause.describe(),
            "comparison": self.comparison.to_dict() if self.comparison else None,
            "source": self.source,
        }
