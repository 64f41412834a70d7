"""Declarative version rules (clauses as data, evaluation as code)."""

from .engine import select_target
from .load import load_ruleset, parse_mapping, parse_rows, parse_tokens, validate_clauses
from .schema import Clause, Comparison, ConditionalClause, FallbackClause, RuleSet, Selection

__all__ = [
    "Clause",
    "Comparison",
    "ConditionalClause",
    "FallbackClause",
    "RuleSet",
    "Selection",
    "load_ruleset",
    "parse_mapping",
    "parse_rows",
    "parse_tokens",
    "select_target",
    "validate_clauses",
]
