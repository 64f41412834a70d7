from __future__ import annotations

import logging

from ..errors import EmptyRuleSetError, MalformedVersionError, NoMatchingRuleError
from ..version import compare
from .load import validate_clauses
from .schema import Comparison, ConditionalClause, FallbackClause, RuleSet, Selection

logger = logging.getLogger(__name__)


def _following_fallback(ruleset: RuleSet, after: int) -> FallbackClause | None:
    for clause in ruleset.clauses[after + 1 :]:
        if isinstance(clause, FallbackClause):
            return clause
    return None


def select_target(ruleset: RuleSet, current_version: str, *, convention: str = "auto") -> Selection:
    """
    Pick the single target module a rule set selects for ``current_version``.

    Raises:
        EmptyRuleSetError: no clauses
        MalformedRuleSetError: more than one conditional or fallback
        NoMatchingRuleError: conditional is false and nothing follows it
        MalformedVersionError: unparseable current or reference version
    """
    if not ruleset.clauses:
        raise EmptyRuleSetError("rule set has no clauses", source=ruleset.source)

    # RuleSet may be built by hand, bypassing the parser.
    validate_clauses(ruleset.clauses, source=ruleset.source)

    for index, clause in enumerate(ruleset.clauses):
        if not isinstance(clause, ConditionalClause):
            continue

        try:
            result = compare(clause.operator, current_version, clause.reference, convention=convention)
        except MalformedVersionError as e:
            e.context.setdefault("clause", clause.describe())
            e.context.setdefault("operator", clause.operator)
            e.context.setdefault("current", current_version)
            e.context.setdefault("reference", clause.reference)
            if ruleset.source:
                e.context.setdefault("source", ruleset.source)
            raise
        comparison = Comparison(
            operator=clause.operator,
            current=current_version,
            reference=clause.reference,
            result=result,
        )
        logger.debug(
            "evaluated %s %s %s -> %s (%s)",
            current_version,
            clause.operator,
            clause.reference,
            result,
            ruleset.source or "<inline>",
        )

        if result:
            return Selection(target=clause.target, clause=clause, comparison=comparison, source=ruleset.source)

        fallback = _following_fallback(ruleset, index)
        if fallback is None:
            raise NoMatchingRuleError(
                "condition is false and no 'else' clause is declared",
                clause=clause.describe(),
                operator=clause.operator,
                current=current_version,
                reference=clause.reference,
                source=ruleset.source,
            )
        return Selection(target=fallback.target, clause=fallback, comparison=comparison, source=ruleset.source)

    fallback = ruleset.fallbacks[0]
    logger.debug("no conditional clause; selecting fallback %s", fallback.target)
    return Selection(target=fallback.target, clause=fallback, source=ruleset.source)
