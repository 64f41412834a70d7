from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Sequence

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from ..errors import MalformedRuleSetError
from ..version import normalize_operator, parse_version
from .schema import Clause, ConditionalClause, FallbackClause, RuleSet

# Keyword -> number of arguments that follow it.
_ARITY = {"if": 3, "else": 1}
_TOP_LEVEL_KEYS = ("if", "else", "rules")


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _target(value: Any, *, position: int, source: str | None) -> str:
    target = str(value).strip() if isinstance(value, str) else ""
    if not target:
        raise MalformedRuleSetError("module name must be a non-empty string", position=position, source=source)
    return target


def _build_clause(keyword: str, args: Sequence[Any], *, position: int, source: str | None) -> Clause:
    if keyword == "if":
        op, reference, target = args
        if not isinstance(reference, str):
            # An unquoted TOML version such as 5.010000 arrives as the float 5.01.
            raise MalformedRuleSetError(
                "reference version must be a quoted string",
                version=reference,
                position=position,
                source=source,
            )
        reference_str = reference.strip()
        # Syntax only; the parsing convention is applied at evaluation time.
        parse_version(reference_str, "dotted")
        return ConditionalClause(
            operator=normalize_operator(op),  # type: ignore[arg-type]
            reference=reference_str,
            target=_target(target, position=position, source=source),
        )
    return FallbackClause(target=_target(args[0], position=position, source=source))


def _keyword(token: Any, *, position: int, source: str | None) -> str:
    keyword = str(token).strip().lower()
    if keyword in _ARITY:
        return keyword
    if keyword in ("elsif", "elif", "else if"):
        raise MalformedRuleSetError(
            "multi-branch conditionals are not supported; use one 'if' and an optional 'else'",
            keyword=token,
            position=position,
            source=source,
        )
    raise MalformedRuleSetError(
        f"unknown keyword {token!r}; expected 'if' or 'else'",
        position=position,
        source=source,
    )


def validate_clauses(clauses: Iterable[Clause], *, source: str | None = None) -> tuple[Clause, ...]:
    """
    Enforce rule set structure.

    At most one conditional, at most one fallback, and the fallback
    follows the conditional.
    """
    items = tuple(clauses)
    conditional_at = [i for i, c in enumerate(items) if isinstance(c, ConditionalClause)]
    fallback_at = [i for i, c in enumerate(items) if isinstance(c, FallbackClause)]

    if len(conditional_at) > 1:
        raise MalformedRuleSetError(
            "multiple 'if' clauses; only one conditional clause is supported",
            count=len(conditional_at),
            source=source,
        )
    if len(fallback_at) > 1:
        raise MalformedRuleSetError(
            "multiple 'else' clauses; at most one fallback clause is supported",
            count=len(fallback_at),
            source=source,
        )
    if conditional_at and fallback_at and fallback_at[0] < conditional_at[0]:
        raise MalformedRuleSetError("'else' clause must follow the 'if' clause", source=source)
    return items


def parse_tokens(tokens: Sequence[Any], *, source: str | None = None) -> RuleSet:
    """
    Parse the flat token form: ``if <op> <version> <module> [else <module>]``.
    """
    clauses: list[Clause] = []
    position = 0
    while position < len(tokens):
        keyword = _keyword(tokens[position], position=position, source=source)
        arity = _ARITY[keyword]
        args = tokens[position + 1 : position + 1 + arity]
        if len(args) < arity:
            raise MalformedRuleSetError(
                f"truncated '{keyword}' clause: expected {arity} argument(s), got {len(args)}",
                position=position,
                source=source,
            )
        clauses.append(_build_clause(keyword, args, position=position, source=source))
        position += 1 + arity

    return RuleSet(clauses=validate_clauses(clauses, source=source), source=source)


def parse_rows(rows: Iterable[Sequence[Any]], *, source: str | None = None) -> RuleSet:
    """Parse one clause per row, e.g. ``[["if", "ge", "3.11", "a"], ["else", "b"]]``."""
    clauses: list[Clause] = []
    for position, row in enumerate(rows):
        if isinstance(row, str) or not isinstance(row, Sequence) or not row:
            raise MalformedRuleSetError("each rule must be a non-empty list of tokens", position=position, source=source)
        keyword = _keyword(row[0], position=position, source=source)
        args = list(row[1:])
        if len(args) != _ARITY[keyword]:
            raise MalformedRuleSetError(
                f"'{keyword}' clause expects {_ARITY[keyword]} argument(s), got {len(args)}",
                position=position,
                source=source,
            )
        clauses.append(_build_clause(keyword, args, position=position, source=source))

    return RuleSet(clauses=validate_clauses(clauses, source=source), source=source)


def parse_mapping(data: dict[str, Any], *, source: str | None = None) -> RuleSet:
    """
    Parse a rule set from decoded TOML.

    Accepts either ``rules = [[...], ...]`` or ``[if]``/``[else]`` tables.
    """
    unknown = sorted(k for k in data if k not in _TOP_LEVEL_KEYS)
    for key in unknown:
        # [elif]/[elsif] tables get the same message as the token forms.
        if key.strip().lower() in ("elsif", "elif", "else if"):
            _keyword(key, position=0, source=source)
    if unknown:
        raise MalformedRuleSetError(
            f"unknown top-level keys: {', '.join(unknown)}; expected 'if', 'else' or 'rules'",
            keys=unknown,
            source=source,
        )
    if "rules" in data and ("if" in data or "else" in data):
        raise MalformedRuleSetError("use either 'rules' or [if]/[else] tables, not both", source=source)

    if "rules" in data:
        rows = data.get("rules")
        if not isinstance(rows, list):
            raise MalformedRuleSetError("'rules' must be an array of token arrays", source=source)
        return parse_rows(rows, source=source)

    clauses: list[Clause] = []
    if "if" in data:
        cond = _coerce_dict(data.get("if"))
        missing = [k for k in ("op", "version", "module") if k not in cond]
        if missing:
            raise MalformedRuleSetError(f"[if] table missing keys: {', '.join(missing)}", source=source)
        clauses.append(
            _build_clause("if", [cond["op"], cond["version"], cond["module"]], position=0, source=source)
        )
    if "else" in data:
        fallback = _coerce_dict(data.get("else"))
        if "module" not in fallback:
            raise MalformedRuleSetError("[else] table missing key: module", source=source)
        clauses.append(_build_clause("else", [fallback["module"]], position=len(clauses), source=source))

    return RuleSet(clauses=validate_clauses(clauses, source=source), source=source)


def load_ruleset(path: Path) -> RuleSet:
    """Load a rule set from TOML."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rule file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise MalformedRuleSetError(f"failed to parse rule file: {e}", source=str(path)) from e

    return parse_mapping(data, source=str(path))
