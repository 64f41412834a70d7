"""Rule file and version inspection commands."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import Settings, current_host_version
from ..errors import VersionGateError
from ..rules import ConditionalClause, load_ruleset
from ..version import compare, parse_version


def run_compare(op: str, current: str, reference: str, *, convention: str = "auto") -> int:
    """Exit 0 when the comparison holds, 1 when it does not, 2 on bad input."""
    err = Console(stderr=True)
    try:
        result = compare(op, current, reference, convention=convention)
    except VersionGateError as e:
        err.print(str(e), style="bold red", markup=False)
        return 2

    print("true" if result else "false")
    return 0 if result else 1


def run_check(path: Path, *, output_json: bool = False) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        ruleset = load_ruleset(path)
    except FileNotFoundError as e:
        err.print(str(e), style="bold red", markup=False)
        return 1
    except VersionGateError as e:
        if output_json:
            print(json.dumps(e.to_dict(), indent=2, sort_keys=True, default=str))
        else:
            err.print(f"Invalid rule file: {e}", style="bold red", markup=False)
        return 1

    if output_json:
        print(json.dumps({"source": ruleset.source, "clauses": [c.describe() for c in ruleset.clauses]}, indent=2))
        return 0

    if not ruleset.clauses:
        console.print(f"{path}: no clauses (resolution would fail)", style="yellow")
        return 0

    table = Table(title=f"Rules: {path.name}")
    table.add_column("#", style="dim")
    table.add_column("keyword", style="magenta")
    table.add_column("op")
    table.add_column("version")
    table.add_column("module", style="cyan")
    for i, clause in enumerate(ruleset.clauses, start=1):
        if isinstance(clause, ConditionalClause):
            table.add_row(str(i), "if", clause.operator, clause.reference, clause.target)
        else:
            table.add_row(str(i), "else", "", "", clause.target)
    console.print(table)
    return 0


def run_host_version(settings: Settings, *, output_json: bool = False) -> int:
    err = Console(stderr=True)
    version = current_host_version(settings)
    try:
        spec = parse_version(version, settings.version_convention)
    except VersionGateError as e:
        err.print(str(e), style="bold red", markup=False)
        return 1

    data = {
        "host_version": version,
        "segments": list(spec.segments),
        "convention": settings.version_convention,
        "overridden": settings.host_version is not None,
    }
    if output_json:
        print(json.dumps(data, indent=2, sort_keys=True))
    else:
        origin = "configured" if data["overridden"] else "interpreter"
        print(f"{version} ({origin}; segments={list(spec.segments)}; convention={settings.version_convention})")
    return 0
