"""Dry-run resolution of a rule file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.console import Console

from ..config import Settings, current_host_version
from ..errors import VersionGateError
from ..resolver import Resolver
from ..rules import load_ruleset, select_target


def run_resolve(
    path: Path,
    settings: Settings,
    *,
    host_version: str | None = None,
    output_json: bool = False,
    load: bool = True,
) -> int:
    """
    Report which module a rule file selects and, when loading, what it exports.

    Nothing is installed anywhere: the resolution has no consumer.
    """
    console = Console()
    err = Console(stderr=True)
    version = host_version or current_host_version(settings)

    try:
        ruleset = load_ruleset(path)
        if load:
            resolved = Resolver(settings=settings).resolve(None, ruleset, version)
            data: dict[str, Any] = {"host_version": version, **resolved.to_dict()}
        else:
            selection = select_target(ruleset, version, convention=settings.version_convention)
            data = {"host_version": version, "module": selection.target, "selection": selection.to_dict()}
    except FileNotFoundError as e:
        err.print(str(e), style="bold red", markup=False)
        return 1
    except VersionGateError as e:
        if output_json:
            print(json.dumps({"host_version": version, **e.to_dict()}, indent=2, sort_keys=True, default=str))
        else:
            err.print(f"Resolution failed: {e}", style="bold red", markup=False)
        return 1

    if output_json:
        print(json.dumps(data, indent=2, sort_keys=True))
        return 0

    selection = data["selection"]
    comparison = selection.get("comparison")
    console.print(f"[bold]Host version:[/bold] {version}")
    if comparison:
        console.print(
            f"[bold]Condition:[/bold] {comparison['current']} {comparison['operator']} "
            f"{comparison['reference']} -> {comparison['result']}"
        )
    console.print(f"[bold]Clause:[/bold] {selection['clause']}")
    console.print(f"[bold]Module:[/bold] [cyan]{data['module']}[/cyan]")
    if "exports" in data:
        exports = data["exports"]
        console.print(f"[bold]Exports ({len(exports)}):[/bold] {', '.join(exports) if exports else '(none)'}")
    return 0
