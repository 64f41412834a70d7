"""CLI entrypoint for versiongate."""

import sys
from pathlib import Path

import click

from . import __version__
from .config import load_settings
from .errors import VersionGateError
from .version import CONVENTIONS, OPERATORS


def _auto_detect_pyproject(start: Path) -> Path | None:
    """Find a pyproject.toml by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


@click.group()
@click.version_option(__version__, prog_name="versiongate")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="pyproject.toml holding a [tool.versiongate] table (defaults to the nearest one)",
)
@click.option(
    "--host-version",
    type=str,
    default=None,
    help="Pretend the interpreter is this version",
)
@click.option(
    "--convention",
    type=click.Choice(CONVENTIONS),
    default=None,
    help="How single-dot versions like 5.013000 are split into segments",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, host_version: str | None, convention: str | None) -> None:
    """versiongate - select implementation modules by interpreter version.

    Check rule files and preview which module they resolve to.
    """
    ctx.ensure_object(dict)
    if config_path is None:
        config_path = _auto_detect_pyproject(Path.cwd())

    try:
        settings = load_settings(config_path, host_version=host_version, version_convention=convention)
    except VersionGateError as e:
        raise click.ClickException(str(e)) from e

    ctx.obj["settings"] = settings


@cli.command()
@click.argument("op", type=click.Choice(list(OPERATORS)))
@click.argument("current")
@click.argument("reference")
@click.pass_context
def compare(ctx: click.Context, op: str, current: str, reference: str) -> None:
    """Compare two versions: exit 0 if CURRENT OP REFERENCE holds, 1 if not.

    Examples:

        versiongate compare ge 5.13.0 5.9.0

        versiongate --convention decimal compare eq 5.013000 5.13.0
    """
    from .commands.check import run_compare

    settings = ctx.obj["settings"]
    sys.exit(run_compare(op, current, reference, convention=settings.version_convention))


@cli.command()
@click.argument("rules", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
def check(rules: Path, output_json: bool) -> None:
    """Validate a rule file and list its clauses."""
    from .commands.check import run_check

    sys.exit(run_check(rules, output_json=output_json))


@cli.command()
@click.argument("rules", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.option(
    "--no-load",
    is_flag=True,
    help="Only evaluate the clauses; do not import the selected module",
)
@click.pass_context
def resolve(ctx: click.Context, rules: Path, output_json: bool, no_load: bool) -> None:
    """Show which module RULES selects for the host version, and its exports.

    \b
    Rule files are TOML, either tables:

        [if]
        op = "ge"
        version = "3.11"
        module = "mypkg._modern"

        [else]
        module = "mypkg._legacy"

    or token rows:

        rules = [["if", "ge", "3.11", "mypkg._modern"], ["else", "mypkg._legacy"]]
    """
    from .commands.resolve import run_resolve

    sys.exit(run_resolve(rules, ctx.obj["settings"], output_json=output_json, load=not no_load))


@cli.command("host-version")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def host_version(ctx: click.Context, output_json: bool) -> None:
    """Print the effective host version and its parsed segments."""
    from .commands.check import run_host_version

    sys.exit(run_host_version(ctx.obj["settings"], output_json=output_json))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
