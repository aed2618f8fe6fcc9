"""
codegraph-naming CLI

Command-line interface for running the naming policies over a PHP tree.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from codegraph_naming.config import NamingSettings, RunMode
from codegraph_naming.errors import NamingError
from codegraph_naming.logging import setup_logging
from codegraph_naming.models import Severity
from codegraph_naming.pipeline import NamingPipeline, RunReport
from codegraph_naming.policies import ADVISORY_CATALOG, POLICY_CATALOG

app = typer.Typer(
    name="codegraph-naming",
    help="Normalize class naming conventions and keep references and file paths in sync",
    add_completion=False,
)

console = Console()


@app.command()
def run(
    path: Path = typer.Argument(..., exists=True, help="Source tree (or single file) to process"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Report changes without touching files"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help="YAML rule-set file"),
    policy: list[str] | None = typer.Option(None, "--policy", "-p", help="Only run these policies (repeatable)"),
    named_args: bool | None = typer.Option(None, "--named-args/--no-named-args", help="Enforce named arguments"),
    multiline: bool | None = typer.Option(None, "--multiline/--no-multiline", help="Split named argument lists"),
    show_diff: bool = typer.Option(False, "--diff", help="Print a unified diff of rewritten files"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)"),
):
    """
    Rename declarations that violate the naming policies.

    Declarations, their references and their files are renamed together.
    With --dry-run nothing is written and no file is moved.
    """
    try:
        settings = NamingSettings.from_yaml(config) if config is not None else NamingSettings()
        settings = _apply_overrides(settings, dry_run, policy, named_args, multiline)

        setup_logging(level=log_level or settings.logging.level, format=settings.logging.format)

        console.print(f"\n[bold cyan]codegraph-naming[/bold cyan] {path}")
        console.print(f"[bold]Mode:[/bold] {'dry-run' if settings.dry_run else 'apply'}\n")

        report = NamingPipeline(settings).run(path)
    except NamingError as e:
        console.print(f"\n[bold red]Run failed:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    _display_report(report, show_diff)


@app.command()
def policies():
    """List the naming policies in pass order."""
    table = Table(title="Naming policies")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Scope")
    table.add_column("Description")

    for index, policy_cls in enumerate(POLICY_CATALOG, start=1):
        scope = policy_cls.scope.path if policy_cls.scope is not None else "everywhere"
        table.add_row(str(index), policy_cls.name, scope, policy_cls.description)

    for rule_cls in ADVISORY_CATALOG:
        scope = rule_cls.scope.path if rule_cls.scope is not None else "everywhere"
        table.add_row("-", rule_cls.name, scope, f"{rule_cls.description} (advisory)")

    console.print(table)


def _apply_overrides(
    settings: NamingSettings,
    dry_run: bool,
    policy: list[str] | None,
    named_args: bool | None,
    multiline: bool | None,
) -> NamingSettings:
    update = {}
    if dry_run:
        update["mode"] = RunMode.DRY_RUN
    if policy:
        update["policies"] = settings.policies.model_copy(update={"enabled": list(policy)})

    arguments = {}
    if named_args is not None:
        arguments["enforce_named"] = named_args
    if multiline is not None:
        arguments["format_multiline"] = multiline
    if arguments:
        update["arguments"] = settings.arguments.model_copy(update=arguments)

    return settings.model_copy(update=update) if update else settings


def _display_report(report: RunReport, show_diff: bool) -> None:
    if report.renames:
        table = Table(title="Renamed declarations")
        table.add_column("Policy", style="cyan")
        table.add_column("Old name")
        table.add_column("New name", style="green")
        table.add_column("File move")

        for record in report.renames:
            move = ""
            if record.new_path is not None:
                move = f"{record.old_path.name} -> {record.new_path.name}"
            table.add_row(record.policy, record.old_fqn, record.new_fqn, move)
        console.print(table)
    else:
        console.print("[green]No naming violations found.[/green]")

    if show_diff:
        for file_path, diff in report.diffs.items():
            console.print(f"\n[bold]{file_path}[/bold]")
            console.print(Syntax(diff, "diff", theme="ansi_dark", word_wrap=True))

    if report.diagnostics:
        console.print("\n[bold]Diagnostics:[/bold]")
        for diagnostic in report.diagnostics:
            color = "red" if diagnostic.severity == Severity.ERROR else "yellow"
            location = f"{diagnostic.file_path}:{diagnostic.line}" if diagnostic.file_path else "-"
            console.print(f"  [{color}]{diagnostic.rule}[/{color}] {location} {diagnostic.message}")

    moves = report.moves
    console.print(
        f"\n[bold]Files:[/bold] {report.files_scanned} scanned, {len(report.modified_files)} modified, "
        f"{len(moves.applied)} moved, {len(moves.skipped)} skipped, {len(moves.discarded)} planned (dry-run)"
    )


def main():
    app()


if __name__ == "__main__":
    main()
