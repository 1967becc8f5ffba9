from __future__ import annotations

import asyncio
import json
import sys
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skillgate.core.config import Settings, get_settings
from skillgate.interfaces.hook import run_hook
from skillgate.observability.logging import setup_logging
from skillgate.routing.cache import ScoreCache
from skillgate.runtime.service import SkillActivationService, TurnOutcome
from skillgate.session.ledger import FileLedgerStore
from skillgate.skills.catalog import CatalogError, load_catalog
from skillgate.skills.emitter import activation_label

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(help="Decide which skills to activate for each request.")


class ScorerChoice(str, Enum):
    auto = "auto"
    llm = "llm"
    keyword = "keyword"


def _settings() -> Settings:
    return get_settings()


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""

    settings = _settings()
    setup_logging(settings.log_level, settings.log_format, settings.log_file)


@app.command()
def hook() -> None:
    """Read one host record from stdin and print the activation text."""

    text = run_hook(sys.stdin.read(), _settings())
    if text:
        typer.echo(text)


async def _activate(
    settings: Settings, session: str, prompt: str, dry_run: bool, scorer: str | None
) -> TurnOutcome:
    service = SkillActivationService.from_settings(settings, scorer_mode=scorer)
    try:
        return await service.run_turn(session, prompt, dry_run=dry_run)
    finally:
        await service.aclose()


@app.command()
def activate(
    prompt: str = typer.Argument(..., help="Request text to score."),
    session: str = typer.Option("cli", "--session", "-s", help="Conversation id."),
    json_output: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not update the session ledger."),
    scorer: ScorerChoice | None = typer.Option(None, "--scorer", help="Override the scorer."),
) -> None:
    """Run one activation turn from the command line."""

    settings = _settings()
    outcome = asyncio.run(
        _activate(settings, session, prompt, dry_run, scorer.value if scorer else None)
    )
    result = outcome.result

    if json_output:
        payload = result.model_dump(mode="json")
        payload["scorer"] = outcome.scorer
        payload["cached"] = outcome.cached
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if not result.final_order:
        console.print("[yellow]No skills activated.[/yellow]")
    else:
        table = Table(title=f"Activated ({outcome.scorer} scorer)")
        table.add_column("#", justify="right")
        table.add_column("Skill")
        table.add_column("Reason")
        for index, name in enumerate(result.final_order, start=1):
            table.add_row(str(index), name, activation_label(name, result))
        console.print(table)

    if result.suggested or result.manual_only:
        console.print("Suggested: " + ", ".join([*result.suggested, *result.manual_only]))
    for diagnostic in result.diagnostics:
        console.print(f"[dim]{diagnostic.code.value}: {escape(diagnostic.message)}[/dim]")


@app.command()
def catalog(
    path: Path | None = typer.Option(None, "--path", help="Catalog file to validate."),
) -> None:
    """Validate the catalog and list its skills."""

    settings = _settings()
    catalog_path = path or settings.catalog_path
    try:
        loaded = load_catalog(catalog_path, default_priority=settings.default_priority)
    except CatalogError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    table = Table(title=str(catalog_path))
    table.add_column("Skill", style="cyan")
    table.add_column("Kind")
    table.add_column("Auto")
    table.add_column("Priority", justify="right")
    table.add_column("Requires")
    table.add_column("Affinity")
    for rule in sorted(loaded, key=lambda r: (r.priority, r.name)):
        table.add_row(
            rule.name,
            rule.kind,
            "yes" if rule.auto_activate else "no",
            str(rule.priority),
            ", ".join(rule.dependencies) or "-",
            ", ".join(rule.affinities) or "-",
        )
    console.print(table)

    for diagnostic in loaded.diagnostics:
        console.print(f"[yellow]{diagnostic.code.value}[/yellow] {escape(diagnostic.message)}")
    if loaded.quarantined:
        raise typer.Exit(code=1)


@app.command()
def ledger(
    session: str = typer.Argument(..., help="Conversation id."),
    reset: bool = typer.Option(False, "--reset", help="Forget every activation."),
) -> None:
    """Show or reset the session ledger of a conversation."""

    store = FileLedgerStore(_settings().state_dir)
    if reset:
        store.clear(session)
        console.print(f"Ledger for [cyan]{session}[/cyan] cleared.")
        return

    activated, diagnostic = store.read_checked(session)
    if diagnostic is not None:
        console.print(f"[yellow]{diagnostic.code.value}[/yellow] {escape(diagnostic.message)}")
    if not activated:
        console.print("No skills activated yet.")
        return
    for name in activated:
        console.print(f"- {name}")


@app.command("cache-sweep")
def cache_sweep() -> None:
    """Drop expired scoring results."""

    settings = _settings()
    cache = ScoreCache(
        settings.cache_dir,
        ttl_seconds=settings.cache_ttl_seconds,
        sweep_interval_seconds=settings.cache_sweep_interval_seconds,
    )
    removed = cache.sweep()
    console.print(f"Removed {removed} expired entries.")


if __name__ == "__main__":
    app()
