"""
Provisioner: CLI entrypoint.

Usage:
    provisioner                 # interactive menu (same as `provisioner menu`)
    provisioner sync
    provisioner list install --json
    provisioner run install/docker --yes
    provisioner status
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from provisioner import __version__
from provisioner.core.observability.logging_config import setup_logging
from provisioner.ui import UI_CHOICES

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="provisioner")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to config.conf (default: $PROVISIONER_CONFIG or /etc/provisioner/config.conf).",
)
@click.option(
    "--ui",
    type=click.Choice(list(UI_CHOICES)),
    default="auto",
    show_default=True,
    help="Dialog front end.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    debug: bool,
    config_path: str | None,
    ui: str,
) -> None:
    """Server provisioner: run categorized setup modules from a git catalog."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["ui"] = ui

    # ── Logging setup (console only until the config names the log file) ──
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    else:
        level = os.environ.get("PROVISIONER_LOG_LEVEL", "WARNING")
    ctx.obj["log_level"] = level
    setup_logging(level=level)

    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


# ── Helpers ─────────────────────────────────────────────────────


@contextmanager
def _fatal_errors() -> Iterator[None]:
    """Map fatal errors to exit codes: ProvisionerError → 1, Ctrl-C → 130."""
    from provisioner.core.errors import ProvisionerError

    try:
        yield
    except ProvisionerError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo(err=True)
        click.secho("Interrupted.", fg="yellow", err=True)
        sys.exit(EXIT_INTERRUPTED)


def _open_session(ctx: click.Context, *, assume_yes: bool = False, auto_sync: bool = True):
    """Select a presenter and run the startup checks."""
    from provisioner.core.use_cases.startup import prepare
    from provisioner.ui import select_presenter
    from provisioner.ui.whiptail import WhiptailPresenter

    presenter = select_presenter(ctx.obj["ui"], assume_yes=assume_yes)
    dialogs = isinstance(presenter, WhiptailPresenter)
    return prepare(
        presenter,
        ctx.obj.get("config_path"),
        console_level=ctx.obj["log_level"],
        console=not dialogs,
        required_tools=("git", "whiptail") if dialogs else ("git",),
        auto_sync=auto_sync,
    )


# ── Commands ────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def menu(ctx: click.Context) -> None:
    """Open the interactive menu (default)."""
    with _fatal_errors():
        session = _open_session(ctx)
        code = session.menu().run()
    sys.exit(code)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def sync(ctx: click.Context, as_json: bool) -> None:
    """Clone or update the module catalog once."""
    with _fatal_errors():
        session = _open_session(ctx, auto_sync=False)
        report = session.sync()

    if as_json:
        click.echo(json.dumps(report.model_dump(mode="json"), indent=2))
    if report.units_made_executable:
        logger.info("Marked %d module(s) executable.", report.units_made_executable)
    if not report.ok:
        sys.exit(1)


@cli.command("list")
@click.argument("category")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_units(ctx: click.Context, category: str, as_json: bool) -> None:
    """List the modules of CATEGORY and whether they have run."""
    from provisioner.core.use_cases.menu import COMPLETED_MARK, PENDING_MARK, category_title

    with _fatal_errors():
        session = _open_session(ctx, auto_sync=False)
        units = session.catalog.list_units(category)
        completed = session.ledger.completed()

    if as_json:
        rows = [
            {
                "key": unit.key,
                "unit_id": unit.unit_id,
                "description": unit.description,
                "completed": unit.key in completed,
                "path": str(unit.path),
            }
            for unit in units
        ]
        click.echo(json.dumps(rows, indent=2))
        return

    click.secho(f"\n📋 {category_title(category)}", fg="cyan", bold=True)
    if not units:
        click.echo(f"   No modules found in {session.catalog.category_path(category)}")
    width = max((len(u.unit_id) for u in units), default=0)
    for unit in units:
        done = unit.key in completed
        mark = COMPLETED_MARK if done else PENDING_MARK
        click.secho(f"   {mark} ", fg="green" if done else "white", nl=False)
        click.echo(f"{unit.unit_id:<{width}}  {unit.description}")
    click.echo()


@cli.command()
@click.argument("key", metavar="CATEGORY/UNIT")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Re-run without asking if already completed.")
@click.pass_context
def run(ctx: click.Context, key: str, assume_yes: bool) -> None:
    """Run a single module without the menu."""
    from provisioner.core.engine.runner import UnitNotFound

    with _fatal_errors():
        session = _open_session(ctx, assume_yes=assume_yes)
        try:
            receipt = session.runner.run_key(key, session.catalog)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="CATEGORY/UNIT") from e
        except UnitNotFound as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)

    if receipt.failed:
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show completed modules per category."""
    from provisioner.core.errors import CategoryUnavailable
    from provisioner.core.models.unit import split_key

    with _fatal_errors():
        session = _open_session(ctx, auto_sync=False)
        completed = session.ledger.completed()

    by_category: dict[str, list[str]] = {c: [] for c in session.config.categories}
    for key in sorted(completed):
        try:
            category, unit_id = split_key(key)
        except ValueError:
            logger.debug("Ignoring malformed ledger entry %r", key)
            continue
        by_category.setdefault(category, []).append(unit_id)

    available: dict[str, int | None] = {}
    for category in by_category:
        try:
            available[category] = len(session.catalog.list_units(category))
        except CategoryUnavailable:
            available[category] = None

    if as_json:
        click.echo(
            json.dumps(
                {
                    "catalog": str(session.config.catalog_root),
                    "synced": session.config.is_cloned,
                    "categories": {
                        c: {"completed": ids, "available": available[c]}
                        for c, ids in by_category.items()
                    },
                },
                indent=2,
            )
        )
        return

    click.secho(f"\n📋 {session.config.catalog_root}", fg="cyan", bold=True)
    if not session.config.is_cloned:
        click.secho("   ⚠️  Catalog not synced yet. Run `provisioner sync`.", fg="yellow")
    for category, ids in by_category.items():
        total = available[category]
        count = f"{len(ids)}/{total}" if total is not None else f"{len(ids)}/?"
        click.secho(f"   {category}: {count} completed", fg="white", bold=True)
        for unit_id in ids:
            click.echo(f"     ✓ {unit_id}")
    click.echo()


@cli.command("log")
@click.pass_context
def show_log(ctx: click.Context) -> None:
    """Page through the execution log."""
    with _fatal_errors():
        session = _open_session(ctx, auto_sync=False)

    if session.log.is_empty():
        click.echo("Log file is empty or does not exist.")
        return
    click.echo_via_pager(session.log.read_text())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
