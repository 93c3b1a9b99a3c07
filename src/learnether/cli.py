"""
learnether CLI

Command-line walkthrough of an Ethereum JSON-RPC endpoint.

Commands:
  accounts  - Show an account's ETH balance
  send      - Send a signed ETH transfer
  read      - Read ERC-20 token state
  write     - Send an ERC-20 transfer
  events    - Query ERC-20 Transfer events
  info      - Show configuration status
"""

from __future__ import annotations

import sys
from typing import Any

import click

from . import __version__
from .config import describe_environment, load_environment
from .errors import LearnEtherError
from .logging_utils import configure_logging


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        L E A R N E T H E R", fg="bright_white", bold=True)
        + click.style(f"      v{__version__}", dim=True)
    )
    click.secho("        ─── Ethereum JSON-RPC lessons ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


class LessonGroup(click.Group):
    """Group that turns library errors into a message and an exit code."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except LearnEtherError as exc:
            click.secho(f"ERROR: {exc}", fg="red", err=True)
            ctx.exit(exc.exit_code)


@click.group(cls=LessonGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="learnether")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """learnether — Ethereum JSON-RPC lessons."""
    ctx.ensure_object(dict)
    configure_logging(verbose)
    load_environment()

    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Lessons ============

from .lessons.accounts import accounts
from .lessons.send import send
from .lessons.read import read
from .lessons.write import write
from .lessons.events import events

cli.add_command(accounts)
cli.add_command(send)
cli.add_command(read)
cli.add_command(write)
cli.add_command(events)


# ============ Info ============


@cli.command()
def info() -> None:
    """Show configuration status."""
    _print_banner()

    click.secho("  Configuration ──────────────────────────", fg="cyan")
    click.echo()
    for name, value in describe_environment().items():
        shown = (
            click.style(value, fg="bright_white")
            if value is not None
            else click.style("not set", fg="yellow")
        )
        click.echo(click.style(f"  {name:<22}", dim=True) + shown)
    click.echo()

    click.secho("  Lessons ────────────────────────────────", fg="cyan")
    click.echo()
    lessons = [
        ("accounts", "Read an account balance"),
        ("send    ", "Sign and send an ETH transfer"),
        ("read    ", "Read ERC-20 token state"),
        ("write   ", "Send an ERC-20 transfer"),
        ("events  ", "Query ERC-20 Transfer events"),
    ]
    for cmd, desc in lessons:
        click.echo(
            click.style("  ", dim=True)
            + click.style(cmd, fg="bright_white", bold=True)
            + click.style("  ◇  ", fg="cyan")
            + click.style(desc, dim=True)
        )
    click.echo()


# ============ Entry Points ============


def main() -> None:
    """learnether CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    cli()


if __name__ == "__main__":
    main()
