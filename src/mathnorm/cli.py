"""
Command-line interface for mathnorm.

Usage:
    mathnorm normalize answer.md
    cat answer.md | mathnorm normalize --explain
    mathnorm watch --delay 0.05 < answer.md
    mathnorm config set extra_commands grad,curl
"""

import sys
import os
import time
import logging
from pathlib import Path
from typing import Optional

# Windows console encoding
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markdown import Markdown
from rich.live import Live
from rich.text import Text
from rich.markup import escape

from mathnorm import __version__
from mathnorm.config import get_config_manager
from mathnorm.exceptions import MathNormError
from mathnorm.models import NormalizeReport
from mathnorm.normalizer import MathNormalizer

console = Console()
err_console = Console(stderr=True)


def get_normalizer(ctx: click.Context) -> MathNormalizer:
    """Normalizer built from the stored configuration."""
    manager = get_config_manager(ctx.obj.get("config_dir"))
    return MathNormalizer(manager.get_config())


def error(message: str) -> None:
    """Print an error."""
    err_console.print(f"[red]✗[/red] {message}")


def success(message: str) -> None:
    """Print a success message."""
    err_console.print(f"[green]✓[/green] {message}")


def info(message: str) -> None:
    """Print an informational message."""
    err_console.print(f"[blue]ℹ[/blue] {message}")


@click.group()
@click.version_option(__version__, prog_name="mathnorm")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.option(
    "--config-dir",
    envvar="MATHNORM_CONFIG_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    help="Configuration directory (default: ~/.mathnorm)"
)
@click.pass_context
def main(ctx, verbose: bool, config_dir: Optional[Path]):
    """mathnorm - wrap bare LaTeX in markdown with math delimiters."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir


# ===== NORMALIZE COMMANDS =====

def _print_report(report: NormalizeReport) -> None:
    if report.protected:
        table = Table(title="Protected spans")
        table.add_column("Kind", style="cyan")
        table.add_column("Original")
        for span in report.protected:
            table.add_row(span.kind, Text(span.original))
        err_console.print(table)

    candidates = sorted(
        report.command_candidates + report.bracket_candidates,
        key=lambda s: s.start
    )
    if not candidates:
        info("No bare math found")
        return

    applied = {(span.start, span.end) for span in report.accepted}

    table = Table(title="Candidates")
    table.add_column("", width=2)
    table.add_column("Source", style="cyan")
    table.add_column("Range", style="dim")
    table.add_column("Text")
    for span in candidates:
        marker = "✓" if (span.start, span.end) in applied else ""
        table.add_row(marker, span.source, f"{span.start}-{span.end}", Text(span.text))
    err_console.print(table)


@main.command("normalize")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--output", "-o", type=click.File("w", encoding="utf-8"), help="Write result to file")
@click.option("--explain", "-e", is_flag=True, help="Show protected and candidate spans")
@click.option("--check", is_flag=True, help="Exit with 1 if the input is not normalized")
@click.pass_context
def normalize_cmd(ctx, source, output, explain: bool, check: bool):
    """Normalize math notation in SOURCE (stdin by default)."""
    try:
        normalizer = get_normalizer(ctx)
        report = normalizer.explain(source.read())

        if explain:
            _print_report(report)

        if check:
            if report.changed:
                error(f"Not normalized: {len(report.accepted)} expressions would be wrapped")
                sys.exit(1)
            success("Already normalized")
            return

        if output is not None:
            output.write(report.output)
        else:
            click.echo(report.output, nl=False)

    except MathNormError as e:
        error(e.message)
        sys.exit(1)


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--chunk-size", "-c", default=16, show_default=True, help="Characters read per update")
@click.option("--delay", "-d", default=0.0, help="Pause between chunks, seconds")
@click.option("--raw", is_flag=True, help="Show normalized text instead of rendered markdown")
@click.pass_context
def watch(ctx, source, chunk_size: int, delay: float, raw: bool):
    """Re-normalize a growing stream and render it live."""
    try:
        normalizer = get_normalizer(ctx)
        buffer = ""

        def _render(text: str):
            body = Text(text) if raw else Markdown(text)
            return Panel(body, title="Answer", border_style="green")

        with Live(_render(""), console=console, refresh_per_second=10) as live:
            while True:
                chunk = source.read(max(chunk_size, 1))
                if not chunk:
                    break
                buffer += chunk
                # Every prefix is normalized from scratch
                live.update(_render(normalizer.normalize(buffer)))
                if delay:
                    time.sleep(delay)

    except MathNormError as e:
        error(e.message)
        sys.exit(1)


# ===== CONFIG COMMANDS =====

@main.group()
def config():
    """Manage normalizer settings."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx):
    """Show current settings."""
    manager = get_config_manager(ctx.obj.get("config_dir"))
    current = manager.get_config()

    table = Table(title="Settings", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Description", style="dim")

    for name, field in type(current).model_fields.items():
        value = getattr(current, name)
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        table.add_row(name, str(value), field.description or "")

    console.print(table)
    info(f"File: {manager.config_file}")


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx, key: str, value: str):
    """Change one setting."""
    try:
        manager = get_config_manager(ctx.obj.get("config_dir"))
        updated = manager.set_value(key, value)
        success(f"{key} = [bold]{escape(repr(getattr(updated, key)))}[/bold]")
    except MathNormError as e:
        error(e.message)
        sys.exit(1)


@config.command("reset")
@click.pass_context
def config_reset(ctx):
    """Restore default settings."""
    manager = get_config_manager(ctx.obj.get("config_dir"))
    manager.reset()
    success("Settings reset to defaults")


if __name__ == "__main__":
    main()
