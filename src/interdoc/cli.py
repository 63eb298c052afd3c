"""CLI entry point for interdoc."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.table import Table

from interdoc.config import InterdocConfig, load_config
from interdoc.config.loader import DEFAULT_CONFIG_TEMPLATE
from interdoc.converter import DocumentConverter
from interdoc.errors import InterdocError
from interdoc.logging_config import configure_logging
from interdoc.registry import CodecRegistry, Format, build_registry

app = typer.Typer(
    name="interdoc",
    help="Convert documents between formats through a shared document model.",
)

config_app = typer.Typer(help="Manage interdoc configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: InterdocConfig | None = None


def _get_config() -> InterdocConfig:
    if _config is None:
        return load_config()
    return _config


def _get_registry(cfg: InterdocConfig) -> CodecRegistry:
    try:
        return build_registry(cfg)
    except InterdocError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to interdoc.yaml")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="debug, info, warn or error")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    try:
        configure_logging(log_level or _config.log_level, _config.log_format)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def convert(
    sources: list[Path] = typer.Argument(..., help="Files to convert"),
    to: Format = typer.Option(..., "--to", "-t", help="Target format"),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Directory for converted files (default: beside each source)"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite existing output files"),
) -> None:
    """Convert one or more files to another format."""
    cfg = _get_config()
    converter = DocumentConverter(_get_registry(cfg))
    failures = 0

    for source in sources:
        if not source.is_file():
            rprint(f"[red]Error:[/red] {source} is not a file")
            failures += 1
            continue

        result = converter.convert(source.name, source.read_bytes(), to)

        if result.is_skipped:
            rprint(f"[yellow]Skipped[/yellow] {source}: {escape(result.reason)}")
            continue
        if result.is_failed:
            failure = result.failure
            rprint(f"[red]Failed[/red] {source} [dim]({failure.kind.value})[/dim]: {escape(failure.message)}")
            failures += 1
            continue

        target_dir = output_dir or source.parent
        target = target_dir / result.file_name
        if target.exists() and not force:
            rprint(f"[yellow]{target} already exists.[/yellow] Use --force to overwrite.")
            failures += 1
            continue
        target_dir.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.data)
        rprint(f"[green]Converted[/green] {source} -> {target}")

    if failures:
        raise typer.Exit(1)


@app.command()
def formats() -> None:
    """List registered codecs, the extensions they read and the formats they write."""
    cfg = _get_config()
    registry = _get_registry(cfg)
    writable = {fmt.value for fmt in registry.writable_formats()}

    table = Table(title=f"Codecs ({len(registry.codecs)})")
    table.add_column("Codec", style="bold")
    table.add_column("Reads")
    table.add_column("Writes")
    table.add_column("Lossless", justify="center")
    for codec in registry.codecs:
        table.add_row(
            codec.name,
            ", ".join(f".{ext}" for ext in sorted(codec.supported_extensions())),
            codec.name if codec.name in writable else "-",
            "yes" if codec.full_fidelity else "-",
        )
    rprint(table)


# ---------------------------------------------------------------------------
# Config commands
# ---------------------------------------------------------------------------


@config_app.command("init")
def config_init(
    path: Path = typer.Option(Path("interdoc.yaml"), "--path", help="Where to write the config"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create a default interdoc.yaml."""
    if path.exists() and not force:
        rprint(f"[yellow]{path} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    path.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {path}")


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration as YAML."""
    cfg = _get_config()
    typer.echo(yaml.safe_dump(cfg.model_dump(mode="json"), sort_keys=False), nl=False)
