"""Config command implementation."""
import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from ..lib.config_loader import ConfigError, ConfigLoader
from ..lib.console import echo_with_prefix, safe_echo
from .common import global_config

logger = logging.getLogger(__name__)

# Create config subapp
config = typer.Typer(help="Configuration management")


@config.command()
def show(key: Optional[str] = typer.Argument(None, help="Specific configuration key")):
    """Show the effective configuration."""
    try:
        config_data, sources = asyncio.run(_async_load_config())
    except ConfigError as e:
        echo_with_prefix("ERROR", f"Failed to load configuration: {e!s}")
        raise typer.Exit(1)

    if key:
        if key in config_data:
            safe_echo(f"{key} = {config_data[key]}")
            return

        echo_with_prefix("WARNING", f"Configuration key '{key}' not found")
        safe_echo("Available keys:")
        for k in sorted(config_data):
            safe_echo(f"  - {k}")
        raise typer.Exit(1)

    safe_echo("\nCurrent Configuration:")
    safe_echo("=" * 50)

    # Group configurations by section
    categories: dict[str, list[tuple[str, Any]]] = {}
    for k, v in config_data.items():
        category = k.split(".")[0] if "." in k else "general"
        categories.setdefault(category, []).append((k, v))

    for category, items in sorted(categories.items()):
        safe_echo(f"\n[{category.upper()}]")
        for k, v in sorted(items):
            safe_echo(f"  {k} = {v}")

    safe_echo(f"\nSources: {', '.join(sources)}")
    safe_echo("=" * 50)


@config.command()
def export(
    output_file: Path = typer.Argument(..., help="Destination file"),
    format: str = typer.Option("env", "--format", help="Output format [env|json]"),
):
    """Export the effective configuration to a file."""
    if format not in ("env", "json"):
        echo_with_prefix("ERROR", f"Unsupported export format: {format}")
        raise typer.Exit(1)

    try:
        exported = asyncio.run(_async_export_config(output_file, format))
    except (ConfigError, OSError) as e:
        echo_with_prefix("ERROR", f"Failed to export configuration: {e!s}")
        logger.error(f"Config export command failed: {e}")
        raise typer.Exit(1)

    if not exported:
        echo_with_prefix("ERROR", "No configuration to export")
        raise typer.Exit(1)

    echo_with_prefix("SUCCESS", f"Configuration exported to {output_file}")


async def _async_load_config() -> tuple[dict[str, Any], list[str]]:
    """Async helper to load configuration and its sources."""
    config_loader = ConfigLoader()
    config_data = await config_loader.load_config(config_file=global_config.get("config_file"))
    return config_data, config_loader.get_config_sources()


async def _async_export_config(output_file: Path, format: str) -> bool:
    """Async helper to load and export configuration."""
    config_loader = ConfigLoader()
    await config_loader.load_config(config_file=global_config.get("config_file"))
    return await config_loader.export_config_to_file(output_file, format=format)
