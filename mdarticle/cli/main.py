"""mdarticle CLI main entry point.

This module provides the main CLI application using Typer.
"""
from pathlib import Path
from typing import Optional

import typer

from ..lib.console import setup_console_encoding
from ..models.config import VALID_LOG_LEVELS
from .check_command import check
from .common import global_config
from .config_command import config
from .render_command import render
from .show_command import list_articles, show

setup_console_encoding()

# Create main app
app = typer.Typer(
    name="mdarticle",
    help="Markdown article toolkit: validate, inspect and re-serialize frontmatter articles",
    no_args_is_help=True,
)

# Add subcommands
app.add_typer(config, name="config", help="Configuration management")
app.command()(check)
app.command()(show)
app.command(name="list")(list_articles)
app.command()(render)


# Global options
@app.callback()
def main(
    config_file: Optional[Path] = typer.Option(None, "--config-file", help="Configuration file path"),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level [DEBUG|INFO|WARNING|ERROR], defaults to logging.level"
    ),
    content_dir: Optional[Path] = typer.Option(
        None, "--content-dir", help="Article directory (overrides content.dir)"
    ),
):
    """mdarticle - frontmatter + markdown article toolkit."""
    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        raise typer.BadParameter(f"Unknown log level: {log_level}", param_hint="--log-level")

    global_config["config_file"] = config_file
    global_config["log_level"] = log_level
    global_config["content_dir"] = content_dir


if __name__ == "__main__":
    app()
