"""Render command implementation."""
import difflib
import logging
from pathlib import Path
from typing import Optional

import typer

from ..lib.config_loader import ConfigError
from ..lib.console import echo_with_prefix, safe_echo
from ..models.config import ConfigKey
from ..repositories.article_repository import ArticleNotFoundError
from ..services.parser_service import ArticleParseError
from .common import build_repository, load_settings

logger = logging.getLogger(__name__)


def render(
    article: str = typer.Argument(..., help="Article slug or file path"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the document to a file"),
    check: bool = typer.Option(
        False, "--check", help="Exit 1 if re-serialization differs from the source"
    ),
):
    """Parse an article and serialize it back to frontmatter + markdown."""
    try:
        settings = load_settings()
        repository = build_repository(settings)
        source = repository.get_raw(article)
        parsed = repository.parser.parse(source)
    except (ConfigError, ArticleNotFoundError, ArticleParseError, OSError, UnicodeDecodeError) as e:
        echo_with_prefix("ERROR", f"Cannot render article: {e!s}")
        logger.error(f"Render command failed: {e}")
        raise typer.Exit(1)

    rendered = repository.serializer.serialize(parsed)

    if check:
        if rendered != source:
            echo_with_prefix("FAIL", "Re-serialized document differs from the source")
            diff = difflib.unified_diff(
                source.splitlines(keepends=True),
                rendered.splitlines(keepends=True),
                fromfile="source",
                tofile="rendered",
            )
            safe_echo("".join(diff), end="")
            raise typer.Exit(1)
        echo_with_prefix("PASS", f"Round trip is byte-identical: {parsed.title}")
        return

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding=settings[ConfigKey.CONTENT_ENCODING], newline="") as f:
            f.write(rendered)
        echo_with_prefix("RENDER", f"Wrote {output}")
        return

    safe_echo(rendered, end="")
