"""Show and list command implementation."""
import json
import logging
from typing import Any

import typer

from ..lib.config_loader import ConfigError
from ..lib.console import echo_with_prefix, safe_echo
from ..models.article import Article, BlockKind
from ..models.config import ConfigKey
from ..repositories.article_repository import ArticleNotFoundError
from ..services.parser_service import ArticleParseError
from .common import build_repository, load_settings

logger = logging.getLogger(__name__)


def show(
    article: str = typer.Argument(..., help="Article slug or file path"),
    format: str = typer.Option("table", "--format", help="Output format [table|json]"),
    raw: bool = typer.Option(False, "--raw", help="Print the stored document verbatim"),
):
    """Show article metadata and outline."""
    try:
        settings = load_settings()
        repository = build_repository(settings)

        if raw:
            # Verbatim, no trailing newline added
            safe_echo(repository.get_raw(article), end="")
            return

        parsed = repository.get_article(article)
        summary = _article_summary(parsed, settings)

        if format == "json":
            safe_echo(json.dumps(summary, indent=2, ensure_ascii=False))
        else:
            _display_article(summary)

    except (ConfigError, ArticleNotFoundError, ArticleParseError, OSError, UnicodeDecodeError) as e:
        echo_with_prefix("ERROR", f"Cannot show article: {e!s}")
        logger.error(f"Show command failed: {e}")
        raise typer.Exit(1)


def list_articles(
    format: str = typer.Option("table", "--format", help="Output format [table|json]"),
):
    """List stored articles."""
    try:
        settings = load_settings()
        repository = build_repository(settings)
        rows = []

        for path in repository.list_paths():
            try:
                article = repository.get_article(path)
                rows.append(
                    {
                        "slug": path.stem,
                        "title": article.title,
                        "publishedAt": article.published_at,
                        "author": article.author,
                    }
                )
            except (ArticleParseError, UnicodeDecodeError) as e:
                rows.append({"slug": path.stem, "error": str(e)})

    except (ConfigError, OSError) as e:
        echo_with_prefix("ERROR", f"Cannot list articles: {e!s}")
        logger.error(f"List command failed: {e}")
        raise typer.Exit(1)

    if format == "json":
        safe_echo(json.dumps(rows, indent=2, ensure_ascii=False))
        return

    if not rows:
        echo_with_prefix("LIST", f"No articles in {repository.content_dir}")
        return

    for row in rows:
        if "error" in row:
            safe_echo(f"{row['slug']}  [UNREADABLE] {row['error']}")
        else:
            safe_echo(f"{row['slug']}  {row['publishedAt']}  {row['title']} ({row['author']})")


def _article_summary(article: Article, settings: dict[str, Any]) -> dict[str, Any]:
    level = settings[ConfigKey.ARTICLE_SECTION_HEADING_LEVEL]
    code_languages: dict[str, int] = {}
    for block in article.code_blocks():
        language = block.language or "(none)"
        code_languages[language] = code_languages.get(language, 0) + 1

    return {
        "title": article.title,
        "publishedAt": article.published_at,
        "author": article.author,
        "extra_fields": dict(article.extra_fields),
        "slug": article.slug,
        "summary": article.get_summary(),
        "word_count": article.word_count(),
        "reading_time_minutes": article.reading_time_minutes(
            settings[ConfigKey.ARTICLE_WORDS_PER_MINUTE]
        ),
        "sections": [
            {
                "title": section.title,
                "number": section.number,
                "line": section.heading.line,
                "code_blocks": sum(1 for block in section.blocks if block.kind is BlockKind.CODE),
            }
            for section in article.sections(level)
        ],
        "code_languages": code_languages,
    }


def _display_article(summary: dict[str, Any]) -> None:
    safe_echo(f"\n{summary['title']}")
    safe_echo("=" * 50)
    safe_echo(f"  author:       {summary['author']}")
    safe_echo(f"  publishedAt:  {summary['publishedAt']}")
    for key, value in summary["extra_fields"].items():
        safe_echo(f"  {key}:  {value}")
    safe_echo(f"  words:        {summary['word_count']}")
    safe_echo(f"  reading time: {summary['reading_time_minutes']} min")

    safe_echo("\nSections:")
    for section in summary["sections"]:
        code_note = f"  [{section['code_blocks']} code]" if section["code_blocks"] else ""
        safe_echo(f"  {section['line']:>5}  {section['title']}{code_note}")

    if summary["code_languages"]:
        languages = ", ".join(f"{lang} x{count}" for lang, count in sorted(summary["code_languages"].items()))
        safe_echo(f"\nCode: {languages}")
    safe_echo("=" * 50)
