"""Check command implementation."""
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer

from ..lib.config_loader import ConfigError
from ..lib.console import echo_with_prefix, safe_echo
from ..models.config import ConfigKey
from ..repositories.article_repository import ArticleNotFoundError
from ..services.validation_service import ValidationService
from .common import build_repository, load_settings

logger = logging.getLogger(__name__)


def check(
    paths: Optional[List[Path]] = typer.Argument(
        None, help="Article files or slugs to check (default: all stored articles)"
    ),
    format: str = typer.Option("table", "--format", help="Output format [table|json]"),
    sections: Optional[int] = typer.Option(
        None, "--sections", min=0, help="Expected numbered sections (overrides article.section_count)"
    ),
):
    """Validate articles against the publishing contract."""
    try:
        settings = load_settings()
    except ConfigError as e:
        echo_with_prefix("ERROR", f"Invalid configuration: {e!s}")
        raise typer.Exit(1)

    if sections is not None:
        settings[ConfigKey.ARTICLE_SECTION_COUNT] = sections

    repository = build_repository(settings)
    validator = ValidationService.from_config(settings)

    targets = [str(path) for path in paths] if paths else [str(p) for p in repository.list_paths()]
    if not targets:
        echo_with_prefix("WARNING", f"No articles found in {repository.content_dir}")
        raise typer.Exit(1)

    results: list[dict[str, Any]] = []
    for target in targets:
        try:
            source = repository.get_raw(target)
        except (ArticleNotFoundError, OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read article {target}: {e}")
            results.append(
                {
                    "path": target,
                    "title": None,
                    "valid": False,
                    "issues": [{"code": "read", "message": str(e), "line": None}],
                }
            )
            continue

        report = validator.validate_text(source)
        results.append({"path": target, **report.to_dict()})

    if format == "json":
        safe_echo(json.dumps(results, indent=2, ensure_ascii=False))
    else:
        _display_table(results)

    failed = [result for result in results if not result["valid"]]
    if failed:
        raise typer.Exit(1)


def _display_table(results: list[dict[str, Any]]) -> None:
    for result in results:
        if result["valid"]:
            safe_echo(f"[PASS] {result['path']} ({result['title']})")
            continue

        safe_echo(f"[FAIL] {result['path']}")
        for issue in result["issues"]:
            location = f"line {issue['line']}: " if issue["line"] is not None else ""
            safe_echo(f"  - [{issue['code']}] {location}{issue['message']}")

    passed = sum(1 for result in results if result["valid"])
    safe_echo(f"\n[SUMMARY] {passed}/{len(results)} article(s) passed")
