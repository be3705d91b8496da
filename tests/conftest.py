"""Shared fixtures for article tests."""
from pathlib import Path
from typing import Callable

import pytest


def make_document(
    sections: int = 10,
    frontmatter: str = 'title: "Clean Code Tips"\npublishedAt: "2024-03-15"\nauthor: "Test Author"\n',
    introduction: bool = True,
    conclusion: bool = True,
    language: str = "python",
) -> str:
    """Build a document following the article layout."""
    parts = [f"---\n{frontmatter}---\n\n"]

    if introduction:
        parts.append("## Introduction\n\nWhy clean code matters.\n\n")

    for number in range(1, sections + 1):
        parts.append(f"## {number}. Practice {number}\n\nExplanation {number}.\n\n")
        parts.append(f"```{language}\nprint({number})\n```\n\n")

    if conclusion:
        parts.append("## Conclusion\n\nKeep practising.\n")

    return "".join(parts)


@pytest.fixture
def document_factory() -> Callable[..., str]:
    """Factory for article documents."""
    return make_document


@pytest.fixture
def valid_document() -> str:
    """A document satisfying every article property."""
    return make_document()


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Temporary content directory holding one valid article."""
    directory = tmp_path / "content"
    directory.mkdir()
    (directory / "clean-code-tips.md").write_text(make_document(), encoding="utf-8")
    return directory
