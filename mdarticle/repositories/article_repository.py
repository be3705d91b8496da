"""Article file repository.

This module stores articles as markdown files in a content directory and
serves them back verbatim.
"""
import logging
import re
from pathlib import Path
from typing import Any, Optional, Union

from ..models.article import Article
from ..services.parser_service import ParserService
from ..services.serializer_service import SerializerService

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._-]*$")


class ArticleNotFoundError(LookupError):
    """Raised when no article file matches a slug or path."""


class ArticleExistsError(Exception):
    """Raised when saving over an existing article without overwrite."""


class ArticleRepository:
    """File-backed article storage."""

    def __init__(
        self,
        content_dir: Union[str, Path],
        extension: str = ".md",
        encoding: str = "utf-8",
        parser: Optional[ParserService] = None,
        serializer: Optional[SerializerService] = None,
    ):
        self.content_dir = Path(content_dir)
        self.extension = extension
        self.encoding = encoding
        self.parser = parser or ParserService()
        self.serializer = serializer or SerializerService()

    def list_paths(self) -> list[Path]:
        """All article files, sorted by name."""
        if not self.content_dir.is_dir():
            logger.warning(f"Content directory does not exist: {self.content_dir}")
            return []

        return sorted(
            path
            for path in self.content_dir.iterdir()
            if path.is_file() and path.suffix == self.extension
        )

    def list_slugs(self) -> list[str]:
        """Slugs (file stems) of all stored articles."""
        return [path.stem for path in self.list_paths()]

    def article_exists(self, slug: str) -> bool:
        """
        Check whether an article is stored.

        Args:
            slug: article slug

        Returns:
            bool: whether the file exists
        """
        return self._path_for(slug).is_file()

    def resolve(self, slug_or_path: Union[str, Path]) -> Path:
        """Resolve a slug or a file path to an existing article file."""
        candidate = Path(slug_or_path)
        if candidate.is_file():
            return candidate

        if isinstance(slug_or_path, str) and SLUG_PATTERN.match(slug_or_path):
            path = self._path_for(slug_or_path)
            if path.is_file():
                return path

        raise ArticleNotFoundError(f"Article not found: {slug_or_path}")

    def get_raw(self, slug_or_path: Union[str, Path]) -> str:
        """Return the stored document text exactly as written."""
        path = self.resolve(slug_or_path)
        with open(path, "r", encoding=self.encoding, newline="") as f:
            return f.read()

    def get_article(self, slug_or_path: Union[str, Path]) -> Article:
        """Load and parse a stored article."""
        return self.parser.parse_file(self.resolve(slug_or_path), encoding=self.encoding)

    def list_articles(self) -> list[tuple[str, Article]]:
        """Parse every stored article; unparseable files raise."""
        return [
            (path.stem, self.parser.parse_file(path, encoding=self.encoding))
            for path in self.list_paths()
        ]

    def save_article(
        self, article: Article, slug: Optional[str] = None, overwrite: bool = False
    ) -> Path:
        """
        Write an article to the content directory.

        Args:
            article: article to store
            slug: file stem, defaults to the title slug
            overwrite: replace an existing file

        Returns:
            Path: written file

        Raises:
            ArticleExistsError: file exists and overwrite is False
        """
        slug = slug or article.slug
        path = self._path_for(slug)

        if path.exists() and not overwrite:
            raise ArticleExistsError(f"Article already exists: {path}")

        self.content_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding=self.encoding, newline="") as f:
            f.write(self.serializer.serialize(article))

        logger.info(f"Saved article '{article.title}' to {path}")
        return path

    def get_stats(self) -> dict[str, Any]:
        """Summary statistics of the content directory."""
        paths = self.list_paths()
        return {
            "content_dir": str(self.content_dir),
            "article_count": len(paths),
            "total_bytes": sum(path.stat().st_size for path in paths),
        }

    def _path_for(self, slug: str) -> Path:
        if not SLUG_PATTERN.match(slug):
            raise ValueError(f"Invalid article slug: {slug!r}")
        return self.content_dir / f"{slug}{self.extension}"
