"""Serializer service implementation.

This module turns Article objects back into frontmatter + markdown text.
"""
import logging

import yaml

from ..models.article import Article

logger = logging.getLogger(__name__)


class SerializerService:
    """Article serialization service."""

    def __init__(self, delimiter: str = "---", newline: str = "\n"):
        self.delimiter = delimiter
        self.newline = newline

    def serialize(self, article: Article) -> str:
        """
        Serialize an article to document text.

        A parsed article keeps its frontmatter block verbatim, so
        ``serialize(parse(text)) == text``.

        Args:
            article: article to serialize

        Returns:
            str: document text
        """
        frontmatter = article.frontmatter_raw
        if frontmatter is None:
            frontmatter = self.render_frontmatter(article)

        return article.leading + frontmatter + article.body

    def render_frontmatter(self, article: Article) -> str:
        """Render the frontmatter block from the article fields."""
        dumped = yaml.safe_dump(
            article.frontmatter,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=float("inf"),
        )
        if self.newline != "\n":
            dumped = dumped.replace("\n", self.newline)

        return f"{self.delimiter}{self.newline}{dumped}{self.delimiter}{self.newline}"

    def is_idempotent(self, article: Article, source: str) -> bool:
        """Check that serializing the article reproduces the source exactly."""
        output = self.serialize(article)
        if output != source:
            logger.debug(f"Serialized output differs from source for '{article.title}'")
            return False
        return True
