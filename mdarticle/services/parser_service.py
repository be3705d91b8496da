"""Parser service implementation.

This module implements article parsing: splitting off the frontmatter block,
reading its fields and scanning the markdown body into blocks.
"""
import logging
import re
from pathlib import Path
from typing import Optional, Union

import yaml

from ..models.article import FRONTMATTER_FIELDS, Article, Block, BlockKind

logger = logging.getLogger(__name__)


def split_lines(text: str) -> list[str]:
    """Split on "\\n" only, keeping line endings."""
    return [line for line in re.split(r"(?<=\n)", text) if line]


class ArticleParseError(ValueError):
    """Raised when a document cannot be parsed into an Article."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ParserService:
    """Frontmatter and markdown body parsing service."""

    def __init__(self, delimiter: str = "---"):
        self.delimiter = delimiter

        # Markdown block patterns
        self.fence_pattern = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
        self.heading_pattern = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]|$)")
        self.list_item_pattern = re.compile(r"^ {0,3}(?:[-*+]|\d{1,9}[.)])(?:[ \t]|$)")

        logger.debug("Parser service initialized")

    def parse(self, text: str) -> Article:
        """
        Parse a complete document into an Article.

        Args:
            text: document text, frontmatter first

        Returns:
            Article: parsed article

        Raises:
            ArticleParseError: frontmatter is missing or malformed
        """
        leading, frontmatter_block, body = self.split_frontmatter(text)
        fields = self.parse_frontmatter(frontmatter_block, start_line=leading.count("\n") + 1)

        missing = [name for name in FRONTMATTER_FIELDS if name not in fields]
        if missing:
            raise ArticleParseError(f"Missing frontmatter fields: {', '.join(missing)}")

        body_start = leading.count("\n") + frontmatter_block.count("\n") + 1
        blocks = self.parse_blocks(body, start_line=body_start)

        try:
            article = Article(
                title=fields["title"],
                published_at=fields["publishedAt"],
                author=fields["author"],
                blocks=blocks,
                extra_fields={
                    key: value for key, value in fields.items() if key not in FRONTMATTER_FIELDS
                },
                frontmatter_raw=frontmatter_block,
                leading=leading,
            )
        except ValueError as e:
            raise ArticleParseError(str(e)) from e

        logger.debug(f"Parsed article '{article.title}' ({len(blocks)} blocks)")
        return article

    def parse_file(self, path: Union[str, Path], encoding: str = "utf-8") -> Article:
        """Parse an article file, keeping its line endings untouched."""
        path = Path(path)
        with open(path, "r", encoding=encoding, newline="") as f:
            text = f.read()

        try:
            return self.parse(text)
        except ArticleParseError as e:
            logger.error(f"Failed to parse article ({path}): {e}")
            raise

    def split_frontmatter(self, text: str) -> tuple[str, str, str]:
        """
        Split a document into leading text, frontmatter block and body.

        The frontmatter block includes both delimiter lines exactly as written.
        Only a BOM and blank lines may precede the opening delimiter.

        Returns:
            tuple: (leading, frontmatter_block, body)
        """
        lines = split_lines(text)
        opening = None

        for index, line in enumerate(lines):
            stripped = line.lstrip("\ufeff").rstrip("\r\n")
            if stripped == self.delimiter:
                opening = index
                break
            if stripped.strip():
                raise ArticleParseError("Document does not start with a frontmatter block", index + 1)

        if opening is None:
            raise ArticleParseError("Document does not start with a frontmatter block")

        for index in range(opening + 1, len(lines)):
            if lines[index].rstrip("\r\n") == self.delimiter:
                leading = "".join(lines[:opening])
                block = "".join(lines[opening : index + 1])
                body = "".join(lines[index + 1 :])
                return leading, block, body

        raise ArticleParseError("Frontmatter block is not closed", opening + 1)

    def parse_frontmatter(self, block: str, start_line: int = 1) -> dict[str, str]:
        """
        Parse a delimited frontmatter block into plain string fields.

        Scalars are read with YAML's base loader, so dates and numbers stay
        strings exactly as written.
        """
        lines = split_lines(block)
        inner = "".join(lines[1:-1])

        try:
            self._check_duplicate_keys(yaml.compose(inner, Loader=yaml.BaseLoader), start_line)
            data = yaml.load(inner, Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            line = start_line + 1 + mark.line if mark is not None else None
            raise ArticleParseError(f"Invalid frontmatter: {getattr(e, 'problem', e)}", line) from e

        if data is None:
            return {}

        if not isinstance(data, dict):
            raise ArticleParseError("Frontmatter must be a key/value mapping", start_line)

        fields: dict[str, str] = {}
        for key, value in data.items():
            if not isinstance(value, str):
                raise ArticleParseError(f"Frontmatter field '{key}' must be a plain string", start_line)
            fields[str(key)] = value

        return fields

    def _check_duplicate_keys(self, node: Optional[yaml.Node], start_line: int) -> None:
        """Reject a mapping that repeats a key; YAML would keep only the last value."""
        if not isinstance(node, yaml.MappingNode):
            return

        seen: set[str] = set()
        for key_node, _ in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                continue
            if key_node.value in seen:
                line = start_line + 1 + key_node.start_mark.line
                raise ArticleParseError(f"Duplicate frontmatter field '{key_node.value}'", line)
            seen.add(key_node.value)

    def parse_blocks(self, body: str, start_line: int = 1) -> list[Block]:
        """Scan a markdown body into blocks covering every byte of it."""
        lines = split_lines(body)
        blocks: list[Block] = []
        i = 0

        while i < len(lines):
            line = lines[i].rstrip("\r\n")
            line_no = start_line + i

            # Blank run
            if not line.strip():
                j = i
                while j < len(lines) and not lines[j].strip():
                    j += 1
                blocks.append(Block(kind=BlockKind.BLANK, raw="".join(lines[i:j]), line=line_no))
                i = j
                continue

            # Fenced code
            fence = self.fence_pattern.match(line)
            if fence:
                j, closed = self._find_fence_end(lines, i, fence.group(1))
                info = fence.group(2).strip()
                blocks.append(
                    Block(
                        kind=BlockKind.CODE,
                        raw="".join(lines[i:j]),
                        line=line_no,
                        language=self._language_from_info(info),
                        closed=closed,
                    )
                )
                i = j
                continue

            # ATX heading
            heading = self.heading_pattern.match(line)
            if heading:
                blocks.append(
                    Block(
                        kind=BlockKind.HEADING,
                        raw=lines[i],
                        line=line_no,
                        level=len(heading.group(1)),
                    )
                )
                i += 1
                continue

            # List or paragraph
            kind = BlockKind.LIST if self.list_item_pattern.match(line) else BlockKind.PARAGRAPH
            j = i + 1
            while j < len(lines) and not self._ends_block(lines[j], kind):
                j += 1
            blocks.append(Block(kind=kind, raw="".join(lines[i:j]), line=line_no))
            i = j

        return blocks

    def _find_fence_end(self, lines: list[str], start: int, fence: str) -> tuple[int, bool]:
        """Return the index after the closing fence and whether one was found."""
        closing = re.compile(r"^ {0,3}" + re.escape(fence[0]) + "{" + str(len(fence)) + r",}[ \t]*$")
        for j in range(start + 1, len(lines)):
            if closing.match(lines[j].rstrip("\r\n")):
                return j + 1, True
        return len(lines), False

    def _language_from_info(self, info: str) -> Optional[str]:
        """Take the language tag from a fence info string."""
        if not info:
            return None
        # "{python}" and "python title=x" both declare python
        language = info.split()[0].strip("{}.")
        return language or None

    def _ends_block(self, line: str, kind: BlockKind) -> bool:
        stripped = line.rstrip("\r\n")
        if not stripped.strip():
            return True
        if self.fence_pattern.match(stripped) or self.heading_pattern.match(stripped):
            return True
        # A list marker starts a new list block after a paragraph
        return kind is BlockKind.PARAGRAPH and bool(self.list_item_pattern.match(stripped))
