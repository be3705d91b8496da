"""Article data model.

This module defines the Article data class, its body blocks and validation logic.
"""
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

FRONTMATTER_FIELDS = ("title", "publishedAt", "author")

# Accepted publishedAt layouts besides ISO 8601
DATE_FORMATS = [
    "%Y/%m/%d",  # 2024/01/15
    "%B %d, %Y",  # January 15, 2024
    "%b %d, %Y",  # Jan 15, 2024
    "%d %B %Y",  # 15 January 2024
    "%d %b %Y",  # 15 Jan 2024
]


class BlockKind(Enum):
    """Markdown body block kinds."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE = "code"
    LIST = "list"
    BLANK = "blank"

    def __str__(self) -> str:
        """Return string representation of kind."""
        return self.value

    @classmethod
    def from_string(cls, kind: str) -> "BlockKind":
        """Create kind from string."""
        for item in cls:
            if item.value == kind.lower():
                return item
        raise ValueError(f"Invalid block kind: {kind}")


@dataclass(frozen=True)
class Block:
    """One contiguous unit of the markdown body."""

    kind: BlockKind
    raw: str
    line: int = 1
    level: Optional[int] = None
    language: Optional[str] = None
    closed: bool = True

    def __post_init__(self) -> None:
        if self.kind is BlockKind.HEADING and not (self.level and 1 <= self.level <= 6):
            raise ValueError("Heading level must be between 1 and 6")

    @property
    def text(self) -> str:
        """Block content without markdown markers."""
        if self.kind is BlockKind.HEADING:
            text = re.sub(r"^\s{0,3}#{1,6}", "", self.raw.strip())
            # Optional closing sequence: "## Title ##"
            text = re.sub(r"\s+#+\s*$", "", text)
            return text.strip()

        if self.kind is BlockKind.CODE:
            lines = self.raw.rstrip("\n").split("\n")
            body = lines[1:-1] if self.closed else lines[1:]
            return "\n".join(body)

        return self.raw.strip()

    def to_dict(self) -> dict:
        """Convert block to dictionary."""
        return {
            "kind": self.kind.value,
            "raw": self.raw,
            "line": self.line,
            "level": self.level,
            "language": self.language,
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Block":
        """Create block from dictionary."""
        return cls(
            kind=BlockKind.from_string(data["kind"]),
            raw=data["raw"],
            line=data.get("line", 1),
            level=data.get("level"),
            language=data.get("language"),
            closed=data.get("closed", True),
        )


@dataclass(frozen=True)
class Section:
    """A heading together with the blocks that follow it."""

    heading: Block
    blocks: tuple[Block, ...]

    @property
    def title(self) -> str:
        return self.heading.text

    @property
    def number(self) -> Optional[int]:
        """Leading section number of "3. Title" style headings."""
        match = re.match(r"^(\d+)[.)]\s", self.heading.text)
        return int(match.group(1)) if match else None


@dataclass(frozen=True)
class Article:
    """Blog article: frontmatter fields plus an ordered markdown body."""

    title: str
    published_at: str
    author: str
    blocks: tuple[Block, ...] = ()
    extra_fields: Mapping[str, str] = field(default_factory=dict)
    frontmatter_raw: Optional[str] = None
    leading: str = ""

    def __post_init__(self) -> None:
        """Validate article data after initialization."""
        # Frozen all the way down: no in-place edits of the body or extra fields
        object.__setattr__(self, "blocks", tuple(self.blocks))
        object.__setattr__(self, "extra_fields", MappingProxyType(dict(self.extra_fields)))

        self._validate_title()
        self._validate_author()
        self._validate_published_at()

    def _validate_title(self) -> None:
        """Validate article title."""
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValueError("Article title must not be empty")

        if len(self.title) > 500:
            raise ValueError("Article title must not exceed 500 characters")

    def _validate_author(self) -> None:
        """Validate author name."""
        if not isinstance(self.author, str) or not self.author.strip():
            raise ValueError("Article author must not be empty")

        if len(self.author) > 200:
            raise ValueError("Article author must not exceed 200 characters")

    def _validate_published_at(self) -> None:
        if not isinstance(self.published_at, str) or not self.published_at.strip():
            raise ValueError("Article publishedAt must not be empty")

    @property
    def frontmatter(self) -> dict[str, str]:
        """All frontmatter fields in document order."""
        data = {
            "title": self.title,
            "publishedAt": self.published_at,
            "author": self.author,
        }
        data.update(self.extra_fields)
        return data

    @property
    def published_date(self) -> Optional[date]:
        """Calendar date of publishedAt, or None if it does not parse."""
        return parse_date(self.published_at)

    @property
    def slug(self) -> str:
        """URL-friendly identifier derived from the title."""
        slug = re.sub(r"[^a-z0-9]+", "-", self.title.lower())
        return slug.strip("-")

    @property
    def body(self) -> str:
        """Exact markdown body."""
        return "".join(block.raw for block in self.blocks)

    def headings(self, level: Optional[int] = None) -> list[Block]:
        """Heading blocks, optionally restricted to one level."""
        return [
            block
            for block in self.blocks
            if block.kind is BlockKind.HEADING and (level is None or block.level == level)
        ]

    def code_blocks(self) -> list[Block]:
        """Fenced code blocks."""
        return [block for block in self.blocks if block.kind is BlockKind.CODE]

    def preamble(self, level: int = 2) -> list[Block]:
        """Blocks before the first heading of the given level."""
        result = []
        for block in self.blocks:
            if block.kind is BlockKind.HEADING and block.level == level:
                break
            result.append(block)
        return result

    def sections(self, level: int = 2) -> list[Section]:
        """Split the body into sections at headings of the given level."""
        sections: list[Section] = []
        current: Optional[Block] = None
        members: list[Block] = []

        for block in self.blocks:
            if block.kind is BlockKind.HEADING and block.level == level:
                if current is not None:
                    sections.append(Section(heading=current, blocks=tuple(members)))
                current = block
                members = []
            elif current is not None:
                members.append(block)

        if current is not None:
            sections.append(Section(heading=current, blocks=tuple(members)))

        return sections

    def body_text(self) -> str:
        """Body prose with code fences and heading markers stripped."""
        parts = [
            block.text
            for block in self.blocks
            if block.kind not in (BlockKind.CODE, BlockKind.BLANK)
        ]
        text = "\n\n".join(parts)
        # Inline markup: links keep their label, emphasis and code marks go
        text = re.sub(r"!?\[([^\]]*)\]\([^)]*\)", r"\1", text)
        text = re.sub(r"[*_`]+", "", text)
        return text

    def word_count(self) -> int:
        """Number of words in the body prose."""
        return len(re.findall(r"\b[\w'-]+\b", self.body_text()))

    def reading_time_minutes(self, words_per_minute: int = 200) -> int:
        """Estimated reading time, at least one minute."""
        if words_per_minute <= 0:
            raise ValueError("words_per_minute must be positive")
        return max(1, math.ceil(self.word_count() / words_per_minute))

    def get_summary(self, max_length: int = 160) -> str:
        """First paragraph of the body, truncated."""
        for block in self.blocks:
            if block.kind is BlockKind.PARAGRAPH:
                text = re.sub(r"\s+", " ", block.text)
                if len(text) <= max_length:
                    return text
                return text[:max_length].rstrip() + "..."
        return ""

    def to_dict(self) -> dict:
        """Convert article to dictionary."""
        return {
            "title": self.title,
            "publishedAt": self.published_at,
            "author": self.author,
            "extra_fields": dict(self.extra_fields),
            "frontmatter_raw": self.frontmatter_raw,
            "leading": self.leading,
            "blocks": [block.to_dict() for block in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Article":
        """Create article from dictionary."""
        return cls(
            title=data["title"],
            published_at=data["publishedAt"],
            author=data["author"],
            blocks=[Block.from_dict(item) for item in data.get("blocks", [])],
            extra_fields=dict(data.get("extra_fields") or {}),
            frontmatter_raw=data.get("frontmatter_raw"),
            leading=data.get("leading", ""),
        )


def parse_date(value: str) -> Optional[date]:
    """Parse a publishedAt string into a calendar date."""
    if not value:
        return None

    value = value.strip()

    try:
        return date.fromisoformat(value)
    except ValueError:
        pass

    try:
        # Accept a trailing "Z" on ISO datetimes
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    return None
