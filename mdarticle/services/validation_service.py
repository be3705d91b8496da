"""Validation service implementation.

This module checks an article against the publishing contract: the three
frontmatter fields, a parseable publish date, ten numbered sections framed by
an introduction and a conclusion, language-tagged code fences and an
idempotent round trip.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from ..models.article import FRONTMATTER_FIELDS, Article, BlockKind, Section
from ..models.config import DEFAULT_CONFIG, ConfigKey
from .parser_service import ArticleParseError, ParserService
from .serializer_service import SerializerService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationIssue:
    """A single contract violation."""

    code: str
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        location = f"line {self.line}: " if self.line is not None else ""
        return f"[{self.code}] {location}{self.message}"

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "line": self.line}


@dataclass
class ValidationReport:
    """Result of validating one article."""

    title: Optional[str] = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def add(self, code: str, message: str, line: Optional[int] = None) -> None:
        self.issues.append(ValidationIssue(code=code, message=message, line=line))

    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "valid": self.is_valid,
            "issues": [issue.to_dict() for issue in self.issues],
        }


class ValidationService:
    """Article contract validation service."""

    def __init__(
        self,
        section_count: int = DEFAULT_CONFIG[ConfigKey.ARTICLE_SECTION_COUNT],
        section_level: int = DEFAULT_CONFIG[ConfigKey.ARTICLE_SECTION_HEADING_LEVEL],
        introduction_heading: str = DEFAULT_CONFIG[ConfigKey.ARTICLE_INTRODUCTION_HEADING],
        conclusion_heading: str = DEFAULT_CONFIG[ConfigKey.ARTICLE_CONCLUSION_HEADING],
        parser: Optional[ParserService] = None,
        serializer: Optional[SerializerService] = None,
    ):
        self.section_count = section_count
        self.section_level = section_level
        self.introduction_heading = introduction_heading
        self.conclusion_heading = conclusion_heading
        self.parser = parser or ParserService()
        self.serializer = serializer or SerializerService()

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ValidationService":
        """Build a validator from a loaded configuration mapping."""
        return cls(
            section_count=int(
                config.get(
                    ConfigKey.ARTICLE_SECTION_COUNT,
                    DEFAULT_CONFIG[ConfigKey.ARTICLE_SECTION_COUNT],
                )
            ),
            section_level=int(
                config.get(
                    ConfigKey.ARTICLE_SECTION_HEADING_LEVEL,
                    DEFAULT_CONFIG[ConfigKey.ARTICLE_SECTION_HEADING_LEVEL],
                )
            ),
            introduction_heading=config.get(
                ConfigKey.ARTICLE_INTRODUCTION_HEADING,
                DEFAULT_CONFIG[ConfigKey.ARTICLE_INTRODUCTION_HEADING],
            ),
            conclusion_heading=config.get(
                ConfigKey.ARTICLE_CONCLUSION_HEADING,
                DEFAULT_CONFIG[ConfigKey.ARTICLE_CONCLUSION_HEADING],
            ),
        )

    def validate_text(self, text: str) -> ValidationReport:
        """
        Parse and validate a document.

        A parse failure is reported as a single ``parse`` issue.

        Args:
            text: document text

        Returns:
            ValidationReport: collected issues
        """
        try:
            article = self.parser.parse(text)
        except ArticleParseError as e:
            report = ValidationReport()
            report.add("parse", str(e), e.line)
            logger.warning(f"Article could not be parsed: {e}")
            return report

        return self.validate(article, source=text)

    def validate(self, article: Article, source: Optional[str] = None) -> ValidationReport:
        """Validate a parsed article; ``source`` enables the round-trip check."""
        report = ValidationReport(title=article.title)

        self._check_frontmatter(article, report)
        self._check_sections(article, report)
        self._check_code_blocks(article, report)

        if source is not None and not self.serializer.is_idempotent(article, source):
            report.add("roundtrip", "Re-serialized document differs from the source")

        if report.is_valid:
            logger.debug(f"Article is valid: {article.title}")
        else:
            logger.info(f"Article '{article.title}' has {len(report.issues)} issue(s)")

        return report

    def _check_frontmatter(self, article: Article, report: ValidationReport) -> None:
        """Check the three frontmatter fields and the publish date."""
        extra = list(article.extra_fields)
        if extra:
            report.add(
                "frontmatter.fields",
                f"Unexpected frontmatter fields: {', '.join(extra)}; "
                f"expected exactly {', '.join(FRONTMATTER_FIELDS)}",
            )

        for key, value in article.frontmatter.items():
            if not value.strip():
                report.add("frontmatter.empty", f"Frontmatter field '{key}' is empty")

        if article.published_date is None:
            report.add(
                "frontmatter.date",
                f"publishedAt is not a valid calendar date: {article.published_at!r}",
            )

    def _check_sections(self, article: Article, report: ValidationReport) -> None:
        """Check numbered sections, introduction and conclusion."""
        sections = article.sections(self.section_level)
        numbered = [section for section in sections if section.number is not None]

        if len(numbered) != self.section_count:
            report.add(
                "sections.count",
                f"Expected {self.section_count} numbered sections, found {len(numbered)}",
            )

        numbers = [section.number for section in numbered]
        if numbers != list(range(1, len(numbered) + 1)):
            line = next(
                (
                    section.heading.line
                    for expected, section in enumerate(numbered, 1)
                    if section.number != expected
                ),
                None,
            )
            report.add(
                "sections.order",
                f"Section numbers must run 1..{len(numbered)} in order, found {numbers}",
                line,
            )

        positions = [index for index, section in enumerate(sections) if section.number is not None]
        first_numbered = positions[0] if positions else len(sections)
        if not self._has_introduction(article, sections[:first_numbered]):
            report.add("sections.introduction", "No introduction before the first numbered section")

        last_numbered = positions[-1] if positions else -1
        trailing = sections[last_numbered + 1 :]
        if not any(self._is_named(section, self.conclusion_heading) for section in trailing):
            report.add(
                "sections.conclusion",
                f"No '{self.conclusion_heading}' section after the numbered sections",
            )

    def _has_introduction(self, article: Article, leading_sections: list[Section]) -> bool:
        if any(self._is_named(section, self.introduction_heading) for section in leading_sections):
            return True

        # Untitled introduction: prose between the title and the first section
        preamble = article.preamble(self.section_level)
        if any(block.kind is BlockKind.PARAGRAPH for block in preamble):
            return True

        return any(
            block.kind is BlockKind.PARAGRAPH
            for section in leading_sections
            if not self._is_named(section, self.conclusion_heading)
            for block in section.blocks
        )

    def _is_named(self, section: Section, name: str) -> bool:
        title = re.sub(r"^\d+[.)]\s+", "", section.title)
        return title.strip().rstrip(":").lower() == name.strip().lower()

    def _check_code_blocks(self, article: Article, report: ValidationReport) -> None:
        """Check that every fence declares a language and is closed."""
        for block in article.code_blocks():
            if not block.language:
                report.add("code.language", "Code block has no language tag", block.line)
            if not block.closed:
                report.add("code.unclosed", "Code block is not closed", block.line)
