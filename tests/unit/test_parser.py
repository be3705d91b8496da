"""Unit tests for parser service.

Test frontmatter splitting, field parsing and markdown block scanning.
"""
import pytest

from mdarticle.models.article import BlockKind
from mdarticle.services.parser_service import ArticleParseError, ParserService, split_lines


class TestParserService:
    """Test document parsing functionality."""

    @pytest.fixture
    def parser_service(self) -> ParserService:
        """Create parser service instance."""
        return ParserService()

    def test_parse_valid_document(self, parser_service: ParserService, valid_document: str):
        """Test parsing a complete article."""
        article = parser_service.parse(valid_document)

        assert article.title == "Clean Code Tips"
        assert article.published_at == "2024-03-15"
        assert article.author == "Test Author"
        assert article.extra_fields == {}
        assert len(article.headings(level=2)) == 12
        assert len(article.code_blocks()) == 10
        assert article.frontmatter_raw.startswith("---\n")
        assert article.frontmatter_raw.endswith("---\n")

    def test_dates_stay_plain_strings(self, parser_service: ParserService):
        """Test that unquoted YAML dates are not converted."""
        document = "---\ntitle: T\npublishedAt: 2024-03-15\nauthor: A\n---\nBody\n"

        article = parser_service.parse(document)

        assert article.published_at == "2024-03-15"
        assert isinstance(article.published_at, str)

    def test_extra_fields_are_kept(self, parser_service: ParserService):
        """Test that additional frontmatter keys are preserved in order."""
        document = "---\ntitle: T\npublishedAt: 2024-03-15\nauthor: A\ntags: python\ndraft: true\n---\n"

        article = parser_service.parse(document)

        assert article.extra_fields == {"tags": "python", "draft": "true"}

    def test_duplicate_field_is_rejected(self, parser_service: ParserService):
        """Test that a repeated key is reported instead of keeping the last value."""
        document = '---\ntitle: "A"\ntitle: "B"\npublishedAt: 2024-03-15\nauthor: X\n---\nBody\n'

        with pytest.raises(ArticleParseError, match="Duplicate frontmatter field 'title'") as exc_info:
            parser_service.parse(document)

        assert exc_info.value.line == 3

    def test_duplicate_extra_field_is_rejected(self, parser_service: ParserService):
        """Test that duplicates outside the required fields are caught too."""
        document = "---\ntitle: T\npublishedAt: 2024-03-15\nauthor: A\ntags: a\ntags: b\n---\n"

        with pytest.raises(ArticleParseError, match="tags"):
            parser_service.parse(document)

    def test_missing_fields(self, parser_service: ParserService):
        """Test that missing required fields raise."""
        document = "---\ntitle: T\nauthor: A\n---\nBody\n"

        with pytest.raises(ArticleParseError, match="publishedAt"):
            parser_service.parse(document)

    def test_empty_field_value(self, parser_service: ParserService):
        """Test that an empty required field raises."""
        document = '---\ntitle: ""\npublishedAt: 2024-03-15\nauthor: A\n---\n'

        with pytest.raises(ArticleParseError, match="title"):
            parser_service.parse(document)

    def test_missing_frontmatter(self, parser_service: ParserService):
        """Test documents without frontmatter."""
        with pytest.raises(ArticleParseError) as exc_info:
            parser_service.parse("# Just markdown\n\nNo frontmatter.\n")

        assert exc_info.value.line == 1

    def test_unclosed_frontmatter(self, parser_service: ParserService):
        """Test frontmatter without closing delimiter."""
        with pytest.raises(ArticleParseError, match="not closed"):
            parser_service.parse("---\ntitle: T\npublishedAt: 2024-03-15\nauthor: A\n")

    def test_nested_frontmatter_value(self, parser_service: ParserService):
        """Test that non-string values are rejected."""
        document = "---\ntitle: T\npublishedAt: 2024-03-15\nauthor:\n  name: A\n---\n"

        with pytest.raises(ArticleParseError, match="plain string"):
            parser_service.parse(document)

    def test_frontmatter_not_mapping(self, parser_service: ParserService):
        """Test that a YAML list is rejected."""
        with pytest.raises(ArticleParseError, match="mapping"):
            parser_service.parse("---\n- title\n- author\n---\n")

    def test_invalid_yaml_reports_line(self, parser_service: ParserService):
        """Test YAML syntax errors carry a document line number."""
        document = "---\ntitle: T\npublishedAt: [2024\nauthor: A\n---\n"

        with pytest.raises(ArticleParseError) as exc_info:
            parser_service.parse(document)

        assert exc_info.value.line is not None
        assert exc_info.value.line >= 3

    def test_leading_blank_lines(self, parser_service: ParserService):
        """Test blank lines before the opening delimiter are kept."""
        document = "\n\n---\ntitle: T\npublishedAt: 2024-03-15\nauthor: A\n---\nBody\n"

        article = parser_service.parse(document)

        assert article.leading == "\n\n"
        assert article.blocks[0].line == 8

    def test_split_frontmatter(self, parser_service: ParserService):
        """Test splitting into leading text, frontmatter and body."""
        leading, block, body = parser_service.split_frontmatter("---\na: b\n---\nbody\n")

        assert leading == ""
        assert block == "---\na: b\n---\n"
        assert body == "body\n"

    def test_parse_file(self, parser_service: ParserService, tmp_path, valid_document: str):
        """Test parsing from disk keeps CRLF line endings."""
        path = tmp_path / "article.md"
        path.write_bytes(valid_document.replace("\n", "\r\n").encode("utf-8"))

        article = parser_service.parse_file(path)

        assert article.frontmatter_raw.endswith("---\r\n")
        assert "\r\n" in article.body


class TestBlockParsing:
    """Test markdown body block scanning."""

    @pytest.fixture
    def parser_service(self) -> ParserService:
        return ParserService()

    def test_blocks_cover_body(self, parser_service: ParserService):
        """Test that block raw text reproduces the body."""
        body = "## Title\n\nPara line one\nline two\n\n- item\n- item 2\n\n```js\nx()\n```\n"

        blocks = parser_service.parse_blocks(body)

        assert "".join(block.raw for block in blocks) == body
        assert [block.kind for block in blocks] == [
            BlockKind.HEADING,
            BlockKind.BLANK,
            BlockKind.PARAGRAPH,
            BlockKind.BLANK,
            BlockKind.LIST,
            BlockKind.BLANK,
            BlockKind.CODE,
        ]

    def test_heading_levels(self, parser_service: ParserService):
        blocks = parser_service.parse_blocks("# One\n### Three\n#NoSpace\n")

        assert blocks[0].level == 1
        assert blocks[1].level == 3
        assert blocks[2].kind is BlockKind.PARAGRAPH

    def test_code_fence_language(self, parser_service: ParserService):
        """Test language tags from fence info strings."""
        body = "```python title=demo.py\na\n```\n\n~~~{bash}\nb\n~~~\n\n```\nc\n```\n"

        code = [block for block in parser_service.parse_blocks(body) if block.kind is BlockKind.CODE]

        assert [block.language for block in code] == ["python", "bash", None]

    def test_code_fence_hides_markdown(self, parser_service: ParserService):
        """Test that headings inside fences are not parsed."""
        body = "```markdown\n## Not a heading\n\n```\n"

        blocks = parser_service.parse_blocks(body)

        assert len(blocks) == 1
        assert blocks[0].kind is BlockKind.CODE
        assert blocks[0].text == "## Not a heading\n"

    def test_longer_closing_fence(self, parser_service: ParserService):
        """Test that a shorter fence does not close a longer one."""
        body = "````md\n```python\nx\n```\n````\n"

        blocks = parser_service.parse_blocks(body)

        assert len(blocks) == 1
        assert blocks[0].closed is True

    def test_unclosed_fence_runs_to_end(self, parser_service: ParserService):
        blocks = parser_service.parse_blocks("```python\nx = 1\n\n## Heading\n")

        assert len(blocks) == 1
        assert blocks[0].closed is False

    def test_list_interrupts_paragraph(self, parser_service: ParserService):
        blocks = parser_service.parse_blocks("Options:\n- one\n- two\n")

        assert [block.kind for block in blocks] == [BlockKind.PARAGRAPH, BlockKind.LIST]

    def test_line_numbers(self, parser_service: ParserService):
        blocks = parser_service.parse_blocks("A\n\n## B\n", start_line=10)

        assert [block.line for block in blocks] == [10, 11, 12]

    def test_split_lines_only_on_newline(self):
        """Test that form feeds and line separators do not split lines."""
        assert split_lines("a\x0cb c\nd") == ["a\x0cb c\n", "d"]
        assert split_lines("") == []
