"""
SourceFile edit buffer Tests
"""

import pytest

from codegraph_naming.errors import EditConflictError
from codegraph_naming.models import ReferenceKind, ReferenceSite, Span
from codegraph_naming.parsing.source_file import SourceFile

CONTENT = "<?php\nfinal class Money extends Value {}\n"


def span_of(text: str, needle: str, occurrence: int = 0) -> Span:
    start = -1
    for _ in range(occurrence + 1):
        start = text.index(needle, start + 1)
    return Span(start, start + len(needle))


@pytest.fixture
def source():
    return SourceFile.from_content("src/Money.php", CONTENT)


class TestEdits:
    def test_unmodified_render_is_original(self, source):
        assert source.modified is False
        assert source.render() == CONTENT

    def test_replace(self, source):
        source.replace(span_of(CONTENT, "Value"), "AbstractValue")

        assert source.render() == "<?php\nfinal class Money extends AbstractValue {}\n"
        assert source.modified is True
        assert source.text == CONTENT

    def test_same_span_last_edit_wins(self, source):
        span = span_of(CONTENT, "Money")
        source.replace(span, "Cash")
        source.replace(span, "Price")

        assert "final class Price extends" in source.render()
        assert source.edit_count == 1

    def test_insertion_before_replacement(self, source):
        span = span_of(CONTENT, "Value")
        source.replace(span, "Base")
        source.replace(Span(span.start, span.start), "\\App\\")

        assert "extends \\App\\Base {}" in source.render()

    def test_partial_overlap_is_rejected(self, source):
        source.replace(span_of(CONTENT, "class Money"), "class Cash")

        with pytest.raises(EditConflictError) as exc_info:
            source.replace(span_of(CONTENT, "Money extends"), "Price extends")

        assert exc_info.value.code == "EDIT_CONFLICT"

    def test_replace_region_absorbs_contained_edits(self, source):
        source.replace(span_of(CONTENT, "Value"), "Base")
        region = span_of(CONTENT, "extends Value")

        rendered = source.render_range(region)
        source.replace_region(region, f"{rendered} implements Countable")

        assert source.render() == "<?php\nfinal class Money extends Base implements Countable {}\n"
        assert source.edit_count == 1

    def test_render_range_applies_inner_edits_only(self, source):
        source.replace(span_of(CONTENT, "Money"), "Cash")
        source.replace(span_of(CONTENT, "Value"), "Base")

        assert source.render_range(span_of(CONTENT, "extends Value")) == "extends Base"


class TestReferenceRewrite:
    def test_rewrite_keeps_site_in_sync(self, source):
        site = ReferenceSite(
            referenced_name="Value",
            kind=ReferenceKind.NAME,
            owner_file_path=source.file_path,
            span=span_of(CONTENT, "Value"),
        )

        source.rewrite_reference(site, "Base")

        assert site.referenced_name == "Base"
        assert "extends Base" in source.render()

    def test_alias_rewrite_without_alias_span_is_noop(self, source):
        site = ReferenceSite(
            referenced_name="Value",
            kind=ReferenceKind.IMPORT,
            owner_file_path=source.file_path,
            span=span_of(CONTENT, "Value"),
        )

        source.rewrite_alias(site, "Other")

        assert source.modified is False


class TestLoading:
    def test_from_file(self, tmp_path):
        path = tmp_path / "src" / "Money.php"
        path.parent.mkdir()
        path.write_text(CONTENT)

        source = SourceFile.from_file(path, root=tmp_path)

        assert source.language == "php"
        assert source.content == CONTENT.encode()
        assert source.relative_path.as_posix() == "src/Money.php"

    def test_unknown_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(ValueError):
            SourceFile.from_file(path)

    def test_get_line(self, source):
        assert source.get_line(2) == "final class Money extends Value {}"
        assert source.get_line(10) == ""
