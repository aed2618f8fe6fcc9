"""
Source File representation

Holds the original bytes of a file, the sites extracted from it and the
queue of text edits produced by a run. Rendering applies the edits; the
original content is never modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from codegraph_naming.errors import EditConflictError
from codegraph_naming.models import CallSite, Declaration, ReferenceSite, Span


@dataclass
class SourceFile:
    """
    Represents a source code file.

    Attributes:
        file_path: Path of the file on disk
        content: Original file content (bytes, tree-sitter offsets index into it)
        language: Programming language
        encoding: File encoding (default: utf-8)
        root: Run root the file was discovered under
    """

    file_path: Path
    content: bytes
    language: str = "php"
    encoding: str = "utf-8"
    root: Path | None = None

    declarations: list[Declaration] = field(default_factory=list)
    references: list[ReferenceSite] = field(default_factory=list)
    calls: list[CallSite] = field(default_factory=list)
    namespace: str = ""

    _edits: dict[tuple[int, int], str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_file(
        cls,
        file_path: str | Path,
        root: str | Path | None = None,
        language: str | None = None,
        encoding: str = "utf-8",
    ) -> SourceFile:
        """
        Load source file from disk.

        Args:
            file_path: Path to file
            root: Run root (used for scope matching on relative paths)
            language: Language override (auto-detected if None)
            encoding: File encoding

        Raises:
            ValueError: If the language cannot be detected
        """
        file_path = Path(file_path)
        content = file_path.read_bytes()

        if language is None:
            from .parser_registry import get_registry

            language = get_registry().detect_language(file_path)
            if language is None:
                raise ValueError(f"Could not detect language for: {file_path}")

        return cls(
            file_path=file_path,
            content=content,
            language=language,
            encoding=encoding,
            root=Path(root) if root is not None else None,
        )

    @classmethod
    def from_content(
        cls,
        file_path: str | Path,
        content: str,
        language: str = "php",
        encoding: str = "utf-8",
        root: str | Path | None = None,
    ) -> SourceFile:
        """Create source file from content string."""
        return cls(
            file_path=Path(file_path),
            content=content.encode(encoding),
            language=language,
            encoding=encoding,
            root=Path(root) if root is not None else None,
        )

    @property
    def relative_path(self) -> Path:
        """Path relative to the run root (the path itself when there is no root)."""
        if self.root is not None:
            try:
                return self.file_path.relative_to(self.root)
            except ValueError:
                pass
        return self.file_path

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding, errors="replace")

    def get_text(self, span: Span) -> str:
        """Original text of a byte range."""
        return self.content[span.start : span.end].decode(self.encoding, errors="replace")

    def get_line(self, line_num: int) -> str:
        """Get specific line from the original source (1-indexed)."""
        lines = self.text.splitlines()
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return ""

    # ------------------------------------------------------------------
    # Edit buffer
    # ------------------------------------------------------------------

    @property
    def modified(self) -> bool:
        return bool(self._edits)

    @property
    def edit_count(self) -> int:
        return len(self._edits)

    def replace(self, span: Span, text: str) -> None:
        """
        Queue a replacement of `span` with `text`.

        A second edit of the exact same span replaces the first. Insertions
        (empty spans) may sit at the start of a replaced span.

        Raises:
            EditConflictError: The span partially overlaps a queued edit
        """
        key = (span.start, span.end)
        for start, end in self._edits:
            if (start, end) == key:
                continue
            if span.overlaps(Span(start, end)):
                raise EditConflictError(
                    "Edit overlaps a queued edit",
                    file=str(self.file_path),
                    span=key,
                    existing=(start, end),
                )
        self._edits[key] = text

    def replace_region(self, span: Span, text: str) -> None:
        """
        Replace `span` with `text`, absorbing queued edits inside it.

        Callers build `text` from render_range(span) so contained edits are
        not lost.
        """
        for key in [k for k in self._edits if span.contains(Span(*k)) and k != (span.end, span.end)]:
            del self._edits[key]
        self.replace(span, text)

    def rewrite_reference(self, site: ReferenceSite, text: str) -> None:
        """Queue new text for a reference site and keep the site in sync."""
        self.replace(site.span, text)
        site.referenced_name = text

    def rewrite_alias(self, site: ReferenceSite, alias: str) -> None:
        if site.alias_span is None:
            return
        self.replace(site.alias_span, alias)
        site.alias_name = alias

    def render_range(self, span: Span) -> str:
        """Text of `span` with the queued edits inside it applied."""
        edits = [
            (start, end, text)
            for (start, end), text in self._edits.items()
            if span.start <= start and end <= span.end and not (start == end == span.end and not span.is_empty)
        ]
        return self._apply(self.content[span.start : span.end], edits, offset=span.start)

    def render(self) -> str:
        """Full file text with all queued edits applied."""
        edits = [(start, end, text) for (start, end), text in self._edits.items()]
        return self._apply(self.content, edits, offset=0)

    def _apply(self, data: bytes, edits: list[tuple[int, int, str]], offset: int) -> str:
        # Back to front so earlier offsets stay valid. For equal starts the
        # replacement goes first, then the insertion lands in front of it.
        result = data
        for start, end, text in sorted(edits, key=lambda e: (e[0], e[1]), reverse=True):
            result = result[: start - offset] + text.encode(self.encoding) + result[end - offset :]
        return result.decode(self.encoding, errors="replace")

    def __repr__(self) -> str:
        return f"SourceFile(file={self.file_path}, language={self.language}, edits={len(self._edits)})"
