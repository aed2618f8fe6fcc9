"""
Multiline named arguments pass

Splits single-line argument lists that use named arguments over one line
per argument:

    new Money(amount: 10, currency: $eur, precision: 2)

becomes

    new Money(
        amount: 10,
        currency: $eur,
        precision: 2
    )
"""

from __future__ import annotations

from collections.abc import Iterable

from codegraph_naming.logging import get_logger
from codegraph_naming.models import CallSite
from codegraph_naming.parsing.source_file import SourceFile

logger = get_logger(__name__)


class MultilineArgumentsFormatter:
    def __init__(self, min_arguments: int = 3, indent: str = "    "):
        self.min_arguments = min_arguments
        self.indent = indent

    def format_all(self, sources: Iterable[SourceFile]) -> int:
        return sum(self.format(source) for source in sources)

    def format(self, source: SourceFile) -> int:
        """Reformat the eligible calls of one file. Returns the number of reformatted calls."""
        eligible = [call for call in source.calls if self._eligible(call)]

        # Inner calls first; outer calls pick up their rendered text
        eligible.sort(key=lambda c: c.arguments_span.end - c.arguments_span.start)

        formatted = 0
        for call in eligible:
            source.replace_region(call.arguments_span, self._render(source, call))
            call.multiline = True
            formatted += 1

        if formatted:
            logger.debug("arguments_split", file=str(source.file_path), calls=formatted)
        return formatted

    def _eligible(self, call: CallSite) -> bool:
        if call.multiline or call.has_comments:
            return False
        if len(call.arguments) < self.min_arguments:
            return False
        return any(arg.is_named for arg in call.arguments)

    def _render(self, source: SourceFile, call: CallSite) -> str:
        inner_indent = f"{call.line_indent}{self.indent}"
        lines = []
        for argument in call.arguments:
            text = source.render_range(argument.span)
            # Nested multiline lists move one level deeper with their argument
            text = text.replace("\n", f"\n{self.indent}")
            lines.append(f"{inner_indent}{text}")
        return "(\n" + ",\n".join(lines) + f"\n{call.line_indent})"
