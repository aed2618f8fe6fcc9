"""
AST Tree wrapper for Tree-sitter
"""

try:
    from tree_sitter import Node as TSNode
    from tree_sitter import Tree as TSTree
except ImportError as e:
    raise ImportError("tree-sitter is required. Install with: pip install tree-sitter") from e

from codegraph_naming.errors import ParseError
from codegraph_naming.parsing.parser_registry import get_registry
from codegraph_naming.parsing.source_file import SourceFile


class AstTree:
    """
    Wrapper for Tree-sitter AST.

    Provides convenient methods for traversing the AST of a SourceFile.
    """

    def __init__(self, source: SourceFile, tree: TSTree):
        self.source = source
        self.tree = tree
        self._root = tree.root_node

    @classmethod
    def parse(cls, source: SourceFile) -> "AstTree":
        """
        Parse source file into AST.

        Raises:
            ParseError: If language not supported or parsing fails
        """
        parser = get_registry().get_parser(source.language)

        if parser is None:
            raise ParseError(f"Language not supported: {source.language}", file=str(source.file_path))

        tree = parser.parse(source.content)

        if tree is None:
            raise ParseError("Failed to parse file", file=str(source.file_path))

        return cls(source, tree)

    @property
    def root(self) -> TSNode:
        return self._root

    def walk(self, node: TSNode | None = None) -> list[TSNode]:
        """Nodes in depth-first order (iterative, safe on deeply nested code)."""
        if node is None:
            node = self._root

        nodes = []
        stack = [node]
        while stack:
            current = stack.pop()
            nodes.append(current)
            stack.extend(reversed(current.children))
        return nodes

    def get_text(self, node: TSNode) -> str:
        """Get text content of a node."""
        return self.source.content[node.start_byte : node.end_byte].decode(self.source.encoding, errors="replace")

    def has_error(self, node: TSNode | None = None) -> bool:
        """Check if AST has any error nodes."""
        if node is None:
            node = self._root
        return node.has_error

    def get_errors(self, node: TSNode | None = None) -> list[TSNode]:
        """Get all error and missing nodes."""
        return [n for n in self.walk(node) if n.type == "ERROR" or n.is_missing]

    def __repr__(self) -> str:
        return f"AstTree(file={self.source.file_path}, language={self.source.language})"
