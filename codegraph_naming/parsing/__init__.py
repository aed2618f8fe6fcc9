"""
Parsing layer: tree-sitter parsers, source files and PHP symbol extraction.
"""

from codegraph_naming.parsing.ast_tree import AstTree
from codegraph_naming.parsing.extractor import PhpSymbolExtractor
from codegraph_naming.parsing.parser_registry import ParserRegistry, get_registry
from codegraph_naming.parsing.source_file import SourceFile

__all__ = [
    "AstTree",
    "PhpSymbolExtractor",
    "ParserRegistry",
    "SourceFile",
    "get_registry",
]
