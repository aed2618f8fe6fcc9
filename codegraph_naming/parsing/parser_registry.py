"""
Parser Registry for Tree-sitter

Manages language-specific parsers and provides a unified interface.
"""

from pathlib import Path

try:
    from tree_sitter import Parser
    from tree_sitter_language_pack import get_language
except ImportError as e:
    raise ImportError(
        "tree-sitter-language-pack is required. " "Install with: pip install tree-sitter tree-sitter-language-pack"
    ) from e

from codegraph_naming.logging import get_logger

logger = get_logger(__name__)


class ParserRegistry:
    """
    Registry for language parsers.

    Supports:
    - PHP
    """

    def __init__(self):
        self._parsers: dict[str, Parser] = {}
        self._languages: dict[str, object] = {}
        self._setup_languages()

    def _register_language(self, name: str, aliases: list[str] | None = None) -> None:
        """
        Register a language and its aliases.

        Args:
            name: Language name (e.g., "php")
            aliases: Optional list of aliases
        """
        try:
            lang = get_language(name)
            self._languages[name] = lang

            if aliases:
                for alias in aliases:
                    self._languages[alias] = lang

            logger.debug("parser_loaded", language=name, aliases=aliases or [])
        except Exception as e:
            logger.warning("parser_load_failed", language=name, error=str(e))

    def _setup_languages(self):
        """Setup Tree-sitter languages"""
        self._register_language("php")

    def get_parser(self, language: str) -> Parser | None:
        """
        Get parser for the specified language.

        Args:
            language: Language name

        Returns:
            Parser instance or None if language not supported
        """
        language = language.lower()

        if language in self._parsers:
            return self._parsers[language]

        lang = self._languages.get(language)
        if not lang:
            return None

        parser = Parser(lang)
        self._parsers[language] = parser
        return parser

    def detect_language(self, file_path: str | Path) -> str | None:
        """
        Detect language from file extension.

        Returns:
            Language name or None if not supported
        """
        ext = Path(file_path).suffix.lower()

        ext_map = {
            ".php": "php",
            ".phtml": "php",
        }

        return ext_map.get(ext)

    def supports_language(self, language: str) -> bool:
        """Check if language is supported"""
        return language.lower() in self._languages


# Global registry instance
_registry: ParserRegistry | None = None


def get_registry() -> ParserRegistry:
    """Get global parser registry instance"""
    global _registry
    if _registry is None:
        _registry = ParserRegistry()
    return _registry
