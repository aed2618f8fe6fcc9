"""
Declaration Table

Per-run index of class-like declarations keyed by their current fully
qualified name. Pass one fills it from every parsed file; the coordinator
re-keys entries on rename; the argument passes read parameter names from it.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from codegraph_naming.logging import get_logger
from codegraph_naming.models import Declaration, fqn_key

if TYPE_CHECKING:
    from codegraph_naming.core.registry import RenameRegistry

logger = get_logger(__name__)


class DeclarationTable:
    """
    Current FQN -> Declaration.

    Lookups are case-insensitive. A second declaration with the same FQN
    (conditional declarations, duplicated fixtures) keeps the first entry.
    """

    def __init__(self):
        self._by_fqn: dict[str, Declaration] = {}
        self._by_path: dict[Path, list[Declaration]] = {}

    def add(self, declaration: Declaration) -> bool:
        """Index a declaration. Returns False for a duplicate FQN."""
        key = fqn_key(declaration.fqn)
        existing = self._by_fqn.get(key)
        if existing is not None and existing is not declaration:
            logger.warning(
                "duplicate_declaration",
                fqn=declaration.fqn,
                file=str(declaration.file_path),
                first_seen=str(existing.file_path),
            )
            return False

        self._by_fqn[key] = declaration
        self._by_path.setdefault(declaration.file_path, []).append(declaration)
        return True

    def get(self, fqn: str) -> Declaration | None:
        return self._by_fqn.get(fqn_key(fqn))

    def rename(self, old_fqn: str, declaration: Declaration) -> None:
        """Re-key `declaration` after its short name changed from `old_fqn`."""
        old_key = fqn_key(old_fqn)
        if self._by_fqn.get(old_key) is declaration:
            del self._by_fqn[old_key]
        self._by_fqn[fqn_key(declaration.fqn)] = declaration

    def declarations_in(self, path: Path) -> list[Declaration]:
        return list(self._by_path.get(path, []))

    def parameter_names(
        self,
        fqn: str,
        method: str,
        registry: RenameRegistry | None = None,
    ) -> list[str] | None:
        """
        Ordered parameter names of `fqn::method`, following `extends`.

        `fqn` may be an old name; the registry maps it to the current one.
        Returns None when the class or the method is unknown anywhere in the
        known part of the hierarchy.
        """
        method_key = method.lower()
        seen: set[str] = set()
        current: str | None = fqn

        while current is not None:
            if registry is not None:
                current = registry.resolve(current)
            key = fqn_key(current)
            if key in seen:
                return None
            seen.add(key)

            declaration = self._by_fqn.get(key)
            if declaration is None:
                return None
            if method_key in declaration.methods:
                return list(declaration.methods[method_key])
            current = declaration.parent_fqn

        return None

    def __iter__(self) -> Iterator[Declaration]:
        return iter(list(self._by_fqn.values()))

    def __contains__(self, fqn: object) -> bool:
        return isinstance(fqn, str) and fqn_key(fqn) in self._by_fqn

    def __len__(self) -> int:
        return len(self._by_fqn)
