"""
Name resolution

Resolves class names as written in a file to fully qualified names, using
the namespace they appear in and the file's current `use` imports.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from codegraph_naming.models import (
    NAMESPACE_SEPARATOR,
    ReferenceKind,
    ReferenceSite,
    normalize_fqn,
    qualify,
)

RELATIVE_SCOPES = frozenset({"self", "static", "parent"})


@dataclass
class NameResolver:
    """
    Class-name resolver for one namespace of one file.

    Attributes:
        namespace: Namespace the names appear in
        imports: Lowercased local name -> imported FQN
        aliased: Lowercased local names bound through an explicit alias
    """

    namespace: str = ""
    imports: dict[str, str] = field(default_factory=dict)
    aliased: set[str] = field(default_factory=set)

    @classmethod
    def from_references(cls, namespace: str, references: Iterable[ReferenceSite]) -> NameResolver:
        """Build a resolver from the import sites of `namespace` (current text)."""
        resolver = cls(namespace=namespace)
        for ref in references:
            if ref.kind != ReferenceKind.IMPORT or ref.namespace != namespace:
                continue
            local = ref.local_name.lower()
            resolver.imports[local] = ref.imported_fqn
            if ref.alias_name:
                resolver.aliased.add(local)
        return resolver

    def resolve(self, name: str) -> str:
        """
        Resolve a written class name.

        - `\\A\\B` is already fully qualified
        - `namespace\\A` is relative to the current namespace
        - a first segment bound by an import expands to the imported FQN
        - anything else is relative to the current namespace
        """
        if name.startswith(NAMESPACE_SEPARATOR):
            return normalize_fqn(name)

        first, sep, rest = name.partition(NAMESPACE_SEPARATOR)
        if first.lower() == "namespace" and sep:
            return qualify(self.namespace, rest)

        target = self.imports.get(first.lower())
        if target is not None:
            return f"{target}{sep}{rest}" if sep else target

        return qualify(self.namespace, name)

    def is_aliased(self, name: str) -> bool:
        """Whether the first segment of `name` is bound by an explicit alias."""
        first = name.partition(NAMESPACE_SEPARATOR)[0]
        return first.lower() in self.aliased

    def is_imported(self, name: str) -> bool:
        first = name.partition(NAMESPACE_SEPARATOR)[0]
        return first.lower() in self.imports
