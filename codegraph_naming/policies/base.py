"""
Naming Policy base types

A policy is a pure rule: given a declaration and its context it returns the
conforming short name, or None when the declaration is out of scope or
already conforms. Policies never touch the file system and never raise.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from codegraph_naming.models import NAMESPACE_SEPARATOR, Declaration, DeclarationKind, split_fqn


@dataclass(frozen=True)
class NamingContext:
    """
    Where a declaration lives.

    Attributes:
        file_path: File path relative to the run root
        namespace: Namespace the declaration is declared in
    """

    file_path: Path
    namespace: str = ""

    @classmethod
    def for_declaration(cls, declaration: Declaration, relative_path: Path | None = None) -> NamingContext:
        return cls(file_path=relative_path or declaration.file_path, namespace=declaration.module_path)


class ModuleScope:
    """
    Activation predicate on the module path.

    Matches when the segment sequence (e.g. "Infrastructure/Repository")
    occurs contiguously in the file's directory or in the namespace.
    """

    def __init__(self, path: str):
        self.path = path
        self.segments = tuple(s for s in path.replace(NAMESPACE_SEPARATOR, "/").split("/") if s)
        if not self.segments:
            raise ValueError("ModuleScope needs at least one segment")

    def _contains(self, parts: tuple[str, ...]) -> bool:
        width = len(self.segments)
        return any(parts[i : i + width] == self.segments for i in range(len(parts) - width + 1))

    def matches_path(self, path: Path) -> bool:
        """Scope occurs in the directory part of `path`."""
        return self._contains(PurePosixPath(path.as_posix()).parent.parts)

    def matches_namespace(self, namespace: str) -> bool:
        return self._contains(tuple(s for s in namespace.split(NAMESPACE_SEPARATOR) if s))

    def matches_fqn(self, fqn: str) -> bool:
        return self.matches_namespace(split_fqn(fqn)[0])

    def matches(self, context: NamingContext) -> bool:
        return self.matches_path(context.file_path) or self.matches_namespace(context.namespace)

    def __repr__(self) -> str:
        return f"ModuleScope({self.path!r})"


class NamingPolicy(ABC):
    """
    Base class for naming conventions.

    Subclasses set the class attributes and implement transform(); override
    accepts() for checks that need more than the kind and the scope.

    Attributes:
        name: Catalog name (used in configuration and diagnostics)
        description: One-line summary
        kinds: Declaration kinds the policy looks at
        scope: Module path the policy is active in (None: everywhere)
        eager_references: Rewrite matching references in the renamed
            declaration's file right away
    """

    name: str = ""
    description: str = ""
    kinds: frozenset[DeclarationKind] = frozenset({DeclarationKind.CLASS})
    scope: ModuleScope | None = None
    eager_references: bool = False

    def accepts(self, declaration: Declaration, context: NamingContext) -> bool:
        return True

    def applies_to(self, declaration: Declaration, context: NamingContext) -> bool:
        if declaration.kind not in self.kinds:
            return False
        if self.scope is not None and not self.scope.matches(context):
            return False
        return self.accepts(declaration, context)

    def in_scope_fqn(self, fqn: str) -> bool:
        return self.scope is None or self.scope.matches_fqn(fqn)

    @abstractmethod
    def transform(self, name: str) -> str | None:
        """Conforming name for `name`, or None when it already conforms."""

    def try_rename(self, declaration: Declaration, context: NamingContext) -> str | None:
        if not self.applies_to(declaration, context):
            return None
        new_name = self.transform(declaration.short_name)
        if new_name is None or new_name == declaration.short_name:
            return None
        return new_name

    def rename_reference(self, name: str) -> str | None:
        """New text for a reference or alias matching this policy's pattern."""
        if not self.eager_references:
            return None
        new_name = self.transform(name)
        if new_name is None or new_name == name:
            return None
        return new_name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, scope={self.scope!r})"


class SuffixPolicy(NamingPolicy):
    """Ensures the name ends with `suffix`."""

    suffix: str = ""

    def transform(self, name: str) -> str | None:
        if name.endswith(self.suffix):
            return None
        return f"{name}{self.suffix}"


class PrefixPolicy(NamingPolicy):
    """Ensures the name starts with `prefix`."""

    prefix: str = ""

    def transform(self, name: str) -> str | None:
        if name.startswith(self.prefix):
            return None
        return f"{self.prefix}{name}"


class SuffixReplacementPolicy(NamingPolicy):
    """
    Replaces the first matching suffix from an ordered table.

    `default_suffix` is appended when no table entry matches and the name
    does not already end with it. Replacements repeat until the name is
    stable, so UserReadModelReadModel goes straight to User. A replacement
    that would leave an empty name is skipped.
    """

    replacements: tuple[tuple[str, str], ...] = ()
    default_suffix: str | None = None

    def transform(self, name: str) -> str | None:
        current = name
        seen = {current}
        while True:
            replaced = self._replace_once(current)
            if replaced is None or replaced in seen:
                break
            seen.add(replaced)
            current = replaced
        return None if current == name else current

    def _replace_once(self, name: str) -> str | None:
        for old, new in self.replacements:
            if name.endswith(old) and name[: -len(old)] + new:
                return f"{name[: -len(old)]}{new}"
        if self.default_suffix is not None and not name.endswith(self.default_suffix):
            return f"{name}{self.default_suffix}"
        return None
