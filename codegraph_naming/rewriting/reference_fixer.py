"""
Reference fixer

Runs once every policy pass is done and rewrites the references the
coordinator did not fix eagerly: any import, bare or qualified class name
in the corpus whose resolved FQN is a key of the rename registry.
"""

from __future__ import annotations

from collections.abc import Iterable

from codegraph_naming.core.names import RELATIVE_SCOPES, NameResolver
from codegraph_naming.core.registry import RenameRegistry
from codegraph_naming.logging import get_logger
from codegraph_naming.models import (
    NAMESPACE_SEPARATOR,
    Diagnostic,
    ReferenceKind,
    ReferenceSite,
    Severity,
    fqn_key,
    short_name_of,
    split_fqn,
)
from codegraph_naming.parsing.source_file import SourceFile

logger = get_logger(__name__)


class ReferenceFixer:
    """
    Applies the registry to every reference site of a set of files.

    Example:
        fixer = ReferenceFixer(session.registry)
        count = fixer.fix_all(sources)
    """

    def __init__(self, registry: RenameRegistry):
        self.registry = registry
        self.diagnostics: list[Diagnostic] = []

    def fix_all(self, sources: Iterable[SourceFile]) -> int:
        if not len(self.registry):
            return 0
        return sum(self.fix(source) for source in sources)

    def fix(self, source: SourceFile) -> int:
        """Rewrite the references of one file. Returns the number of rewritten sites."""
        # Resolvers see the imports as they are before this file is fixed
        resolvers: dict[str, NameResolver] = {}
        for site in source.references:
            if site.namespace not in resolvers:
                resolvers[site.namespace] = NameResolver.from_references(site.namespace, source.references)

        fixed = 0
        for site in source.references:
            if site.kind == ReferenceKind.IMPORT:
                fixed += self._fix_import(source, site)
            elif site.kind == ReferenceKind.NAME:
                fixed += self._fix_name(source, site, resolvers[site.namespace])
            else:
                fixed += self._fix_qualified(source, site, resolvers[site.namespace])

        if fixed:
            logger.debug("references_fixed", file=str(source.file_path), count=fixed)
        return fixed

    def _fix_import(self, source: SourceFile, site: ReferenceSite) -> int:
        new_fqn = self.registry.lookup(site.imported_fqn)
        if new_fqn is None:
            return 0

        if site.group_prefix:
            # `use A\{B\C}`: the clause holds the part after the group prefix
            prefix = site.group_prefix.strip(NAMESPACE_SEPARATOR)
            if not fqn_key(new_fqn).startswith(fqn_key(prefix) + NAMESPACE_SEPARATOR):
                self._skip(source, site, f"Cannot express {new_fqn} inside group use {prefix}\\{{...}}")
                return 0
            text = new_fqn[len(prefix) + 1 :]
        else:
            leading = NAMESPACE_SEPARATOR if site.referenced_name.startswith(NAMESPACE_SEPARATOR) else ""
            text = f"{leading}{new_fqn}"

        if text == site.referenced_name:
            return 0
        source.rewrite_reference(site, text)
        return 1

    def _fix_name(self, source: SourceFile, site: ReferenceSite, resolver: NameResolver) -> int:
        name = site.referenced_name
        if name.lower() in RELATIVE_SCOPES or resolver.is_aliased(name):
            return 0

        new_fqn = self.registry.lookup(resolver.resolve(name))
        if new_fqn is None:
            return 0

        new_short = short_name_of(new_fqn)
        if new_short == name:
            return 0
        source.rewrite_reference(site, new_short)
        return 1

    def _fix_qualified(self, source: SourceFile, site: ReferenceSite, resolver: NameResolver) -> int:
        old_fqn = resolver.resolve(site.referenced_name)
        new_fqn = self.registry.lookup(old_fqn)
        if new_fqn is None:
            return 0

        if fqn_key(split_fqn(old_fqn)[0]) != fqn_key(split_fqn(new_fqn)[0]):
            # Moved to another namespace: write it fully qualified
            source.rewrite_reference(site, f"{NAMESPACE_SEPARATOR}{new_fqn}")
            return 1

        prefix, sep, last = site.referenced_name.rpartition(NAMESPACE_SEPARATOR)
        new_short = short_name_of(new_fqn)
        if new_short == last:
            return 0
        source.rewrite_reference(site, f"{prefix}{sep}{new_short}")
        return 1

    def _skip(self, source: SourceFile, site: ReferenceSite, message: str) -> None:
        line = source.content.count(b"\n", 0, site.span.start) + 1
        self.diagnostics.append(
            Diagnostic(
                rule="reference-fixer",
                message=message,
                file_path=source.file_path,
                line=line,
                severity=Severity.WARNING,
            )
        )
        logger.warning("reference_not_fixed", file=str(source.file_path), line=line, reason=message)
