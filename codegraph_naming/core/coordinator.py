"""
Symbol Rename Coordinator

Applies a policy verdict to a declaration and keeps the three views of the
name in sync:

1. the declaration itself (in-memory, queued source edit)
2. references: eagerly in the current file, everywhere else through the
   rename registry consumed by the reference fixer
3. the hosting file, through the file rename planner

All bookkeeping lives in a RenameSession owned by the run driver. The file
system is only touched when the session is finalized.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from codegraph_naming.config import CollisionPolicy
from codegraph_naming.core.declaration_table import DeclarationTable
from codegraph_naming.core.names import RELATIVE_SCOPES, NameResolver
from codegraph_naming.core.planner import CommitReport, FileRenamePlanner
from codegraph_naming.core.registry import RenameRegistry
from codegraph_naming.errors import SessionStateError
from codegraph_naming.logging import get_logger
from codegraph_naming.models import (
    NAMESPACE_SEPARATOR,
    Declaration,
    Diagnostic,
    ReferenceKind,
    ReferenceSite,
    RenameRecord,
    Severity,
    qualify,
    short_name_of,
    split_fqn,
)

if TYPE_CHECKING:
    from pathlib import Path

    from codegraph_naming.parsing.source_file import SourceFile
    from codegraph_naming.policies.base import NamingPolicy

logger = get_logger(__name__)


class RenameSession:
    """
    Bookkeeping for one run: registry, planner, declaration table, records
    and diagnostics.

    finalize() commits (apply mode) or aborts (dry-run) the planned file
    moves exactly once; later calls return the first result.

    Usage:
        with RenameSession(dry_run=False) as session:
            coordinator = SymbolRenameCoordinator(session)
            ...
        session.commit_report.applied
    """

    def __init__(
        self,
        dry_run: bool = False,
        collision_policy: CollisionPolicy = CollisionPolicy.FIRST_WINS,
    ):
        self.dry_run = dry_run
        self.registry = RenameRegistry()
        self.planner = FileRenamePlanner(collision_policy)
        self.table = DeclarationTable()
        self.records: list[RenameRecord] = []
        self.diagnostics: list[Diagnostic] = []
        self.commit_report: CommitReport | None = None
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def ensure_open(self) -> None:
        if self._finalized:
            raise SessionStateError("Session already finalized")

    def report(
        self,
        rule: str,
        message: str,
        file_path: Path | None = None,
        line: int = 0,
        severity: Severity = Severity.WARNING,
    ) -> Diagnostic:
        diagnostic = Diagnostic(rule=rule, message=message, file_path=file_path, line=line, severity=severity)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def finalize(self, dry_run: bool | None = None) -> CommitReport:
        """
        Commit or discard the planned file moves.

        Args:
            dry_run: Run mode, read here and nowhere else (defaults to the
                mode the session was created with)

        Raises:
            FileRenameError: a move failed in apply mode; the session still
                counts as finalized
        """
        if self._finalized:
            logger.debug("session_already_finalized")
            return self.commit_report or CommitReport()

        self._finalized = True
        if dry_run is None:
            dry_run = self.dry_run

        if dry_run:
            self.commit_report = self.planner.abort()
        else:
            self.commit_report = self.planner.commit()

        logger.info(
            "session_finalized",
            dry_run=dry_run,
            renames=len(self.records),
            applied=len(self.commit_report.applied),
            skipped=len(self.commit_report.skipped),
            discarded=len(self.commit_report.discarded),
        )
        return self.commit_report

    def __enter__(self) -> RenameSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._finalized:
            return
        if exc_type is not None:
            # Never move files for a run that failed half-way
            self.finalize(dry_run=True)
        else:
            self.finalize()

    def __repr__(self) -> str:
        return (
            f"RenameSession(dry_run={self.dry_run}, renames={len(self.records)}, "
            f"planned={len(self.planner)}, finalized={self._finalized})"
        )


class SymbolRenameCoordinator:
    """
    Applies naming verdicts within a session.

    Example:
        coordinator = SymbolRenameCoordinator(session)
        new_name = policy.try_rename(declaration, context)
        coordinator.apply(declaration, new_name, policy, source)
    """

    def __init__(self, session: RenameSession):
        self.session = session

    def apply(
        self,
        declaration: Declaration,
        new_name: str | None,
        policy: NamingPolicy,
        source: SourceFile,
    ) -> RenameRecord | None:
        """
        Rename `declaration` to `new_name`.

        Returns:
            The rename record, or None when nothing changed (no verdict,
            same name, or the rename was rejected as a collision).

        Raises:
            SessionStateError: the session was already finalized
        """
        self.session.ensure_open()

        if new_name is None or new_name == declaration.short_name:
            return None

        old_fqn = declaration.fqn
        new_fqn = qualify(declaration.module_path, new_name)

        if not self._can_claim(declaration, old_fqn, new_fqn, policy):
            return None

        declaration.short_name = new_name
        if declaration.name_span is not None:
            source.replace(declaration.name_span, new_name)
        self.session.table.rename(old_fqn, declaration)

        if policy.eager_references:
            self._rewrite_local_references(source, policy)

        new_path = self._plan_file_move(declaration, new_name)

        record = RenameRecord(
            old_fqn=old_fqn,
            new_fqn=new_fqn,
            old_path=declaration.file_path,
            new_path=new_path,
            policy=policy.name,
        )
        self.session.records.append(record)

        logger.info(
            "declaration_renamed",
            policy=policy.name,
            old_fqn=old_fqn,
            new_fqn=new_fqn,
            file=str(declaration.file_path),
        )
        return record

    def _can_claim(self, declaration: Declaration, old_fqn: str, new_fqn: str, policy: NamingPolicy) -> bool:
        """Collision checks; registers the mapping as the last step."""
        owner = self.session.table.get(new_fqn)
        if owner is not None and owner is not declaration:
            self.session.report(
                policy.name,
                f"Cannot rename {old_fqn} to {new_fqn}: name already declared in {owner.file_path}",
                file_path=declaration.file_path,
                line=declaration.line,
            )
            logger.warning("rename_collision", policy=policy.name, old_fqn=old_fqn, new_fqn=new_fqn)
            return False

        if not self.session.registry.register(old_fqn, new_fqn):
            self.session.report(
                policy.name,
                f"Cannot rename {old_fqn} to {new_fqn}: conflicting rename already registered",
                file_path=declaration.file_path,
                line=declaration.line,
            )
            return False

        return True

    def _plan_file_move(self, declaration: Declaration, new_name: str) -> Path | None:
        if not declaration.owns_file:
            return None

        old_path = declaration.file_path
        new_path = old_path.with_name(f"{new_name}{old_path.suffix}")
        supersede = declaration.planned_path is not None

        if new_path == old_path:
            # Renamed back to the name on disk
            self.session.planner.plan(old_path, new_path, supersede=supersede)
            declaration.planned_path = None
            return None

        if self.session.planner.plan(old_path, new_path, supersede=supersede):
            declaration.planned_path = new_path
            return new_path

        self.session.report(
            "file-move",
            f"File move {old_path.name} -> {new_path.name} skipped: already planned elsewhere",
            file_path=old_path,
            line=declaration.line,
        )
        return None

    # ------------------------------------------------------------------
    # Eager local rewrite
    # ------------------------------------------------------------------

    def _rewrite_local_references(self, source: SourceFile, policy: NamingPolicy) -> None:
        """
        Rewrite references in `source` that match the policy pattern.

        Only targets known to this run are touched: renamed declarations (the
        registry) and declarations in the table within the policy scope.
        Aliases follow the pattern on their own.
        """
        # Resolve against the imports as they were before this rewrite
        resolvers: dict[str, NameResolver] = {}
        for site in source.references:
            if site.namespace not in resolvers:
                resolvers[site.namespace] = NameResolver.from_references(site.namespace, source.references)

        rewritten = 0
        for site in source.references:
            if site.kind == ReferenceKind.IMPORT:
                rewritten += self._rewrite_import(source, site, policy)
                continue

            name = site.referenced_name
            if name.lower() in RELATIVE_SCOPES:
                continue

            resolver = resolvers[site.namespace]
            fqn = resolver.resolve(name)
            if not self._is_local_target(fqn, policy):
                continue

            current = short_name_of(name)
            if resolver.is_aliased(name) and NAMESPACE_SEPARATOR not in name:
                new_short = policy.rename_reference(current)
            else:
                new_short = self._target_short_name(fqn, current, policy)
            if new_short is None or new_short == current:
                continue

            prefix, sep, _ = name.rpartition(NAMESPACE_SEPARATOR)
            source.rewrite_reference(site, f"{prefix}{sep}{new_short}")
            rewritten += 1

        if rewritten:
            logger.debug("local_references_rewritten", policy=policy.name, file=str(source.file_path), count=rewritten)

    def _rewrite_import(self, source: SourceFile, site: ReferenceSite, policy: NamingPolicy) -> int:
        fqn = site.imported_fqn
        if not self._is_local_target(fqn, policy):
            return 0

        rewritten = 0
        current = short_name_of(site.referenced_name)
        new_short = self._target_short_name(fqn, current, policy)
        if new_short is not None and new_short != current:
            prefix, sep, _ = site.referenced_name.rpartition(NAMESPACE_SEPARATOR)
            source.rewrite_reference(site, f"{prefix}{sep}{new_short}")
            rewritten += 1

        # The alias is rewritten on its own when it matches the pattern too
        if site.alias_name:
            new_alias = policy.rename_reference(site.alias_name)
            if new_alias is not None:
                source.rewrite_alias(site, new_alias)
                rewritten += 1

        return rewritten

    def _is_local_target(self, fqn: str, policy: NamingPolicy) -> bool:
        if not policy.in_scope_fqn(fqn):
            return False
        return fqn in self.session.registry or fqn in self.session.table

    def _target_short_name(self, fqn: str, current: str, policy: NamingPolicy) -> str | None:
        """
        New short name for a reference to `fqn` written as `current`.

        Until the declaration itself is renamed the pattern is a guess. The
        guess is dropped when the name already belongs to another declaration
        or is claimed as a rename target.
        """
        new_short = policy.rename_reference(current)
        if new_short is None:
            return None
        target = self.session.registry.lookup(fqn)
        if target is not None:
            return short_name_of(target)

        new_fqn = qualify(split_fqn(fqn)[0], new_short)
        owner = self.session.table.get(new_fqn)
        if owner is not None and owner is not self.session.table.get(fqn):
            return None
        if self.session.registry.is_target(new_fqn):
            return None
        return new_short
