"""
Naming Pipeline

Drives a full run over a source tree:

1. discover files
2. parse and extract symbols (files with syntax errors are skipped)
3. pass one: fill the declaration table
4. one pass per policy, in catalog order, over every declaration
5. reference fixer over the whole corpus
6. argument passes (named arguments, multiline formatting)
7. advisories
8. write modified files (apply mode only)
9. finalize the session: commit or discard the planned file moves
"""

from __future__ import annotations

import difflib
import os
from dataclasses import dataclass, field
from pathlib import Path

from codegraph_naming.config import NamingSettings, get_settings
from codegraph_naming.core.coordinator import RenameSession, SymbolRenameCoordinator
from codegraph_naming.core.planner import CommitReport
from codegraph_naming.errors import NamingError, ParseError
from codegraph_naming.logging import get_logger, log_failure, run_context, timed_stage
from codegraph_naming.models import Diagnostic, RenameRecord, Severity
from codegraph_naming.parsing.ast_tree import AstTree
from codegraph_naming.parsing.extractor import PhpSymbolExtractor
from codegraph_naming.parsing.source_file import SourceFile
from codegraph_naming.policies import build_advisories, build_policies
from codegraph_naming.policies.advisories import AdvisoryRule
from codegraph_naming.policies.base import NamingContext, NamingPolicy
from codegraph_naming.rewriting import MultilineArgumentsFormatter, NamedArgumentsRewriter, ReferenceFixer

logger = get_logger(__name__)


@dataclass
class RunReport:
    """What a run did (or, in dry-run mode, would do)."""

    root: Path
    dry_run: bool
    files_scanned: int = 0
    renames: list[RenameRecord] = field(default_factory=list)
    moves: CommitReport = field(default_factory=CommitReport)
    modified_files: list[Path] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    diffs: dict[Path, str] = field(default_factory=dict)
    references_fixed: int = 0
    named_calls: int = 0
    multiline_calls: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.renames or self.modified_files or self.moves.applied or self.moves.discarded)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity != Severity.INFO]


class NamingPipeline:
    """
    Runs the naming policies over a source tree.

    Example:
        settings = NamingSettings(mode=RunMode.DRY_RUN)
        report = NamingPipeline(settings).run(Path("src"))
        for record in report.renames:
            print(record.old_fqn, "->", record.new_fqn)
    """

    def __init__(
        self,
        settings: NamingSettings | None = None,
        policies: list[NamingPolicy] | None = None,
        advisories: list[AdvisoryRule] | None = None,
    ):
        self.settings = settings or get_settings()
        self.policies = policies if policies is not None else build_policies(self.settings)
        self.advisories = advisories if advisories is not None else build_advisories(self.settings)

    def run(self, root: str | Path) -> RunReport:
        """
        Run every pass over `root`.

        Raises:
            FileRenameError: a planned file move failed (apply mode)
            EditConflictError: two rewrites touched overlapping source ranges
        """
        root = Path(root).resolve()
        dry_run = self.settings.dry_run
        report = RunReport(root=root, dry_run=dry_run)

        with run_context(str(root), dry_run):
            with RenameSession(dry_run=dry_run, collision_policy=self.settings.collision_policy) as session:
                with timed_stage(logger, "discover"):
                    paths = self.discover(root)
                sources = self._load(paths, root, session)
                report.files_scanned = len(sources)

                self._build_table(sources, session)
                self._apply_policies(sources, session)

                fixer = ReferenceFixer(session.registry)
                with timed_stage(logger, "fix_references"):
                    report.references_fixed = fixer.fix_all(sources)
                session.diagnostics.extend(fixer.diagnostics)

                self._rewrite_arguments(sources, session, report)
                self._run_advisories(sources, session)

                report.diffs = self._diffs(sources, root)
                report.modified_files = [s.file_path for s in sources if s.modified]
                if not dry_run:
                    self._write(sources)

                report.moves = session.finalize(dry_run)

            report.renames = list(session.records)
            report.diagnostics = list(session.diagnostics)

        logger.info(
            "run_complete",
            files=report.files_scanned,
            renames=len(report.renames),
            modified=len(report.modified_files),
            moved=len(report.moves.applied),
            dry_run=dry_run,
        )
        return report

    # ------------------------------------------------------------------
    # Discovery and parsing
    # ------------------------------------------------------------------

    def discover(self, root: Path) -> list[Path]:
        """Source files under `root`, sorted, honouring the discovery settings."""
        config = self.settings.discovery
        extensions = {ext.lower() for ext in config.extensions}
        excluded = {Path(p).as_posix().strip("/") for p in config.exclude_dirs}

        if root.is_file():
            return [root] if root.suffix.lower() in extensions else []

        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            rel_dir = Path(dirpath).relative_to(root)
            dirnames[:] = sorted(
                d for d in dirnames if d not in excluded and (rel_dir / d).as_posix() not in excluded
            )
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.suffix.lower() not in extensions:
                    continue
                if path.stat().st_size > config.max_file_size_bytes:
                    logger.info("file_skipped", file=str(path), reason="too_large")
                    continue
                found.append(path)

        return sorted(found)

    def _load(self, paths: list[Path], root: Path, session: RenameSession) -> list[SourceFile]:
        base = root if root.is_dir() else root.parent
        sources: list[SourceFile] = []

        for path in paths:
            try:
                source = SourceFile.from_file(path, root=base)
                tree = AstTree.parse(source)
            except (OSError, ValueError, ParseError) as e:
                log_failure(logger, "file_load_failed", e, file=str(path))
                session.report("parser", f"Cannot parse file: {e}", file_path=path, severity=Severity.ERROR)
                continue

            if tree.has_error() and self.settings.skip_files_with_errors:
                errors = tree.get_errors()
                line = errors[0].start_point[0] + 1 if errors else 0
                session.report("parser", "File has syntax errors, skipped", file_path=path, line=line)
                logger.warning("file_skipped", file=str(path), reason="syntax_error", line=line)
                continue

            sources.append(PhpSymbolExtractor(tree).extract())

        return sources

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _build_table(self, sources: list[SourceFile], session: RenameSession) -> None:
        for source in sources:
            for declaration in source.declarations:
                session.table.add(declaration)
        logger.debug("declaration_table_built", declarations=len(session.table))

    def _apply_policies(self, sources: list[SourceFile], session: RenameSession) -> None:
        coordinator = SymbolRenameCoordinator(session)

        for policy in self.policies:
            renamed = 0
            with timed_stage(logger, "policy_pass", policy=policy.name):
                for source in sources:
                    for declaration in source.declarations:
                        context = NamingContext.for_declaration(declaration, source.relative_path)
                        new_name = policy.try_rename(declaration, context)
                        if coordinator.apply(declaration, new_name, policy, source) is not None:
                            renamed += 1
            if renamed:
                logger.info("policy_applied", policy=policy.name, renamed=renamed)

    def _rewrite_arguments(self, sources: list[SourceFile], session: RenameSession, report: RunReport) -> None:
        config = self.settings.arguments

        if config.enforce_named:
            rewriter = NamedArgumentsRewriter(session.table, session.registry, min_arguments=config.min_named_arguments)
            with timed_stage(logger, "named_arguments"):
                report.named_calls = rewriter.rewrite_all(sources)

        if config.format_multiline:
            formatter = MultilineArgumentsFormatter(min_arguments=config.min_multiline_arguments, indent=config.indent)
            with timed_stage(logger, "multiline_arguments"):
                report.multiline_calls = formatter.format_all(sources)

    def _run_advisories(self, sources: list[SourceFile], session: RenameSession) -> None:
        for rule in self.advisories:
            for source in sources:
                for declaration in source.declarations:
                    diagnostic = rule.check(declaration, NamingContext.for_declaration(declaration, source.relative_path))
                    if diagnostic is not None:
                        session.diagnostics.append(diagnostic)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _diffs(self, sources: list[SourceFile], root: Path) -> dict[Path, str]:
        diffs: dict[Path, str] = {}
        for source in sources:
            if not source.modified:
                continue
            name = source.relative_path.as_posix()
            diff = difflib.unified_diff(
                source.text.splitlines(keepends=True),
                source.render().splitlines(keepends=True),
                fromfile=f"a/{name}",
                tofile=f"b/{name}",
            )
            diffs[source.file_path] = "".join(diff)
        return diffs

    def _write(self, sources: list[SourceFile]) -> None:
        for source in sources:
            if not source.modified:
                continue
            try:
                source.file_path.write_bytes(source.render().encode(source.encoding))
            except OSError as e:
                raise NamingError("FILE_WRITE_FAILED", "Cannot write file", file=str(source.file_path)) from e
            logger.debug("file_written", file=str(source.file_path), edits=source.edit_count)
