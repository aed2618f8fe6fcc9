"""
File Rename Planner

Accumulates file moves during a run and applies them once at the end.

- plan() is idempotent and collision-guarded
- commit() creates missing directories, skips moves whose destination
  already exists (a resumed run) and never overwrites
- abort() discards the plan without touching the file system
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from codegraph_naming.config import CollisionPolicy
from codegraph_naming.errors import FileRenameError, PlanConflictError
from codegraph_naming.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CommitReport:
    """Outcome of a commit (or abort)."""

    applied: list[tuple[Path, Path]] = field(default_factory=list)
    skipped: list[tuple[Path, Path]] = field(default_factory=list)
    discarded: list[tuple[Path, Path]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.applied) + len(self.skipped) + len(self.discarded)


class FileRenamePlanner:
    """
    Planned file moves: old path -> new path.

    Example:
        planner = FileRenamePlanner()
        planner.plan(Path("src/Entity.php"), Path("src/AbstractEntity.php"))
        report = planner.commit()
    """

    def __init__(self, collision_policy: CollisionPolicy = CollisionPolicy.FIRST_WINS):
        self.collision_policy = collision_policy
        self._planned: dict[Path, Path] = {}

    @property
    def planned(self) -> dict[Path, Path]:
        """Copy of the current plan."""
        return dict(self._planned)

    def plan(self, old_path: Path, new_path: Path, *, supersede: bool = False) -> bool:
        """
        Plan moving `old_path` to `new_path`.

        Args:
            old_path: File as it exists on disk
            new_path: Destination (same directory, new base name)
            supersede: Replace an earlier plan for `old_path` made by the same
                declaration (a later pass renamed it again)

        Returns:
            True if the plan now maps old_path to new_path.

        Raises:
            PlanConflictError: collision policy is ERROR and old_path is
                already planned with a different destination
        """
        old_path = Path(old_path)
        new_path = Path(new_path)

        if old_path == new_path:
            if supersede and old_path in self._planned:
                # Renamed back to the original name
                del self._planned[old_path]
            return False

        current = self._planned.get(old_path)
        if current is None or current == new_path or supersede:
            self._planned[old_path] = new_path
            logger.debug("file_move_planned", source=str(old_path), target=str(new_path))
            return True

        if self.collision_policy == CollisionPolicy.ERROR:
            raise PlanConflictError(
                "File already planned with a different destination",
                source=str(old_path),
                planned=str(current),
                requested=str(new_path),
            )

        if self.collision_policy == CollisionPolicy.LAST_WINS:
            logger.warning(
                "file_move_replaced",
                source=str(old_path),
                previous=str(current),
                target=str(new_path),
            )
            self._planned[old_path] = new_path
            return True

        logger.warning(
            "file_move_skipped",
            reason="already_planned",
            source=str(old_path),
            planned=str(current),
            requested=str(new_path),
        )
        return False

    def commit(self) -> CommitReport:
        """
        Apply every planned move, then clear the plan.

        Raises:
            FileRenameError: a directory could not be created or a move failed;
                moves applied before the failure stay applied and a re-run
                skips them
        """
        report = CommitReport()

        try:
            for source, target in self._planned.items():
                try:
                    target.parent.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise FileRenameError(
                        "Cannot create target directory",
                        source=str(source),
                        target=str(target),
                    ) from e

                if target.exists():
                    logger.info("file_move_skipped", reason="target_exists", source=str(source), target=str(target))
                    report.skipped.append((source, target))
                    continue

                try:
                    source.rename(target)
                except OSError as e:
                    raise FileRenameError("Cannot move file", source=str(source), target=str(target)) from e

                logger.info("file_moved", source=str(source), target=str(target))
                report.applied.append((source, target))
        finally:
            self._planned.clear()

        return report

    def abort(self) -> CommitReport:
        """Discard the plan without touching the file system."""
        report = CommitReport(discarded=list(self._planned.items()))
        if report.discarded:
            logger.info("file_moves_discarded", count=len(report.discarded))
        self._planned.clear()
        return report

    def __len__(self) -> int:
        return len(self._planned)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, Path) and path in self._planned
