"""
Rename Registry

Run-scoped map of old fully qualified name -> new fully qualified name.
Filled by the coordinator during the policy passes and consumed by the
reference fixer once every pass is done, so references see every rename
regardless of the order files were visited in.
"""

from __future__ import annotations

from collections.abc import Iterator

from codegraph_naming.logging import get_logger
from codegraph_naming.models import fqn_key, normalize_fqn

logger = get_logger(__name__)


class RenameRegistry:
    """
    Old FQN -> new FQN mapping with collision rejection and chain collapsing.

    Keys are compared case-insensitively. Registering B -> C after A -> B
    rewrites the first entry to A -> C, so a lookup never needs more than
    one hop.

    Example:
        registry = RenameRegistry()
        registry.register("App\\\\Entity", "App\\\\AbstractEntity")
        registry.lookup("app\\\\entity")  # "App\\\\AbstractEntity"
    """

    def __init__(self):
        # key(old) -> (old, new)
        self._entries: dict[str, tuple[str, str]] = {}

    def register(self, old_fqn: str, new_fqn: str) -> bool:
        """
        Record a rename.

        Returns:
            True if the mapping is recorded (or is an identity no-op),
            False if it was rejected as a collision.
        """
        old_fqn = normalize_fqn(old_fqn)
        new_fqn = normalize_fqn(new_fqn)
        old_key = fqn_key(old_fqn)
        new_key = fqn_key(new_fqn)

        if old_key == new_key:
            return True

        existing = self._entries.get(old_key)
        if existing is not None and fqn_key(existing[1]) != new_key:
            logger.warning(
                "rename_rejected",
                reason="already_renamed",
                old_fqn=old_fqn,
                new_fqn=new_fqn,
                existing_target=existing[1],
            )
            return False

        for key, (other_old, target) in self._entries.items():
            if key == old_key or fqn_key(target) != new_key:
                continue
            logger.warning(
                "rename_rejected",
                reason="target_taken",
                old_fqn=old_fqn,
                new_fqn=new_fqn,
                claimed_by=other_old,
            )
            return False

        # Collapse chains: X -> old becomes X -> new
        for key, (other_old, target) in list(self._entries.items()):
            if fqn_key(target) == old_key:
                if key == new_key:
                    # Renamed back to where it started
                    del self._entries[key]
                else:
                    self._entries[key] = (other_old, new_fqn)

        self._entries[old_key] = (old_fqn, new_fqn)
        logger.debug("rename_registered", old_fqn=old_fqn, new_fqn=new_fqn)
        return True

    def lookup(self, fqn: str) -> str | None:
        """New FQN for `fqn`, or None when it was not renamed."""
        entry = self._entries.get(fqn_key(fqn))
        return entry[1] if entry is not None else None

    def resolve(self, fqn: str) -> str:
        """Current FQN of `fqn` (itself when it was not renamed)."""
        return self.lookup(fqn) or normalize_fqn(fqn)

    def is_target(self, fqn: str) -> bool:
        key = fqn_key(fqn)
        return any(fqn_key(target) == key for _, target in self._entries.values())

    def as_mapping(self) -> dict[str, str]:
        """Plain old -> new mapping for collaborators."""
        return {old: new for old, new in self._entries.values()}

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._entries.values()))

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, fqn: object) -> bool:
        return isinstance(fqn, str) and fqn_key(fqn) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RenameRegistry(entries={len(self._entries)})"
