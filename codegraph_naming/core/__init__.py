"""
Rename coordination: registry, file planner, declaration table, coordinator.
"""

from codegraph_naming.core.coordinator import RenameSession, SymbolRenameCoordinator
from codegraph_naming.core.declaration_table import DeclarationTable
from codegraph_naming.core.names import NameResolver
from codegraph_naming.core.planner import CommitReport, FileRenamePlanner
from codegraph_naming.core.registry import RenameRegistry

__all__ = [
    "RenameSession",
    "SymbolRenameCoordinator",
    "DeclarationTable",
    "NameResolver",
    "CommitReport",
    "FileRenamePlanner",
    "RenameRegistry",
]
