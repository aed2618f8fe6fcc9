"""
codegraph-naming

Normalizes class naming conventions in PHP source trees. Declarations, the
references to them and the files hosting them are renamed together.
"""

from codegraph_naming.config import CollisionPolicy, NamingSettings, RunMode, get_settings
from codegraph_naming.core import RenameRegistry, RenameSession, SymbolRenameCoordinator
from codegraph_naming.errors import NamingError
from codegraph_naming.pipeline import NamingPipeline, RunReport

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CollisionPolicy",
    "NamingSettings",
    "RunMode",
    "get_settings",
    "RenameRegistry",
    "RenameSession",
    "SymbolRenameCoordinator",
    "NamingError",
    "NamingPipeline",
    "RunReport",
]
