"""
Source rewriting passes that run after the policy passes.
"""

from codegraph_naming.rewriting.multiline_arguments import MultilineArgumentsFormatter
from codegraph_naming.rewriting.named_arguments import NamedArgumentsRewriter
from codegraph_naming.rewriting.reference_fixer import ReferenceFixer

__all__ = [
    "ReferenceFixer",
    "NamedArgumentsRewriter",
    "MultilineArgumentsFormatter",
]
