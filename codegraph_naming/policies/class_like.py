"""
Class-like naming conventions (PSR naming bylaws)

Active everywhere. References are fixed by the reference fixer only.
"""

from __future__ import annotations

from codegraph_naming.models import NAMESPACE_SEPARATOR, Declaration, DeclarationKind
from codegraph_naming.policies.base import NamingContext, PrefixPolicy, SuffixPolicy


class AbstractPrefixPolicy(PrefixPolicy):
    name = "abstract-prefix"
    description = "Abstract classes start with 'Abstract'"
    prefix = "Abstract"

    def accepts(self, declaration: Declaration, context: NamingContext) -> bool:
        return declaration.is_abstract


class InterfaceSuffixPolicy(SuffixPolicy):
    name = "interface-suffix"
    description = "Interfaces end with 'Interface'"
    kinds = frozenset({DeclarationKind.INTERFACE})
    suffix = "Interface"


class TraitSuffixPolicy(SuffixPolicy):
    name = "trait-suffix"
    description = "Traits end with 'Trait'"
    kinds = frozenset({DeclarationKind.TRAIT})
    suffix = "Trait"


class ExceptionSuffixPolicy(SuffixPolicy):
    name = "exception-suffix"
    description = "Classes extending an exception end with 'Exception'"
    suffix = "Exception"

    BASE_NAMES = ("Exception", "Throwable")

    def accepts(self, declaration: Declaration, context: NamingContext) -> bool:
        candidates = [n for n in (declaration.parent_fqn, declaration.parent_name) if n]
        return any(self._is_exception_name(n.lstrip(NAMESPACE_SEPARATOR)) for n in candidates)

    def _is_exception_name(self, name: str) -> bool:
        if name.endswith(self.suffix) or name in self.BASE_NAMES:
            return True
        return any(name.endswith(f"{NAMESPACE_SEPARATOR}{base}") for base in self.BASE_NAMES)
