"""
Named arguments pass

Turns positional arguments of constructor and static calls into named
arguments, using the parameter names collected in the declaration table:

    new Money($amount, $currency)  ->  new Money(amount: $amount, currency: $currency)

Every lookup failure degrades to "leave the call alone".
"""

from __future__ import annotations

from collections.abc import Iterable

from codegraph_naming.core.declaration_table import DeclarationTable
from codegraph_naming.core.names import NameResolver
from codegraph_naming.core.registry import RenameRegistry
from codegraph_naming.logging import get_logger
from codegraph_naming.models import CallKind, CallSite, Span
from codegraph_naming.parsing.source_file import SourceFile

logger = get_logger(__name__)

CONSTRUCTOR = "__construct"


class NamedArgumentsRewriter:
    """
    Adds parameter names to positional call arguments.

    Instance method calls are never touched: the receiver type is unknown
    without type inference.
    """

    def __init__(
        self,
        table: DeclarationTable,
        registry: RenameRegistry | None = None,
        min_arguments: int = 2,
    ):
        self.table = table
        self.registry = registry
        self.min_arguments = min_arguments

    def rewrite_all(self, sources: Iterable[SourceFile]) -> int:
        return sum(self.rewrite(source) for source in sources)

    def rewrite(self, source: SourceFile) -> int:
        """Rewrite the eligible calls of one file. Returns the number of rewritten calls."""
        resolvers: dict[str, NameResolver] = {}
        rewritten = 0

        for call in source.calls:
            if not self._eligible(call):
                continue

            resolver = resolvers.get(call.namespace)
            if resolver is None:
                resolver = NameResolver.from_references(call.namespace, source.references)
                resolvers[call.namespace] = resolver

            class_fqn = self._target_class(call, resolver)
            if class_fqn is None:
                continue

            method = CONSTRUCTOR if call.kind == CallKind.NEW else call.method_name
            parameters = self.table.parameter_names(class_fqn, method, self.registry)
            if not parameters or len(call.arguments) > len(parameters):
                continue

            for argument, parameter in zip(call.arguments, parameters):
                source.replace(Span(argument.span.start, argument.span.start), f"{parameter}: ")
                argument.is_named = True
                argument.name = parameter
            rewritten += 1

        if rewritten:
            logger.debug("named_arguments_added", file=str(source.file_path), calls=rewritten)
        return rewritten

    def _eligible(self, call: CallSite) -> bool:
        if call.kind == CallKind.METHOD:
            return False
        if call.kind == CallKind.STATIC and not call.method_name:
            return False
        if len(call.arguments) < self.min_arguments:
            return False
        return not any(arg.is_named or arg.is_unpacked for arg in call.arguments)

    def _target_class(self, call: CallSite, resolver: NameResolver) -> str | None:
        if call.relative_scope is not None:
            enclosing = call.enclosing
            if enclosing is None:
                return None
            if call.relative_scope == "parent":
                return enclosing.parent_fqn
            return enclosing.fqn

        if call.class_ref is None:
            return None
        return resolver.resolve(call.class_ref.referenced_name)
