"""
Advisory rules

Report structural smells as diagnostics. Advisories never rename anything.
"""

from __future__ import annotations

from codegraph_naming.models import Declaration, DeclarationKind, Diagnostic, Severity
from codegraph_naming.policies.base import ModuleScope, NamingContext


class AdvisoryRule:
    """A scoped check producing at most one diagnostic per declaration."""

    name: str = ""
    description: str = ""
    message: str = ""
    kinds: frozenset[DeclarationKind] = frozenset({DeclarationKind.CLASS})
    scope: ModuleScope | None = None
    severity: Severity = Severity.WARNING

    def check(self, declaration: Declaration, context: NamingContext) -> Diagnostic | None:
        if declaration.kind not in self.kinds:
            return None
        if self.scope is not None and not self.scope.matches(context):
            return None
        return Diagnostic(
            rule=self.name,
            message=self.message,
            file_path=declaration.file_path,
            line=declaration.line,
            severity=self.severity,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class DomainActionAdvisory(AdvisoryRule):
    name = "domain-action"
    description = "Domain actions belong in application commands or aggregate methods"
    message = "Domain Actions should be removed. Move logic to Application Commands or Aggregate methods."
    scope = ModuleScope("Domain/Action")


ADVISORY_CATALOG: tuple[type[AdvisoryRule], ...] = (DomainActionAdvisory,)
