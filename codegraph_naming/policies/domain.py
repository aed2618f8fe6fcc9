"""
Domain-driven design naming conventions

Each policy is scoped to a module path. Matching `use` clauses, aliases and
bare names in the renamed declaration's file are rewritten eagerly.
"""

from __future__ import annotations

import re

from codegraph_naming.models import Declaration, DeclarationKind
from codegraph_naming.policies.base import (
    ModuleScope,
    NamingContext,
    NamingPolicy,
    SuffixReplacementPolicy,
)

TECHNOLOGY_PREFIXES = (
    "Eloquent",
    "Redis",
    "Memory",
    "InMemory",
    "File",
    "Database",
    "Cache",
    "Cached",
    "Mock",
    "Fake",
    "Stub",
    "Null",
)


class ValueObjectPolicy(NamingPolicy):
    """MoneyValue -> Money. Identifier value objects (UserIdValue) keep the suffix."""

    name = "value-object"
    description = "Value objects drop the 'Value' suffix"
    scope = ModuleScope("ValueObject")
    eager_references = True

    SUFFIX = "Value"

    def transform(self, name: str) -> str | None:
        stem = name
        # MoneyValueValue -> Money in one step
        while stem.endswith(self.SUFFIX) and stem != self.SUFFIX:
            stem = stem[: -len(self.SUFFIX)]
        if stem == name or stem.endswith("Id"):
            return None
        return stem


class RepositoryImplementationPolicy(NamingPolicy):
    """OrderRepository -> EloquentOrderRepository unless a technology prefix is present."""

    name = "repository-implementation"
    description = "Repository implementations carry a technology prefix"
    scope = ModuleScope("Infrastructure/Repository")
    eager_references = True

    SUFFIX = "Repository"

    def __init__(self, prefix: str = "Eloquent", known_prefixes: tuple[str, ...] = TECHNOLOGY_PREFIXES):
        self.prefix = prefix
        self.known_prefixes = tuple(dict.fromkeys((*known_prefixes, prefix)))

    def transform(self, name: str) -> str | None:
        if not name.endswith(self.SUFFIX):
            return None
        if name.startswith(self.known_prefixes):
            return None
        return f"{self.prefix}{name}"


class SpecificationPolicy(SuffixReplacementPolicy):
    name = "specification"
    description = "Specifications end with 'Specification'"
    scope = ModuleScope("Specification")
    eager_references = True
    replacements = (("Spec", "Specification"), ("Rule", "Specification"))
    default_suffix = "Specification"


class QueryPolicy(NamingPolicy):
    """
    Queries read as `Get...Query`.

    A literal table is consulted first, then a leading verb is decomposed
    (ValidateXQuery -> GetXValidationQuery); anything else gets a `Get` prefix.
    """

    name = "query"
    description = "Queries start with 'Get'"
    scope = ModuleScope("Application/Query")
    eager_references = True

    OVERRIDES = {
        "ValidateUserHierarchyQuery": "GetUserHierarchyValidationQuery",
        "ValidateMetadataQuery": "GetMetadataValidationQuery",
        "CalculateRateQuery": "GetRateCalculationQuery",
        "CalculateBulkRatesQuery": "GetBulkRatesCalculationQuery",
        "IsAssignedToUserQuery": "GetUserAssignmentQuery",
        "IsAssignedToTeamQuery": "GetTeamAssignmentQuery",
        "IsAssignedToOrganizationQuery": "GetOrganizationAssignmentQuery",
        "CheckBusinessUnitAssignmentLimitQuery": "GetBusinessUnitAssignmentLimitQuery",
    }

    VERB_MEANINGS = {
        "Validate": "Validation",
        "Calculate": "Calculation",
        "Check": "Check",
        "Is": "Status",
    }

    VERB_PATTERN = re.compile(r"^(Validate|Calculate|Check|Is)(.+)Query$")

    def transform(self, name: str) -> str | None:
        if not name.endswith("Query") or name.startswith("Get"):
            return None

        override = self.OVERRIDES.get(name)
        if override is not None:
            return override

        match = self.VERB_PATTERN.match(name)
        if match:
            verb, noun = match.groups()
            return f"Get{noun}{self.VERB_MEANINGS[verb]}Query"

        return f"Get{name}"


class ReadModelPolicy(SuffixReplacementPolicy):
    name = "read-model"
    description = "Read models drop the 'ReadModel' suffix"
    scope = ModuleScope("ReadModel")
    eager_references = True
    replacements = (("ReadModel", ""),)


class ServiceSuffixPolicy(SuffixReplacementPolicy):
    name = "service-suffix"
    description = "'DomainService'/'ApplicationService' become 'Service'"
    scope = ModuleScope("Service")
    eager_references = True
    replacements = (("DomainService", "Service"), ("ApplicationService", "Service"))


class DataTransferObjectPolicy(SuffixReplacementPolicy):
    name = "data-transfer-object"
    description = "Data transfer objects end with 'Data'"
    scope = ModuleScope("DataTransferObject")
    eager_references = True
    replacements = (("DataTransferObject", "Data"), ("DTO", "Data"))
    default_suffix = "Data"


class AggregatePolicy(SuffixReplacementPolicy):
    name = "aggregate"
    description = "Aggregate roots are named '...Aggregate'"
    scope = ModuleScope("Domain/Aggregate")
    eager_references = True
    replacements = (("AggregateRoot", "Aggregate"),)

    def accepts(self, declaration: Declaration, context: NamingContext) -> bool:
        return not declaration.is_abstract and declaration.short_name != "AbstractAggregateRoot"

    def transform(self, name: str) -> str | None:
        if name == "AbstractAggregateRoot":
            return None
        return super().transform(name)


class DirectoryProviderPolicy(SuffixReplacementPolicy):
    name = "directory-provider"
    description = "'DirectoryInterface' contracts become 'ProviderInterface'"
    kinds = frozenset({DeclarationKind.INTERFACE})
    scope = ModuleScope("SharedKernel/Domain/Contract")
    eager_references = True
    replacements = (("DirectoryInterface", "ProviderInterface"),)
