"""
Naming policy catalog

The catalog order is the pass order of a run: class-like conventions first,
then the scoped domain conventions. A declaration may be renamed by several
passes (UserDirectory -> UserDirectoryInterface -> UserProviderInterface);
the registry collapses the chain.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from codegraph_naming.errors import UnknownPolicyError
from codegraph_naming.policies.advisories import ADVISORY_CATALOG, AdvisoryRule, DomainActionAdvisory
from codegraph_naming.policies.base import (
    ModuleScope,
    NamingContext,
    NamingPolicy,
    PrefixPolicy,
    SuffixPolicy,
    SuffixReplacementPolicy,
)
from codegraph_naming.policies.class_like import (
    AbstractPrefixPolicy,
    ExceptionSuffixPolicy,
    InterfaceSuffixPolicy,
    TraitSuffixPolicy,
)
from codegraph_naming.policies.domain import (
    AggregatePolicy,
    DataTransferObjectPolicy,
    DirectoryProviderPolicy,
    QueryPolicy,
    ReadModelPolicy,
    RepositoryImplementationPolicy,
    ServiceSuffixPolicy,
    SpecificationPolicy,
    ValueObjectPolicy,
)

if TYPE_CHECKING:
    from codegraph_naming.config import NamingSettings

POLICY_CATALOG: tuple[type[NamingPolicy], ...] = (
    AbstractPrefixPolicy,
    InterfaceSuffixPolicy,
    TraitSuffixPolicy,
    ExceptionSuffixPolicy,
    ValueObjectPolicy,
    RepositoryImplementationPolicy,
    SpecificationPolicy,
    QueryPolicy,
    ReadModelPolicy,
    ServiceSuffixPolicy,
    DataTransferObjectPolicy,
    AggregatePolicy,
    DirectoryProviderPolicy,
)


def policy_names() -> list[str]:
    return [policy.name for policy in POLICY_CATALOG]


def _select(names: list[str] | None, disabled: list[str], catalog_names: list[str], kind: str) -> set[str]:
    known = set(catalog_names)
    for name in [*(names or []), *disabled]:
        if name not in known:
            raise UnknownPolicyError(f"Unknown {kind}: {name}", name=name, available=sorted(known))
    selected = set(catalog_names) if names is None else set(names)
    return selected - set(disabled)


def build_policies(settings: NamingSettings) -> list[NamingPolicy]:
    """
    Instantiate the enabled policies in catalog order.

    Raises:
        UnknownPolicyError: a configured name is not in the catalog
    """
    config = settings.policies
    advisory_names = [rule.name for rule in ADVISORY_CATALOG]
    selected = _select(
        [n for n in config.enabled if n not in advisory_names] if config.enabled is not None else None,
        [n for n in config.disabled if n not in advisory_names],
        policy_names(),
        "policy",
    )

    policies: list[NamingPolicy] = []
    for policy_cls in POLICY_CATALOG:
        if policy_cls.name not in selected:
            continue
        if policy_cls is RepositoryImplementationPolicy:
            policies.append(RepositoryImplementationPolicy(prefix=config.repository_prefix))
        else:
            policies.append(policy_cls())
    return policies


def build_advisories(settings: NamingSettings) -> list[AdvisoryRule]:
    """Advisory rules enabled by the settings (honours enabled/disabled names)."""
    config = settings.policies
    if not config.advisories:
        return []

    rules = []
    for rule_cls in ADVISORY_CATALOG:
        if rule_cls.name in config.disabled:
            continue
        if config.enabled is not None and rule_cls.name not in config.enabled:
            continue
        rules.append(rule_cls())
    return rules


__all__ = [
    "POLICY_CATALOG",
    "ADVISORY_CATALOG",
    "build_policies",
    "build_advisories",
    "policy_names",
    "NamingContext",
    "ModuleScope",
    "NamingPolicy",
    "PrefixPolicy",
    "SuffixPolicy",
    "SuffixReplacementPolicy",
    "AdvisoryRule",
    "DomainActionAdvisory",
    "AbstractPrefixPolicy",
    "InterfaceSuffixPolicy",
    "TraitSuffixPolicy",
    "ExceptionSuffixPolicy",
    "ValueObjectPolicy",
    "RepositoryImplementationPolicy",
    "SpecificationPolicy",
    "QueryPolicy",
    "ReadModelPolicy",
    "ServiceSuffixPolicy",
    "DataTransferObjectPolicy",
    "AggregatePolicy",
    "DirectoryProviderPolicy",
]
