"""
RenameSession / SymbolRenameCoordinator Tests

Sources and sites are built by hand so the coordinator is tested without
the parser.
"""

from pathlib import Path

import pytest

from codegraph_naming.core.coordinator import RenameSession, SymbolRenameCoordinator
from codegraph_naming.errors import SessionStateError
from codegraph_naming.models import (
    Declaration,
    DeclarationKind,
    ReferenceKind,
    ReferenceSite,
    Span,
)
from codegraph_naming.parsing.source_file import SourceFile
from codegraph_naming.policies.class_like import AbstractPrefixPolicy, InterfaceSuffixPolicy
from codegraph_naming.policies.domain import ValueObjectPolicy

ENTITY = "<?php\nnamespace App\\Domain;\n\nabstract class Entity {}\n"


def span_of(text: str, needle: str) -> Span:
    start = text.index(needle)
    return Span(start, start + len(needle))


@pytest.fixture
def entity(tmp_path):
    """(declaration, source) for an abstract class that owns its file."""
    path = tmp_path / "src" / "Domain" / "Entity.php"
    path.parent.mkdir(parents=True)
    path.write_text(ENTITY)

    source = SourceFile.from_content(path, ENTITY, root=tmp_path)
    name_start = ENTITY.index("Entity {")
    declaration = Declaration(
        short_name="Entity",
        module_path="App\\Domain",
        kind=DeclarationKind.CLASS,
        file_path=path,
        is_abstract=True,
        name_span=Span(name_start, name_start + len("Entity")),
        line=4,
        owns_file=True,
    )
    source.declarations.append(declaration)
    return declaration, source


@pytest.fixture
def session():
    return RenameSession()


class TestApply:
    def test_rename_updates_every_view(self, session, entity):
        declaration, source = entity
        session.table.add(declaration)
        old_path = declaration.file_path

        record = SymbolRenameCoordinator(session).apply(declaration, "AbstractEntity", AbstractPrefixPolicy(), source)

        assert record.old_fqn == "App\\Domain\\Entity"
        assert record.new_fqn == "App\\Domain\\AbstractEntity"
        assert record.new_path == old_path.with_name("AbstractEntity.php")
        assert record.policy == "abstract-prefix"

        assert declaration.short_name == "AbstractEntity"
        assert "abstract class AbstractEntity {}" in source.render()
        assert session.registry.lookup("App\\Domain\\Entity") == "App\\Domain\\AbstractEntity"
        assert session.table.get("App\\Domain\\AbstractEntity") is declaration
        assert session.planner.planned == {old_path: old_path.with_name("AbstractEntity.php")}
        assert session.records == [record]

    @pytest.mark.parametrize("new_name", [None, "Entity"])
    def test_no_verdict_is_noop(self, session, entity, new_name):
        declaration, source = entity

        assert SymbolRenameCoordinator(session).apply(declaration, new_name, AbstractPrefixPolicy(), source) is None
        assert source.modified is False
        assert len(session.registry) == 0

    def test_file_not_owned_is_not_moved(self, session, entity):
        declaration, source = entity
        declaration.owns_file = False

        record = SymbolRenameCoordinator(session).apply(declaration, "AbstractEntity", AbstractPrefixPolicy(), source)

        assert record.new_path is None
        assert len(session.planner) == 0

    def test_collision_with_existing_declaration(self, session, entity):
        declaration, source = entity
        session.table.add(declaration)
        session.table.add(
            Declaration(
                short_name="AbstractEntity",
                module_path="App\\Domain",
                kind=DeclarationKind.CLASS,
                file_path=declaration.file_path.with_name("AbstractEntity.php"),
            )
        )

        record = SymbolRenameCoordinator(session).apply(declaration, "AbstractEntity", AbstractPrefixPolicy(), source)

        assert record is None
        assert declaration.short_name == "Entity"
        assert source.modified is False
        assert len(session.planner) == 0
        assert len(session.diagnostics) == 1
        assert "already declared" in session.diagnostics[0].message

    def test_chained_renames_collapse(self, session, tmp_path):
        path = tmp_path / "UserDirectory.php"
        text = "<?php\ninterface UserDirectory {}\n"
        path.write_text(text)
        source = SourceFile.from_content(path, text)
        declaration = Declaration(
            short_name="UserDirectory",
            module_path="App\\Contract",
            kind=DeclarationKind.INTERFACE,
            file_path=path,
            name_span=span_of(text, "UserDirectory"),
            owns_file=True,
        )
        session.table.add(declaration)
        coordinator = SymbolRenameCoordinator(session)
        policy = InterfaceSuffixPolicy()

        coordinator.apply(declaration, "UserDirectoryInterface", policy, source)
        coordinator.apply(declaration, "UserProviderInterface", policy, source)

        assert session.registry.as_mapping() == {
            "App\\Contract\\UserDirectory": "App\\Contract\\UserProviderInterface",
            "App\\Contract\\UserDirectoryInterface": "App\\Contract\\UserProviderInterface",
        }
        assert session.planner.planned == {path: path.with_name("UserProviderInterface.php")}
        assert source.render() == "<?php\ninterface UserProviderInterface {}\n"


class TestEagerReferences:
    TEXT = (
        "<?php\n"
        "namespace App\\ValueObject;\n"
        "\n"
        "use App\\ValueObject\\MoneyValue as AmountValue;\n"
        "\n"
        "final class PriceValue\n"
        "{\n"
        "    private AmountValue $amount;\n"
        "}\n"
    )

    @pytest.fixture
    def price(self):
        text = self.TEXT
        path = Path("src/ValueObject/PriceValue.php")
        source = SourceFile.from_content(path, text)

        import_start = text.index("App\\ValueObject\\MoneyValue")
        alias_start = text.index("AmountValue;")
        property_start = text.index("AmountValue $amount")
        source.references = [
            ReferenceSite(
                referenced_name="App\\ValueObject\\MoneyValue",
                kind=ReferenceKind.IMPORT,
                owner_file_path=path,
                span=Span(import_start, import_start + len("App\\ValueObject\\MoneyValue")),
                namespace="App\\ValueObject",
                alias_name="AmountValue",
                alias_span=Span(alias_start, alias_start + len("AmountValue")),
            ),
            ReferenceSite(
                referenced_name="AmountValue",
                kind=ReferenceKind.NAME,
                owner_file_path=path,
                span=Span(property_start, property_start + len("AmountValue")),
                namespace="App\\ValueObject",
            ),
        ]
        declaration = Declaration(
            short_name="PriceValue",
            module_path="App\\ValueObject",
            kind=DeclarationKind.CLASS,
            file_path=path,
            name_span=span_of(text, "PriceValue"),
        )
        money = Declaration(
            short_name="MoneyValue",
            module_path="App\\ValueObject",
            kind=DeclarationKind.CLASS,
            file_path=path.with_name("MoneyValue.php"),
        )
        return declaration, money, source

    def test_imports_aliases_and_names_follow_the_pattern(self, session, price):
        declaration, money, source = price
        session.table.add(declaration)
        session.table.add(money)

        SymbolRenameCoordinator(session).apply(declaration, "Price", ValueObjectPolicy(), source)

        rendered = source.render()
        assert "use App\\ValueObject\\Money as Amount;" in rendered
        assert "final class Price\n" in rendered
        assert "private Amount $amount;" in rendered
        assert source.references[0].alias_name == "Amount"

    def test_unknown_targets_are_left_alone(self, session, price):
        declaration, _, source = price
        session.table.add(declaration)

        SymbolRenameCoordinator(session).apply(declaration, "Price", ValueObjectPolicy(), source)

        rendered = source.render()
        assert "use App\\ValueObject\\MoneyValue as AmountValue;" in rendered
        assert "private AmountValue $amount;" in rendered

    def test_name_owned_by_another_declaration_is_not_guessed(self, session, price):
        declaration, money, source = price
        session.table.add(declaration)
        session.table.add(money)
        session.table.add(
            Declaration(
                short_name="Money",
                module_path="App\\ValueObject",
                kind=DeclarationKind.CLASS,
                file_path=Path("src/ValueObject/Money.php"),
            )
        )

        SymbolRenameCoordinator(session).apply(declaration, "Price", ValueObjectPolicy(), source)

        rendered = source.render()
        # The alias is a local name and still follows the pattern
        assert "use App\\ValueObject\\MoneyValue as Amount;" in rendered
        assert "private Amount $amount;" in rendered

    def test_name_claimed_by_another_rename_is_not_guessed(self, session, price):
        declaration, money, source = price
        session.table.add(declaration)
        session.table.add(money)
        session.registry.register("App\\ValueObject\\Cash", "App\\ValueObject\\Money")

        SymbolRenameCoordinator(session).apply(declaration, "Price", ValueObjectPolicy(), source)

        assert "use App\\ValueObject\\MoneyValue as Amount;" in source.render()

    def test_non_eager_policy_leaves_references(self, session, price):
        declaration, money, source = price
        session.table.add(declaration)
        session.table.add(money)

        SymbolRenameCoordinator(session).apply(declaration, "AbstractPriceValue", AbstractPrefixPolicy(), source)

        assert source.edit_count == 1


class TestFinalize:
    def test_apply_mode_moves_files(self, entity):
        declaration, source = entity
        old_path = declaration.file_path

        with RenameSession(dry_run=False) as session:
            SymbolRenameCoordinator(session).apply(declaration, "AbstractEntity", AbstractPrefixPolicy(), source)

        assert session.finalized is True
        assert session.commit_report.applied == [(old_path, old_path.with_name("AbstractEntity.php"))]
        assert old_path.with_name("AbstractEntity.php").exists()
        assert not old_path.exists()

    def test_dry_run_discards(self, entity):
        declaration, source = entity
        old_path = declaration.file_path

        with RenameSession(dry_run=True) as session:
            SymbolRenameCoordinator(session).apply(declaration, "AbstractEntity", AbstractPrefixPolicy(), source)

        assert session.commit_report.discarded == [(old_path, old_path.with_name("AbstractEntity.php"))]
        assert old_path.exists()

    def test_finalize_runs_once(self, session, entity):
        declaration, source = entity
        SymbolRenameCoordinator(session).apply(declaration, "AbstractEntity", AbstractPrefixPolicy(), source)

        first = session.finalize(dry_run=True)
        second = session.finalize(dry_run=False)

        assert second is first
        assert declaration.file_path.exists()

    def test_apply_after_finalize_raises(self, session, entity):
        declaration, source = entity
        session.finalize()

        with pytest.raises(SessionStateError) as exc_info:
            SymbolRenameCoordinator(session).apply(declaration, "AbstractEntity", AbstractPrefixPolicy(), source)

        assert exc_info.value.code == "SESSION_STATE"

    def test_exception_in_context_aborts(self, entity):
        declaration, source = entity

        with pytest.raises(RuntimeError):
            with RenameSession(dry_run=False) as session:
                SymbolRenameCoordinator(session).apply(declaration, "AbstractEntity", AbstractPrefixPolicy(), source)
                raise RuntimeError("boom")

        assert session.finalized is True
        assert session.commit_report.applied == []
        assert len(session.commit_report.discarded) == 1
        assert declaration.file_path.exists()
