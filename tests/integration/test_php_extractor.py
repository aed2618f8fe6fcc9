"""
PhpSymbolExtractor Tests (real tree-sitter parse)
"""

from textwrap import dedent

import pytest

from codegraph_naming.models import CallKind, DeclarationKind, ReferenceKind
from codegraph_naming.parsing.ast_tree import AstTree
from codegraph_naming.parsing.extractor import PhpSymbolExtractor
from codegraph_naming.parsing.source_file import SourceFile


def extract(path: str, code: str) -> SourceFile:
    source = SourceFile.from_content(path, dedent(code).lstrip("\n"))
    return PhpSymbolExtractor(AstTree.parse(source)).extract()


ENTITY = """
<?php
namespace App\\Domain;

use App\\Base\\Model;
use App\\Shared\\ValueObject\\MoneyValue;
use App\\Shared\\{Clock, Id as Identifier};

abstract class Entity extends Model
{
    public function __construct(private Identifier $id, string $name, ...$rest)
    {
    }

    public static function create(MoneyValue $price, Clock $clock): void
    {
        $money = new MoneyValue(amount: 1, currency: 'EUR');
        $copy = MoneyValue::of(1, 'EUR');
        $this->touch($clock, ...$price->parts());
    }
}

interface Countable {}

trait Timestamps {}
"""


@pytest.fixture
def entity_source():
    return extract("src/Domain/Entity.php", ENTITY)


class TestDeclarations:
    def test_namespace(self, entity_source):
        assert entity_source.namespace == "App\\Domain"

    def test_class_like_kinds(self, entity_source):
        kinds = {d.short_name: d.kind for d in entity_source.declarations}

        assert kinds == {
            "Entity": DeclarationKind.CLASS,
            "Countable": DeclarationKind.INTERFACE,
            "Timestamps": DeclarationKind.TRAIT,
        }

    def test_class_details(self, entity_source):
        entity = entity_source.declarations[0]

        assert entity.fqn == "App\\Domain\\Entity"
        assert entity.is_abstract is True
        assert entity.parent_name == "Model"
        assert entity.parent_fqn == "App\\Base\\Model"
        assert entity.owns_file is True
        assert entity.line == 8
        assert entity_source.get_text(entity.name_span) == "Entity"

    def test_only_the_matching_declaration_owns_the_file(self, entity_source):
        owners = [d.short_name for d in entity_source.declarations if d.owns_file]

        assert owners == ["Entity"]

    def test_method_parameters(self, entity_source):
        entity = entity_source.declarations[0]

        # Variadic parameters cannot be named
        assert entity.methods["__construct"] == ["id", "name"]
        assert entity.methods["create"] == ["price", "clock"]


class TestReferences:
    def test_imports(self, entity_source):
        imports = [r for r in entity_source.references if r.kind == ReferenceKind.IMPORT]
        by_local = {r.local_name: r for r in imports}

        assert by_local["Model"].imported_fqn == "App\\Base\\Model"
        assert by_local["MoneyValue"].imported_fqn == "App\\Shared\\ValueObject\\MoneyValue"
        assert by_local["Clock"].imported_fqn == "App\\Shared\\Clock"
        assert by_local["Clock"].group_prefix == "App\\Shared"

        aliased = by_local["Identifier"]
        assert aliased.referenced_name == "Id"
        assert aliased.alias_name == "Identifier"
        assert entity_source.get_text(aliased.alias_span) == "Identifier"

    def test_class_names_in_code(self, entity_source):
        names = [r.referenced_name for r in entity_source.references if r.kind == ReferenceKind.NAME]

        assert "Model" in names
        assert "Identifier" in names
        assert names.count("MoneyValue") == 3
        assert "Clock" in names

    def test_scalar_types_are_not_references(self, entity_source):
        names = {r.referenced_name.lower() for r in entity_source.references}

        assert "string" not in names
        assert "void" not in names

    def test_qualified_names(self):
        source = extract(
            "src/Http/Controller.php",
            """
            <?php
            namespace App\\Http;

            final class Controller extends \\App\\Base\\Controller
            {
                public function show(): Domain\\User
                {
                    return \\App\\Domain\\User::find(1);
                }
            }
            """,
        )

        qualified = {r.referenced_name for r in source.references if r.kind == ReferenceKind.QUALIFIED}

        assert "\\App\\Domain\\User" in qualified
        assert "Domain\\User" in qualified


class TestCalls:
    def test_call_kinds(self, entity_source):
        kinds = [call.kind for call in entity_source.calls]

        assert kinds.count(CallKind.NEW) == 1
        assert kinds.count(CallKind.STATIC) == 1
        assert CallKind.METHOD in kinds

    def test_new_expression(self, entity_source):
        call = next(c for c in entity_source.calls if c.kind == CallKind.NEW)

        assert call.class_ref is not None
        assert call.class_ref.referenced_name == "MoneyValue"
        assert call.enclosing is entity_source.declarations[0]
        assert [a.name for a in call.arguments] == ["amount", "currency"]
        assert all(a.is_named for a in call.arguments)
        assert call.line_indent == "        "
        assert call.multiline is False

    def test_static_call(self, entity_source):
        call = next(c for c in entity_source.calls if c.kind == CallKind.STATIC)

        assert call.method_name == "of"
        assert call.class_ref.referenced_name == "MoneyValue"
        assert len(call.arguments) == 2
        assert not any(a.is_named for a in call.arguments)

    def test_unpacked_argument(self, entity_source):
        call = next(c for c in entity_source.calls if c.method_name == "touch")

        assert call.arguments[1].is_unpacked is True

    def test_relative_scope(self):
        source = extract(
            "src/Money.php",
            """
            <?php
            final class Money
            {
                public static function zero(): self
                {
                    return self::of(0, 'EUR');
                }
            }
            """,
        )

        call = source.calls[0]
        assert call.relative_scope == "self"
        assert call.class_ref is None
        assert call.enclosing.short_name == "Money"

    def test_multiline_arguments_are_flagged(self):
        source = extract(
            "src/Factory.php",
            """
            <?php
            $money = new Money(
                1,
                'EUR',
            );
            """,
        )

        assert source.calls[0].multiline is True


class TestSyntaxErrors:
    def test_broken_file_has_errors(self):
        source = SourceFile.from_content("src/Broken.php", "<?php\nabstract class Broken {\n    public function (\n")
        tree = AstTree.parse(source)

        assert tree.has_error() is True
        assert tree.get_errors()
