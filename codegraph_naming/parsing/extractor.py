"""
PHP symbol extraction

Walks a tree-sitter PHP tree and fills a SourceFile with:
- class-like declarations (with method parameter names)
- reference sites (imports, bare and qualified class names)
- call sites (new / static / instance method calls) with their arguments
"""

from __future__ import annotations

from tree_sitter import Node as TSNode

from codegraph_naming.core.names import RELATIVE_SCOPES, NameResolver
from codegraph_naming.logging import get_logger
from codegraph_naming.models import (
    ArgumentSite,
    CallKind,
    CallSite,
    Declaration,
    DeclarationKind,
    ReferenceKind,
    ReferenceSite,
    Span,
)
from codegraph_naming.parsing.ast_tree import AstTree
from codegraph_naming.parsing.source_file import SourceFile

logger = get_logger(__name__)

CLASS_LIKE_NODES = {
    "class_declaration": DeclarationKind.CLASS,
    "interface_declaration": DeclarationKind.INTERFACE,
    "trait_declaration": DeclarationKind.TRAIT,
    "enum_declaration": DeclarationKind.ENUM,
}

# Parents under which a name/qualified_name always denotes a class-like
REFERENCE_PARENTS = frozenset(
    {
        "named_type",
        "object_creation_expression",
        "base_clause",
        "class_interface_clause",
        "use_declaration",  # trait use inside a class body
        "attribute",
    }
)

# Parents where only the `scope` field denotes a class-like
SCOPE_FIELD_PARENTS = frozenset({"scoped_call_expression", "scoped_property_access_expression"})

CLASS_NAME_NODES = frozenset({"name", "qualified_name"})

PARAMETER_NODES = frozenset({"simple_parameter", "property_promotion_parameter", "variadic_parameter"})

CALL_NODES = {
    "object_creation_expression": CallKind.NEW,
    "scoped_call_expression": CallKind.STATIC,
    "member_call_expression": CallKind.METHOD,
    "nullsafe_member_call_expression": CallKind.METHOD,
}

RESERVED_TYPE_NAMES = RELATIVE_SCOPES | frozenset(
    {"array", "bool", "callable", "false", "float", "int", "iterable", "mixed", "never", "null", "object", "string", "true", "void"}
)


def _span(node: TSNode) -> Span:
    return Span(node.start_byte, node.end_byte)


def _same(a: TSNode | None, b: TSNode | None) -> bool:
    if a is None or b is None:
        return False
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte and a.type == b.type


def _has_keyword(node: TSNode, *keywords: str) -> bool:
    return any(not child.is_named and child.type.lower() in keywords for child in node.children)


class PhpSymbolExtractor:
    """
    Fills a SourceFile from its parsed tree.

    Usage:
        tree = AstTree.parse(source)
        PhpSymbolExtractor(tree).extract()
        source.declarations, source.references, source.calls
    """

    def __init__(self, tree: AstTree):
        self.tree = tree
        self.source = tree.source
        self._refs_by_span: dict[tuple[int, int], ReferenceSite] = {}
        self._pending_class_refs: list[tuple[CallSite, tuple[int, int]]] = []

    def extract(self) -> SourceFile:
        namespace = ""
        namespaces: list[str] = []

        for child in self.tree.root.children:
            if child.type == "namespace_definition":
                name_node = child.child_by_field_name("name")
                ns = self._text(name_node) if name_node is not None else ""
                namespaces.append(ns)
                body = child.child_by_field_name("body")
                if body is None:
                    # `namespace Foo;` applies to the following siblings
                    namespace = ns
                else:
                    self._scan(body, ns)
                continue
            self._scan(child, namespace)

        self.source.namespace = namespaces[0] if namespaces else ""

        for call, key in self._pending_class_refs:
            call.class_ref = self._refs_by_span.get(key)

        self._resolve_parents()

        logger.debug(
            "symbols_extracted",
            file=str(self.source.file_path),
            declarations=len(self.source.declarations),
            references=len(self.source.references),
            calls=len(self.source.calls),
        )
        return self.source

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _scan(self, node: TSNode, namespace: str) -> None:
        stack: list[tuple[TSNode, Declaration | None]] = [(node, None)]

        while stack:
            current, enclosing = stack.pop()
            node_type = current.type

            if node_type == "namespace_use_declaration":
                self._collect_imports(current, namespace)
                continue

            if node_type in CLASS_NAME_NODES:
                self._maybe_reference(current, namespace)
                if node_type == "qualified_name":
                    continue

            if node_type in CLASS_LIKE_NODES:
                declaration = self._declaration(current, namespace)
                if declaration is not None:
                    enclosing = declaration
            elif node_type == "anonymous_class":
                enclosing = None
            elif node_type == "method_declaration" and enclosing is not None:
                self._record_method(current, enclosing)
            elif node_type in CALL_NODES:
                self._call(current, CALL_NODES[node_type], namespace, enclosing)

            for child in reversed(current.children):
                stack.append((child, enclosing))

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _declaration(self, node: TSNode, namespace: str) -> Declaration | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None

        kind = CLASS_LIKE_NODES[node.type]
        short_name = self._text(name_node)

        parent_name = None
        if kind == DeclarationKind.CLASS:
            for child in node.named_children:
                if child.type == "base_clause":
                    parents = [c for c in child.named_children if c.type in CLASS_NAME_NODES]
                    if parents:
                        parent_name = self._text(parents[0])
                    break

        declaration = Declaration(
            short_name=short_name,
            module_path=namespace,
            kind=kind,
            file_path=self.source.file_path,
            is_abstract=any(child.type == "abstract_modifier" for child in node.children),
            parent_name=parent_name,
            name_span=_span(name_node),
            line=node.start_point[0] + 1,
            owns_file=self.source.file_path.stem == short_name,
        )
        self.source.declarations.append(declaration)
        return declaration

    def _record_method(self, node: TSNode, enclosing: Declaration) -> None:
        name_node = node.child_by_field_name("name")
        params_node = node.child_by_field_name("parameters")
        if name_node is None or params_node is None:
            return

        names: list[str] = []
        for param in params_node.named_children:
            if param.type not in PARAMETER_NODES:
                continue
            if param.type == "variadic_parameter":
                # Cannot be targeted by a named argument
                break
            var = param.child_by_field_name("name")
            if var is None:
                break
            names.append(self._text(var).lstrip("&").strip().lstrip("$"))

        enclosing.methods[self._text(name_node).lower()] = names

    def _resolve_parents(self) -> None:
        resolvers: dict[str, NameResolver] = {}
        for declaration in self.source.declarations:
            if declaration.parent_name is None:
                continue
            resolver = resolvers.get(declaration.module_path)
            if resolver is None:
                resolver = NameResolver.from_references(declaration.module_path, self.source.references)
                resolvers[declaration.module_path] = resolver
            declaration.parent_fqn = resolver.resolve(declaration.parent_name)

    # ------------------------------------------------------------------
    # Imports and references
    # ------------------------------------------------------------------

    def _collect_imports(self, node: TSNode, namespace: str) -> None:
        if _has_keyword(node, "function", "const"):
            return

        group_prefix = None
        for child in node.named_children:
            if child.type == "namespace_name":
                group_prefix = self._text(child)
            elif child.type == "namespace_use_clause":
                self._import_clause(child, namespace, None)
            elif child.type == "namespace_use_group":
                for clause in child.named_children:
                    if clause.type not in ("namespace_use_clause", "namespace_use_group_clause"):
                        continue
                    if _has_keyword(clause, "function", "const"):
                        continue
                    self._import_clause(clause, namespace, group_prefix)

    def _import_clause(self, clause: TSNode, namespace: str, group_prefix: str | None) -> None:
        alias_node = clause.child_by_field_name("alias")
        target = None

        for child in clause.named_children:
            if _same(child, alias_node):
                continue
            if child.type in ("name", "qualified_name", "namespace_name") and target is None:
                target = child
            elif child.type == "namespace_aliasing_clause":
                alias_node = next((c for c in child.named_children if c.type == "name"), None)
            elif child.type == "name" and alias_node is None:
                alias_node = child

        if target is None:
            return

        site = ReferenceSite(
            referenced_name=self._text(target),
            kind=ReferenceKind.IMPORT,
            owner_file_path=self.source.file_path,
            span=_span(target),
            namespace=namespace,
            alias_name=self._text(alias_node) if alias_node is not None else None,
            alias_span=_span(alias_node) if alias_node is not None else None,
            group_prefix=group_prefix,
        )
        self.source.references.append(site)

    def _maybe_reference(self, node: TSNode, namespace: str) -> None:
        if not self._is_class_reference(node):
            return

        text = self._text(node)
        if text.lower() in RESERVED_TYPE_NAMES:
            return

        site = ReferenceSite(
            referenced_name=text,
            kind=ReferenceKind.QUALIFIED if "\\" in text else ReferenceKind.NAME,
            owner_file_path=self.source.file_path,
            span=_span(node),
            namespace=namespace,
        )
        self.source.references.append(site)
        self._refs_by_span[(node.start_byte, node.end_byte)] = site

    def _is_class_reference(self, node: TSNode) -> bool:
        parent = node.parent
        if parent is None:
            return False

        parent_type = parent.type
        if parent_type in REFERENCE_PARENTS:
            return True
        if parent_type in SCOPE_FIELD_PARENTS:
            return _same(parent.child_by_field_name("scope"), node)
        if parent_type == "class_constant_access_expression":
            named = parent.named_children
            return bool(named) and _same(named[0], node)
        if parent_type == "binary_expression":
            named = parent.named_children
            return _has_keyword(parent, "instanceof") and bool(named) and _same(named[-1], node)
        return False

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def _call(self, node: TSNode, kind: CallKind, namespace: str, enclosing: Declaration | None) -> None:
        arguments_node = node.child_by_field_name("arguments")
        if arguments_node is None:
            arguments_node = next((c for c in node.named_children if c.type == "arguments"), None)
        if arguments_node is None:
            return

        call = CallSite(
            kind=kind,
            arguments_span=_span(arguments_node),
            arguments=self._arguments(arguments_node),
            namespace=namespace,
            enclosing=enclosing,
            line_indent=self._line_indent(node.start_byte),
            multiline=arguments_node.start_point[0] != arguments_node.end_point[0],
            has_comments=any(c.type == "comment" for c in arguments_node.children),
        )

        if kind == CallKind.NEW:
            designator = next(
                (c for c in node.named_children if c.type in CLASS_NAME_NODES or c.type == "relative_scope"),
                None,
            )
            if designator is None:
                # anonymous class or dynamic `new $class`
                return
            self._bind_class(call, designator)
        elif kind == CallKind.STATIC:
            scope = node.child_by_field_name("scope")
            name_node = node.child_by_field_name("name")
            if scope is None or name_node is None or name_node.type != "name":
                return
            call.method_name = self._text(name_node)
            if scope.type in CLASS_NAME_NODES or scope.type == "relative_scope":
                self._bind_class(call, scope)
        else:
            name_node = node.child_by_field_name("name")
            if name_node is not None and name_node.type == "name":
                call.method_name = self._text(name_node)

        self.source.calls.append(call)

    def _bind_class(self, call: CallSite, node: TSNode) -> None:
        text = self._text(node)
        if node.type == "relative_scope" or text.lower() in RELATIVE_SCOPES:
            call.relative_scope = text.lower()
        else:
            self._pending_class_refs.append((call, (node.start_byte, node.end_byte)))

    def _arguments(self, node: TSNode) -> list[ArgumentSite]:
        arguments = []
        for child in node.named_children:
            if child.type == "variadic_placeholder":
                arguments.append(ArgumentSite(span=_span(child), is_unpacked=True))
            elif child.type == "argument":
                name_node = child.child_by_field_name("name")
                arguments.append(
                    ArgumentSite(
                        span=_span(child),
                        is_named=name_node is not None,
                        is_unpacked=any(c.type == "variadic_unpacking" for c in child.children),
                        name=self._text(name_node) if name_node is not None else None,
                    )
                )
        return arguments

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _text(self, node: TSNode) -> str:
        return self.tree.get_text(node)

    def _line_indent(self, offset: int) -> str:
        content = self.source.content
        line_start = content.rfind(b"\n", 0, offset) + 1
        indent = bytearray()
        for byte in content[line_start:offset]:
            if byte in (0x20, 0x09):
                indent.append(byte)
            else:
                break
        return indent.decode(self.source.encoding)
