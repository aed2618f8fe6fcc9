"""
Naming Models

Declarations, reference sites, call sites and the records a run produces.
Sites carry byte spans into their source file; the tree they were extracted
from is not kept.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

NAMESPACE_SEPARATOR = "\\"


def normalize_fqn(name: str) -> str:
    """Strip the leading namespace separator of a fully qualified name."""
    return name.lstrip(NAMESPACE_SEPARATOR)


def qualify(module_path: str, short_name: str) -> str:
    """Join a namespace and a short name into a fully qualified name."""
    module_path = normalize_fqn(module_path).rstrip(NAMESPACE_SEPARATOR)
    if not module_path:
        return short_name
    return f"{module_path}{NAMESPACE_SEPARATOR}{short_name}"


def split_fqn(fqn: str) -> tuple[str, str]:
    """Split a fully qualified name into (namespace, short name)."""
    namespace, _, short_name = normalize_fqn(fqn).rpartition(NAMESPACE_SEPARATOR)
    return namespace, short_name


def short_name_of(name: str) -> str:
    return split_fqn(name)[1]


def fqn_key(fqn: str) -> str:
    """Lookup key for a fully qualified name (PHP class names are case-insensitive)."""
    return normalize_fqn(fqn).lower()


@dataclass(frozen=True)
class Span:
    """Half-open byte range [start, end) in a source file."""

    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Invalid span: {self.start} > {self.end}")

    def contains(self, other: Span) -> bool:
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: Span) -> bool:
        return self.start < other.end and other.start < self.end

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


class DeclarationKind(str, Enum):
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"


@dataclass(eq=False)
class Declaration:
    """
    A named top-level class-like declaration.

    Attributes:
        short_name: Current declared name (mutated in place on rename)
        module_path: Namespace the declaration lives in ("" for global)
        kind: class / interface / trait / enum
        file_path: File hosting the declaration on disk
        is_abstract: Declared with the abstract modifier
        parent_name: `extends` clause as written
        parent_fqn: `extends` clause resolved against the file's imports
        name_span: Byte range of the declared name
        line: 1-based line of the declaration
        methods: Method name (lowercase) -> ordered parameter names
        owns_file: File stem equals the declared name (PSR-4 1:1 mapping)
        planned_path: Destination of the planned file move, once planned
    """

    short_name: str
    module_path: str
    kind: DeclarationKind
    file_path: Path
    is_abstract: bool = False
    parent_name: str | None = None
    parent_fqn: str | None = None
    name_span: Span | None = None
    line: int = 0
    methods: dict[str, list[str]] = field(default_factory=dict)
    owns_file: bool = False
    planned_path: Path | None = None

    @property
    def fqn(self) -> str:
        return qualify(self.module_path, self.short_name)

    def __repr__(self) -> str:
        return f"Declaration({self.kind.value} {self.fqn} @ {self.file_path})"


class ReferenceKind(str, Enum):
    IMPORT = "import"  # use App\Foo [as Bar];
    NAME = "name"  # Foo
    QUALIFIED = "qualified"  # App\Foo, \App\Foo


@dataclass(eq=False)
class ReferenceSite:
    """
    An occurrence referring to a class-like declaration by name.

    `referenced_name` always holds the current text; rewriting a site updates
    it together with the queued source edit.
    """

    referenced_name: str
    kind: ReferenceKind
    owner_file_path: Path
    span: Span
    namespace: str = ""
    alias_name: str | None = None
    alias_span: Span | None = None
    group_prefix: str | None = None

    @property
    def local_name(self) -> str:
        """Name an import binds in its file (alias or last segment)."""
        if self.alias_name:
            return self.alias_name
        return short_name_of(self.referenced_name)

    @property
    def imported_fqn(self) -> str:
        """Fully qualified target of an import (group prefix applied)."""
        if self.group_prefix:
            return qualify(self.group_prefix, normalize_fqn(self.referenced_name))
        return normalize_fqn(self.referenced_name)


@dataclass(eq=False)
class ArgumentSite:
    span: Span
    is_named: bool = False
    is_unpacked: bool = False
    name: str | None = None


class CallKind(str, Enum):
    NEW = "new"
    STATIC = "static"
    METHOD = "method"


@dataclass(eq=False)
class CallSite:
    """
    A call expression whose argument list may be rewritten.

    Attributes:
        kind: new / static call / instance method call
        arguments_span: Byte range of the parenthesized argument list
        arguments: Individual arguments
        namespace: Enclosing namespace
        class_ref: Reference naming the class (new X / X::m), if any
        relative_scope: "self", "static" or "parent" when used instead of a name
        enclosing: Class-like declaration the call appears in
        method_name: Called method (static and instance calls)
        line_indent: Leading whitespace of the line the call starts on
        multiline: Argument list already spans several lines
        has_comments: Argument list contains comments
    """

    kind: CallKind
    arguments_span: Span
    arguments: list[ArgumentSite] = field(default_factory=list)
    namespace: str = ""
    class_ref: ReferenceSite | None = None
    relative_scope: str | None = None
    enclosing: Declaration | None = None
    method_name: str | None = None
    line_indent: str = ""
    multiline: bool = False
    has_comments: bool = False


@dataclass(frozen=True)
class RenameRecord:
    """One successful declaration rename."""

    old_fqn: str
    new_fqn: str
    old_path: Path
    new_path: Path | None
    policy: str


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """Advisory message attached to a file location."""

    rule: str
    message: str
    file_path: Path | None = None
    line: int = 0
    severity: Severity = Severity.WARNING
