"""Syntax tree nodes for witx documents.

Nodes are immutable and built bottom up by the parser. They describe the
source as written: identifiers are not resolved and types are not checked.

Sum types are represented by a family of classes. `DatatypeIdentSyntax` is
the base of the five datatype reference forms, while `TypedefSyntax`,
`DeclSyntax`, `TopLevelSyntax` and `ModuleDeclSyntax` are unions of the
node classes that can appear in those positions.
"""

__all__ = [
    "BuiltinType",
    "Id",
    "CommentSyntax",
    "Documented",
    "DatatypeIdentSyntax",
    "Builtin",
    "Array",
    "Pointer",
    "ConstPointer",
    "Ident",
    "EnumSyntax",
    "FlagsSyntax",
    "FieldSyntax",
    "StructSyntax",
    "UnionSyntax",
    "HandleSyntax",
    "TypedefSyntax",
    "TypenameSyntax",
    "ImportTypeSyntax",
    "ModuleImportSyntax",
    "InterfaceFuncSyntax",
    "ModuleDeclSyntax",
    "ModuleSyntax",
    "DeclSyntax",
    "UseSyntax",
    "TopLevelSyntax",
    "TopLevelDocument",
]

import enum
from dataclasses import dataclass, field

from ._error import Span


class BuiltinType(enum.Enum):
    """Built in scalar types, valued by their keyword."""
    STRING = "string"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    S8 = "s8"
    S16 = "s16"
    S32 = "s32"
    S64 = "s64"
    F32 = "f32"
    F64 = "f64"


@dataclass(frozen=True)
class Id:
    """An identifier, stored without its leading `$`.

    Field, param and result names may be written as strings instead, which
    `quoted` records. Identifiers compare by name only; the span and the
    written form are kept for diagnostics and rendering.
    """
    name: str
    span: Span | None = field(default=None, compare=False, repr=False)
    quoted: bool = field(default=False, compare=False)

    def __str__(self):
        if self.quoted:
            escaped = self.name.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return f"${self.name}"


@dataclass(frozen=True)
class CommentSyntax:
    """Comments directly preceding a construct, delimiters removed.

    Line comments lose their leading `;;` and block comments lose the
    surrounding `(;` and `;)`.
    """
    comments: tuple[str, ...] = ()

    def docs(self) -> str:
        """Normalized documentation text.

        Only doc comments count, which are the comments whose text starts
        with another `;` (so `;;;` lines and `(;; ... ;)` blocks). The
        smallest indentation among non-empty doc lines is removed from all
        of them, and every line is followed by a newline.
        """
        docs = []
        for comment in self.comments:
            comment = comment.rstrip()
            if comment.startswith(";"):
                docs.append(comment[1:])

        to_trim = min(
            (len(doc) - len(doc.lstrip()) for doc in docs if doc),
            default=0,
        )

        ret = []
        for doc in docs:
            if doc:
                ret.append(doc[to_trim:].rstrip())
            ret.append("\n")
        return "".join(ret)


@dataclass(frozen=True)
class Documented:
    """Any construct paired with the comments that preceded it."""
    comments: CommentSyntax
    item: object

    @property
    def docs(self) -> str:
        return self.comments.docs()


@dataclass(frozen=True)
class DatatypeIdentSyntax:
    """Base for references to a type."""


@dataclass(frozen=True)
class Builtin(DatatypeIdentSyntax):
    type: BuiltinType

    def __str__(self):
        return self.type.value


@dataclass(frozen=True)
class Array(DatatypeIdentSyntax):
    element: DatatypeIdentSyntax

    def __str__(self):
        return f"(array {self.element})"


@dataclass(frozen=True)
class Pointer(DatatypeIdentSyntax):
    pointee: DatatypeIdentSyntax

    def __str__(self):
        return f"(@witx pointer {self.pointee})"


@dataclass(frozen=True)
class ConstPointer(DatatypeIdentSyntax):
    pointee: DatatypeIdentSyntax

    def __str__(self):
        return f"(@witx const-pointer {self.pointee})"


@dataclass(frozen=True)
class Ident(DatatypeIdentSyntax):
    """Reference to a named type."""
    ident: Id

    def __str__(self):
        return str(self.ident)


@dataclass(frozen=True)
class EnumSyntax:
    """Enumeration with at least one member.

    Attributes:
        repr: (BuiltinType) Integer representation
        members: (tuple[Documented]) Documented `Id` members
    """
    repr: BuiltinType
    members: tuple[Documented, ...]


@dataclass(frozen=True)
class FlagsSyntax:
    """Bit flags, possibly with no flags at all.

    Attributes:
        repr: (BuiltinType) Integer representation
        flags: (tuple[Documented]) Documented `Id` flag names
    """
    repr: BuiltinType
    flags: tuple[Documented, ...]


@dataclass(frozen=True)
class FieldSyntax:
    """A named, typed slot: struct field, union arm, param or result."""
    name: Id
    type: DatatypeIdentSyntax


@dataclass(frozen=True)
class StructSyntax:
    fields: tuple[Documented, ...]


@dataclass(frozen=True)
class UnionSyntax:
    fields: tuple[Documented, ...]


@dataclass(frozen=True)
class HandleSyntax:
    supertypes: tuple[Id, ...]


TypedefSyntax = DatatypeIdentSyntax | EnumSyntax | FlagsSyntax | StructSyntax | UnionSyntax | HandleSyntax


@dataclass(frozen=True)
class TypenameSyntax:
    """`(typename $name <definition>)`"""
    ident: Id
    definition: TypedefSyntax


class ImportTypeSyntax(enum.Enum):
    MEMORY = "memory"


@dataclass(frozen=True, eq=False)
class ModuleImportSyntax:
    """`(import "name" (memory))`

    Equality ignores `name_loc`.
    """
    name: str
    name_loc: Span
    type: ImportTypeSyntax

    def __eq__(self, other):
        if not isinstance(other, ModuleImportSyntax):
            return NotImplemented
        return self.name == other.name and self.type == other.type

    def __hash__(self):
        return hash((self.name, self.type))


@dataclass(frozen=True, eq=False)
class InterfaceFuncSyntax:
    """`(@interface func (export "name") <param and result fields>)`

    Params and results keep their own source order. Equality ignores
    `export_loc`.
    """
    export: str
    export_loc: Span
    params: tuple[Documented, ...]
    results: tuple[Documented, ...]

    def __eq__(self, other):
        if not isinstance(other, InterfaceFuncSyntax):
            return NotImplemented
        return (
            self.export == other.export
            and self.params == other.params
            and self.results == other.results
        )

    def __hash__(self):
        return hash((self.export, self.params, self.results))


ModuleDeclSyntax = ModuleImportSyntax | InterfaceFuncSyntax


@dataclass(frozen=True)
class ModuleSyntax:
    """`(module $name <decls>)`"""
    name: Id
    decls: tuple[Documented, ...]


DeclSyntax = TypenameSyntax | ModuleSyntax


@dataclass(frozen=True)
class UseSyntax:
    """`(use "path")`"""
    path: str


TopLevelSyntax = DeclSyntax | UseSyntax


@dataclass(frozen=True)
class TopLevelDocument:
    """Root of a parsed document.

    Attributes:
        items: (tuple[Documented]) Top level forms in source order
    """
    items: tuple[Documented, ...]

    def uses(self):
        """Iterate the `UseSyntax` items."""
        return (doc.item for doc in self.items if isinstance(doc.item, UseSyntax))

    def typenames(self):
        """Iterate the `TypenameSyntax` items."""
        return (doc.item for doc in self.items if isinstance(doc.item, TypenameSyntax))

    def modules(self):
        """Iterate the `ModuleSyntax` items."""
        return (doc.item for doc in self.items if isinstance(doc.item, ModuleSyntax))
