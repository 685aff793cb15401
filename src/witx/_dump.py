"""Readable rendering of syntax trees."""

__all__ = ["dump"]

from ._syntax import (
    DatatypeIdentSyntax,
    Documented,
    EnumSyntax,
    FieldSyntax,
    FlagsSyntax,
    HandleSyntax,
    Id,
    InterfaceFuncSyntax,
    ModuleImportSyntax,
    ModuleSyntax,
    StructSyntax,
    TopLevelDocument,
    TypenameSyntax,
    UnionSyntax,
    UseSyntax,
)


def dump(node):
    """Render a syntax node as indented text, one construct per line.

    Documentation is shown as `;;;` lines above the construct it belongs to.
    """
    lines = []
    _dump(node, 0, lines)
    return "\n".join(lines)


def _dump(node, indent, lines, prefix=""):
    pad = "  " * indent
    match node:
        case TopLevelDocument():
            for item in node.items:
                _dump(item, indent, lines)
        case Documented():
            for doc in node.comments.docs().splitlines():
                lines.append(f"{pad};;; {doc}".rstrip())
            _dump(node.item, indent, lines, prefix)
        case UseSyntax():
            lines.append(f'{pad}use "{node.path}"')
        case TypenameSyntax():
            lines.append(f"{pad}typename {node.ident}")
            _dump(node.definition, indent + 1, lines)
        case EnumSyntax():
            lines.append(f"{pad}enum {node.repr.value}")
            for member in node.members:
                _dump(member, indent + 1, lines)
        case FlagsSyntax():
            lines.append(f"{pad}flags {node.repr.value}")
            for flag in node.flags:
                _dump(flag, indent + 1, lines)
        case StructSyntax():
            lines.append(f"{pad}struct")
            for field in node.fields:
                _dump(field, indent + 1, lines)
        case UnionSyntax():
            lines.append(f"{pad}union")
            for field in node.fields:
                _dump(field, indent + 1, lines)
        case HandleSyntax():
            supertypes = "".join(f" {ident}" for ident in node.supertypes)
            lines.append(f"{pad}handle{supertypes}")
        case FieldSyntax():
            lines.append(f"{pad}{prefix}{node.name} {node.type}")
        case ModuleSyntax():
            lines.append(f"{pad}module {node.name}")
            for decl in node.decls:
                _dump(decl, indent + 1, lines)
        case ModuleImportSyntax():
            lines.append(f'{pad}import "{node.name}" ({node.type.value})')
        case InterfaceFuncSyntax():
            lines.append(f'{pad}func "{node.export}"')
            for param in node.params:
                _dump(param, indent + 1, lines, "param ")
            for result in node.results:
                _dump(result, indent + 1, lines, "result ")
        case DatatypeIdentSyntax() | Id():
            lines.append(f"{pad}{node}")
        case _:
            raise ValueError(f"Unhandled syntax node: {node!r}")
