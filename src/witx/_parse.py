"""Parse witx source into syntax trees.

Each grammar rule is a function taking a `Parser` cursor and returning a
syntax node. Where more than one alternative is allowed the rule peeks at
the next one or two tokens, in a fixed order, before committing to a
branch. Nothing is recovered: the first error raises `ParseError` and the
whole parse fails.

Rules that take a whole parenthesized form are called through
`Parser.parens`, which enters the form and checks that the rule consumed
all of it.
"""

__all__ = [
    "parse",
    "parse_file",
    "parse_datatype",
    "parse_typedef",
]

import logging
import pathlib

from . import _lexer
from ._lexer import IDENT, LPAREN, STRING, Keyword, Reserved
from ._syntax import (
    Array,
    Builtin,
    BuiltinType,
    CommentSyntax,
    ConstPointer,
    Documented,
    EnumSyntax,
    FieldSyntax,
    FlagsSyntax,
    HandleSyntax,
    Id,
    Ident,
    ImportTypeSyntax,
    InterfaceFuncSyntax,
    ModuleImportSyntax,
    ModuleSyntax,
    Pointer,
    StructSyntax,
    TopLevelDocument,
    TypenameSyntax,
    UnionSyntax,
    UseSyntax,
)

log = logging.getLogger(__name__)

AT_WITX = Reserved("@witx")
AT_INTERFACE = Reserved("@interface")

_KW = {
    name: Keyword(name)
    for name in [
        "array", "const-pointer", "pointer",
        "enum", "flags", "struct", "union", "handle", "field",
        "typename", "module", "use",
        "import", "memory", "func", "export", "param", "result",
    ]
}

_BUILTINS = [(Keyword(builtin.value), builtin) for builtin in BuiltinType]


def parse(source, filename=None):
    """Parse a complete witx document.

    Args:
        source: (str) Witx source text
        filename: (str | None) Path reported in error positions

    Returns:
        (TopLevelDocument) Unvalidated syntax tree

    Raises:
        ParseError: On the first syntax error
    """
    parser = _lexer.read(source, filename)
    return _document(parser)


def parse_file(path):
    """Read and parse a witx file."""
    path = pathlib.Path(path)
    log.debug("Parsing %s", path)
    source = path.read_text(encoding="utf-8")
    document = parse(source, filename=str(path))
    log.debug("Parsed %d top-level items from %s", len(document.items), path)
    return document


def parse_datatype(source, filename=None):
    """Parse source holding exactly one datatype reference."""
    parser = _lexer.read(source, filename)
    datatype = _datatype(parser)
    _finish(parser)
    return datatype


def parse_typedef(source, filename=None):
    """Parse source holding exactly one type definition body."""
    parser = _lexer.read(source, filename)
    typedef = _typedef(parser)
    _finish(parser)
    return typedef


def _finish(parser):
    if not parser.is_empty():
        raise parser.error("expected end of input")


def _builtin_type(parser):
    look = parser.lookahead()
    for keyword, builtin in _BUILTINS:
        if look.peek(keyword):
            parser.step(keyword)
            return builtin
    raise look.error()


def _comments(parser):
    comments = []
    for token in parser.comments():
        if token.kind == "block_comment":
            comments.append(token.text[2:-2])
        else:
            comments.append(token.text[2:])
    return CommentSyntax(tuple(comments))


def _documented(parser, rule):
    comments = _comments(parser)
    item = rule(parser)
    return Documented(comments, item)


def _one_or_more(parser, rule, what):
    """Documented items until the form ends, requiring at least one."""
    if parser.is_empty():
        raise parser.error(f"unexpected end of form, expected at least one {what}")
    items = []
    while not parser.is_empty():
        items.append(_documented(parser, rule))
    return tuple(items)


def _ident(parser):
    token = parser.step(IDENT)
    return Id(token.text[1:], token.span)


def _field_name(parser):
    # Field, param and result names may also be written as strings.
    if parser.peek(STRING):
        token = parser.step(STRING)
        return Id(token.text, token.span, quoted=True)
    return _ident(parser)


def _datatype(parser):
    if parser.peek(IDENT):
        return Ident(_ident(parser))
    if parser.peek2(_KW["array"]):
        return parser.parens(_array)
    if parser.peek(LPAREN):
        return parser.parens(_pointer)
    return Builtin(_builtin_type(parser))


def _array(parser):
    parser.step(_KW["array"])
    return Array(_datatype(parser))


def _pointer(parser):
    parser.step(AT_WITX)
    if parser.peek(_KW["const-pointer"]):
        parser.step(_KW["const-pointer"])
        return ConstPointer(_datatype(parser))
    parser.step(_KW["pointer"])
    return Pointer(_datatype(parser))


def _typedef(parser):
    if (
        not parser.peek(LPAREN)
        or parser.peek2(_KW["array"])
        or parser.peek2(AT_WITX)
    ):
        return _datatype(parser)
    return parser.parens(_typedef_form)


def _typedef_form(parser):
    look = parser.lookahead()
    if look.peek(_KW["enum"]):
        return _enum(parser)
    if look.peek(_KW["flags"]):
        return _flags(parser)
    if look.peek(_KW["struct"]):
        return _struct(parser)
    if look.peek(_KW["union"]):
        return _union(parser)
    if look.peek(_KW["handle"]):
        return _handle(parser)
    raise look.error()


def _enum(parser):
    parser.step(_KW["enum"])
    representation = _builtin_type(parser)
    members = _one_or_more(parser, _ident, "member")
    return EnumSyntax(representation, members)


def _flags(parser):
    parser.step(_KW["flags"])
    representation = _builtin_type(parser)
    flags = []
    while not parser.is_empty():
        flags.append(_documented(parser, _ident))
    return FlagsSyntax(representation, tuple(flags))


def _struct(parser):
    parser.step(_KW["struct"])
    return StructSyntax(_one_or_more(parser, _field, "field"))


def _union(parser):
    parser.step(_KW["union"])
    return UnionSyntax(_one_or_more(parser, _field, "field"))


def _handle(parser):
    parser.step(_KW["handle"])
    supertypes = []
    while not parser.is_empty():
        supertypes.append(_ident(parser))
    return HandleSyntax(tuple(supertypes))


def _field(parser):
    return parser.parens(_field_form)


def _field_form(parser):
    parser.step(_KW["field"])
    name = _field_name(parser)
    return FieldSyntax(name, _datatype(parser))


def _typename(parser):
    parser.step(_KW["typename"])
    ident = _ident(parser)
    return TypenameSyntax(ident, _typedef(parser))


def _module(parser):
    parser.step(_KW["module"])
    name = _ident(parser)
    decls = []
    while not parser.is_empty():
        decls.append(_documented(parser, _module_decl))
    return ModuleSyntax(name, tuple(decls))


def _module_decl(parser):
    return parser.parens(_module_decl_form)


def _module_decl_form(parser):
    look = parser.lookahead()
    if look.peek(_KW["import"]):
        return _import(parser)
    if look.peek(AT_INTERFACE):
        return _interface_func(parser)
    raise look.error()


def _import(parser):
    parser.step(_KW["import"])
    name_loc = parser.cur_span()
    name = parser.step(STRING).text
    import_type = parser.parens(_import_type)
    return ModuleImportSyntax(name, name_loc, import_type)


def _import_type(parser):
    parser.step(_KW["memory"])
    return ImportTypeSyntax.MEMORY


def _interface_func(parser):
    parser.step(AT_INTERFACE)
    parser.step(_KW["func"])
    export_loc, export = parser.parens(_export)

    params = []
    results = []
    while not parser.is_empty():
        func_field = _documented(parser, _func_field)
        kind, field = func_field.item
        documented = Documented(func_field.comments, field)
        if kind == "param":
            params.append(documented)
        else:
            results.append(documented)

    return InterfaceFuncSyntax(export, export_loc, tuple(params), tuple(results))


def _export(parser):
    parser.step(_KW["export"])
    span = parser.cur_span()
    return span, parser.step(STRING).text


def _func_field(parser):
    """A `param` or `result` form, tagged with which one it was."""
    return parser.parens(_func_field_form)


def _func_field_form(parser):
    look = parser.lookahead()
    if look.peek(_KW["param"]):
        kind = "param"
    elif look.peek(_KW["result"]):
        kind = "result"
    else:
        raise look.error()
    parser.step(_KW[kind])
    name = _field_name(parser)
    return kind, FieldSyntax(name, _datatype(parser))


def _decl(parser):
    look = parser.lookahead()
    if look.peek(_KW["module"]):
        return _module(parser)
    if look.peek(_KW["typename"]):
        return _typename(parser)
    raise look.error()


def _top_level(parser):
    return parser.parens(_top_level_form)


def _top_level_form(parser):
    if parser.peek(_KW["use"]):
        parser.step(_KW["use"])
        return UseSyntax(parser.step(STRING).text)
    return _decl(parser)


def _document(parser):
    items = []
    while not parser.is_empty():
        items.append(_documented(parser, _top_level))
    return TopLevelDocument(tuple(items))
