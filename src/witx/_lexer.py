"""Tokenize witx source into forms and provide a cursor over them.

Lark recognizes the s-expression shape of the source: nested forms,
strings, atoms and comments. The lark tree is converted into plain `Form`
and `Token` values, and a `Parser` cursor walks the items of one form at a
time with one and two token lookahead.

Comments stay in the token stream. Every lookahead and consuming method
skips over them, except `Parser.comments` which collects the run of
comments at the cursor so documentation can be attached to whatever
follows.
"""

__all__ = [
    "Token",
    "Form",
    "Parser",
    "Lookahead",
    "Keyword",
    "Reserved",
    "LPAREN",
    "IDENT",
    "STRING",
    "read",
    "lark_tree",
    "MAX_NESTING",
]

import re
from dataclasses import dataclass

import lark

from ._error import ParseError, Span

# Deepest form nesting accepted. Rules recurse once per form, so this keeps
# parsing well inside the interpreter recursion limit.
MAX_NESTING = 200


@dataclass(frozen=True)
class Token:
    """A single lexical token.

    Attributes:
        kind: (str) One of "string", "id", "keyword", "reserved",
            "line_comment" or "block_comment"
        text: (str) Decoded value for strings, raw source text otherwise
        span: (Span) Position of the first character
    """
    kind: str
    text: str
    span: Span


@dataclass(frozen=True)
class Form:
    """A parenthesized form.

    Attributes:
        items: (tuple) Tokens and nested forms between the parens
        span: (Span) Position of the opening paren
        end: (Span) Position of the closing paren
    """
    items: tuple
    span: Span
    end: Span


class Keyword:
    """Peek predicate matching one keyword."""

    def __init__(self, name):
        self.name = name
        self.display = f"`{name}`"

    def __call__(self, node):
        return isinstance(node, Token) and node.kind == "keyword" and node.text == self.name


class Reserved:
    """Peek predicate matching one reserved word, like `@witx`."""

    def __init__(self, name):
        self.name = name
        self.display = f"`{name}`"

    def __call__(self, node):
        return isinstance(node, Token) and node.kind == "reserved" and node.text == self.name


class _Kind:
    def __init__(self, kind, display):
        self.kind = kind
        self.display = display

    def __call__(self, node):
        return isinstance(node, Token) and node.kind == self.kind


class _LParen:
    display = "`(`"

    def __call__(self, node):
        return isinstance(node, Form)


LPAREN = _LParen()
IDENT = _Kind("id", "an identifier")
STRING = _Kind("string", "a string")


def _is_comment(node):
    return isinstance(node, Token) and node.kind in ("line_comment", "block_comment")


def _first(items, pos):
    """Index of the first non-comment item at or after pos."""
    while pos < len(items) and _is_comment(items[pos]):
        pos += 1
    return pos


class Parser:
    """Cursor over the items of a single form (or the whole document).

    Args:
        items: (tuple) Tokens and forms to walk
        end: (Span) Position reported for errors at the end of the items
    """

    def __init__(self, items, end):
        self._items = items
        self._pos = 0
        self._end = end

    def _next(self):
        pos = _first(self._items, self._pos)
        return self._items[pos] if pos < len(self._items) else None

    def _next2(self):
        pos = _first(self._items, self._pos)
        if pos >= len(self._items):
            return None
        node = self._items[pos]
        if isinstance(node, Form):
            inner = _first(node.items, 0)
            return node.items[inner] if inner < len(node.items) else None
        pos = _first(self._items, pos + 1)
        return self._items[pos] if pos < len(self._items) else None

    def is_empty(self):
        """True when nothing but comments remain."""
        return self._next() is None

    def peek(self, token):
        """Test the next token against a predicate without consuming it."""
        return token(self._next())

    def peek2(self, token):
        """Test the token after the next one.

        When the next item is a form, the token after its opening paren
        is the one tested.
        """
        return token(self._next2())

    def lookahead(self):
        return Lookahead(self)

    def cur_span(self):
        node = self._next()
        if node is None:
            return self._end
        return node.span

    def error(self, message):
        return ParseError(message, self.cur_span())

    def step(self, token):
        """Consume the next token, which must match the predicate."""
        if not token(self._next()):
            raise self.error(f"expected {token.display}")
        pos = _first(self._items, self._pos)
        self._pos = pos + 1
        return self._items[pos]

    def comments(self):
        """Consume the run of comment tokens directly at the cursor."""
        comments = []
        while self._pos < len(self._items) and _is_comment(self._items[self._pos]):
            comments.append(self._items[self._pos])
            self._pos += 1
        return comments

    def parens(self, rule):
        """Parse the next form with `rule`, which must consume all of it.

        Args:
            rule: (callable) Called with a Parser over the form's items

        Returns:
            Whatever `rule` returns
        """
        pos = _first(self._items, self._pos)
        node = self._items[pos] if pos < len(self._items) else None
        if not isinstance(node, Form):
            raise self.error("expected `(`")
        inner = Parser(node.items, node.end)
        result = rule(inner)
        if not inner.is_empty():
            raise inner.error("expected `)`")
        self._pos = pos + 1
        return result


class Lookahead:
    """Records the alternatives tested at a branch point.

    When none of them match, `error` lists every alternative that was
    peeked for.
    """

    def __init__(self, parser):
        self._parser = parser
        self._attempts = []

    def peek(self, token):
        self._attempts.append(token.display)
        return self._parser.peek(token)

    def error(self):
        if len(self._attempts) == 1:
            message = f"expected {self._attempts[0]}"
        else:
            message = "unexpected token, expected one of: " + ", ".join(self._attempts)
        return self._parser.error(message)


def read(source, filename=None):
    """Tokenize source into a Parser over its top-level items.

    Args:
        source: (str) Witx source text
        filename: (str | None) Path used in error positions

    Returns:
        (Parser) Cursor at the start of the document

    Raises:
        ParseError: Malformed tokens, unbalanced parens or nesting deeper
            than `MAX_NESTING`
    """
    tree = lark_tree(source, filename)
    items = tuple(_convert_tree(kid, filename) for kid in tree.children)
    return Parser(items, _end_span(source, filename))


def lark_tree(source, filename=None):
    """Parse source into the raw lark tree."""
    parser = _lark_parser("witx")
    try:
        return parser.parse(source)
    except lark.UnexpectedCharacters as err:
        span = Span(err.pos_in_stream, err.line, err.column, filename)
        raise ParseError(f"unexpected character {err.char!r}", span) from err
    except lark.UnexpectedToken as err:
        if err.token.type == "$END":
            span = _end_span(source, filename)
            raise ParseError("unexpected end of input, expected `)`", span) from err
        span = _span(err.token, filename)
        raise ParseError(f"unexpected `{err.token}`", span) from err
    except lark.UnexpectedInput as err:
        span = _end_span(source, filename)
        raise ParseError("unexpected end of input", span) from err


def _span(token, filename):
    return Span(token.start_pos, token.line, token.column, filename)


def _end_span(source, filename):
    line = source.count("\n") + 1
    column = len(source) - (source.rfind("\n") + 1) + 1
    return Span(len(source), line, column, filename)


def _classify(text):
    if text.startswith("$") and len(text) > 1:
        return "id"
    if "a" <= text[0] <= "z":
        return "keyword"
    return "reserved"


_ESCAPES = {"t": 0x09, "n": 0x0A, "r": 0x0D, '"': 0x22, "'": 0x27, "\\": 0x5C}
_UNICODE_ESCAPE = re.compile(r"\\u\{([0-9a-fA-F]+)\}")
_HEX_ESCAPE = re.compile(r"\\[0-9a-fA-F]{2}")


def _decode_string(text, span):
    """Decode the escapes of a quoted string token."""
    body = text[1:-1]
    out = bytearray()
    pos = 0
    while pos < len(body):
        ch = body[pos]
        if ch != "\\":
            out += ch.encode("utf-8")
            pos += 1
            continue
        esc = body[pos + 1]
        if esc in _ESCAPES:
            out.append(_ESCAPES[esc])
            pos += 2
        elif esc == "u":
            match = _UNICODE_ESCAPE.match(body, pos)
            if match is None:
                raise ParseError("invalid unicode escape", span)
            try:
                out += chr(int(match.group(1), 16)).encode("utf-8")
            except (ValueError, OverflowError):
                raise ParseError("invalid unicode scalar value", span) from None
            pos = match.end()
        elif _HEX_ESCAPE.match(body, pos):
            out.append(int(body[pos + 1:pos + 3], 16))
            pos += 3
        else:
            raise ParseError(f"invalid string escape '\\{esc}'", span)
    try:
        return out.decode("utf-8")
    except UnicodeDecodeError:
        raise ParseError("malformed UTF-8 encoding", span) from None


def _convert_tree(tree, filename, depth=0):
    """Convert a lark Tree or Token into a Form or Token.

    Args:
        depth: (int) Number of forms enclosing `tree`
    """
    if isinstance(tree, lark.Token):
        span = _span(tree, filename)
        match tree.type:
            case "STRING":
                return Token("string", _decode_string(tree.value, span), span)
            case "ATOM":
                return Token(_classify(tree.value), tree.value, span)
            case "LINE_COMMENT":
                return Token("line_comment", tree.value, span)
            case "BLOCK_COMMENT":
                return Token("block_comment", tree.value, span)
        raise ValueError(f"Unhandled grammar token: {tree.type}")

    match tree.data:
        case "form":
            kids = tree.children
            span = _span(kids[0], filename)
            if depth >= MAX_NESTING:
                raise ParseError("item nesting too deep", span)
            items = tuple(_convert_tree(kid, filename, depth + 1) for kid in kids[1:-1])
            return Form(items, span, _span(kids[-1], filename))
    raise ValueError(f"Unhandled grammar rule: {tree.data}")


_parsers = {}


def _lark_parser(name):
    """Get globally shared lark parser.

    Args:
        name: (str) name of the grammar file (without .lark)

    Returns:
        (lark.Lark) Parser instance
    """
    parser = _parsers.get(name)
    if parser is not None:
        return parser

    path = f"lark/{name}.lark"
    parser = lark.Lark.open(
        path, rel_to=__file__, parser="lalr", propagate_positions=True
    )
    _parsers[name] = parser
    return parser
