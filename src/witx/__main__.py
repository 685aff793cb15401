#!/usr/bin/env python3
"""Witx CLI - Command-line interface for the witx parser.

Usage:
    witx <file.witx>                # Show the syntax tree
    witx <file.witx> --tokens       # Show Lark token tree
    witx <file.witx> --docs         # Show documentation of each declaration
    witx '(typename $t u8)' --text  # Parse inline source
"""

import argparse
import logging
import pathlib
import sys

from lark import Token, Tree

import witx

log = logging.getLogger("witx")


def prettylark(node, indent=0, show_positions=False):
    """Pretty-print a Lark parse tree."""
    prefix = "  " * indent

    if isinstance(node, Token):
        pos = f" @{node.line}:{node.column}" if show_positions else ""
        value = repr(node.value) if len(node.value) < 60 else repr(node.value[:57] + "...")
        print(f"{prefix}{node.type}: {value}{pos}")

    elif isinstance(node, Tree):
        pos = ""
        if show_positions and node.meta and not node.meta.empty:
            pos = f" @{node.meta.line}:{node.meta.column}"
        print(f"{prefix}{node.data}:{pos}")
        for child in node.children:
            prettylark(child, indent + 1, show_positions)

    else:
        print(f"{prefix}??? {type(node).__name__}: {node!r}")


def _documented_children(item):
    """Yield (depth, title, docs) for the documented parts of a declaration."""
    match item:
        case witx.TypenameSyntax(definition=witx.EnumSyntax() as enum):
            for member in enum.members:
                yield 1, str(member.item), member.docs
        case witx.TypenameSyntax(definition=witx.FlagsSyntax() as flags):
            for flag in flags.flags:
                yield 1, str(flag.item), flag.docs
        case witx.TypenameSyntax(definition=witx.StructSyntax() | witx.UnionSyntax() as record):
            for field in record.fields:
                yield 1, f"{field.item.name} {field.item.type}", field.docs
        case witx.ModuleSyntax():
            for decl in item.decls:
                if isinstance(decl.item, witx.InterfaceFuncSyntax):
                    yield 1, f'func "{decl.item.export}"', decl.docs
                    for param in decl.item.params:
                        yield 2, f"param {param.item.name} {param.item.type}", param.docs
                    for result in decl.item.results:
                        yield 2, f"result {result.item.name} {result.item.type}", result.docs
                else:
                    yield 1, f'import "{decl.item.name}"', decl.docs


def _print_docs(docs, indent):
    prefix = "  " * indent
    for line in docs.splitlines():
        print(f"{prefix}{line}".rstrip())


def show_docs(document):
    """Print every top-level declaration with its documentation."""
    for documented in document.items:
        item = documented.item
        match item:
            case witx.TypenameSyntax():
                print(f"typename {item.ident}")
            case witx.ModuleSyntax():
                print(f"module {item.name}")
            case witx.UseSyntax():
                print(f'use "{item.path}"')
        _print_docs(documented.docs, 1)
        for depth, title, docs in _documented_children(item):
            print(f"{'  ' * depth}{title}")
            _print_docs(docs, depth + 1)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="witx",
        description="Witx interface description parser")
    parser.add_argument("source",
        help="Witx source file to parse")
    parser.add_argument("--text", action="store_true",
        help="Treat source as witx text to be parsed")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--tree", action="store_true",
        help="Show the parsed syntax tree (default)")
    mode.add_argument("--tokens", action="store_true",
        help="Show the Lark token tree")
    mode.add_argument("--docs", action="store_true",
        help="Show the documentation attached to each declaration")
    parser.add_argument("--pos", action="store_true",
        help="Show line:column positions with --tokens")
    parser.add_argument("--verbose", "-v", action="store_true",
        help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s")

    if args.text:
        source = args.source
        filename = None
    else:
        filepath = pathlib.Path(args.source)
        if not filepath.is_file():
            print(f"error: file not found: {filepath}", file=sys.stderr)
            return 1
        source = filepath.read_text(encoding="utf-8")
        filename = str(filepath)

    try:
        if args.tokens:
            prettylark(witx.lark_tree(source, filename), show_positions=args.pos)
            return 0
        if args.text:
            document = witx.parse(source)
        else:
            document = witx.parse_file(filepath)
    except witx.ParseError as err:
        print(err.render(source), file=sys.stderr)
        return 1

    log.debug("Read %d top-level items", len(document.items))
    if args.docs:
        show_docs(document)
    else:
        print(witx.dump(document))
    return 0


if __name__ == "__main__":
    sys.exit(main())
