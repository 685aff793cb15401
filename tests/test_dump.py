"""Tests for the readable syntax tree rendering."""

import pytest

import witx


def test_dump_document():
    document = witx.parse("""
;;; Sizes.
(typename $size u32)
(typename $rec (struct
  ;;; A.
  (field $a u8)))
(use "other.witx")
(module $m
  (import "mem" (memory))
  (@interface func (export "f") (param $x $size) (result $y (array u8))))
""")
    assert witx.dump(document).splitlines() == [
        ";;; Sizes.",
        "typename $size",
        "  u32",
        "typename $rec",
        "  struct",
        "    ;;; A.",
        "    $a u8",
        'use "other.witx"',
        "module $m",
        '  import "mem" (memory)',
        '  func "f"',
        "    param $x $size",
        "    result $y (array u8)",
    ]


def test_dump_enum_flags_handle():
    document = witx.parse("""
(typename $e (enum u8 $a $b))
(typename $f (flags u16))
(typename $h (handle $fd))
""")
    assert witx.dump(document).splitlines() == [
        "typename $e",
        "  enum u8",
        "    $a",
        "    $b",
        "typename $f",
        "  flags u16",
        "typename $h",
        "  handle $fd",
    ]


def test_dump_blank_doc_line():
    document = witx.parse(";;; One.\n;;;\n;;; Two.\n(typename $t u8)")
    assert witx.dump(document).splitlines()[:3] == [";;; One.", ";;;", ";;; Two."]


def test_dump_datatype():
    datatype = witx.parse_datatype("(@witx pointer (array $t))")
    assert witx.dump(datatype) == "(@witx pointer (array $t))"


def test_dump_unknown():
    with pytest.raises(ValueError):
        witx.dump(42)


def test_dump_keeps_string_field_names():
    document = witx.parse(
        '(typename $r (struct (field "a" u8) (field $b u8)))\n'
        '(module $m (@interface func (export "f") (param "x" $r)))'
    )
    assert witx.dump(document).splitlines() == [
        "typename $r",
        "  struct",
        '    "a" u8',
        "    $b u8",
        "module $m",
        '  func "f"',
        '    param "x" $r',
    ]
