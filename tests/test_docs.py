"""Tests for documentation comments and their normalization."""

import pytest

import witx
from witxtest import parse_item


def docs(*comments):
    return witx.CommentSyntax(comments).docs()


def test_no_comments():
    assert witx.CommentSyntax().docs() == ""


def test_only_plain_comments():
    assert docs(" just a note", " another") == ""


@pytest.mark.parametrize(
    "comments,expected",
    [
        (("; hello",), "hello\n"),
        (("; hello", "; world"), "hello\nworld\n"),
        ((";  a", ";    b"), "a\n  b\n"),
        ((";    deeper", ";  shallow"), "  deeper\nshallow\n"),
        ((" plain", "; doc"), "doc\n"),
        (("; a", ";", "; b"), "a\n\nb\n"),
        ((";    ", "; b"), "\nb\n"),
        (("; trailing   ",), "trailing\n"),
        ((";no space",), "no space\n"),
        ((";; two semis",), "; two semis\n"),
    ],
    ids=[
        "single", "two", "min-indent", "min-indent-later", "plain-dropped",
        "blank-line", "whitespace-line", "trailing-space", "no-space", "extra-semi",
    ],
)
def test_normalization(comments, expected):
    assert docs(*comments) == expected


def test_blank_lines_do_not_affect_indent():
    assert docs(";", ";    indented", ";") == "\nindented\n\n"


def test_line_doc_comment():
    document = witx.parse(";;; Size in bytes.\n(typename $size u32)")
    item = document.items[0]
    assert item.comments == witx.CommentSyntax(("; Size in bytes.",))
    assert item.docs == "Size in bytes.\n"


def test_block_doc_comment():
    document = witx.parse("(;; Block documentation ;)\n(typename $t u8)")
    item = document.items[0]
    assert item.comments.comments == ("; Block documentation ",)
    assert item.docs == "Block documentation\n"


def test_plain_comment_kept_but_not_documentation():
    document = witx.parse(";; implementation note\n(typename $t u8)")
    item = document.items[0]
    assert item.comments.comments == (" implementation note",)
    assert item.docs == ""


def test_mixed_comment_run():
    code = """
;;; Error codes.
;; (not documentation)
;;;
;;;   See the errno table.
(typename $errno u16)
"""
    item = witx.parse(code).items[0]
    assert item.docs == "Error codes.\n\n  See the errno table.\n"


def test_indentation_removed():
    code = """
;;;   first
;;;     second
(typename $t u8)
"""
    assert witx.parse(code).items[0].docs == "first\n  second\n"


def test_docs_belong_to_following_item():
    code = """
;;; First.
(typename $a u8)
;;; Second.
(typename $b u8)
(typename $c u8)
"""
    items = witx.parse(code).items
    assert [item.docs for item in items] == ["First.\n", "Second.\n", ""]


def test_struct_field_docs():
    typename = parse_item("""
(typename $iovec
  (struct
    ;;; The address of the buffer.
    (field $buf (@witx pointer u8))
    ;;; The length of the buffer.
    (field $buf_len u32)))
""")
    fields = typename.definition.fields
    assert [field.docs for field in fields] == [
        "The address of the buffer.\n",
        "The length of the buffer.\n",
    ]


def test_enum_member_docs():
    typename = parse_item("""
(typename $whence
  (enum u8
    ;;; Seek relative to start.
    $set
    $cur
    ;;; Seek relative to end.
    $end))
""")
    members = typename.definition.members
    assert [member.item.name for member in members] == ["set", "cur", "end"]
    assert [member.docs for member in members] == [
        "Seek relative to start.\n", "", "Seek relative to end.\n",
    ]


def test_comments_inside_form_are_skipped():
    typename = parse_item("(typename ;; the name\n $t ;; the type\n u8 ;; done\n)")
    assert typename == witx.TypenameSyntax(witx.Id("t"), witx.Builtin(witx.BuiltinType.U8))


def test_trailing_comments():
    document = witx.parse("(typename $t u8)\n;;; dangling documentation\n")
    assert len(document.items) == 1
