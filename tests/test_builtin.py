"""Tests for the built in scalar type keywords."""

import pytest

import witx


@pytest.mark.parametrize(
    "keyword,expected",
    [
        ("string", witx.BuiltinType.STRING),
        ("u8", witx.BuiltinType.U8),
        ("u16", witx.BuiltinType.U16),
        ("u32", witx.BuiltinType.U32),
        ("u64", witx.BuiltinType.U64),
        ("s8", witx.BuiltinType.S8),
        ("s16", witx.BuiltinType.S16),
        ("s32", witx.BuiltinType.S32),
        ("s64", witx.BuiltinType.S64),
        ("f32", witx.BuiltinType.F32),
        ("f64", witx.BuiltinType.F64),
    ],
)
def test_builtin_keywords(keyword, expected):
    assert witx.parse_datatype(keyword) == witx.Builtin(expected)


def test_builtin_count():
    assert len(witx.BuiltinType) == 11


@pytest.mark.parametrize(
    "code",
    ["u128", "i32", "String", "bool", '"u8"', "@witx", "1"],
    ids=["u128", "i32", "caps", "bool", "quoted", "reserved", "number"],
)
def test_invalid_builtin(code):
    with pytest.raises(witx.ParseError) as exc_info:
        witx.parse_datatype(code)
    message = exc_info.value.message
    assert message.startswith("unexpected token, expected one of:")
    for builtin in witx.BuiltinType:
        assert f"`{builtin.value}`" in message


def test_builtin_consumes_one_token():
    with pytest.raises(witx.ParseError) as exc_info:
        witx.parse_datatype("u8 u16")
    assert exc_info.value.message == "expected end of input"
    assert exc_info.value.span.column == 4
