# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest
from lark.exceptions import UnexpectedInput

from fourcc.parser import LiteralDecodeError, parse_expr, parse_program
from fourcc.parser import ast as parser_ast
from fourcc.parser.ast import LitKind


def test_parse_const_items() -> None:
	prog = parse_program(
		"""
// container tags
const RIFF: u32 = fourcc!("RIFF");
const COUNT = 3;
"""
	)
	assert [item.name for item in prog.items] == ["RIFF", "COUNT"]
	assert [item.type_name for item in prog.items] == ["u32", None]
	riff = prog.items[0]
	assert riff.loc.line == 3
	assert riff.loc.column == 1
	assert isinstance(riff.value, parser_ast.MacroCall)
	assert riff.value.name == "fourcc"


def test_parse_empty_program() -> None:
	assert parse_program("  // nothing here\n").items == []


@pytest.mark.parametrize(
	"src, value, suffix",
	[
		("42", 42, None),
		("1_000", 1000, None),
		("0x1F", 31, None),
		("0xDEAD_BEEFu32", 0xDEADBEEF, "u32"),
		("0o17", 15, None),
		("0b1010u8", 10, "u8"),
		("007", 7, None),
		("7i64", 7, "i64"),
	],
)
def test_parse_int_literals(src: str, value: int, suffix: str | None) -> None:
	lit = parse_expr(src)
	assert isinstance(lit, parser_ast.Literal)
	assert lit.kind is LitKind.INT
	assert lit.value == value
	assert lit.suffix == suffix


def test_parse_other_literal_kinds() -> None:
	assert parse_expr("1.5").kind is LitKind.FLOAT
	assert parse_expr("2.0f32").suffix == "f32"
	assert parse_expr("true").value is True
	assert parse_expr("false").value is False
	char = parse_expr("'x'")
	assert (char.kind, char.value) == (LitKind.CHAR, "x")
	raw = parse_expr('b"RI\\x00F"')
	assert (raw.kind, raw.value) == (LitKind.BYTE_STR, b"RI\x00F")


def test_parse_string_escapes_and_non_ascii() -> None:
	assert parse_expr('"A\\x42\\n\\t\\\\\\""').value == 'AB\n\t\\"'
	assert parse_expr('"\\u{e9}"').value == "é"
	assert parse_expr('"héllo"').value == "héllo"


def test_invalid_escape_raises_literal_decode_error() -> None:
	with pytest.raises(LiteralDecodeError, match="unknown character escape") as excinfo:
		parse_program('const A = "\\q";')
	assert excinfo.value.loc.line == 1
	assert excinfo.value.loc.column == 11


def test_multi_char_char_literal_is_rejected() -> None:
	with pytest.raises(LiteralDecodeError, match="exactly one character"):
		parse_expr("'ab'")


def test_binary_precedence() -> None:
	expr = parse_expr("1 + 2 * 3")
	assert isinstance(expr, parser_ast.Binary)
	assert expr.op == "+"
	assert isinstance(expr.right, parser_ast.Binary)
	assert expr.right.op == "*"

	expr = parse_expr("a | b << 2 & c")
	assert expr.op == "|"
	assert expr.right.op == "&"
	assert expr.right.left.op == "<<"


def test_parentheses_unary_and_calls() -> None:
	expr = parse_expr("-(1 + 2)")
	assert isinstance(expr, parser_ast.Unary)
	assert expr.op == "-"
	assert isinstance(expr.operand, parser_ast.Paren)
	assert isinstance(expr.operand.inner, parser_ast.Binary)
	assert (expr.operand.loc.column, expr.operand.loc.end_column) == (2, 9)

	call = parse_expr("f(1, g(), x)")
	assert isinstance(call, parser_ast.Call)
	assert isinstance(call.func, parser_ast.Name)
	assert len(call.args) == 3
	assert isinstance(call.args[1], parser_ast.Call)
	assert call.args[1].args == []


def test_macro_call_keeps_raw_tokens() -> None:
	call = parse_expr('fourcc!("RIFF", little)')
	assert isinstance(call, parser_ast.MacroCall)
	assert [t.type for t in call.tokens] == ["STRING", "COMMA", "NAME"]
	assert call.tokens[0].value == '"RIFF"'
	assert call.tokens[2].column == 17


def test_macro_call_tokens_include_nested_delimiters() -> None:
	call = parse_expr("m!(f(a, [1, 2]), const ; !)")
	assert [t.value for t in call.tokens] == ["f", "(", "a", ",", "[", "1", ",", "2", "]", ")", ",", "const", ";", "!"]


def test_macro_call_with_no_tokens() -> None:
	call = parse_expr("fourcc!()")
	assert isinstance(call, parser_ast.MacroCall)
	assert call.tokens == []


@pytest.mark.parametrize(
	"src",
	[
		"const A = ;",
		"const A = 1",
		"const = 1;",
		'const A = fourcc!("RIFF";',
		"const A = 1 +;",
	],
)
def test_syntax_errors_raise_unexpected_input(src: str) -> None:
	with pytest.raises(UnexpectedInput):
		parse_program(src)
