from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from fourcc.core.span import Span

from .ast import (
    Binary,
    Call,
    ConstItem,
    Expr,
    LitKind,
    Literal,
    MacroCall,
    Name,
    Paren,
    Program,
    Unary,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_INT_SUFFIX = re.compile(r"(u8|u16|u32|u64|i8|i16|i32|i64)$")
_FLOAT_SUFFIX = re.compile(r"(f32|f64)$")
_ESCAPE = re.compile(r"\\(x[0-9a-fA-F]{2}|u\{[0-9a-fA-F_]{1,8}\}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
	"n": "\n",
	"r": "\r",
	"t": "\t",
	"0": "\0",
	"\\": "\\",
	"'": "'",
	'"': '"',
}


class LiteralDecodeError(ValueError):
	"""
	User-facing error for a literal whose contents cannot be decoded
	(unknown escape, out-of-range byte, multi-character char literal).

	Carries the literal's location so the driver reports a parser diagnostic
	instead of crashing.
	"""

	def __init__(self, message: str, *, loc: Span) -> None:
		super().__init__(message)
		self.loc = loc


def _decode_escapes(raw: str, *, loc: Span) -> str:
	"""
	Decode backslash escapes inside a quoted literal body.

	Supported: `\\n \\r \\t \\0 \\\\ \\' \\"`, `\\xHH` and `\\u{H...}`. Characters
	that are not escapes (including non-ASCII ones) are kept as-is.
	"""

	def _replace(m: re.Match) -> str:
		esc = m.group(1)
		if esc.startswith("x") and len(esc) == 3:
			return chr(int(esc[1:], 16))
		if esc.startswith("u{"):
			cp = int(esc[2:-1].replace("_", ""), 16)
			if cp > 0x10FFFF:
				raise LiteralDecodeError(f"invalid unicode escape '\\{esc}'", loc=loc)
			return chr(cp)
		if esc in _SIMPLE_ESCAPES:
			return _SIMPLE_ESCAPES[esc]
		raise LiteralDecodeError(f"unknown character escape '\\{esc}'", loc=loc)

	return _ESCAPE.sub(_replace, raw)


def _parse_int(text: str) -> tuple[int, Optional[str]]:
	suffix = None
	m = _INT_SUFFIX.search(text)
	# Hex digits never contain `u`/`i`, so a trailing suffix is unambiguous.
	if m is not None:
		suffix = m.group(1)
		text = text[: m.start()]
	digits = text.replace("_", "")
	if digits[:2] in ("0x", "0X"):
		return int(digits[2:], 16), suffix
	if digits[:2] == "0o":
		return int(digits[2:], 8), suffix
	if digits[:2] == "0b":
		return int(digits[2:], 2), suffix
	return int(digits, 10), suffix


def _build_literal(tok: Token) -> Literal:
	loc = _loc_from_token(tok)
	if tok.type == "STRING":
		return Literal(loc=loc, kind=LitKind.STR, value=_decode_escapes(tok.value[1:-1], loc=loc))
	if tok.type == "BYTE_STRING":
		text = _decode_escapes(tok.value[2:-1], loc=loc)
		try:
			raw = text.encode("latin-1")
		except UnicodeEncodeError:
			raise LiteralDecodeError("non-byte character in byte string literal", loc=loc) from None
		return Literal(loc=loc, kind=LitKind.BYTE_STR, value=raw)
	if tok.type == "CHAR":
		text = _decode_escapes(tok.value[1:-1], loc=loc)
		if len(text) != 1:
			raise LiteralDecodeError("character literal must contain exactly one character", loc=loc)
		return Literal(loc=loc, kind=LitKind.CHAR, value=text)
	if tok.type == "INT":
		value, suffix = _parse_int(tok.value)
		return Literal(loc=loc, kind=LitKind.INT, value=value, suffix=suffix)
	if tok.type == "FLOAT":
		text = tok.value
		suffix = None
		m = _FLOAT_SUFFIX.search(text)
		if m is not None:
			suffix = m.group(1)
			text = text[: m.start()]
		return Literal(loc=loc, kind=LitKind.FLOAT, value=float(text.replace("_", "")), suffix=suffix)
	if tok.type in ("TRUE", "FALSE"):
		return Literal(loc=loc, kind=LitKind.BOOL, value=tok.type == "TRUE")
	raise TypeError(f"Unexpected literal token {tok.type}")


_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="program",
	propagate_positions=True,
	maybe_placeholders=False,
)

_EXPR_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="expr",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_program(source: str) -> Program:
	"""
	Parse a full source file.

	Raises lark's `UnexpectedInput` on syntax errors and `LiteralDecodeError`
	on malformed literal contents; the driver turns both into diagnostics.
	"""
	tree = _PARSER.parse(source)
	return _build_program(tree)


def parse_expr(source: str) -> Expr:
	"""Parse a single expression from source text (no trailing `;`)."""
	tree = _EXPR_PARSER.parse(source)
	return build_expr(tree)


def expr_parser() -> Lark:
	"""The shared expression parser (start rule `expr`), for token-level feeding."""
	return _EXPR_PARSER


def _build_program(tree: Tree) -> Program:
	items: List[ConstItem] = []
	for child in tree.children:
		if isinstance(child, Tree) and _name(child) == "const_item":
			items.append(_build_const_item(child))
	return Program(items=items)


def _build_const_item(tree: Tree) -> ConstItem:
	names = [c for c in tree.children if isinstance(c, Token) and c.type == "NAME"]
	value_node = next(c for c in tree.children if isinstance(c, Tree))
	type_name = names[1].value if len(names) > 1 else None
	return ConstItem(
		loc=_loc(tree),
		name=names[0].value,
		type_name=type_name,
		value=build_expr(value_node),
	)


def build_expr(node) -> Expr:
    if not isinstance(node, Tree):
        raise TypeError(f"Unexpected node type: {type(node)}")
    name = _name(node)

    if name == "literal":
        return _build_literal(node.children[0])
    if name == "name":
        tok = node.children[0]
        return Name(loc=_loc_from_token(tok), ident=tok.value)
    if name == "paren":
        inner = next(c for c in node.children if isinstance(c, Tree))
        return Paren(loc=_loc(node), inner=build_expr(inner))
    if name == "binary":
        left, op, right = node.children
        return Binary(loc=_loc(node), op=op.value, left=build_expr(left), right=build_expr(right))
    if name == "unary_op":
        op, operand = node.children
        return Unary(loc=_loc(node), op=op.value, operand=build_expr(operand))
    if name == "call":
        func = build_expr(node.children[0])
        args_node = next((c for c in node.children[1:] if isinstance(c, Tree) and _name(c) == "args"), None)
        args: List[Expr] = []
        if args_node is not None:
            args = [build_expr(c) for c in args_node.children if isinstance(c, Tree)]
        return Call(loc=_loc(node), func=func, args=args)
    if name == "macro_call":
        name_tok = node.children[0]
        tokens: List[Token] = []
        for child in node.children:
            if isinstance(child, Tree):
                tokens.extend(_flatten_token_tree(child))
        return MacroCall(loc=_loc(node), name=name_tok.value, tokens=tokens)
    raise TypeError(f"Unsupported expression node: {name}")


def _flatten_token_tree(tree: Tree) -> List[Token]:
	out: List[Token] = []
	for child in tree.children:
		if isinstance(child, Token):
			out.append(child)
		else:
			out.extend(_flatten_token_tree(child))
	return out


def _loc(tree: Tree) -> Span:
    return Span.from_loc(tree.meta)


def _loc_from_token(token: Token) -> Span:
    return Span.from_loc(token)


def _name(node: Tree | Token) -> str:
    if isinstance(node, Tree):
        data = node.data
        if isinstance(data, Token):
            return data.value
        return data
    if isinstance(node, Token):
        return node.type
    return str(node)


__all__ = ["parse_program", "parse_expr", "build_expr", "expr_parser", "LiteralDecodeError"]
