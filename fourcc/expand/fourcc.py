# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The `fourcc!` expander.

`fourcc!("RIFF")` / `fourcc!("RIFF", little|big|target)` expands to a `u32`
literal holding the four bytes of the string. Without a directive (or with
`target`) the byte order is the build target's native one.

Diagnostics are split in two groups:
- wrong literal kind (not a literal, not a string): reported, and the
  invocation expands to `0u32`;
- shape problems (non-ASCII text, length != 4, unknown directive): reported,
  but packing still runs over whatever bytes the literal has.

The second group is observed behavior and kept as such; see DESIGN.md.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from lark import Token

from fourcc.core.span import Span
from fourcc.parser.ast import Expr, Ident, LitKind, Literal

from .base import U32_MASK, ExpansionContext

MACRO_NAME = "fourcc"


class FourccError(Enum):
	"""Diagnostic kinds reported by `fourcc!` (code, message)."""

	NON_LITERAL = ("E_FOURCC_NON_LITERAL", "non-literal in fourcc!")
	UNSUPPORTED_LITERAL = ("E_FOURCC_UNSUPPORTED_LITERAL", "unsupported literal in fourcc!")
	NON_ASCII = ("E_FOURCC_NON_ASCII", "non-ascii string literal in fourcc!")
	WRONG_LENGTH = ("E_FOURCC_WRONG_LENGTH", "string literal with len != 4 in fourcc!")
	INVALID_ENDIAN = ("E_FOURCC_INVALID_ENDIAN", "invalid endian directive in fourcc!")

	def __init__(self, code: str, message: str) -> None:
		self.code = code
		self.message = message


class EndianMode(Enum):
	LITTLE = "little"
	BIG = "big"


@dataclass(frozen=True)
class ParsedArgs:
	expr: Expr
	directive: Optional[Ident] = None


def _report(cx: ExpansionContext, span: Span, err: FourccError) -> None:
	cx.span_err(span, err.message, code=err.code)


def parse_args(cx: ExpansionContext, sp: Span, tokens: Sequence[Token]) -> ParsedArgs:
	"""
	Extract `<expr> [, <ident>]` from the invocation tokens.

	Raises `MacroSyntaxError` (through the token parser) for a bad expression,
	a missing comma, a non-identifier directive or trailing tokens.
	"""
	p = cx.new_parser(tokens, sp)
	expr = p.parse_expr()
	directive = None
	if not p.at_eof():
		p.expect("COMMA")
		directive = p.parse_ident()
	if not p.at_eof():
		p.unexpected()
	return ParsedArgs(expr=expr, directive=directive)


def target_endian(cx: ExpansionContext) -> EndianMode:
	return EndianMode.LITTLE if cx.is_target_little_endian() else EndianMode.BIG


def resolve_endian(cx: ExpansionContext, directive: Optional[Ident]) -> EndianMode:
	if directive is None:
		return target_endian(cx)
	if directive.name == "little":
		return EndianMode.LITTLE
	if directive.name == "big":
		return EndianMode.BIG
	if directive.name != "target":
		_report(cx, directive.span, FourccError.INVALID_ENDIAN)
	return target_endian(cx)


def validate_literal(cx: ExpansionContext, expr: Expr) -> Optional[bytes]:
	"""
	Return the literal's bytes, or None when the invocation must expand to 0.

	Only the first failing shape check is reported: a non-ASCII literal is not
	also checked for length.
	"""
	if not isinstance(expr, Literal):
		_report(cx, expr.loc, FourccError.NON_LITERAL)
		return None
	if expr.kind is not LitKind.STR:
		_report(cx, expr.loc, FourccError.UNSUPPORTED_LITERAL)
		return None
	text = str(expr.value)
	if not text.isascii():
		_report(cx, expr.loc, FourccError.NON_ASCII)
	elif len(text) != 4:
		_report(cx, expr.loc, FourccError.WRONG_LENGTH)
	return text.encode("utf-8")


def pack(data: bytes, mode: EndianMode) -> int:
	"""
	Fold up to four bytes into a u32, most significant first.

	BIG folds the leading bytes in order; LITTLE folds the reversed bytes, so
	the first character of a 4-byte literal lands in the low byte. Fewer than
	four bytes are folded as-is, never padded.
	"""
	seq: Iterable[int] = reversed(data) if mode is EndianMode.LITTLE else data
	val = 0
	for byte in itertools.islice(seq, 4):
		val = ((val << 8) | byte) & U32_MASK
	return val


def expand_fourcc(cx: ExpansionContext, sp: Span, tokens: Sequence[Token]) -> Expr:
	args = parse_args(cx, sp, tokens)
	mode = resolve_endian(cx, args.directive)
	data = validate_literal(cx, args.expr)
	if data is None:
		return cx.expr_u32(sp, 0)
	return cx.expr_u32(sp, pack(data, mode))


__all__ = [
	"MACRO_NAME",
	"FourccError",
	"EndianMode",
	"ParsedArgs",
	"parse_args",
	"resolve_endian",
	"target_endian",
	"validate_literal",
	"pack",
	"expand_fourcc",
]
