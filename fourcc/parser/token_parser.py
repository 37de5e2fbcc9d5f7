# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Bounded sub-parsers over a macro invocation's raw tokens.

Expanders never see the whole-file parser. They receive a `TokenParser` over
the tokens between the invocation's parentheses and pull pieces off it:
an expression, a punctuation token, an identifier. Any grammar violation
raises `MacroSyntaxError`, which the host expander reports and which aborts
only the current invocation.
"""

from __future__ import annotations

from typing import List, NoReturn, Protocol, Sequence

from lark import Token, Tree
from lark.exceptions import UnexpectedInput, UnexpectedToken

from fourcc.core.span import Span

from .ast import Expr, Ident
from .parser import LiteralDecodeError, build_expr, expr_parser

_OPEN = frozenset({"LPAR", "LSQB"})
_CLOSE = frozenset({"RPAR", "RSQB"})

_PUNCT_TEXT = {
	"COMMA": ",",
	"SEMI": ";",
	"COLON": ":",
	"EQUAL": "=",
}


class MacroSyntaxError(ValueError):
	"""
	Malformed macro arguments (missing comma, trailing tokens, bad expression).

	Raised from a `TokenParser`; the host expander converts it into an
	`E_MACRO_SYNTAX` diagnostic at `span` and leaves the invocation unexpanded.
	"""

	def __init__(self, message: str, *, span: Span) -> None:
		super().__init__(message)
		self.span = span


class TokenParser(Protocol):
	"""
	Parser capability over one invocation's token window.

	Implementations consume tokens left to right; every method either
	advances past what it returns or raises `MacroSyntaxError`.
	"""

	def at_eof(self) -> bool:
		"""True once every token of the window has been consumed."""
		...

	def parse_expr(self) -> Expr:
		"""Parse one expression, stopping before a top-level `,` or a token that cannot continue it."""
		...

	def expect(self, kind: str) -> Span:
		"""Consume one token of terminal type `kind` (e.g. "COMMA"); return its span."""
		...

	def parse_ident(self) -> Ident:
		"""Consume one identifier token."""
		...

	def unexpected(self) -> NoReturn:
		"""Report the current token as unexpected."""
		...


def _describe(tok: Token) -> str:
	return f"`{tok.value}`"


def _prefix_before(window: Sequence[Token], tok: Token) -> List[Token]:
	for idx, candidate in enumerate(window):
		if candidate is tok:
			return list(window[:idx])
	return []


class LarkTokenParser:
	"""
	`TokenParser` backed by the shared lark expression grammar.

	Expressions are parsed by feeding the window's tokens to lark's interactive
	LALR parser, so the tokens keep their original positions and every node
	built from them points back into the source file.
	"""

	def __init__(self, tokens: Sequence[Token], *, span: Span) -> None:
		self._tokens: List[Token] = list(tokens)
		self._pos = 0
		# Invocation span; used for "expected X, found end of input" errors.
		self._span = span

	def at_eof(self) -> bool:
		return self._pos >= len(self._tokens)

	def _peek(self) -> Token | None:
		if self.at_eof():
			return None
		return self._tokens[self._pos]

	def _eof_span(self) -> Span:
		if self._tokens:
			last = Span.from_loc(self._tokens[-1])
			return Span(
				file=self._span.file,
				line=last.end_line,
				column=last.end_column,
				end_line=last.end_line,
				end_column=last.end_column,
			)
		return self._span

	def _span_of(self, tok: Token) -> Span:
		return Span.from_loc(tok).in_file(self._span.file)

	def _feed(self, window: Sequence[Token]) -> Tree:
		interactive = expr_parser().parse_interactive()
		for tok in window:
			interactive.feed_token(tok)
		return interactive.feed_eof(window[-1])

	def parse_expr(self) -> Expr:
		start = self._pos
		end = start
		depth = 0
		while end < len(self._tokens):
			ttype = self._tokens[end].type
			if ttype in _OPEN:
				depth += 1
			elif ttype in _CLOSE:
				depth -= 1
			elif ttype == "COMMA" and depth == 0:
				break
			end += 1
		window = self._tokens[start:end]
		if not window:
			found = self._peek()
			if found is None:
				raise MacroSyntaxError("expected expression, found end of macro arguments", span=self._eof_span())
			raise MacroSyntaxError(f"expected expression, found {_describe(found)}", span=self._span_of(found))

		try:
			tree = self._feed(window)
		except UnexpectedToken as err:
			tok = err.token
			if tok.type == "$END":
				raise MacroSyntaxError("expected expression, found end of macro arguments", span=self._eof_span()) from err
			# The expression may have ended right before the offending token
			# (`"RIFF" big`); stop there and let the caller reject the rest.
			prefix = _prefix_before(window, tok)
			if not prefix:
				raise MacroSyntaxError(f"unexpected token {_describe(tok)} in expression", span=self._span_of(tok)) from err
			try:
				tree = self._feed(prefix)
			except UnexpectedInput:
				raise MacroSyntaxError(f"unexpected token {_describe(tok)} in expression", span=self._span_of(tok)) from err
			end = start + len(prefix)
		except UnexpectedInput as err:
			span = Span(file=self._span.file, line=getattr(err, "line", None), column=getattr(err, "column", None))
			raise MacroSyntaxError(f"invalid expression: {err}", span=span) from err
		self._pos = end
		try:
			return build_expr(tree)
		except LiteralDecodeError as err:
			raise MacroSyntaxError(str(err), span=err.loc.in_file(self._span.file)) from err

	def expect(self, kind: str) -> Span:
		tok = self._peek()
		want = _PUNCT_TEXT.get(kind, kind)
		if tok is None:
			raise MacroSyntaxError(f"expected `{want}`, found end of macro arguments", span=self._eof_span())
		if tok.type != kind:
			raise MacroSyntaxError(f"expected `{want}`, found {_describe(tok)}", span=self._span_of(tok))
		self._pos += 1
		return self._span_of(tok)

	def parse_ident(self) -> Ident:
		tok = self._peek()
		if tok is None:
			raise MacroSyntaxError("expected identifier, found end of macro arguments", span=self._eof_span())
		if tok.type != "NAME":
			raise MacroSyntaxError(f"expected identifier, found {_describe(tok)}", span=self._span_of(tok))
		self._pos += 1
		return Ident(name=tok.value, span=self._span_of(tok))

	def unexpected(self) -> NoReturn:
		tok = self._peek()
		if tok is None:
			raise MacroSyntaxError("unexpected end of macro arguments", span=self._eof_span())
		span = self._span_of(tok).to(self._span_of(self._tokens[-1]))
		raise MacroSyntaxError(f"unexpected trailing tokens: found {_describe(tok)}", span=span)


__all__ = ["TokenParser", "LarkTokenParser", "MacroSyntaxError"]
