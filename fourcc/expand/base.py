# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Macro expansion host: context, expander registry, and the AST walk.

Every expander receives an explicit `ExpansionContext` carrying the
capabilities it may use (token sub-parser, diagnostic sink, target config,
literal construction). There is no module-level state, so expanding the same
program twice with equal contexts yields equal results and diagnostics.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Iterator, Optional, Sequence

from lark import Token

from fourcc.core.diagnostics import DiagnosticSink
from fourcc.core.span import Span
from fourcc.core.target import TargetConfig
from fourcc.parser.ast import Binary, Call, Expr, LitKind, Literal, MacroCall, Paren, Program, Unary
from fourcc.parser.token_parser import LarkTokenParser, MacroSyntaxError, TokenParser

E_MACRO_SYNTAX = "E_MACRO_SYNTAX"
E_UNKNOWN_MACRO = "E_UNKNOWN_MACRO"

U32_MASK = 0xFFFF_FFFF

ParserFactory = Callable[[Sequence[Token], Span], TokenParser]
Expander = Callable[["ExpansionContext", Span, Sequence[Token]], Expr]


def _lark_parser_factory(tokens: Sequence[Token], span: Span) -> TokenParser:
	return LarkTokenParser(tokens, span=span)


class ExpansionContext:
	"""
	Capabilities handed to expanders.

	- `new_parser(tokens, span)`: bounded sub-parser over an invocation's tokens
	  (the factory is injectable so tests can supply a stub);
	- `span_err(...)`: append an error to the ordered diagnostic sink;
	- `is_target_little_endian()`: configuration query, answered by `target`
	  on every call;
	- `expr_u32(span, value)`: build a `u32` integer literal node.
	"""

	def __init__(
		self,
		*,
		target: TargetConfig,
		diagnostics: Optional[DiagnosticSink] = None,
		parser_factory: Optional[ParserFactory] = None,
	) -> None:
		self.target = target
		self.diagnostics = diagnostics if diagnostics is not None else DiagnosticSink(phase="expand")
		self._parser_factory = parser_factory or _lark_parser_factory

	def new_parser(self, tokens: Sequence[Token], span: Span) -> TokenParser:
		return self._parser_factory(tokens, span)

	def span_err(self, span: Span, message: str, *, code: str | None = None) -> None:
		self.diagnostics.span_err(span, message, code=code)

	def is_target_little_endian(self) -> bool:
		return self.target.is_target_little_endian()

	def expr_u32(self, span: Span, value: int) -> Literal:
		return Literal(loc=span, kind=LitKind.INT, value=value & U32_MASK, suffix="u32")


class SyntaxExtensions:
	"""Name -> expander registry (`fourcc` resolves `fourcc!(...)`)."""

	def __init__(self) -> None:
		self._expanders: Dict[str, Expander] = {}

	def register(self, name: str, expander: Expander) -> None:
		if name in self._expanders:
			raise ValueError(f"macro '{name}' is already registered")
		self._expanders[name] = expander

	def get(self, name: str) -> Optional[Expander]:
		return self._expanders.get(name)

	def __contains__(self, name: object) -> bool:
		return name in self._expanders

	def __iter__(self) -> Iterator[str]:
		return iter(sorted(self._expanders))


def expand_expr(expr: Expr, cx: ExpansionContext, extensions: SyntaxExtensions) -> Expr:
	"""
	Expand every macro invocation inside `expr` (bottom-up).

	Syntax errors in one invocation are reported and leave that invocation as
	an unexpanded `MacroCall`; expansion of the rest continues.
	"""
	if isinstance(expr, MacroCall):
		expander = extensions.get(expr.name)
		if expander is None:
			cx.span_err(expr.loc, f"cannot find macro `{expr.name}!`", code=E_UNKNOWN_MACRO)
			return expr
		try:
			return expander(cx, expr.loc, expr.tokens)
		except MacroSyntaxError as err:
			cx.span_err(err.span, str(err), code=E_MACRO_SYNTAX)
			return expr
	if isinstance(expr, Binary):
		return replace(expr, left=expand_expr(expr.left, cx, extensions), right=expand_expr(expr.right, cx, extensions))
	if isinstance(expr, Unary):
		return replace(expr, operand=expand_expr(expr.operand, cx, extensions))
	if isinstance(expr, Paren):
		return replace(expr, inner=expand_expr(expr.inner, cx, extensions))
	if isinstance(expr, Call):
		return replace(
			expr,
			func=expand_expr(expr.func, cx, extensions),
			args=[expand_expr(a, cx, extensions) for a in expr.args],
		)
	return expr


def expand_program(program: Program, cx: ExpansionContext, extensions: SyntaxExtensions) -> Program:
	"""Return a copy of `program` with all macro invocations expanded."""
	items = [replace(item, value=expand_expr(item.value, cx, extensions)) for item in program.items]
	return Program(items=items)


__all__ = [
	"ExpansionContext",
	"SyntaxExtensions",
	"Expander",
	"ParserFactory",
	"expand_expr",
	"expand_program",
	"E_MACRO_SYNTAX",
	"E_UNKNOWN_MACRO",
	"U32_MASK",
]
