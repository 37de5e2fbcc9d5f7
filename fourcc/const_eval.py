# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Constant folding for expanded programs.

Each `const` is folded to an integer and wrapped to its type. The type comes
from the declaration (`const X: u16 = ...`), else from the first suffixed
literal or typed const the expression mentions (`fourcc!` yields `u32`
literals), else `u64`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from fourcc.core.diagnostics import DiagnosticSink
from fourcc.core.span import Span
from fourcc.parser.ast import Binary, Call, ConstItem, Expr, LitKind, Literal, MacroCall, Name, Paren, Program, Unary

E_CONST_EVAL = "E_CONST_EVAL"

DEFAULT_TYPE = "u64"

INT_TYPES: Dict[str, tuple[int, bool]] = {
	"u8": (8, False),
	"u16": (16, False),
	"u32": (32, False),
	"u64": (64, False),
	"i8": (8, True),
	"i16": (16, True),
	"i32": (32, True),
	"i64": (64, True),
}


@dataclass(frozen=True)
class ConstValue:
	name: str
	type_name: str
	value: int
	span: Span


class ConstEvalError(ValueError):
	def __init__(self, message: str, *, span: Span) -> None:
		super().__init__(message)
		self.span = span


class _Skipped(Exception):
	"""The expression depends on something already reported (unexpanded macro, failed const)."""


def wrap(value: int, type_name: str) -> int:
	"""Wrap `value` to the two's-complement range of `type_name`."""
	bits, signed = INT_TYPES[type_name]
	value &= (1 << bits) - 1
	if signed and value >= 1 << (bits - 1):
		value -= 1 << bits
	return value


class _Evaluator:
	def __init__(self, consts: Dict[str, ConstValue], failed: set[str]) -> None:
		self._consts = consts
		self._failed = failed

	def infer_type(self, expr: Expr) -> Optional[str]:
		if isinstance(expr, Literal):
			return expr.suffix if expr.suffix in INT_TYPES else None
		if isinstance(expr, Name):
			known = self._consts.get(expr.ident)
			return known.type_name if known is not None else None
		if isinstance(expr, Paren):
			return self.infer_type(expr.inner)
		if isinstance(expr, Unary):
			return self.infer_type(expr.operand)
		if isinstance(expr, Binary):
			return self.infer_type(expr.left) or self.infer_type(expr.right)
		return None

	def eval(self, expr: Expr, type_name: str) -> int:
		if isinstance(expr, MacroCall):
			raise _Skipped()
		if isinstance(expr, Literal):
			if expr.kind is not LitKind.INT:
				raise ConstEvalError(f"expected integer constant, found {expr.kind.value} literal", span=expr.loc)
			return int(expr.value)  # type: ignore[call-overload]
		if isinstance(expr, Name):
			if expr.ident in self._failed:
				raise _Skipped()
			known = self._consts.get(expr.ident)
			if known is None:
				raise ConstEvalError(f"cannot find constant `{expr.ident}`", span=expr.loc)
			return known.value
		if isinstance(expr, Paren):
			return self.eval(expr.inner, type_name)
		if isinstance(expr, Unary):
			operand = self.eval(expr.operand, type_name)
			if expr.op == "-":
				return wrap(-operand, type_name)
			if expr.op == "~":
				return wrap(~operand, type_name)
			raise ConstEvalError(f"unsupported unary operator `{expr.op}`", span=expr.loc)
		if isinstance(expr, Binary):
			return self._eval_binary(expr, type_name)
		if isinstance(expr, Call):
			raise ConstEvalError("function calls are not allowed in constants", span=expr.loc)
		raise ConstEvalError("unsupported constant expression", span=expr.loc)

	def _eval_binary(self, expr: Binary, type_name: str) -> int:
		left = self.eval(expr.left, type_name)
		right = self.eval(expr.right, type_name)
		op = expr.op
		if op in ("/", "%"):
			if right == 0:
				raise ConstEvalError("attempt to divide by zero", span=expr.loc)
			# Integer division truncates toward zero.
			quot = abs(left) // abs(right)
			if (left < 0) != (right < 0):
				quot = -quot
			return wrap(quot if op == "/" else left - quot * right, type_name)
		if op in ("<<", ">>"):
			bits = INT_TYPES[type_name][0]
			if right < 0 or right >= bits:
				raise ConstEvalError(f"shift amount {right} out of range for `{type_name}`", span=expr.loc)
			return wrap(left << right if op == "<<" else left >> right, type_name)
		if op == "+":
			return wrap(left + right, type_name)
		if op == "-":
			return wrap(left - right, type_name)
		if op == "*":
			return wrap(left * right, type_name)
		if op == "&":
			return wrap(left & right, type_name)
		if op == "|":
			return wrap(left | right, type_name)
		if op == "^":
			return wrap(left ^ right, type_name)
		raise ConstEvalError(f"unsupported binary operator `{op}`", span=expr.loc)


def evaluate_program(program: Program, diagnostics: DiagnosticSink) -> List[ConstValue]:
	"""
	Fold every const in declaration order.

	Consts that fail report `E_CONST_EVAL` and are left out of the result, as are
	consts that still contain an unexpanded macro (already reported by the
	expander) or refer to a const that failed.
	"""
	consts: Dict[str, ConstValue] = {}
	failed: set[str] = set()
	out: List[ConstValue] = []
	ev = _Evaluator(consts, failed)
	for item in program.items:
		if item.name in consts or item.name in failed:
			diagnostics.span_err(item.loc, f"constant `{item.name}` is defined multiple times", code=E_CONST_EVAL)
			continue
		value = _evaluate_item(ev, item, diagnostics)
		if value is None:
			failed.add(item.name)
			continue
		consts[item.name] = value
		out.append(value)
	return out


def _evaluate_item(ev: _Evaluator, item: ConstItem, diagnostics: DiagnosticSink) -> Optional[ConstValue]:
	type_name = item.type_name or ev.infer_type(item.value) or DEFAULT_TYPE
	if type_name not in INT_TYPES:
		diagnostics.span_err(item.loc, f"unknown integer type `{type_name}`", code=E_CONST_EVAL)
		return None
	try:
		value = ev.eval(item.value, type_name)
	except _Skipped:
		return None
	except ConstEvalError as err:
		diagnostics.span_err(err.span, str(err), code=E_CONST_EVAL)
		return None
	return ConstValue(name=item.name, type_name=type_name, value=wrap(value, type_name), span=item.loc)


__all__ = ["ConstValue", "ConstEvalError", "evaluate_program", "wrap", "E_CONST_EVAL", "INT_TYPES"]
