from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from lark import Token

from fourcc.core.span import Span


class LitKind(Enum):
    """Tag of a `Literal` node; expanders match on this instead of node types."""

    STR = "str"
    BYTE_STR = "byte_str"
    INT = "int"
    FLOAT = "float"
    CHAR = "char"
    BOOL = "bool"


class Expr:
    loc: Span


@dataclass
class Literal(Expr):
	"""
	A literal of any kind.

	`value` is a `str` for STR/CHAR, `bytes` for BYTE_STR, `int` for INT,
	`float` for FLOAT and `bool` for BOOL. `suffix` is the type suffix of a
	numeric literal (`u32` in `7u32`), if any.
	"""

	loc: Span
	kind: LitKind
	value: object
	suffix: Optional[str] = None


@dataclass
class Name(Expr):
    loc: Span
    ident: str


@dataclass
class Paren(Expr):
    """A parenthesised expression; kept so `(x)` is distinguishable from `x`."""

    loc: Span
    inner: Expr


@dataclass
class Unary(Expr):
    loc: Span
    op: str
    operand: Expr


@dataclass
class Binary(Expr):
    loc: Span
    op: str
    left: Expr
    right: Expr


@dataclass
class Call(Expr):
    loc: Span
    func: Expr
    args: List[Expr] = field(default_factory=list)


@dataclass
class MacroCall(Expr):
	"""
	An unexpanded `name!( ... )` invocation.

	`tokens` are the raw lark tokens between the outer parentheses (nested
	delimiters included, outer ones excluded), in source order.
	"""

	loc: Span
	name: str
	tokens: List[Token] = field(default_factory=list)


@dataclass(frozen=True)
class Ident:
    name: str
    span: Span


@dataclass
class ConstItem:
    loc: Span
    name: str
    type_name: Optional[str]
    value: Expr


@dataclass
class Program:
    items: List[ConstItem] = field(default_factory=list)
