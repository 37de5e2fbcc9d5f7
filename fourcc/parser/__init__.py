# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser for the constant-declaration host language (lark, LALR).

`parse_program` builds the AST in `fourcc.parser.ast`; macro invocations keep
their raw tokens, which expanders consume through `LarkTokenParser`.
"""

from __future__ import annotations

from . import ast
from .parser import LiteralDecodeError, build_expr, parse_expr, parse_program
from .token_parser import LarkTokenParser, MacroSyntaxError, TokenParser

__all__ = [
	"ast",
	"parse_program",
	"parse_expr",
	"build_expr",
	"LiteralDecodeError",
	"TokenParser",
	"LarkTokenParser",
	"MacroSyntaxError",
]
