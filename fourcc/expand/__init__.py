# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compile-time macro expansion.

`default_extensions()` returns a registry with every built-in expander
(currently `fourcc!`).
"""

from __future__ import annotations

from .base import (
	E_MACRO_SYNTAX,
	E_UNKNOWN_MACRO,
	ExpansionContext,
	SyntaxExtensions,
	expand_expr,
	expand_program,
)
from .fourcc import MACRO_NAME as FOURCC_MACRO_NAME
from .fourcc import expand_fourcc


def default_extensions() -> SyntaxExtensions:
	ext = SyntaxExtensions()
	ext.register(FOURCC_MACRO_NAME, expand_fourcc)
	return ext


__all__ = [
	"ExpansionContext",
	"SyntaxExtensions",
	"default_extensions",
	"expand_expr",
	"expand_program",
	"expand_fourcc",
	"E_MACRO_SYNTAX",
	"E_UNKNOWN_MACRO",
]
