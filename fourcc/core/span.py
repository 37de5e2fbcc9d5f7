# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span carries best-effort file/line/column info (1-based, as lark reports
them) plus the end position when the parser knows it. Spans are values: the
expander copies them into the nodes it builds, nothing mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	# Parser-specific location object (lark Token/Meta); never part of equality.
	raw: Any = field(default=None, compare=False, repr=False)

	@classmethod
	def from_loc(cls, loc: Any) -> "Span":
		"""
		Construct a Span from an existing parser/location object.

		Accepts a Span (returned unchanged), a lark `Token`, a lark `Meta`, or
		any object exposing `line`/`column` (and optionally `end_line`/
		`end_column`).
		"""
		if loc is None:
			return cls()
		if isinstance(loc, cls):
			return loc
		return cls(
			file=getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=loc,
		)

	def to(self, other: "Span") -> "Span":
		"""Return a span starting at `self` and ending where `other` ends."""
		return replace(self, end_line=other.end_line, end_column=other.end_column, raw=None)

	def in_file(self, file: str | None) -> "Span":
		if file is None or self.file is not None:
			return self
		return replace(self, file=file)

	def __str__(self) -> str:
		line = self.line if self.line is not None else "?"
		column = self.column if self.column is not None else "?"
		return f"{line}:{column}"


__all__ = ["Span"]
