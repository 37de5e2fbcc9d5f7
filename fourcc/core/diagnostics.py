# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for parser/expander/evaluator passes.

A diagnostic is a message plus an optional stable code, phase label and span.
`DiagnosticSink` is the ordered, append-only channel every pass reports into;
the driver renders the collected list as text or JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Optional phase label ("parser", "expand", "const-eval"). The driver fills
	# in the phase of the sink when a diagnostic does not carry its own.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def to_dict(self, *, source: str | None = None) -> dict:
		"""Render to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file or source,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}

	def format_human(self, *, source: str | None = None) -> str:
		file = self.span.file or source or "<input>"
		return f"{file}:{self.span}: {self.severity}: {self.message}"


class DiagnosticSink:
	"""
	Ordered, append-only diagnostic collector.

	Reporting never raises: callers decide separately whether a condition is
	fatal for the current unit of work.
	"""

	def __init__(self, *, phase: str | None = None) -> None:
		self.phase = phase
		self._diagnostics: list[Diagnostic] = []

	def report(self, diag: Diagnostic) -> None:
		if diag.phase is None:
			diag.phase = self.phase
		self._diagnostics.append(diag)

	def span_err(self, span: Span, message: str, *, code: str | None = None) -> None:
		self.report(Diagnostic(message=message, code=code, severity="error", span=span))

	@property
	def diagnostics(self) -> list[Diagnostic]:
		return list(self._diagnostics)

	def has_errors(self) -> bool:
		return any(d.severity == "error" for d in self._diagnostics)

	def codes(self) -> list[str | None]:
		return [d.code for d in self._diagnostics]

	def __iter__(self) -> Iterator[Diagnostic]:
		return iter(list(self._diagnostics))

	def __len__(self) -> int:
		return len(self._diagnostics)


__all__ = ["Diagnostic", "DiagnosticSink"]
