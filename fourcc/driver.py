# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line driver: parse -> expand macros -> fold constants.

With --json, prints one JSON object (exit_code, diagnostics, consts) to
stdout; otherwise prints `NAME = value` lines to stdout and human-readable
diagnostics to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from lark.exceptions import UnexpectedInput

from fourcc.const_eval import INT_TYPES, ConstValue, evaluate_program
from fourcc.core.diagnostics import Diagnostic, DiagnosticSink
from fourcc.core.span import Span
from fourcc.core.target import TargetConfig, parse_cfg_arg
from fourcc.expand import ExpansionContext, SyntaxExtensions, default_extensions, expand_program
from fourcc.parser import LiteralDecodeError, parse_program
from fourcc.parser.ast import Program

E_PARSE = "E_PARSE"
E_CONFIG = "E_CONFIG"
E_IO = "E_IO"


@dataclass
class CompileResult:
	program: Optional[Program]
	consts: List[ConstValue] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	def has_errors(self) -> bool:
		return any(d.severity == "error" for d in self.diagnostics)


def compile_source(
	source: str,
	*,
	target: TargetConfig,
	file: str | None = None,
	extensions: SyntaxExtensions | None = None,
) -> CompileResult:
	"""
	Run the whole pipeline over one source text.

	Parse errors stop the pipeline for this source; expansion and evaluation
	errors are collected and the remaining consts are still produced.
	"""
	parse_sink = DiagnosticSink(phase="parser")
	try:
		program = parse_program(source)
	except LiteralDecodeError as err:
		parse_sink.span_err(err.loc.in_file(file), str(err), code=E_PARSE)
		return CompileResult(program=None, diagnostics=parse_sink.diagnostics)
	except UnexpectedInput as err:
		span = Span(file=file, line=getattr(err, "line", None), column=getattr(err, "column", None), raw=err)
		parse_sink.span_err(span, str(err).strip(), code=E_PARSE)
		return CompileResult(program=None, diagnostics=parse_sink.diagnostics)

	cx = ExpansionContext(target=target, diagnostics=DiagnosticSink(phase="expand"))
	expanded = expand_program(program, cx, extensions if extensions is not None else default_extensions())
	eval_sink = DiagnosticSink(phase="const-eval")
	consts = evaluate_program(expanded, eval_sink)
	diagnostics = [*cx.diagnostics.diagnostics, *eval_sink.diagnostics]
	if file is not None:
		for d in diagnostics:
			d.span = d.span.in_file(file)
	return CompileResult(program=expanded, consts=consts, diagnostics=diagnostics)


def _format_value(c: ConstValue, fmt: str) -> str:
	if fmt == "dec":
		return str(c.value)
	bits = INT_TYPES[c.type_name][0]
	return f"0x{c.value & ((1 << bits) - 1):0{bits // 4}X}"


def _const_to_json(c: ConstValue, source: str) -> dict:
	return {
		"file": c.span.file or source,
		"name": c.name,
		"type": c.type_name,
		"value": c.value,
		"line": c.span.line,
	}


def _build_target(args: argparse.Namespace) -> TargetConfig:
	target = TargetConfig.from_triple(args.target) if args.target else TargetConfig.host()
	for raw in args.cfg or []:
		key, value = parse_cfg_arg(raw)
		target = target.with_cfg(key, value)
	return target


def _emit_fatal(message: str, code: str, *, as_json: bool, file: str | None = None) -> int:
	diag = Diagnostic(message=message, code=code, phase="driver", span=Span(file=file))
	if as_json:
		print(json.dumps({"exit_code": 1, "diagnostics": [diag.to_dict()], "consts": []}))
	else:
		print(diag.format_human(source=file or "fourcc"), file=sys.stderr)
	return 1


def main(argv: list[str] | None = None) -> int:
	"""
	Compile one or more source files and print their constants.

	Exit code is 1 if any error diagnostic was produced (including advisory
	macro errors such as a wrong-length fourcc literal), else 0.
	"""
	parser = argparse.ArgumentParser(prog="fourcc", description="Expand fourcc! constants in source files")
	parser.add_argument("source", type=Path, nargs="+", help="Path(s) to source file(s)")
	parser.add_argument(
		"--target",
		type=str,
		default=None,
		help="Target triple (e.g. powerpc-unknown-linux-gnu); default: the host machine",
	)
	parser.add_argument(
		"--cfg",
		dest="cfg",
		action="append",
		type=str,
		help='Set a configuration value, e.g. --cfg target_endian=big (repeatable)',
	)
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics and constants as JSON (phase/code/message/severity/file/line/column)",
	)
	parser.add_argument(
		"--format",
		choices=("hex", "dec"),
		default="hex",
		help="Value format for human-readable output (default: hex)",
	)
	args = parser.parse_args(argv)

	try:
		target = _build_target(args)
	except ValueError as err:
		return _emit_fatal(str(err), E_CONFIG, as_json=args.json)

	all_diags: list[tuple[Diagnostic, str]] = []
	all_consts: list[tuple[ConstValue, str]] = []
	for path in args.source:
		try:
			text = path.read_text(encoding="utf-8")
		except OSError as err:
			return _emit_fatal(f"cannot read source: {err}", E_IO, as_json=args.json, file=str(path))
		result = compile_source(text, target=target, file=str(path))
		all_diags.extend((d, str(path)) for d in result.diagnostics)
		all_consts.extend((c, str(path)) for c in result.consts)

	exit_code = 1 if any(d.severity == "error" for d, _ in all_diags) else 0
	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [d.to_dict(source=src) for d, src in all_diags],
			"consts": [_const_to_json(c, src) for c, src in all_consts],
		}
		print(json.dumps(payload))
	else:
		for d, src in all_diags:
			print(d.format_human(source=src), file=sys.stderr)
		for c, _src in all_consts:
			print(f"{c.name} = {_format_value(c, args.format)}")
	return exit_code


__all__ = ["CompileResult", "compile_source", "main", "E_PARSE", "E_CONFIG", "E_IO"]
