# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from fourcc.const_eval import E_CONST_EVAL, evaluate_program, wrap
from fourcc.core.diagnostics import DiagnosticSink
from fourcc.core.target import TargetConfig
from fourcc.expand import ExpansionContext, default_extensions, expand_program
from fourcc.parser import parse_program


def _eval(src: str, *, little: bool = True):
	cx = ExpansionContext(target=TargetConfig(cfg={"target_endian": "little" if little else "big"}))
	program = expand_program(parse_program(src), cx, default_extensions())
	sink = DiagnosticSink(phase="const-eval")
	consts = evaluate_program(program, sink)
	return {c.name: c for c in consts}, cx.diagnostics, sink


@pytest.mark.parametrize(
	"value, type_name, expected",
	[
		(0x1_0000_0001, "u32", 1),
		(-1, "u8", 0xFF),
		(0xFF, "i8", -1),
		(0x7F, "i8", 127),
		(1 << 64, "u64", 0),
	],
)
def test_wrap(value: int, type_name: str, expected: int) -> None:
	assert wrap(value, type_name) == expected


def test_fourcc_consts_are_u32() -> None:
	consts, expand_diags, sink = _eval(
		"""
const RIFF = fourcc!("RIFF");
const FLAGGED = fourcc!("RIFF", big) | 1;
const NOT_RIFF = ~RIFF;
"""
	)
	assert consts["RIFF"].type_name == "u32"
	assert consts["RIFF"].value == 0x46464952
	assert consts["FLAGGED"].value == 0x52494647
	assert consts["NOT_RIFF"].type_name == "u32"
	assert consts["NOT_RIFF"].value == 0xB9B9B6AD
	assert len(expand_diags) == 0
	assert len(sink) == 0


def test_declared_type_wins_and_wraps() -> None:
	consts, _, sink = _eval("const LOW: u8 = fourcc!(\"RIFF\", big); const NEG: i16 = 0 - 2;")
	assert consts["LOW"].value == 0x46
	assert consts["NEG"].value == -2
	assert len(sink) == 0


def test_untyped_plain_integers_default_to_u64() -> None:
	consts, _, _ = _eval("const A = 1 << 40; const B = 0 - 1;")
	assert consts["A"].type_name == "u64"
	assert consts["A"].value == 1 << 40
	assert consts["B"].value == (1 << 64) - 1


def test_arithmetic_operators() -> None:
	consts, _, sink = _eval(
		"const A: i32 = 7 / 2; const B: i32 = -7 / 2; const C: i32 = -7 % 2; const D = 6 ^ 3; const E = 6 & 3; const F = 2 * 3 - 1;"
	)
	assert [consts[k].value for k in "ABCDEF"] == [3, -3, -1, 5, 2, 5]
	assert len(sink) == 0


@pytest.mark.parametrize(
	"src, message",
	[
		("const A = 1 / 0;", "attempt to divide by zero"),
		("const A = MISSING + 1;", "cannot find constant `MISSING`"),
		('const A = "RIFF";', "expected integer constant, found str literal"),
		("const A = f(1);", "function calls are not allowed"),
		("const A: u32 = 1 << 32;", "shift amount 32 out of range for `u32`"),
		("const A: f32 = 1;", "unknown integer type `f32`"),
		("const A = 1; const A = 2;", "defined multiple times"),
	],
)
def test_evaluation_errors(src: str, message: str) -> None:
	_, _, sink = _eval(src)
	assert sink.codes() == [E_CONST_EVAL]
	assert message in sink.diagnostics[0].message
	assert sink.diagnostics[0].phase == "const-eval"


def test_unexpanded_macros_and_their_dependents_are_skipped_silently() -> None:
	consts, expand_diags, sink = _eval('const BAD = fourcc!("RIFF" big); const USES_BAD = BAD + 1; const OK = 2;')
	assert list(consts) == ["OK"]
	assert len(expand_diags) == 1
	assert len(sink) == 0


def test_advisory_fourcc_errors_still_produce_values() -> None:
	consts, expand_diags, sink = _eval('const SHORT = fourcc!("AB", big); const ZERO = fourcc!(x);')
	assert consts["SHORT"].value == 0x4142
	assert consts["ZERO"].value == 0
	assert expand_diags.codes() == ["E_FOURCC_WRONG_LENGTH", "E_FOURCC_NON_LITERAL"]
	assert len(sink) == 0


def test_failed_redefinition_keeps_the_first_binding() -> None:
	consts, _, sink = _eval("const A = 1; const A = x; const B = A + 1;")
	assert [(c.name, c.value) for c in consts.values()] == [("A", 1), ("B", 2)]
	assert sink.codes() == [E_CONST_EVAL]
	assert "defined multiple times" in sink.diagnostics[0].message


def test_redefinition_of_a_failed_const_is_reported() -> None:
	consts, _, sink = _eval("const A = x; const A = 1; const B = A;")
	assert consts == {}
	assert [d.message for d in sink] == [
		"cannot find constant `x`",
		"constant `A` is defined multiple times",
	]


def test_parenthesised_macro_result_is_folded() -> None:
	consts, expand_diags, sink = _eval('const T = (fourcc!("RIFF", big)) + 1;')
	assert consts["T"].type_name == "u32"
	assert consts["T"].value == 0x52494647
	assert len(expand_diags) == 0
	assert len(sink) == 0
