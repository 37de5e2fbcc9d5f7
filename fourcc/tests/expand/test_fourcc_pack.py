# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from fourcc.expand.fourcc import EndianMode, pack


@pytest.mark.parametrize("tag", [b"RIFF", b"WAVE", b"PNG ", b"ftyp", b"\x00\x01\x7f~"])
def test_four_bytes_big_puts_first_byte_high(tag: bytes) -> None:
	assert pack(tag, EndianMode.BIG) == int.from_bytes(tag, "big")


@pytest.mark.parametrize("tag", [b"RIFF", b"WAVE", b"PNG ", b"ftyp", b"\x00\x01\x7f~"])
def test_four_bytes_little_puts_first_byte_low(tag: bytes) -> None:
	assert pack(tag, EndianMode.LITTLE) == int.from_bytes(tag, "little")


def test_known_values() -> None:
	assert pack(b"RIFF", EndianMode.LITTLE) == 0x46464952
	assert pack(b"RIFF", EndianMode.BIG) == 0x52494646
	assert pack(b"PNG ", EndianMode.BIG) == 0x504E4720


def test_short_input_is_not_padded() -> None:
	assert pack(b"AB", EndianMode.BIG) == 0x4142
	assert pack(b"AB", EndianMode.LITTLE) == 0x4241
	assert pack(b"", EndianMode.BIG) == 0


def test_long_input_takes_four_bytes_from_the_iteration_start() -> None:
	assert pack(b"ABCDE", EndianMode.BIG) == 0x41424344
	# Reversed iteration starts at the end: E D C B.
	assert pack(b"ABCDE", EndianMode.LITTLE) == 0x45444342
