# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Target configuration: a cfg set of `key -> value` pairs.

Expanders ask layout questions ("is the target little-endian?") through this
object instead of looking at the host interpreter, so a build for
`powerpc-unknown-linux-gnu` on an x86_64 machine packs big-endian values.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Mapping

TARGET_ENDIAN = "target_endian"
TARGET_ARCH = "target_arch"

# Architectures whose default byte order differs from little-endian, plus the
# little-endian spellings of otherwise big-endian families.
_BIG_ENDIAN_ARCHES = frozenset(
	{
		"aarch64_be",
		"armeb",
		"armebv7r",
		"thumbeb",
		"m68k",
		"mips",
		"mips64",
		"mipsisa32r6",
		"mipsisa64r6",
		"powerpc",
		"powerpc64",
		"s390x",
		"sparc",
		"sparc64",
		"sparcv9",
		"hexagon_be",
		"bpfeb",
	}
)
_LITTLE_ENDIAN_PREFIXES = (
	"x86_64",
	"i386",
	"i586",
	"i686",
	"aarch64",
	"arm64",
	"arm",
	"thumb",
	"riscv",
	"wasm",
	"mipsel",
	"mips64el",
	"mipsisa32r6el",
	"mipsisa64r6el",
	"powerpc64le",
	"loongarch",
	"bpfel",
	"hexagon",
	"msp430",
	"avr",
	"nvptx",
)


def _endian_for_arch(arch: str) -> str:
	if arch in _BIG_ENDIAN_ARCHES:
		return "big"
	# Checked after the exact big-endian names: `armeb` also starts with `arm`.
	if arch.startswith(_LITTLE_ENDIAN_PREFIXES):
		return "little"
	raise ValueError(f"unknown target architecture '{arch}' (cannot infer byte order)")


@dataclass(frozen=True)
class TargetConfig:
	"""
	Build configuration visible to expanders.

	`cfg` mirrors the `name = "value"` meta items a build defines; only
	`target_endian` is interpreted by the current expanders.
	"""

	cfg: Mapping[str, str] = field(default_factory=dict)
	triple: str | None = None

	@classmethod
	def host(cls) -> "TargetConfig":
		"""Configuration for the machine running the compiler."""
		return cls(cfg={TARGET_ENDIAN: sys.byteorder})

	@classmethod
	def from_triple(cls, triple: str) -> "TargetConfig":
		"""
		Configuration for a target triple such as `x86_64-unknown-linux-gnu`.

		Only the architecture component is inspected. Raises `ValueError` for an
		empty triple or an architecture with no known byte order.
		"""
		arch = triple.split("-", 1)[0].strip().lower()
		if not arch:
			raise ValueError(f"invalid target triple '{triple}'")
		return cls(cfg={TARGET_ARCH: arch, TARGET_ENDIAN: _endian_for_arch(arch)}, triple=triple)

	def with_cfg(self, key: str, value: str) -> "TargetConfig":
		"""Return a copy with `key = value` added (or overridden)."""
		cfg = dict(self.cfg)
		cfg[key] = value
		return TargetConfig(cfg=cfg, triple=self.triple)

	def contains(self, key: str, value: str) -> bool:
		return self.cfg.get(key) == value

	def is_target_little_endian(self) -> bool:
		return self.contains(TARGET_ENDIAN, "little")


def parse_cfg_arg(text: str) -> tuple[str, str]:
	"""
	Parse a `key=value` (or `key="value"`) command-line cfg override.

	Raises `ValueError` if the text has no `=` or an empty key.
	"""
	key, sep, value = text.partition("=")
	key = key.strip()
	if not sep or not key:
		raise ValueError(f"invalid cfg '{text}' (expected key=value)")
	value = value.strip()
	if len(value) >= 2 and value[0] == value[-1] == '"':
		value = value[1:-1]
	return key, value


__all__ = ["TargetConfig", "TARGET_ENDIAN", "TARGET_ARCH", "parse_cfg_arg"]
