# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
fourcc: compile-time four-character-code expansion.

The pipeline is parser -> expander -> const evaluator. The CLI entrypoint is
`fourcc.driver:main` (also `python -m fourcc`).
"""

__all__ = []
