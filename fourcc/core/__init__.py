"""
fourcc.core: shared span/diagnostic/target-config types used across stages.

Modules:
  - span: best-effort source location
  - diagnostics: Diagnostic record + ordered sink
  - target: cfg set answering target layout questions (byte order)
"""

__all__ = [
    "span",
    "diagnostics",
    "target",
]
