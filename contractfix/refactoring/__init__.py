"""
Code generation for contract fixes: guard synthesis and edit application.
"""

from .cst_transformer import AppliedEditsResult, EditApplier, add_imports, apply_edits
from .raise_synthesizer import (
    RaiseSynthesizer,
    build_guard_statement,
    build_raise_expression,
    find_guarded_parameter,
    negate_condition,
)

__all__ = [
    "AppliedEditsResult",
    "EditApplier",
    "RaiseSynthesizer",
    "add_imports",
    "apply_edits",
    "build_guard_statement",
    "build_raise_expression",
    "find_guarded_parameter",
    "negate_condition",
]
