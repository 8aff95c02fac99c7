"""
Contract rules. Import order is registry order, which decides which edit
wins when two edits overlap.
"""

from .base import RULES, CallSite, ContractRule, RuleContext, create_rules, register_rule
from .pull_preconditions import PullPreconditionsRule
from .requires_to_raise import RequiresToRaiseRule
from .debug_assert import DebugAssertRule
from .obsolete_contracts import ObsoleteContractRule
from .replacement_class import ReplacementClassRule
from .invariant_methods import InvariantMethodRule
from .missing_condition_text import MissingConditionTextRule
from .condition_text import ConditionTextRule

__all__ = [
    "RULES",
    "CallSite",
    "ConditionTextRule",
    "ContractRule",
    "DebugAssertRule",
    "InvariantMethodRule",
    "MissingConditionTextRule",
    "ObsoleteContractRule",
    "PullPreconditionsRule",
    "ReplacementClassRule",
    "RequiresToRaiseRule",
    "RuleContext",
    "create_rules",
    "register_rule",
]
