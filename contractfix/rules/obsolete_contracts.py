"""
CR04: removal of contract calls that have no replacement.

Postconditions, invariants and ``end_contract_block`` markers are dropped.
Invariant methods are left alone; CR06 reports them for removal by hand.
"""

from typing import List, Optional, Tuple

import libcst as cst

from ..analysis.invocation import MAX_ARGUMENTS, split_call_target
from ..analysis.models import Edit, EditKind, Finding
from .base import ContractRule, RuleContext, register_rule

END_CONTRACT_BLOCK = "end_contract_block"


@register_rule
class ObsoleteContractRule(ContractRule):
    rule_id = "CR04"
    title = "Obsolete contract call"
    description = "Remove ensures/ensures_on_throw/invariant/end_contract_block statements."

    def _removable_target(self, call: cst.Call) -> Optional[Tuple[str, str]]:
        """(class, method) of a legacy call with no replacement, else None."""
        library = self.config.library
        target = split_call_target(call.func)
        if target is None:
            return None
        _, class_name, method_name, subscript = target
        if class_name != library.legacy_class or subscript is not None:
            return None
        if method_name not in library.removable_methods:
            return None
        if any(arg.star for arg in call.args):
            return None
        # The block marker takes no arguments; the others take a condition.
        if method_name == END_CONTRACT_BLOCK:
            if call.args:
                return None
        elif not 1 <= len(call.args) <= MAX_ARGUMENTS:
            return None
        return class_name, method_name

    def check(self, context: RuleContext) -> List[Finding]:
        findings = []
        for site in context.call_sites():
            if site.statement is None or context.in_holder_class(site):
                continue
            if context.is_invariant_method(site.function):
                continue
            target = self._removable_target(site.call)
            if target is None:
                continue
            class_name, method_name = target
            findings.append(
                context.finding(
                    self,
                    site.call,
                    f"{class_name}.{method_name} has no replacement and can be removed",
                    Edit(EditKind.REMOVE, site.statement),
                )
            )
        return findings
