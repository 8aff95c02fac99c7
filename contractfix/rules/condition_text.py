"""
CR13: condition string out of sync with its condition.
"""

from typing import List

from ..analysis.invocation import classify_invocation
from ..analysis.models import Edit, EditKind, Finding, InvocationKind, Severity
from ..analysis.syntax_utils import literal_string_value, string_literal
from .base import ContractRule, RuleContext, register_rule


@register_rule
class ConditionTextRule(ContractRule):
    rule_id = "CR13"
    title = "Condition string mismatch"
    description = "Update condition strings of replacement calls that no longer match the condition."
    severity = Severity.INFO

    def check(self, context: RuleContext) -> List[Finding]:
        findings = []
        for site in context.call_sites():
            invocation = classify_invocation(
                site.call, self.config, kinds=(InvocationKind.REPLACEMENT,)
            )
            if invocation is None or invocation.is_condition_text_in_sync:
                continue
            # Computed condition strings are left alone.
            if literal_string_value(invocation.condition_text) is None:
                continue

            expected = invocation.condition_source
            edit = Edit(EditKind.REPLACE, invocation.condition_text, (string_literal(expected),))
            findings.append(
                context.finding(
                    self,
                    invocation.condition_text,
                    f"Condition string does not match condition '{expected}'",
                    edit,
                    expected=expected,
                )
            )
        return findings
