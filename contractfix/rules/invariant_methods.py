"""
CR06: report invariant methods.

Invariant methods only feed the legacy runtime checker. They are reported
for removal by hand and never rewritten.
"""

from typing import List

from ..analysis.models import Finding, Severity
from .base import ContractRule, RuleContext, register_rule


@register_rule
class InvariantMethodRule(ContractRule):
    rule_id = "CR06"
    title = "Invariant method"
    description = "Report methods decorated as contract invariant methods."
    severity = Severity.INFO

    def check(self, context: RuleContext) -> List[Finding]:
        findings = []
        for function, classes in context.functions():
            if not classes or not context.is_invariant_method(function):
                continue
            findings.append(
                context.finding(
                    self,
                    function.name,
                    f"Invariant method {classes[-1].name.value}.{function.name.value} "
                    f"can be removed",
                )
            )
        return findings
