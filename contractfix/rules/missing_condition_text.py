"""
CR07: replacement calls without a condition string.

    Check.requires(x > 0, "positive")

becomes

    Check.requires(x > 0, "positive", condition_string="x > 0")

so failures report the condition as written. CR13 keeps the string in sync
afterwards.
"""

from typing import List

import libcst as cst

from ..analysis.invocation import MAX_ARGUMENTS, classify_invocation
from ..analysis.models import Edit, EditKind, Finding, InvocationKind, Severity
from ..analysis.syntax_utils import literal_string_value, string_literal
from .base import ContractRule, RuleContext, register_rule

_LITERALS = (cst.BaseString, cst.BaseNumber)
_CONSTANT_NAMES = {"True", "False", "None"}


def is_constant(expr: cst.BaseExpression) -> bool:
    if isinstance(expr, _LITERALS):
        return True
    return isinstance(expr, cst.Name) and expr.value in _CONSTANT_NAMES


@register_rule
class MissingConditionTextRule(ContractRule):
    rule_id = "CR07"
    title = "Missing condition string"
    description = "Add condition_string to replacement requires/assert_/assume calls."
    severity = Severity.INFO

    def check(self, context: RuleContext) -> List[Finding]:
        library = self.config.library
        methods = library.requires_methods + library.assert_methods + library.assume_methods

        findings = []
        for site in context.call_sites():
            invocation = classify_invocation(
                site.call, self.config, kinds=(InvocationKind.REPLACEMENT,), methods=methods
            )
            if invocation is None or invocation.is_typed or invocation.condition_text is not None:
                continue
            if len(invocation.arguments) >= MAX_ARGUMENTS or is_constant(invocation.condition):
                continue
            expected = invocation.condition_source
            # A message that already spells out the condition is enough.
            if literal_string_value(invocation.message) == expected:
                continue

            argument = cst.Arg(
                keyword=cst.Name(library.condition_text_keyword),
                value=string_literal(expected),
                equal=cst.AssignEqual(
                    whitespace_before=cst.SimpleWhitespace(""),
                    whitespace_after=cst.SimpleWhitespace(""),
                ),
            )
            replacement = site.call.with_changes(args=list(site.call.args) + [argument])
            findings.append(
                context.finding(
                    self,
                    site.call,
                    f"{invocation.class_name}.{invocation.method_name} can carry its "
                    f"condition string '{expected}'",
                    Edit(EditKind.REPLACE, site.call, (replacement,)),
                    expected=expected,
                )
            )
        return findings
