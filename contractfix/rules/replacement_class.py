"""
CR05: retarget legacy calls to the replacement class.

Only the qualifier changes, so arguments and formatting are kept:

    contracts.Contract.requires(x > 0)  ->  Check.requires(x > 0)
"""

from typing import List

import libcst as cst

from ..analysis.invocation import classify_invocation, split_call_target
from ..analysis.models import Edit, EditKind, Finding, ImportRequest, InvocationKind
from .base import ContractRule, RuleContext, register_rule


@register_rule
class ReplacementClassRule(ContractRule):
    rule_id = "CR05"
    title = "Contract call to replacement class"
    description = "Rename the qualifier of untyped requires/assert_/assume calls."

    def check(self, context: RuleContext) -> List[Finding]:
        library = self.config.library
        methods = library.requires_methods + library.assert_methods + library.assume_methods
        imports = (ImportRequest(library.replacement_module, library.replacement_class),)

        findings = []
        for site in context.call_sites():
            if context.in_holder_class(site):
                continue
            invocation = classify_invocation(
                site.call, self.config, kinds=(InvocationKind.LEGACY,), methods=methods
            )
            if invocation is None or invocation.is_typed:
                continue

            qualifier = split_call_target(site.call.func)[0]
            edit = Edit(
                EditKind.REPLACE,
                qualifier,
                (cst.Name(library.replacement_class, lpar=qualifier.lpar, rpar=qualifier.rpar),),
                imports,
            )
            findings.append(
                context.finding(
                    self,
                    qualifier,
                    f"Use {library.replacement_class}.{invocation.method_name} instead of "
                    f"{invocation.class_name}.{invocation.method_name}",
                    edit,
                )
            )
        return findings
