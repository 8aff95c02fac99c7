"""
CR03: legacy ``requires``/``assert_``/``assume`` to the debug assertion call.

The condition text is always appended, so the assertion reports the failed
condition even without a message:

    Contract.requires(x > 0)          ->  Debug.assert_(x > 0, "x > 0")
    Contract.assert_(ok, "broken")    ->  Debug.assert_(ok, "broken", "ok")
"""

from typing import List

import libcst as cst

from ..analysis.invocation import classify_invocation
from ..analysis.models import ContractInvocation, Edit, EditKind, Finding, ImportRequest, InvocationKind
from ..analysis.syntax_utils import string_literal
from .base import ContractRule, RuleContext, register_rule


@register_rule
class DebugAssertRule(ContractRule):
    rule_id = "CR03"
    title = "Contract call to debug assertion"
    description = "Replace untyped requires/assert_/assume calls with the debug assertion."

    def check(self, context: RuleContext) -> List[Finding]:
        library = self.config.library
        methods = library.requires_methods + library.assert_methods + library.assume_methods

        findings = []
        for site in context.call_sites():
            if context.in_holder_class(site):
                continue
            invocation = classify_invocation(
                site.call, self.config, kinds=(InvocationKind.LEGACY,), methods=methods
            )
            if invocation is None or invocation.is_typed:
                continue

            edit = Edit(
                EditKind.REPLACE,
                site.call,
                (self._debug_call(invocation),),
                (ImportRequest(library.debug_module, library.debug_class),),
            )
            findings.append(
                context.finding(
                    self,
                    site.call,
                    f"{invocation.class_name}.{invocation.method_name} can be replaced with "
                    f"{library.debug_class}.{library.assert_methods[0]}",
                    edit,
                )
            )
        return findings

    def _debug_call(self, invocation: ContractInvocation) -> cst.Call:
        library = self.config.library
        args = [cst.Arg(value=invocation.condition.deep_clone())]
        if invocation.message is not None:
            args.append(cst.Arg(value=invocation.message.deep_clone()))
        args.append(cst.Arg(value=string_literal(invocation.condition_source)))
        return invocation.call.with_changes(
            func=cst.Attribute(
                value=cst.Name(library.debug_class), attr=cst.Name(library.assert_methods[0])
            ),
            args=args,
        )
