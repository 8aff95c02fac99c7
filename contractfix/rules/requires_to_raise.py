"""
CR02: typed ``requires`` lowered to an explicit guard.

    Contract.requires[ArgumentNoneError](x is not None)

becomes ``if x is None: raise ArgumentNoneError("x")``.
"""

import logging
from typing import List

from ..analysis.invocation import classify_invocation
from ..analysis.models import Edit, EditKind, Finding, InvocationKind
from ..cancellation import check_cancelled
from ..refactoring.raise_synthesizer import RaiseSynthesizer
from .base import ContractRule, RuleContext, register_rule

logger = logging.getLogger(__name__)


@register_rule
class RequiresToRaiseRule(ContractRule):
    rule_id = "CR02"
    title = "Typed requires"
    description = "Replace typed requires calls with 'if not condition: raise E(...)'."

    def check(self, context: RuleContext) -> List[Finding]:
        library = self.config.library
        synthesizer = RaiseSynthesizer(context.index, self.config)

        findings = []
        for site in context.call_sites():
            if site.statement is None or context.in_holder_class(site):
                continue
            invocation = classify_invocation(
                site.call, self.config, kinds=(InvocationKind.LEGACY,), methods=library.requires_methods
            )
            if invocation is None or not invocation.is_typed:
                continue
            check_cancelled(context.token)

            guard = synthesizer.build_statement(
                site.statement,
                invocation,
                context.parameter_names(site.function),
                context.source.module_name,
            )
            edit = Edit(EditKind.REPLACE, site.statement, (guard,)) if guard is not None else None
            findings.append(
                context.finding(
                    self,
                    site.call,
                    f"Typed {invocation.class_name}.{invocation.method_name} can be "
                    f"replaced with an explicit raise",
                    edit,
                    condition=invocation.condition_source,
                )
            )
        return findings
