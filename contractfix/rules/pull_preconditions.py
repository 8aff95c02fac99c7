"""
CR01: preconditions retrievable from a base type or contract holder.

Methods overriding a base method or implementing an interface member should
start with the preconditions they inherit. Missing ones are inserted at the
top of the body, after the docstring.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import libcst as cst

from ..analysis.contract_holders import collect_inherited_preconditions
from ..analysis.dedup import deduplicate
from ..analysis.models import Edit, EditKind, Finding, ImportRequest, PreconditionKind, PreconditionStatement
from ..analysis.preconditions import extract_leading_preconditions
from ..analysis.syntax_utils import is_docstring_stmt
from ..cancellation import check_cancelled
from ..refactoring.cst_transformer import imported_names
from .base import ContractRule, RuleContext, register_rule

logger = logging.getLogger(__name__)


@register_rule
class PullPreconditionsRule(ContractRule):
    rule_id = "CR01"
    title = "Inherited preconditions missing"
    description = "Insert preconditions declared on base methods, interfaces or contract holders."

    def check(self, context: RuleContext) -> List[Finding]:
        settings = self.config.analysis_settings
        present_kinds = PreconditionKind.from_names(settings.present_kinds)

        findings = []
        for function_def, _ in context.functions():
            check_cancelled(context.token)
            method = context.index.method_for_declaration(function_def)
            if method is None or len(method.declarations) != 1:
                continue

            inherited = collect_inherited_preconditions(
                method, context.index, self.config, context.token
            )
            if not inherited:
                continue
            present = extract_leading_preconditions(function_def, present_kinds, self.config)
            missing = deduplicate(inherited, present, settings.semantic_dedup)
            if not missing:
                continue

            logger.debug(f"{method}: {len(missing)} inherited precondition(s) missing")
            findings.append(
                context.finding(
                    self,
                    function_def.name,
                    f"'{function_def.name.value}' is missing {len(missing)} "
                    f"precondition(s) inherited from its base",
                    self._insertion(context, function_def, missing),
                    conditions=[s.invocation.condition_source for s in missing],
                )
            )
        return findings

    def _insertion(
        self,
        context: RuleContext,
        function_def: cst.FunctionDef,
        missing: Sequence[PreconditionStatement],
    ) -> Optional[Edit]:
        body = function_def.body
        if not isinstance(body, cst.IndentedBlock):
            return None

        statements = tuple(
            s.statement.deep_clone().with_changes(leading_lines=[]) for s in missing
        )
        imports = self._imports(context, missing)
        first = body.body[0]
        if is_docstring_stmt(first):
            return Edit(EditKind.INSERT_AFTER, first, statements, imports)
        return Edit(EditKind.INSERT_BEFORE, first, statements, imports)

    def _imports(
        self, context: RuleContext, missing: Sequence[PreconditionStatement]
    ) -> Tuple[ImportRequest, ...]:
        """Imports of the contract classes, as bound in the modules the statements come from."""
        requests: List[ImportRequest] = []
        for precondition in missing:
            if precondition.module_name is None:
                continue
            source = context.index.module_named(precondition.module_name)
            if source is None or source is context.source:
                continue
            class_name = precondition.invocation.class_name
            module = imported_names(source.module).get(class_name)
            if module:
                request = ImportRequest(module, class_name)
                if request not in requests:
                    requests.append(request)
        return tuple(requests)
