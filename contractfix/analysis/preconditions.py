"""
Precondition extraction.

Preconditions form a contiguous prologue at the top of a method body: the
scan keeps taking expression statements and stops at the first statement of
any other shape, even when later statements look like contract calls.
"""

import logging
from typing import List, Optional

import libcst as cst

from ..cancellation import CancellationToken, check_cancelled
from ..config import ContractFixConfig
from ..symbols.model import MethodSymbol
from .invocation import classify_statement, precondition_kind
from .models import PreconditionKind, PreconditionStatement

logger = logging.getLogger(__name__)


def is_expression_statement(statement: cst.CSTNode) -> bool:
    return (
        isinstance(statement, cst.SimpleStatementLine)
        and len(statement.body) == 1
        and isinstance(statement.body[0], cst.Expr)
    )


def leading_expression_statements(function_def: cst.FunctionDef) -> List[cst.SimpleStatementLine]:
    if not isinstance(function_def.body, cst.IndentedBlock):
        return []
    prologue = []
    for statement in function_def.body.body:
        if not is_expression_statement(statement):
            break
        prologue.append(statement)
    return prologue


def extract_leading_preconditions(
    function_def: cst.FunctionDef,
    kinds: PreconditionKind = PreconditionKind.DEFAULT,
    config: Optional[ContractFixConfig] = None,
) -> List[PreconditionStatement]:
    """Return the precondition statements of ``function_def``'s prologue, in order."""
    config = config or ContractFixConfig.default()
    result = []
    for statement in leading_expression_statements(function_def):
        invocation = classify_statement(statement, config)
        if invocation is None:
            continue
        kind = precondition_kind(invocation, config)
        if kind is not None and kind & kinds:
            result.append(PreconditionStatement(statement, invocation))
    return result


def extract_method_preconditions(
    method: MethodSymbol,
    kinds: PreconditionKind = PreconditionKind.DEFAULT,
    config: Optional[ContractFixConfig] = None,
    token: Optional[CancellationToken] = None,
) -> List[PreconditionStatement]:
    """Extract from a method symbol; ambiguous or missing source yields nothing."""
    check_cancelled(token)
    declarations = method.original_definition.declarations
    if len(declarations) != 1:
        logger.debug(f"{method} has {len(declarations)} declarations; skipping extraction")
        return []
    statements = extract_leading_preconditions(declarations[0], kinds, config)
    for statement in statements:
        statement.module_name = method.containing_type.module_name
    return statements
