"""
analysis/invocation.py

Invocation classifier: recognises contract-shaped calls such as

    Contract.requires(x is not None, "x is required")
    Contract.requires[ArgumentNoneError](x is not None)
    contracts.Debug.assert_(ok, "message", "ok")
    Check.requires(x > 0, condition_string="x > 0")

and normalizes them into ``ContractInvocation`` records. Every rule goes
through this module to decide whether a call is a contract call.
"""

from __future__ import annotations

import logging
from typing import Collection, Dict, Optional, Tuple

import libcst as cst

from ..config import ContractFixConfig, ContractLibraryConfig
from ..symbols.model import dotted_name
from .models import ContractInvocation, InvocationKind, PreconditionKind

logger = logging.getLogger(__name__)

MIN_ARGUMENTS = 1
MAX_ARGUMENTS = 3


def _allow_list(library: ContractLibraryConfig) -> Dict[str, InvocationKind]:
    return {
        library.legacy_class: InvocationKind.LEGACY,
        library.debug_class: InvocationKind.DEBUG,
        library.replacement_class: InvocationKind.REPLACEMENT,
    }


def split_call_target(
    func: cst.BaseExpression,
) -> Optional[Tuple[cst.BaseExpression, str, str, Optional[cst.Subscript]]]:
    """
    Split ``[ns.]ClassName.method[...]`` into its parts.

    Returns (qualifier, class name, method name, subscript) or None when the
    callee does not have that shape.
    """
    subscript = None
    if isinstance(func, cst.Subscript):
        subscript = func
        func = func.value
    if not isinstance(func, cst.Attribute):
        return None

    qualifier = func.value
    if isinstance(qualifier, cst.Name):
        class_name = qualifier.value
    elif isinstance(qualifier, cst.Attribute) and dotted_name(qualifier) is not None:
        class_name = qualifier.attr.value
    else:
        return None
    return qualifier, class_name, func.attr.value, subscript


def _exception_type(subscript: cst.Subscript) -> Optional[cst.BaseExpression]:
    if len(subscript.slice) != 1:
        return None
    element = subscript.slice[0].slice
    if not isinstance(element, cst.Index):
        return None
    if not isinstance(element.value, (cst.Name, cst.Attribute)):
        return None
    return element.value


def classify_invocation(
    call: cst.Call,
    config: Optional[ContractFixConfig] = None,
    kinds: Optional[Collection[InvocationKind]] = None,
    methods: Optional[Collection[str]] = None,
) -> Optional[ContractInvocation]:
    """
    Classify ``call`` as a contract invocation.

    Args:
        call: The call expression.
        config: Supplies the allow-listed class names and keyword names.
        kinds: Restrict matches to these dialects.
        methods: Restrict matches to these method names.

    Returns:
        The normalized invocation, or None when the call does not match.
    """
    library = (config or ContractFixConfig.default()).library

    target = split_call_target(call.func)
    if target is None:
        return None
    _, class_name, method_name, subscript = target

    kind = _allow_list(library).get(class_name)
    if kind is None:
        return None
    if kinds is not None and kind not in kinds:
        return None
    if methods is not None and method_name not in methods:
        return None

    exception_type = None
    if subscript is not None:
        if method_name not in library.requires_methods:
            return None
        exception_type = _exception_type(subscript)
        if exception_type is None:
            return None

    args = tuple(call.args)
    if not MIN_ARGUMENTS <= len(args) <= MAX_ARGUMENTS:
        return None
    if any(arg.star for arg in args):
        return None

    message = None
    condition_text = None
    if len(args) > 1:
        arg1 = args[1]
        if arg1.keyword is not None and arg1.keyword.value == library.condition_text_keyword:
            condition_text = arg1.value
        else:
            message = arg1.value
    if len(args) > 2:
        arg2 = args[2]
        if arg2.keyword is not None and arg2.keyword.value in library.message_keywords:
            message = arg2.value
        else:
            condition_text = arg2.value

    return ContractInvocation(
        kind=kind,
        class_name=class_name,
        method_name=method_name,
        condition=args[0].value,
        call=call,
        arguments=args,
        message=message,
        condition_text=condition_text,
        exception_type=exception_type,
    )


def call_of_statement(statement: cst.CSTNode) -> Optional[cst.Call]:
    """The call of an expression statement holding a single call, else None."""
    if not isinstance(statement, cst.SimpleStatementLine) or len(statement.body) != 1:
        return None
    expr = statement.body[0]
    if not isinstance(expr, cst.Expr) or not isinstance(expr.value, cst.Call):
        return None
    return expr.value


def classify_statement(
    statement: cst.CSTNode,
    config: Optional[ContractFixConfig] = None,
    kinds: Optional[Collection[InvocationKind]] = None,
    methods: Optional[Collection[str]] = None,
) -> Optional[ContractInvocation]:
    call = call_of_statement(statement)
    if call is None:
        return None
    return classify_invocation(call, config, kinds, methods)


def precondition_kind(
    invocation: ContractInvocation, config: Optional[ContractFixConfig] = None
) -> Optional[PreconditionKind]:
    """Map an invocation to the precondition kind it represents, if any."""
    library = (config or ContractFixConfig.default()).library
    if invocation.kind is InvocationKind.LEGACY and invocation.method_name in library.requires_methods:
        return PreconditionKind.REQUIRES
    if (
        invocation.kind is InvocationKind.REPLACEMENT
        and invocation.method_name in library.requires_methods
    ):
        return PreconditionKind.REPLACEMENT
    if invocation.kind is InvocationKind.DEBUG and invocation.method_name in library.assert_methods:
        return PreconditionKind.DEBUG_ASSERT
    return None
