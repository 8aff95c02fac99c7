"""
refactoring/raise_synthesizer.py

Lowers a typed precondition to an explicit guard:

    Contract.requires[ArgumentNoneError](x is not None)

becomes

    if x is None:
        raise ArgumentNoneError("x")

The exception construction is chosen from the exception type's declared
constructors, preferring the ones that keep the guarded parameter's name.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import libcst as cst

from ..analysis.models import ContractInvocation
from ..analysis.syntax_utils import code_text, string_literal
from ..config import ContractFixConfig, ExceptionConfig
from ..interfaces import SymbolFacts
from ..symbols.model import ConstructorSignature, ParameterSymbol, TypeRef

logger = logging.getLogger(__name__)

# Exact complements only. Order comparisons are not complements on partial orders.
_INVERTED_OPERATORS = {
    cst.Equal: cst.NotEqual,
    cst.NotEqual: cst.Equal,
    cst.Is: cst.IsNot,
    cst.IsNot: cst.Is,
    cst.In: cst.NotIn,
    cst.NotIn: cst.In,
}

_LOOSE_EXPRESSIONS = (cst.BooleanOperation, cst.IfExp, cst.Lambda, cst.NamedExpr)
_EXCEPTION_TYPES = {"Exception", "BaseException"}


class _ParameterReferenceCollector(cst.CSTVisitor):
    def __init__(self, parameter_names: Sequence[str]) -> None:
        self.parameter_names = set(parameter_names)
        self.found: List[str] = []

    def visit_Name(self, node: cst.Name) -> Optional[bool]:
        if node.value in self.parameter_names and node.value not in self.found:
            self.found.append(node.value)
        return False

    def visit_Attribute(self, node: cst.Attribute) -> Optional[bool]:
        # ``x.y`` references ``x`` only.
        node.value.visit(self)
        return False

    def visit_Arg(self, node: cst.Arg) -> Optional[bool]:
        node.value.visit(self)
        return False


def find_guarded_parameter(
    condition: cst.BaseExpression, parameter_names: Sequence[str]
) -> Optional[str]:
    """The single parameter ``condition`` references, or None for zero or several."""
    collector = _ParameterReferenceCollector(parameter_names)
    condition.visit(collector)
    if len(collector.found) == 1:
        return collector.found[0]
    return None


def _parenthesize(expr: cst.BaseExpression) -> cst.BaseExpression:
    if expr.lpar:
        return expr
    return expr.with_changes(lpar=[cst.LeftParen()], rpar=[cst.RightParen()])


def negate_condition(condition: cst.BaseExpression) -> cst.BaseExpression:
    """Return the test that holds exactly when ``condition`` does not."""
    if isinstance(condition, cst.Comparison) and len(condition.comparisons) == 1:
        target = condition.comparisons[0]
        inverted = _INVERTED_OPERATORS.get(type(target.operator))
        if inverted is not None:
            operator = inverted(
                whitespace_before=target.operator.whitespace_before,
                whitespace_after=target.operator.whitespace_after,
            )
            return condition.with_changes(comparisons=[target.with_changes(operator=operator)])

    if isinstance(condition, cst.UnaryOperation) and isinstance(condition.operator, cst.Not):
        return condition.expression

    if isinstance(condition, _LOOSE_EXPRESSIONS):
        condition = _parenthesize(condition)
    return cst.UnaryOperation(operator=cst.Not(), expression=condition)


def is_string_parameter(parameter: ParameterSymbol) -> bool:
    annotation = parameter.annotation
    if annotation is None:
        return True
    if annotation.simple_name == "str" and not annotation.arguments:
        return True
    if annotation.simple_name in ("Optional", "Union"):
        members = [a for a in annotation.arguments if a.simple_name not in ("None", "NoneType")]
        return len(members) == 1 and members[0].simple_name == "str"
    return False


def is_inner_exception_parameter(parameter: ParameterSymbol, exceptions: ExceptionConfig) -> bool:
    if parameter.name in exceptions.inner_exception_names:
        return True
    annotation = parameter.annotation
    if annotation is None:
        return False
    if annotation.simple_name in _EXCEPTION_TYPES:
        return True
    if annotation.simple_name in ("Optional", "Union"):
        return any(a.simple_name in _EXCEPTION_TYPES for a in annotation.arguments)
    return False


class _ConstructorTable:
    """Constructor lookup by parameter roles."""

    def __init__(self, constructors: Sequence[ConstructorSignature], exceptions: ExceptionConfig):
        self.constructors = constructors
        self.exceptions = exceptions

    def _is_param(self, p: ParameterSymbol) -> bool:
        return p.name in self.exceptions.param_names and is_string_parameter(p)

    def _is_message(self, p: ParameterSymbol) -> bool:
        return p.name == self.exceptions.message_name and is_string_parameter(p)

    def param_only(self) -> Optional[ConstructorSignature]:
        for ctor in self.constructors:
            params = ctor.named_parameters
            if len(params) == 1 and self._is_param(params[0]):
                return ctor
        return None

    def message_only(self) -> Optional[ConstructorSignature]:
        for ctor in self.constructors:
            params = ctor.named_parameters
            if len(params) == 1 and self._is_message(params[0]):
                return ctor
        return None

    def param_and_message(self) -> Optional[ConstructorSignature]:
        for ctor in self.constructors:
            params = ctor.named_parameters
            if len(params) != 2:
                continue
            first, second = params
            if (self._is_param(first) and self._is_message(second)) or (
                self._is_message(first) and self._is_param(second)
            ):
                return ctor
        return None

    def message_and_inner(self) -> Optional[ConstructorSignature]:
        for ctor in self.constructors:
            params = ctor.named_parameters
            if (
                len(params) == 2
                and self._is_message(params[0])
                and is_inner_exception_parameter(params[1], self.exceptions)
            ):
                return ctor
        return None


def _construct(exception_type: cst.BaseExpression, *args: cst.BaseExpression) -> cst.Call:
    return cst.Call(func=exception_type.deep_clone(), args=[cst.Arg(value=a) for a in args])


def build_raise_expression(
    exception_type: cst.BaseExpression,
    constructors: Sequence[ConstructorSignature],
    condition: cst.BaseExpression,
    message: Optional[cst.BaseExpression] = None,
    parameter: Optional[str] = None,
    is_argument_error: bool = False,
    is_argument_none_error: bool = False,
    exceptions: Optional[ExceptionConfig] = None,
) -> cst.Call:
    """
    Build the exception construction for a lowered precondition.

    Args:
        exception_type: The exception expression from ``requires[E]``.
        constructors: Declared constructor signatures of ``E``.
        condition: The guarded condition.
        message: Explicit message, if the call had one.
        parameter: The single parameter the condition references.
        is_argument_error: ``E`` belongs to the argument error family.
        is_argument_none_error: ``E`` is the argument-none error type itself.
        exceptions: Parameter slot names.

    Returns:
        A call expression such as ``ArgumentNoneError("x")``.
    """
    exceptions = exceptions or ExceptionConfig()
    table = _ConstructorTable(constructors, exceptions)

    def param_name() -> cst.SimpleString:
        return string_literal(parameter)

    def message_value() -> cst.BaseExpression:
        if message is not None:
            return message.deep_clone()
        return string_literal(code_text(condition))

    def fill(ctor: ConstructorSignature) -> cst.Call:
        args = []
        for p in ctor.named_parameters:
            args.append(message_value() if p.name == exceptions.message_name else param_name())
        return _construct(exception_type, *args)

    if is_argument_none_error and parameter is not None and message is None:
        ctor = table.param_only()
        if ctor is not None:
            return _construct(exception_type, param_name())

    if is_argument_error and parameter is not None:
        ctor = table.param_and_message()
        if ctor is not None:
            return fill(ctor)
        if table.message_only() is None and table.param_only() is not None:
            return _construct(exception_type, param_name())

    if table.message_only() is not None:
        return _construct(exception_type, message_value())

    if parameter is not None:
        ctor = table.param_and_message()
        if ctor is not None:
            return fill(ctor)

    if table.message_and_inner() is not None:
        return _construct(exception_type, message_value(), cst.Name("None"))

    return _construct(exception_type)


def build_guard_statement(
    statement: cst.SimpleStatementLine,
    condition: cst.BaseExpression,
    raise_expression: cst.BaseExpression,
) -> cst.If:
    """``if not condition: raise ...`` keeping the statement's comments."""
    raise_line = cst.SimpleStatementLine(
        body=[cst.Raise(exc=raise_expression)],
        trailing_whitespace=statement.trailing_whitespace,
    )
    return cst.If(
        test=negate_condition(condition.deep_clone()),
        body=cst.IndentedBlock(body=[raise_line]),
        leading_lines=statement.leading_lines,
    )


class RaiseSynthesizer:
    """Resolves exception types through the host and builds guard statements."""

    def __init__(self, facts: SymbolFacts, config: Optional[ContractFixConfig] = None) -> None:
        self.facts = facts
        self.config = config or ContractFixConfig.default()

    def synthesize(
        self,
        invocation: ContractInvocation,
        parameter_names: Sequence[str],
        module_name: Optional[str] = None,
    ) -> Optional[cst.Call]:
        if invocation.exception_type is None:
            return None
        ref = TypeRef.from_expression(invocation.exception_type)
        if ref is None:
            return None

        exceptions = self.config.exceptions
        is_argument_none_error = ref.simple_name == exceptions.argument_none_error
        is_argument_error = is_argument_none_error or self.facts.is_subtype(
            ref, exceptions.argument_error, module_name
        )
        parameter = find_guarded_parameter(invocation.condition, parameter_names)
        constructors = self.facts.constructors(ref, module_name)
        logger.debug(
            f"Synthesizing {ref} (parameter={parameter}, "
            f"constructors={len(constructors)}, argument_error={is_argument_error})"
        )
        return build_raise_expression(
            invocation.exception_type,
            constructors,
            invocation.condition,
            invocation.message,
            parameter,
            is_argument_error,
            is_argument_none_error,
            exceptions,
        )

    def build_statement(
        self,
        statement: cst.SimpleStatementLine,
        invocation: ContractInvocation,
        parameter_names: Sequence[str],
        module_name: Optional[str] = None,
    ) -> Optional[cst.If]:
        raise_expression = self.synthesize(invocation, parameter_names, module_name)
        if raise_expression is None:
            return None
        return build_guard_statement(statement, invocation.condition, raise_expression)
