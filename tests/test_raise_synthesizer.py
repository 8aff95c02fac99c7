"""
Tests for lowering typed preconditions to raise statements.
"""

import libcst as cst
import pytest

from contractfix.analysis.invocation import classify_statement
from contractfix.analysis.syntax_utils import code_text
from contractfix.refactoring.raise_synthesizer import (
    RaiseSynthesizer,
    build_guard_statement,
    build_raise_expression,
    find_guarded_parameter,
    negate_condition,
)
from contractfix.symbols import ConstructorSignature, ParameterSymbol, TypeRef


def expr(code):
    return cst.parse_expression(code)


def ctor(*names, annotation="str"):
    return ConstructorSignature(
        "E", [ParameterSymbol(n, TypeRef(annotation) if annotation else None) for n in names]
    )


def raise_code(constructors, condition="x > 0", parameter="x", message=None, **flags):
    call = build_raise_expression(
        expr("E"),
        constructors,
        expr(condition),
        expr(message) if message is not None else None,
        parameter,
        **flags,
    )
    return code_text(call)


class TestFindGuardedParameter:
    @pytest.mark.parametrize(
        "condition, expected",
        [
            ("x is not None", "x"),
            ("x > y", None),
            ("len(items) > 0 and items[0]", "items"),
            ("self.x > 0", None),
            ("x.count > 0", "x"),
            ("check(flag=y)", "y"),
            ("GLOBAL_LIMIT > 0", None),
        ],
    )
    def test_single_parameter(self, condition, expected):
        assert find_guarded_parameter(expr(condition), ["x", "y", "items"]) == expected

    def test_receiver_is_not_a_parameter(self):
        assert find_guarded_parameter(expr("self.ready"), []) is None


class TestNegateCondition:
    @pytest.mark.parametrize(
        "condition, expected",
        [
            ("x is not None", "x is None"),
            ("x is None", "x is not None"),
            ("a == b", "a != b"),
            ("a < b", "not a < b"),
            ("a >= b", "not a >= b"),
            ("a != b", "a == b"),
            ("key not in table", "key in table"),
            ("key in table", "key not in table"),
            ("not ready", "ready"),
            ("ready", "not ready"),
            ("f(x)", "not f(x)"),
            ("a and b", "not (a and b)"),
            ("a < b < c", "not a < b < c"),
        ],
    )
    def test_negation(self, condition, expected):
        assert code_text(negate_condition(expr(condition))) == expected


class TestBuildRaiseExpression:
    """Constructor selection policy."""

    def test_argument_none_error_uses_parameter_only(self):
        constructors = [ctor(), ctor("param_name"), ctor("param_name", "message")]

        code = raise_code(
            constructors, "x is not None", is_argument_error=True, is_argument_none_error=True
        )

        assert code == 'E("x")'

    def test_argument_error_with_parameter_and_message_slots(self):
        """Arguments follow the constructor's declared order."""
        code = raise_code([ctor("message", "param_name")], is_argument_error=True)

        assert code == 'E("x > 0", "x")'

    def test_argument_error_prefers_explicit_message(self):
        code = raise_code(
            [ctor("param_name", "message")], message='"x must be positive"', is_argument_error=True
        )

        assert code == 'E("x", "x must be positive")'

    def test_message_constructor_wins_over_parameter_only(self):
        """With (message) and (param_name) available, the condition text becomes the message."""
        code = raise_code([ctor("message"), ctor("paramName")], is_argument_error=True)

        assert code == 'E("x > 0")'

    def test_parameter_only_when_no_message_constructor(self):
        code = raise_code([ctor("paramName")], is_argument_error=True)

        assert code == 'E("x")'

    def test_message_only_for_plain_exception(self):
        code = raise_code([ctor(), ctor("message")], message='"bad input"')

        assert code == 'E("bad input")'

    def test_parameter_and_message_for_plain_exception(self):
        code = raise_code([ctor("param", "message")])

        assert code == 'E("x", "x > 0")'

    def test_message_and_inner_exception(self):
        constructors = [
            ConstructorSignature(
                "E",
                [ParameterSymbol("message", TypeRef("str")), ParameterSymbol("inner", TypeRef("Exception"))],
            )
        ]

        assert raise_code(constructors, parameter=None) == 'E("x > 0", None)'

    def test_unannotated_parameters_count_as_strings(self):
        assert raise_code([ctor("message", annotation=None)], parameter=None) == 'E("x > 0")'

    def test_non_string_message_falls_back_to_no_arguments(self):
        assert raise_code([ctor("message", annotation="int")], parameter=None) == "E()"


class TestBuildGuardStatement:
    def test_guard_keeps_comment(self):
        statement = cst.parse_statement("Contract.requires[ValueError](x > 0)  # keep\n")

        guard = build_guard_statement(statement, expr("x > 0"), expr('ValueError("x > 0")'))

        assert cst.Module(body=[guard]).code == 'if not x > 0:\n    raise ValueError("x > 0")  # keep\n'


class TestRaiseSynthesizer:
    """Tests for RaiseSynthesizer against an indexed project."""

    ERRORS = {
        "errors.py": """
        from typing import overload

        class ArgumentError(ValueError):
            def __init__(self, message: str, param_name: str) -> None:
                super().__init__(message)

        class ArgumentNoneError(ArgumentError):
            @overload
            def __init__(self, param_name: str) -> None: ...
            @overload
            def __init__(self, message: str, param_name: str) -> None: ...
            def __init__(self, *args) -> None:
                super().__init__(*args)

        class ArgumentOutOfRangeError(ArgumentError):
            pass
        """
    }

    def synthesize(self, index, code, parameters=("x",)):
        statement = cst.parse_statement(code + "\n")
        invocation = classify_statement(statement)
        guard = RaiseSynthesizer(index).build_statement(statement, invocation, parameters, "mod")
        return cst.Module(body=[guard]).code if guard is not None else None

    def test_argument_none_error(self, make_index):
        index = make_index(self.ERRORS)

        code = self.synthesize(index, "Contract.requires[ArgumentNoneError](x is not None)")

        assert code == 'if x is None:\n    raise ArgumentNoneError("x")\n'

    def test_argument_error_subclass(self, make_index):
        index = make_index(self.ERRORS)

        code = self.synthesize(index, "Contract.requires[ArgumentOutOfRangeError](x >= 0)")

        assert code == 'if not x >= 0:\n    raise ArgumentOutOfRangeError("x >= 0", "x")\n'

    def test_builtin_exception_with_message(self, make_index):
        index = make_index(self.ERRORS)

        code = self.synthesize(index, 'Contract.requires[KeyError](key in table, "missing key")', ["key"])

        assert code == 'if key not in table:\n    raise KeyError("missing key")\n'

    def test_untyped_call_is_not_synthesized(self, make_index):
        index = make_index(self.ERRORS)

        assert self.synthesize(index, "Contract.requires(x)") is None

    def test_defaulted_message_allows_parameter_only_construction(self, make_index):
        index = make_index(
            {
                "errors.py": """
                class ArgumentError(ValueError):
                    def __init__(self, message, param_name):
                        super().__init__(message)

                class ArgumentNoneError(ArgumentError):
                    def __init__(self, param_name, message=None):
                        super().__init__(message or param_name, param_name)
                """
            }
        )

        code = self.synthesize(index, "Contract.requires[ArgumentNoneError](x is not None)")

        assert code == 'if x is None:\n    raise ArgumentNoneError("x")\n'
