"""
Tests for precondition extraction.
"""

import pytest

from contractfix.analysis.models import PreconditionKind
from contractfix.analysis.preconditions import (
    extract_leading_preconditions,
    extract_method_preconditions,
)
from contractfix.cancellation import CancellationToken
from contractfix.errors import OperationCancelled


def codes(statements):
    return [s.code for s in statements]


class TestExtractLeadingPreconditions:
    """Tests for the prologue scan."""

    def test_prologue_stops_at_first_non_expression_statement(self, parse_function):
        """Contract calls after the first other statement are not preconditions."""
        function_def = parse_function(
            """
            def f(x, y):
                Contract.requires(x is not None)
                Contract.requires(y > 0)
                total = x + y
                Contract.requires(total > 0)
                return total
            """
        )

        assert codes(extract_leading_preconditions(function_def)) == [
            "Contract.requires(x is not None)",
            "Contract.requires(y > 0)",
        ]

    def test_docstring_and_other_calls_do_not_end_prologue(self, parse_function):
        function_def = parse_function(
            '''
            def f(x):
                """Docstring."""
                log(x)
                Contract.requires(x)
                return x
            '''
        )

        assert codes(extract_leading_preconditions(function_def)) == ["Contract.requires(x)"]

    def test_kinds_filter(self, parse_function):
        function_def = parse_function(
            """
            def f(x):
                Contract.requires(x)
                Check.requires(x > 1)
                Debug.assert_(x > 2)
                Contract.ensures(x > 3)
                pass
            """
        )

        assert codes(extract_leading_preconditions(function_def)) == ["Contract.requires(x)"]
        assert codes(extract_leading_preconditions(function_def, PreconditionKind.ALL)) == [
            "Contract.requires(x)",
            "Check.requires(x > 1)",
            "Debug.assert_(x > 2)",
        ]
        assert codes(
            extract_leading_preconditions(function_def, PreconditionKind.REPLACEMENT)
        ) == ["Check.requires(x > 1)"]

    def test_one_line_body_has_no_prologue(self, parse_function):
        function_def = parse_function("def f(x): Contract.requires(x)\n")
        assert extract_leading_preconditions(function_def) == []

    def test_body_starting_with_statement(self, parse_function):
        function_def = parse_function(
            """
            def f(x):
                if x:
                    Contract.requires(x)
            """
        )
        assert extract_leading_preconditions(function_def) == []


class TestExtractMethodPreconditions:
    """Tests for extraction from method symbols."""

    SOURCE = """
        from typing import overload

        class Service:
            def run(self, x):
                Contract.requires(x is not None)
                return x

            @overload
            def get(self, key: int) -> int: ...
            @overload
            def get(self, key: str) -> str: ...
            def get(self, key):
                Contract.requires(key)
                return key
    """

    def test_records_module_name(self, make_index):
        index = make_index({"service.py": self.SOURCE})
        method = index.get_type("service.Service").get_members("run")[0]

        statements = extract_method_preconditions(method)

        assert codes(statements) == ["Contract.requires(x is not None)"]
        assert statements[0].module_name == "service"

    def test_overloaded_method_yields_nothing(self, make_index):
        """Several declarations make the source ambiguous."""
        index = make_index({"service.py": self.SOURCE})
        method = index.get_type("service.Service").get_members("get")[0]

        assert len(method.declarations) == 3
        assert extract_method_preconditions(method) == []

    def test_cancelled_token_raises(self, make_index):
        index = make_index({"service.py": self.SOURCE})
        method = index.get_type("service.Service").get_members("run")[0]
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelled):
            extract_method_preconditions(method, token=token)
