"""
End-to-end tests for the contract rules, run through the engine.
"""

import logging
import textwrap

from contractfix.analysis.models import Severity
from contractfix.engine import ContractFixEngine
from contractfix.rules import RULES, create_rules


def dedent(source):
    return textwrap.dedent(source)


def run_rules(make_index, sources, rule_ids):
    index = make_index(sources)
    report = ContractFixEngine(index, rule_ids=rule_ids).run(fix=True)
    return {file_report.path: file_report for file_report in report.files}


ERRORS = """
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
"""


class TestRegistry:
    def test_registry_order(self):
        assert list(RULES) == ["CR01", "CR02", "CR03", "CR04", "CR05", "CR06", "CR07", "CR13"]

    def test_default_rules_leave_opt_in_rules_out(self, config):
        assert [r.rule_id for r in create_rules(config=config)] == [
            "CR01",
            "CR02",
            "CR04",
            "CR05",
            "CR06",
            "CR13",
        ]

    def test_unknown_rule_id_is_ignored(self, config, caplog):
        with caplog.at_level(logging.WARNING):
            rules = create_rules(["CR99", "CR04"], config)

        assert [r.rule_id for r in rules] == ["CR04"]
        assert "CR99" in caplog.text


class TestPullPreconditionsRule:
    """CR01: inherited preconditions are inserted into overriding methods."""

    BASE = """
    from contracts import Contract


    class Base:
        def m(self, val):
            Contract.requires(val is not None)
            return val
    """

    def test_inserts_after_docstring_and_imports_contract_class(self, make_index):
        reports = run_rules(
            make_index,
            {
                "base.py": self.BASE,
                "derived.py": """
                from base import Base


                class Derived(Base):
                    def m(self, val):
                        \"\"\"Doubles.\"\"\"
                        return val * 2
                """,
            },
            ["CR01"],
        )

        derived = reports["derived.py"]
        assert derived.modified_source == dedent(
            """
            from base import Base
            from contracts import Contract


            class Derived(Base):
                def m(self, val):
                    \"\"\"Doubles.\"\"\"
                    Contract.requires(val is not None)
                    return val * 2
            """
        )
        (finding,) = derived.findings
        assert finding.rule_id == "CR01"
        assert finding.details["conditions"] == ["val is not None"]
        assert (finding.line, finding.column) == (6, 8)
        assert not reports["base.py"].changed

    def test_inserts_before_first_statement_in_same_module(self, make_index):
        reports = run_rules(
            make_index,
            {
                "mod.py": self.BASE
                + """
    class Other(Base):
        def m(self, val):
            return val
    """
            },
            ["CR01"],
        )

        source = reports["mod.py"].modified_source
        assert "class Other(Base):\n    def m(self, val):\n        Contract.requires(val is not None)\n        return val\n" in source
        assert source.count("from contracts import Contract") == 1

    def test_present_precondition_is_not_duplicated(self, make_index):
        reports = run_rules(
            make_index,
            {
                "mod.py": self.BASE
                + """
    class Same(Base):
        def m(self, val):
            Contract.requires( val is not None )
            return val


    class Replaced(Base):
        def m(self, val):
            Check.requires(val is not None, "val is required")
            return val
    """
            },
            ["CR01"],
        )

        assert reports["mod.py"].findings == []

    def test_only_immediate_base_is_consulted(self, make_index):
        """Preconditions two levels up are not pulled past a base that dropped them."""
        reports = run_rules(
            make_index,
            {
                "mod.py": self.BASE
                + """
    class Middle(Base):
        def m(self, val):
            return val


    class Leaf(Middle):
        def m(self, val):
            return val
    """
            },
            ["CR01"],
        )

        findings = reports["mod.py"].findings
        assert len(findings) == 1
        assert "Contract.requires(val is not None)" in reports["mod.py"].modified_source.split(
            "class Leaf"
        )[0].split("class Middle")[1]


class TestRequiresToRaiseRule:
    """CR02: typed requires calls become guards."""

    def test_typed_requires_in_function(self, make_index):
        reports = run_rules(
            make_index,
            {
                "errors.py": ERRORS,
                "mod.py": """
                from contracts import Contract
                from errors import ArgumentNoneError


                def f(x):
                    Contract.requires[ArgumentNoneError](x is not None)
                    return x
                """,
            },
            ["CR02"],
        )

        assert reports["mod.py"].modified_source == dedent(
            """
            from contracts import Contract
            from errors import ArgumentNoneError


            def f(x):
                if x is None:
                    raise ArgumentNoneError("x")
                return x
            """
        )

    def test_method_receiver_is_not_a_parameter(self, make_index):
        reports = run_rules(
            make_index,
            {
                "errors.py": ERRORS,
                "mod.py": """
                class Service:
                    def run(self, name: str):
                        Contract.requires[ArgumentNoneError](name is not None)
                        return name
                """,
            },
            ["CR02"],
        )

        assert 'raise ArgumentNoneError("name")' in reports["mod.py"].modified_source

    def test_untyped_requires_is_ignored(self, make_index):
        reports = run_rules(make_index, {"mod.py": "def f(x):\n    Contract.requires(x)\n"}, ["CR02"])

        assert reports["mod.py"].findings == []


class TestDebugAssertRule:
    """CR03: legacy calls to the debug assertion."""

    def test_condition_text_is_appended(self, make_index):
        reports = run_rules(
            make_index,
            {
                "mod.py": """
                from contracts import Contract


                def f(x):
                    Contract.requires(x > 0)
                    Contract.assert_(x, "bad")
                    return x
                """
            },
            ["CR03"],
        )

        assert reports["mod.py"].modified_source == dedent(
            """
            from contracts import Contract
            from contracts.debug import Debug


            def f(x):
                Debug.assert_(x > 0, "x > 0")
                Debug.assert_(x, "bad", "x")
                return x
            """
        )

    def test_wins_over_replacement_class_rule(self, make_index):
        """Both rules target the same call; the earlier rule's edit is applied."""
        reports = run_rules(
            make_index,
            {"mod.py": "def f(x):\n    Contract.requires(x)\n"},
            ["CR03", "CR05"],
        )

        report = reports["mod.py"]
        assert report.modified_source == (
            "from contracts.debug import Debug\n"
            "def f(x):\n"
            '    Debug.assert_(x, "x")\n'
        )
        assert (report.applied_edits, report.skipped_edits) == (1, 1)


class TestObsoleteContractRule:
    """CR04: calls without a replacement are removed."""

    def test_removes_postconditions_and_markers(self, make_index):
        reports = run_rules(
            make_index,
            {
                "account.py": """
                class Account:
                    def deposit(self, amount):
                        Contract.ensures(self.balance >= amount)
                        Contract.end_contract_block()
                        self.balance += amount

                    def noop(self):
                        Contract.end_contract_block()

                    @contract_invariant_method
                    def invariants(self):
                        Contract.invariant(self.balance >= 0)
                """
            },
            ["CR04"],
        )

        report = reports["account.py"]
        assert len(report.findings) == 3
        assert report.modified_source == dedent(
            """
            class Account:
                def deposit(self, amount):
                    self.balance += amount

                def noop(self):
                    pass

                @contract_invariant_method
                def invariants(self):
                    Contract.invariant(self.balance >= 0)
            """
        )


class TestReplacementClassRule:
    """CR05: legacy calls retargeted to the replacement class."""

    def test_qualifier_is_renamed(self, make_index):
        reports = run_rules(
            make_index,
            {
                "mod.py": """
                import contracts


                def f(x):
                    contracts.Contract.requires(x > 0, "positive")
                    Contract.requires[ValueError](x)
                    return x


                @contract_class_for(Base)
                class BaseContracts(Base):
                    def m(self, x):
                        Contract.requires(x)
                """
            },
            ["CR05"],
        )

        report = reports["mod.py"]
        assert len(report.findings) == 1
        assert report.modified_source == dedent(
            """
            import contracts
            from checks import Check


            def f(x):
                Check.requires(x > 0, "positive")
                Contract.requires[ValueError](x)
                return x


            @contract_class_for(Base)
            class BaseContracts(Base):
                def m(self, x):
                    Contract.requires(x)
            """
        )


class TestConditionTextRule:
    """CR13: condition strings are kept in sync with their conditions."""

    def test_out_of_sync_text_is_replaced(self, make_index):
        reports = run_rules(
            make_index,
            {
                "mod.py": """
                def f(x, label):
                    Check.requires(x > 0, "positive", "x >= 0")
                    Check.requires(x, condition_string="x")
                    Check.requires(x, "m", label)
                """
            },
            ["CR13"],
        )

        report = reports["mod.py"]
        (finding,) = report.findings
        assert finding.severity is Severity.INFO
        assert finding.details["expected"] == "x > 0"
        assert 'Check.requires(x > 0, "positive", "x > 0")' in report.modified_source
        assert 'Check.requires(x, "m", label)' in report.modified_source


class TestInvariantMethodRule:
    """CR06: invariant methods are reported without an edit."""

    def test_reports_invariant_method(self, make_index):
        reports = run_rules(
            make_index,
            {
                "account.py": """
                class Account:
                    @contract_invariant_method
                    def invariants(self):
                        Contract.invariant(self.balance >= 0)

                    def deposit(self, amount):
                        self.balance += amount
                """
            },
            ["CR06"],
        )

        report = reports["account.py"]
        (finding,) = report.findings
        assert finding.rule_id == "CR06"
        assert (finding.line, finding.message) == (4, "Invariant method Account.invariants can be removed")
        assert finding.edit is None
        assert not report.changed


class TestMissingConditionTextRule:
    """CR07: replacement calls gain a condition string."""

    def test_condition_string_is_added(self, make_index):
        reports = run_rules(
            make_index,
            {
                "mod.py": """
                def f(x, items):
                    Check.requires(x > 0)
                    Check.assert_(len(items) > 1, "too short")
                    Check.requires(x, "x")
                    Check.requires(False, "unreachable")
                    Check.requires(x, condition_string="x")
                    Contract.requires(x > 0)
                """
            },
            ["CR07"],
        )

        report = reports["mod.py"]
        assert [f.details["expected"] for f in report.findings] == ["x > 0", "len(items) > 1"]
        assert report.modified_source == dedent(
            """
            def f(x, items):
                Check.requires(x > 0, condition_string="x > 0")
                Check.assert_(len(items) > 1, "too short", condition_string="len(items) > 1")
                Check.requires(x, "x")
                Check.requires(False, "unreachable")
                Check.requires(x, condition_string="x")
                Contract.requires(x > 0)
            """
        )

    def test_added_string_is_in_sync(self, make_index):
        reports = run_rules(make_index, {"mod.py": "Check.assume(ready)\n"}, ["CR07", "CR13"])

        report = reports["mod.py"]
        assert [f.rule_id for f in report.findings] == ["CR07"]
        assert report.modified_source == 'Check.assume(ready, condition_string="ready")\n'
