"""
Tests for precondition deduplication.
"""

import libcst as cst
from hypothesis import given, settings, strategies as st

from contractfix.analysis.dedup import deduplicate, statements_equal
from contractfix.analysis.invocation import classify_statement
from contractfix.analysis.models import PreconditionStatement


def statement(code):
    line = cst.parse_statement(code + "\n")
    return PreconditionStatement(line, classify_statement(line))


def identities(statements):
    return [id(s) for s in statements]


class TestDeduplicate:
    """Tests for deduplicate."""

    def test_empty_aggregated(self):
        assert deduplicate([], [statement("Contract.requires(x)")]) == []

    def test_structural_overlap_ignores_formatting(self):
        aggregated = [statement("Contract.requires( x is not None )  # inherited")]
        present = [statement("Contract.requires(x is not None)")]

        assert deduplicate(aggregated, present) == []

    def test_semantic_overlap_compares_conditions_only(self):
        aggregated = [statement('Contract.requires(x > 0, "positive")')]
        present = [statement('Check.requires(x > 0, "other message")')]

        assert deduplicate(aggregated, present, semantic=True) == []
        assert deduplicate(aggregated, present, semantic=False) == aggregated

    def test_redundant_parentheses_are_ignored(self):
        aggregated = [statement("Contract.requires((x > 0))")]
        present = [statement("Contract.requires(x > 0)")]

        assert deduplicate(aggregated, present, semantic=True) == []

    def test_internal_duplicates_are_structural_in_both_modes(self):
        """Inherited statements sharing a condition but not a message are both kept."""
        first = statement('Contract.requires(x, "a")')
        same = statement('Contract.requires(x, "a")')
        other_message = statement('Contract.requires(x, "b")')

        for semantic in (False, True):
            result = deduplicate([first, same, other_message], [], semantic=semantic)
            assert identities(result) == identities([first, other_message])

    def test_order_is_preserved(self):
        a = statement("Contract.requires(a)")
        b = statement("Contract.requires(b)")
        c = statement("Contract.requires(c)")

        result = deduplicate([c, a, b], [statement("Contract.requires(a)")])

        assert identities(result) == identities([c, b])


CONDITIONS = ["x", "x is not None", "(x is not None)", "x > 0", "len(items) > 0"]
MESSAGES = [None, '"bad"', '"x required"']


@st.composite
def precondition_statements(draw):
    cls = draw(st.sampled_from(["Contract", "Check"]))
    condition = draw(st.sampled_from(CONDITIONS))
    message = draw(st.sampled_from(MESSAGES))
    args = condition if message is None else f"{condition}, {message}"
    return statement(f"{cls}.requires({args})")


statement_lists = st.lists(precondition_statements(), max_size=6)


@settings(max_examples=50)
@given(statement_lists, statement_lists, st.booleans())
def test_deduplicate_is_idempotent(aggregated, present, semantic):
    once = deduplicate(aggregated, present, semantic)
    twice = deduplicate(once, present, semantic)

    assert identities(twice) == identities(once)


@settings(max_examples=50)
@given(statement_lists, statement_lists)
def test_semantic_result_is_subset_of_structural(aggregated, present):
    structural = set(identities(deduplicate(aggregated, present, semantic=False)))
    semantic = identities(deduplicate(aggregated, present, semantic=True))

    assert set(semantic) <= structural


@settings(max_examples=50)
@given(statement_lists, statement_lists)
def test_structural_mode_only_drops_equal_statements(aggregated, present):
    """Every dropped statement equals a present one or an earlier kept one."""
    result = deduplicate(aggregated, present, semantic=False)
    kept = set(identities(result))

    for s in aggregated:
        if id(s) in kept:
            continue
        assert any(statements_equal(s, other) for other in list(present) + result)
