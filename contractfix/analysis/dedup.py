"""
Deduplication of inherited preconditions.

Overlap with the preconditions already present is checked either
structurally or semantically (by condition only). Internal duplicates among
the inherited statements are always checked structurally, so distinct
statements that merely share a condition are both kept.
"""

from typing import List, Sequence

from .models import PreconditionStatement
from .syntax_utils import structurally_equal


def conditions_equal(left: PreconditionStatement, right: PreconditionStatement) -> bool:
    return structurally_equal(left.condition, right.condition)


def statements_equal(left: PreconditionStatement, right: PreconditionStatement) -> bool:
    return structurally_equal(left.statement, right.statement)


def are_equivalent(
    left: PreconditionStatement, right: PreconditionStatement, semantic: bool = False
) -> bool:
    if semantic:
        return conditions_equal(left, right)
    return statements_equal(left, right)


def remove_overlapped(
    aggregated: Sequence[PreconditionStatement],
    present: Sequence[PreconditionStatement],
    semantic: bool = False,
) -> List[PreconditionStatement]:
    result = list(aggregated)
    for index in range(len(result) - 1, -1, -1):
        if any(are_equivalent(result[index], p, semantic) for p in present):
            del result[index]
    return result


def remove_duplicates(statements: Sequence[PreconditionStatement]) -> List[PreconditionStatement]:
    unique: List[PreconditionStatement] = []
    for statement in statements:
        if not any(statements_equal(statement, kept) for kept in unique):
            unique.append(statement)
    return unique


def deduplicate(
    aggregated: Sequence[PreconditionStatement],
    present: Sequence[PreconditionStatement],
    semantic: bool = False,
) -> List[PreconditionStatement]:
    """Return the statements of ``aggregated`` that still need to be inserted."""
    if not aggregated:
        return []
    return remove_duplicates(remove_overlapped(aggregated, present, semantic))
