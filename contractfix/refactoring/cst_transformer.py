"""
refactoring/cst_transformer.py

Applies finding edits to a LibCST module while preserving formatting and
comments.

Notes:
- Edits are anchored on nodes of the original tree and matched by identity,
  so the module must be the same object the findings were computed on.
- Replacing and removing claim the whole subtree of the target. An edit
  whose target overlaps an already claimed subtree is skipped.
- Removing the only statement of a block leaves ``pass`` behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set, Union

import libcst as cst

from ..analysis.models import Edit, EditKind, ImportRequest
from ..analysis.syntax_utils import (
    is_docstring_stmt,
    is_future_import,
    is_import_stmt,
    module_name,
)

logger = logging.getLogger(__name__)


class _SubtreeCollector(cst.CSTVisitor):
    def __init__(self) -> None:
        self.ids: Set[int] = set()

    def on_visit(self, node: cst.CSTNode) -> bool:
        self.ids.add(id(node))
        return True


def subtree_ids(node: cst.CSTNode) -> Set[int]:
    collector = _SubtreeCollector()
    node.visit(collector)
    return collector.ids


class EditApplier(cst.CSTTransformer):
    """
    Applies replace/remove/insert edits to the nodes they are anchored on.

    Call ``accept`` for each edit first; accepted edits are applied when the
    module is visited.
    """

    def __init__(self) -> None:
        self._claimed: Set[int] = set()
        self._replacements: Dict[int, Edit] = {}
        self._before: Dict[int, List[cst.CSTNode]] = {}
        self._after: Dict[int, List[cst.CSTNode]] = {}
        self.accepted: List[Edit] = []
        self.skipped: List[Edit] = []

    def accept(self, edit: Edit) -> bool:
        key = id(edit.target)
        if edit.kind in (EditKind.REPLACE, EditKind.REMOVE):
            ids = subtree_ids(edit.target)
            if ids & self._claimed:
                logger.debug(f"Skipping overlapping {edit.kind.value} edit")
                self.skipped.append(edit)
                return False
            self._claimed |= ids
            self._replacements[key] = edit
        elif edit.kind is EditKind.INSERT_BEFORE:
            self._before.setdefault(key, []).extend(edit.nodes)
        else:
            self._after.setdefault(key, []).extend(edit.nodes)
        self.accepted.append(edit)
        return True

    def on_leave(
        self, original_node: cst.CSTNode, updated_node: cst.CSTNode
    ) -> Union[cst.CSTNode, cst.RemovalSentinel, cst.FlattenSentinel]:
        updated_node = super().on_leave(original_node, updated_node)
        key = id(original_node)

        edit = self._replacements.get(key)
        nodes: List[cst.CSTNode]
        if edit is None:
            nodes = [updated_node]
        elif edit.kind is EditKind.REMOVE:
            nodes = []
        else:
            nodes = list(edit.nodes)

        before = self._before.get(key, [])
        after = self._after.get(key, [])
        if edit is None and not before and not after:
            return updated_node

        nodes = list(before) + nodes + list(after)
        if not nodes:
            return cst.RemoveFromParent()
        if len(nodes) == 1:
            return nodes[0]
        return cst.FlattenSentinel(nodes)


def imported_names(mod: cst.Module) -> Dict[str, str]:
    """Names bound by top-level ``from x import y`` and ``import y``, mapped to their module."""
    names: Dict[str, str] = {}
    for stmt in mod.body:
        if not is_import_stmt(stmt):
            continue
        b0 = stmt.body[0]
        if isinstance(b0, cst.ImportFrom):
            if isinstance(b0.names, cst.ImportStar):
                continue
            source = module_name(b0.module) or ""
            for alias in b0.names:
                bound = alias.evaluated_alias or alias.evaluated_name
                names[bound] = source
        else:
            for alias in b0.names:
                bound = alias.evaluated_alias or alias.evaluated_name.split(".")[0]
                names[bound] = ""
    return names


def add_imports(mod: cst.Module, requests: Iterable[ImportRequest]) -> cst.Module:
    """Add ``from module import name`` for each request whose name is not yet bound."""
    for request in requests:
        if request.name in imported_names(mod):
            continue

        body = list(mod.body)
        extended = False
        # 1) extend an existing "from module import ..."
        for idx, stmt in enumerate(body):
            if not is_import_stmt(stmt):
                continue
            b0 = stmt.body[0]
            if not isinstance(b0, cst.ImportFrom) or isinstance(b0.names, cst.ImportStar):
                continue
            if b0.relative or module_name(b0.module) != request.module:
                continue
            names = list(b0.names)
            names[-1] = names[-1].with_changes(comma=cst.Comma(whitespace_after=cst.SimpleWhitespace(" ")))
            names.append(cst.ImportAlias(name=cst.Name(request.name)))
            body[idx] = stmt.with_changes(body=[b0.with_changes(names=names)])
            extended = True
            break

        # 2) insert after docstring/future/import block
        if not extended:
            insert_at = 0
            if body and is_docstring_stmt(body[0]):
                insert_at = 1
            while insert_at < len(body) and is_future_import(body[insert_at]):
                insert_at += 1
            while insert_at < len(body) and is_import_stmt(body[insert_at]):
                insert_at += 1

            new_stmt = cst.SimpleStatementLine(
                body=[
                    cst.ImportFrom(
                        module=cst.parse_expression(request.module),
                        names=[cst.ImportAlias(name=cst.Name(request.name))],
                    )
                ]
            )
            body.insert(insert_at, new_stmt)
        mod = mod.with_changes(body=body)
    return mod


@dataclass(frozen=True)
class AppliedEditsResult:
    """Result of applying edits to one module."""

    modified_source: str
    applied: List[Edit]
    skipped: List[Edit]


def apply_edits(mod: cst.Module, edits: Sequence[Edit]) -> AppliedEditsResult:
    """
    Apply ``edits`` to ``mod`` and add the imports they require.

    Args:
        mod: The module the edits' targets belong to.
        edits: Edits in priority order; later overlapping edits are skipped.

    Returns:
        AppliedEditsResult with the new source and the applied/skipped edits.
    """
    applier = EditApplier()
    for edit in edits:
        applier.accept(edit)

    modified = mod.visit(applier)
    requests: List[ImportRequest] = []
    for edit in applier.accepted:
        for request in edit.imports:
            if request not in requests:
                requests.append(request)
    if requests:
        modified = add_imports(modified, requests)

    return AppliedEditsResult(
        modified_source=modified.code,
        applied=applier.accepted,
        skipped=applier.skipped,
    )
