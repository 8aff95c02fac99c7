"""
Small LibCST helpers shared by the analysis and refactoring layers.
"""

import ast
import textwrap
from typing import Optional

import libcst as cst

_EMPTY_MODULE = cst.Module(body=[])


def code_text(node: cst.CSTNode) -> str:
    """Source text of ``node`` without surrounding whitespace."""
    return _EMPTY_MODULE.code_for_node(node).strip()


def _normalized(node: cst.CSTNode) -> str:
    code = _EMPTY_MODULE.code_for_node(node)
    try:
        if isinstance(node, cst.BaseExpression):
            return ast.dump(ast.parse(f"({code.strip()})", mode="eval"))
        return ast.dump(ast.parse(textwrap.dedent(code)))
    except SyntaxError:
        return " ".join(code.split())


def structurally_equal(left: cst.CSTNode, right: cst.CSTNode) -> bool:
    """Equality ignoring formatting, comments and redundant parentheses."""
    if left is right:
        return True
    return _normalized(left) == _normalized(right)


def literal_string_value(expr: Optional[cst.BaseExpression]) -> Optional[str]:
    """Value of a plain string literal, else None (f-strings and bytes included)."""
    if isinstance(expr, (cst.SimpleString, cst.ConcatenatedString)):
        value = expr.evaluated_value
        if isinstance(value, str):
            return value
    return None


def string_literal(text: str) -> cst.SimpleString:
    """A string literal for ``text``, double-quoted when no escaping is needed."""
    if '"' not in text and "\\" not in text and "\n" not in text:
        return cst.SimpleString(f'"{text}"')
    return cst.SimpleString(repr(text))


def is_docstring_stmt(stmt: cst.CSTNode) -> bool:
    if not isinstance(stmt, cst.SimpleStatementLine):
        return False
    if len(stmt.body) != 1:
        return False
    b0 = stmt.body[0]
    return isinstance(b0, cst.Expr) and isinstance(b0.value, (cst.SimpleString, cst.ConcatenatedString))


def is_future_import(stmt: cst.CSTNode) -> bool:
    if not isinstance(stmt, cst.SimpleStatementLine):
        return False
    if len(stmt.body) != 1:
        return False
    b0 = stmt.body[0]
    return isinstance(b0, cst.ImportFrom) and module_name(b0.module) == "__future__"


def is_import_stmt(stmt: cst.CSTNode) -> bool:
    if not isinstance(stmt, cst.SimpleStatementLine):
        return False
    if len(stmt.body) != 1:
        return False
    return isinstance(stmt.body[0], (cst.Import, cst.ImportFrom))


def module_name(mod_expr: Optional[cst.BaseExpression]) -> Optional[str]:
    if mod_expr is None:
        return None
    if isinstance(mod_expr, cst.Name):
        return mod_expr.value
    if isinstance(mod_expr, cst.Attribute):
        head = module_name(mod_expr.value)
        if head is None:
            return None
        return f"{head}.{mod_expr.attr.value}"
    return None
