"""
Data models for contract analysis.

Records produced by the classifier and the extractor, and the findings that
rules hand to the engine.
"""

from dataclasses import dataclass, field
from enum import Enum, Flag
from typing import Any, Dict, Optional, Tuple

import libcst as cst

from .syntax_utils import code_text, literal_string_value


class InvocationKind(Enum):
    """Call dialects recognised by the classifier."""

    LEGACY = "legacy"
    DEBUG = "debug"
    REPLACEMENT = "replacement"


class PreconditionKind(Flag):
    """Which precondition-shaped calls the extractor keeps."""

    REQUIRES = 1
    REPLACEMENT = 2
    DEBUG_ASSERT = 4
    DEFAULT = REQUIRES
    ALL = REQUIRES | REPLACEMENT | DEBUG_ASSERT

    @classmethod
    def from_names(cls, names) -> "PreconditionKind":
        """Combine configuration names such as ``["requires", "debug_assert"]``."""
        result = cls(0)
        for name in names:
            result |= cls[name.upper()]
        return result


@dataclass(eq=False)
class ContractInvocation:
    """Normalized view of one contract-shaped call."""

    kind: InvocationKind
    class_name: str
    method_name: str
    condition: cst.BaseExpression
    call: cst.Call
    arguments: Tuple[cst.Arg, ...]
    message: Optional[cst.BaseExpression] = None
    condition_text: Optional[cst.BaseExpression] = None
    exception_type: Optional[cst.BaseExpression] = None

    @property
    def is_typed(self) -> bool:
        return self.exception_type is not None

    @property
    def condition_source(self) -> str:
        return code_text(self.condition)

    @property
    def is_condition_text_in_sync(self) -> bool:
        """True when there is no condition text or it equals the condition's source."""
        if self.condition_text is None:
            return True
        return literal_string_value(self.condition_text) == self.condition_source


@dataclass(eq=False)
class PreconditionStatement:
    """A statement line holding exactly one precondition call."""

    statement: cst.SimpleStatementLine
    invocation: ContractInvocation
    module_name: Optional[str] = None

    @property
    def condition(self) -> cst.BaseExpression:
        return self.invocation.condition

    @property
    def code(self) -> str:
        return code_text(self.statement)


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class EditKind(Enum):
    """How an edit changes its target statement or node."""

    REPLACE = "replace"
    REMOVE = "remove"
    INSERT_BEFORE = "insert_before"
    INSERT_AFTER = "insert_after"


@dataclass(frozen=True)
class ImportRequest:
    """``from module import name`` that an edit needs in its module."""

    module: str
    name: str


@dataclass(eq=False)
class Edit:
    """A single change anchored on a node of the original tree."""

    kind: EditKind
    target: cst.CSTNode
    nodes: Tuple[cst.CSTNode, ...] = ()
    imports: Tuple[ImportRequest, ...] = ()


@dataclass
class Finding:
    """A diagnostic plus the edit that resolves it, if one exists."""

    rule_id: str
    message: str
    path: str
    line: int
    column: int
    severity: Severity = Severity.WARNING
    edit: Optional[Edit] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def fixable(self) -> bool:
        return self.edit is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "message": self.message,
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "severity": self.severity.value,
            "fixable": self.fixable,
            "details": self.details,
        }
