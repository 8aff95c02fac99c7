"""
Base class and registry for contract rules.

A rule is a pass over one indexed module. It reports findings, each carrying
the edit that resolves it, and never mutates the module itself.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Type

import libcst as cst

from ..analysis.invocation import call_of_statement
from ..analysis.models import Edit, Finding, Severity
from ..cancellation import CancellationToken
from ..config import ContractFixConfig
from ..symbols.model import AttributeData
from ..symbols.project_index import ProjectIndex, SourceModule, read_parameters

logger = logging.getLogger(__name__)


@dataclass
class CallSite:
    """A call together with its enclosing statement, function and classes."""

    call: cst.Call
    statement: Optional[cst.SimpleStatementLine]
    function: Optional[cst.FunctionDef]
    classes: Tuple[cst.ClassDef, ...]


class _CallSiteCollector(cst.CSTVisitor):
    def __init__(self) -> None:
        self.sites: List[CallSite] = []
        self.functions: List[Tuple[cst.FunctionDef, Tuple[cst.ClassDef, ...]]] = []
        self._classes: List[cst.ClassDef] = []
        self._function_stack: List[cst.FunctionDef] = []
        self._statements: List[cst.SimpleStatementLine] = []

    def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
        self._classes.append(node)
        return True

    def leave_ClassDef(self, original_node: cst.ClassDef) -> None:
        self._classes.pop()

    def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
        self.functions.append((node, tuple(self._classes)))
        self._function_stack.append(node)
        return True

    def leave_FunctionDef(self, original_node: cst.FunctionDef) -> None:
        self._function_stack.pop()

    def visit_SimpleStatementLine(self, node: cst.SimpleStatementLine) -> Optional[bool]:
        self._statements.append(node)
        return True

    def leave_SimpleStatementLine(self, original_node: cst.SimpleStatementLine) -> None:
        self._statements.pop()

    def visit_Call(self, node: cst.Call) -> Optional[bool]:
        statement = None
        if self._statements and call_of_statement(self._statements[-1]) is node:
            statement = self._statements[-1]
        function = self._function_stack[-1] if self._function_stack else None
        self.sites.append(CallSite(node, statement, function, tuple(self._classes)))
        return True


def _has_decorator(decorators, name: str) -> bool:
    for decorator in decorators:
        data = AttributeData.from_decorator(decorator)
        if data is not None and data.name == name:
            return True
    return False


class RuleContext:
    """Everything a rule needs to analyze one module."""

    def __init__(
        self,
        index: ProjectIndex,
        source: SourceModule,
        config: Optional[ContractFixConfig] = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        self.index = index
        self.source = source
        self.config = config or index.config
        self.token = token
        self._collector: Optional[_CallSiteCollector] = None

    def _collected(self) -> _CallSiteCollector:
        if self._collector is None:
            self._collector = _CallSiteCollector()
            self.source.module.visit(self._collector)
        return self._collector

    def call_sites(self) -> List[CallSite]:
        return self._collected().sites

    def functions(self) -> List[Tuple[cst.FunctionDef, Tuple[cst.ClassDef, ...]]]:
        return self._collected().functions

    def is_holder_class(self, class_def: cst.ClassDef) -> bool:
        return _has_decorator(class_def.decorators, self.config.library.contract_class_for_decorator)

    def in_holder_class(self, site: CallSite) -> bool:
        return any(self.is_holder_class(c) for c in site.classes)

    def is_invariant_method(self, function: Optional[cst.FunctionDef]) -> bool:
        if function is None:
            return False
        return _has_decorator(function.decorators, self.config.library.invariant_method_decorator)

    def parameter_names(self, function: Optional[cst.FunctionDef]) -> List[str]:
        """Value parameter names of ``function``; the receiver of a method is excluded."""
        if function is None:
            return []
        method = self.index.method_for_declaration(function)
        if method is not None:
            return [p.name for p in method.value_parameters]
        return [p.name for p in read_parameters(function.params)]

    def finding(
        self,
        rule: "ContractRule",
        node: cst.CSTNode,
        message: str,
        edit: Optional[Edit] = None,
        **details,
    ) -> Finding:
        line, column = self.source.position(node)
        return Finding(
            rule_id=rule.rule_id,
            message=message,
            path=self.source.path,
            line=line,
            column=column,
            severity=rule.severity,
            edit=edit,
            details=details,
        )


class ContractRule(ABC):
    """
    Abstract contract for a rule.

    Rules are executed in registration order by the engine; when two edits
    overlap, the one from the earlier rule wins.
    """

    rule_id: str = ""
    title: str = ""
    description: str = ""
    severity: Severity = Severity.WARNING

    def __init__(self, config: Optional[ContractFixConfig] = None) -> None:
        self.config = config or ContractFixConfig.default()

    @abstractmethod
    def check(self, context: RuleContext) -> List[Finding]:
        """
        Analyze one module.

        Args:
            context: The module, the project index and the configuration.

        Returns:
            Findings in source order.
        """
        pass


RULES: Dict[str, Type[ContractRule]] = {}


def register_rule(rule_class: Type[ContractRule]) -> Type[ContractRule]:
    if rule_class.rule_id in RULES:
        raise ValueError(f"Duplicate rule id: {rule_class.rule_id}")
    RULES[rule_class.rule_id] = rule_class
    return rule_class


def create_rules(
    rule_ids: Optional[Iterable[str]] = None, config: Optional[ContractFixConfig] = None
) -> List[ContractRule]:
    """Instantiate rules by id, in registry order. Unknown ids are logged and ignored."""
    config = config or ContractFixConfig.default()
    wanted = list(rule_ids) if rule_ids is not None else config.analysis_settings.enabled_rules
    for rule_id in wanted:
        if rule_id not in RULES:
            logger.warning(f"Unknown rule id ignored: {rule_id}")
    return [rule_class(config) for rule_id, rule_class in RULES.items() if rule_id in wanted]
