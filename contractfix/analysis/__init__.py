"""
Contract analysis: classification, extraction, inheritance resolution and
deduplication of precondition statements.
"""

from .base_methods import resolve_base_methods
from .contract_holders import (
    ContractHolderLinks,
    collect_inherited_preconditions,
    resolve_contract_holder_methods,
)
from .dedup import deduplicate
from .invocation import classify_invocation, classify_statement, precondition_kind
from .models import (
    ContractInvocation,
    Edit,
    EditKind,
    Finding,
    ImportRequest,
    InvocationKind,
    PreconditionKind,
    PreconditionStatement,
    Severity,
)
from .preconditions import extract_leading_preconditions, extract_method_preconditions

__all__ = [
    "ContractHolderLinks",
    "ContractInvocation",
    "Edit",
    "EditKind",
    "Finding",
    "ImportRequest",
    "InvocationKind",
    "PreconditionKind",
    "PreconditionStatement",
    "Severity",
    "classify_invocation",
    "classify_statement",
    "collect_inherited_preconditions",
    "deduplicate",
    "extract_leading_preconditions",
    "extract_method_preconditions",
    "precondition_kind",
    "resolve_base_methods",
    "resolve_contract_holder_methods",
]
