"""
Symbol model and the LibCST-based project index.
"""

from .model import (
    AttributeData,
    ConstructorSignature,
    MethodSymbol,
    ParameterKind,
    ParameterSymbol,
    TypeKind,
    TypeRef,
    TypeSymbol,
    dotted_name,
)
from .project_index import ProjectIndex, SourceModule, parse_source

__all__ = [
    "AttributeData",
    "ConstructorSignature",
    "MethodSymbol",
    "ParameterKind",
    "ParameterSymbol",
    "ProjectIndex",
    "SourceModule",
    "TypeKind",
    "TypeRef",
    "TypeSymbol",
    "dotted_name",
    "parse_source",
]
