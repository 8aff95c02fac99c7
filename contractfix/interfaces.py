"""
Protocol interfaces between the analysis core and its host.

The host owns parsing and type resolution. The core only queries it through
``SymbolFacts`` and never mutates the symbols it receives.
"""

from typing import List, Optional, Protocol, Sequence

import libcst as cst

from .symbols.model import ConstructorSignature, MethodSymbol, TypeRef, TypeSymbol


class SymbolFacts(Protocol):
    """Read-only symbol queries the analysis core needs from its host."""

    def resolve_type(self, ref: TypeRef, module_name: Optional[str] = None) -> Optional[TypeSymbol]:
        """Resolve a written type reference, constructing generics when arguments are given."""
        ...

    def construct(self, definition: TypeSymbol, type_arguments: Sequence[TypeRef]) -> TypeSymbol:
        """Substitute ``definition``'s type parameters with ``type_arguments``."""
        ...

    def all_interfaces(self, type_symbol: TypeSymbol) -> List[TypeSymbol]:
        """All interfaces implemented by ``type_symbol``, transitively, with arguments bound."""
        ...

    def overridden_method(self, method: MethodSymbol) -> Optional[MethodSymbol]:
        """The method ``method`` directly overrides, or None."""
        ...

    def find_implementation_for_interface_member(
        self, type_symbol: TypeSymbol, interface_method: MethodSymbol
    ) -> Optional[MethodSymbol]:
        """The method of ``type_symbol`` implementing ``interface_method``, or None."""
        ...

    def method_for_declaration(self, node: cst.FunctionDef) -> Optional[MethodSymbol]:
        """The method symbol declared by ``node``, or None for free functions."""
        ...

    def constructors(
        self, ref: TypeRef, module_name: Optional[str] = None
    ) -> List[ConstructorSignature]:
        """Declared constructor signatures of an exception type."""
        ...

    def is_subtype(self, ref: TypeRef, base_name: str, module_name: Optional[str] = None) -> bool:
        """True when ``ref`` names ``base_name`` or one of its subclasses."""
        ...
