"""
analysis/contract_holders.py

Contract-holder resolution.

An interface or base class may keep its preconditions on a separate holder
class linked by decorators:

    @contract_class(IFooContracts)
    class IFoo(Protocol[T]): ...

    @contract_class_for(IFoo)
    class IFooContracts(IFoo[T]): ...

Given an ancestor method, this module finds the holder methods (and the
ancestor itself when it has a body) whose prologues carry the preconditions
to inherit. Every failed lookup contributes nothing.
"""

import logging
from typing import List, Optional

from ..cancellation import CancellationToken, check_cancelled
from ..config import ContractFixConfig
from ..interfaces import SymbolFacts
from ..symbols.model import MethodSymbol, TypeSymbol
from .base_methods import resolve_base_methods
from .models import PreconditionKind, PreconditionStatement
from .preconditions import extract_method_preconditions

logger = logging.getLogger(__name__)


class ContractHolderLinks:
    """
    Lookup table for the type/holder relation declared by decorators.

    ``holders_of`` follows ``contract_class`` on a type; ``owner_of`` follows
    ``contract_class_for`` on a holder. Holders are always returned as their
    unbound generic definition.
    """

    def __init__(self, facts: SymbolFacts, config: Optional[ContractFixConfig] = None) -> None:
        self.facts = facts
        self.config = config or ContractFixConfig.default()

    def _linked_types(self, type_symbol: TypeSymbol, decorator: str) -> List[TypeSymbol]:
        definition = type_symbol.original_definition
        linked = []
        for attribute in definition.get_attributes(decorator):
            if not attribute.arguments or attribute.arguments[0] is None:
                logger.debug(f"@{decorator} on {definition} has no type argument")
                continue
            resolved = self.facts.resolve_type(attribute.arguments[0], definition.module_name)
            if resolved is None:
                logger.debug(f"Cannot resolve {attribute.arguments[0]} from @{decorator}")
                continue
            linked.append(resolved.original_definition)
        return linked

    def owner_of(self, holder: TypeSymbol) -> Optional[TypeSymbol]:
        owners = self._linked_types(holder, self.config.library.contract_class_for_decorator)
        return owners[0] if owners else None

    def holders_of(self, type_symbol: TypeSymbol) -> List[TypeSymbol]:
        definition = type_symbol.original_definition
        holders = []
        for holder in self._linked_types(definition, self.config.library.contract_class_decorator):
            if self.config.analysis_settings.require_reciprocal_link:
                if self.owner_of(holder) != definition:
                    logger.debug(f"{holder} does not name {definition} back; link ignored")
                    continue
            if holder not in holders:
                holders.append(holder)
        return holders

    def is_holder(self, type_symbol: TypeSymbol) -> bool:
        """True for a class marked with ``contract_class_for``."""
        decorator = self.config.library.contract_class_for_decorator
        return bool(type_symbol.original_definition.get_attributes(decorator))


def _interface_member_on_holder(
    base_method: MethodSymbol, holder: TypeSymbol, facts: SymbolFacts
) -> Optional[MethodSymbol]:
    interface = base_method.containing_type
    member = base_method

    if holder.is_generic and interface.is_generic:
        definition = interface.original_definition
        if len(definition.type_parameters) == len(holder.type_arguments):
            reconstructed = facts.construct(definition, holder.type_arguments)
            members = reconstructed.get_members(base_method.name)
            if members:
                member = members[0]

    implementation = facts.find_implementation_for_interface_member(holder, member)
    if implementation is not None:
        return implementation

    # Holder implements the interface with a different argument order.
    for candidate in facts.all_interfaces(holder):
        if candidate.original_definition != interface.original_definition:
            continue
        members = candidate.get_members(base_method.name)
        if members:
            return facts.find_implementation_for_interface_member(holder, members[0])
    return None


def _class_member_on_holder(
    base_method: MethodSymbol, holder: TypeSymbol, facts: SymbolFacts
) -> Optional[MethodSymbol]:
    for candidate in holder.get_members(base_method.name):
        overridden = facts.overridden_method(candidate)
        if overridden is None:
            continue
        # ``class BaseContracts(Base)`` over ``Base(Generic[T])`` overrides the unbound definition.
        overridden_type = overridden.containing_type
        bare_base = overridden_type.is_generic and overridden_type.definition is None
        if holder.is_generic or bare_base:
            if overridden.original_definition == base_method.original_definition:
                return candidate
        elif overridden == base_method:
            return candidate
    return None


def resolve_contract_holder_methods(
    base_method: MethodSymbol,
    original_method: MethodSymbol,
    facts: SymbolFacts,
    config: Optional[ContractFixConfig] = None,
    token: Optional[CancellationToken] = None,
) -> List[MethodSymbol]:
    """
    Find the methods carrying the preconditions ``original_method`` inherits from ``base_method``.

    Args:
        base_method: An ancestor returned by ``resolve_base_methods``.
        original_method: The method preconditions are being collected for.
        facts: Host symbol queries.
        config: Decorator names and the reciprocal link requirement.
        token: Optional cancellation token.

    Returns:
        Holder methods, followed by ``base_method`` itself when it is virtual.
    """
    check_cancelled(token)
    links = ContractHolderLinks(facts, config)
    owner = base_method.containing_type
    own_type = original_method.containing_type.original_definition

    result: List[MethodSymbol] = []
    for holder in links.holders_of(owner):
        if holder == own_type:
            continue
        if owner.is_interface:
            found = _interface_member_on_holder(base_method, holder, facts)
        else:
            found = _class_member_on_holder(base_method, holder, facts)
        if found is None:
            logger.debug(f"No member of {holder} matches {base_method}")
            continue
        if found not in result:
            result.append(found)

    if base_method.is_virtual and base_method not in result:
        result.append(base_method)

    check_cancelled(token)
    return result


def collect_inherited_preconditions(
    method: MethodSymbol,
    facts: SymbolFacts,
    config: Optional[ContractFixConfig] = None,
    token: Optional[CancellationToken] = None,
) -> List[PreconditionStatement]:
    """
    All precondition statements ``method`` inherits, not deduplicated.

    Holder methods of every ancestor come first, in ancestor order, followed by
    the virtual ancestors themselves.
    """
    config = config or ContractFixConfig.default()
    kinds = PreconditionKind.from_names(config.analysis_settings.inherited_kinds)

    aggregated: List[PreconditionStatement] = []
    holder_sources: List[MethodSymbol] = []
    virtual_sources: List[MethodSymbol] = []
    for base_method in resolve_base_methods(method, facts, token):
        for source in resolve_contract_holder_methods(base_method, method, facts, config, token):
            if source is base_method:
                virtual_sources.append(source)
            else:
                holder_sources.append(source)

    visited: List[MethodSymbol] = []
    for source in holder_sources + virtual_sources:
        definition = source.original_definition
        if definition in visited or definition == method.original_definition:
            continue
        visited.append(definition)
        aggregated.extend(extract_method_preconditions(source, kinds, config, token))
    return aggregated
