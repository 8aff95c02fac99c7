"""
Base-method resolution.

The ancestors of a method are its immediately overridden method plus every
interface member it implements. Deeper overrides are reached only through
the immediate base's own preconditions.
"""

import logging
from typing import List, Optional

from ..cancellation import CancellationToken, check_cancelled
from ..interfaces import SymbolFacts
from ..symbols.model import MethodSymbol

logger = logging.getLogger(__name__)


def resolve_base_methods(
    method: MethodSymbol,
    facts: SymbolFacts,
    token: Optional[CancellationToken] = None,
) -> List[MethodSymbol]:
    """Return the methods ``method`` should inherit preconditions from, in stable order."""
    check_cancelled(token)
    result: List[MethodSymbol] = []

    overridden = facts.overridden_method(method)
    if overridden is not None:
        result.append(overridden)

    owner = method.containing_type
    for interface in facts.all_interfaces(owner):
        for member in interface.get_members():
            implementation = facts.find_implementation_for_interface_member(owner, member)
            if implementation is not None and implementation == method and member not in result:
                result.append(member)

    check_cancelled(token)
    logger.debug(f"Base methods of {method}: {[str(m) for m in result]}")
    return result
