"""
contractfix - migration tooling for a legacy contract library

Finds contract-style precondition calls in Python code bases, pulls inherited
preconditions down into overriding methods, lowers typed preconditions to
explicit ``raise`` statements and retargets or removes obsolete contract calls.
"""

__version__ = "0.1.0"

# Only expose version by default - everything else is lazy loaded
__all__ = [
    "__version__",
    "ContractFix",
    "AnalysisResult",
    "FixResult",
    "ContractFixConfig",
    "ProjectIndex",
    "CancellationToken",
]


def __getattr__(name):
    """Lazy loading of main API classes to keep ``import contractfix`` cheap."""
    if name in {"ContractFix", "AnalysisResult", "FixResult"}:
        from .api import AnalysisResult, ContractFix, FixResult

        return {
            "ContractFix": ContractFix,
            "AnalysisResult": AnalysisResult,
            "FixResult": FixResult,
        }[name]

    if name == "ContractFixConfig":
        from .config import ContractFixConfig

        return ContractFixConfig

    if name == "ProjectIndex":
        from .symbols import ProjectIndex

        return ProjectIndex

    if name == "CancellationToken":
        from .cancellation import CancellationToken

        return CancellationToken

    raise AttributeError(f"module 'contractfix' has no attribute '{name}'")
