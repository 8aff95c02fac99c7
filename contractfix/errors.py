"""
Exception hierarchy for contractfix.

Only genuine failures are modelled here. A classifier or resolver that finds
nothing returns an empty result instead of raising.
"""

from typing import Optional


class ContractFixError(Exception):
    """Base class for all contractfix errors."""

    pass


class ConfigurationError(ContractFixError):
    """Raised when configuration validation fails."""

    pass


class SourceParseError(ContractFixError):
    """Raised when a source file cannot be parsed by LibCST."""

    def __init__(self, path: str, reason: str, line: Optional[int] = None):
        self.path = path
        self.reason = reason
        self.line = line
        location = f"{path}:{line}" if line is not None else path
        super().__init__(f"Cannot parse {location}: {reason}")


class OperationCancelled(ContractFixError):
    """Raised when a cancellation token is triggered during analysis."""

    pass
