"""
Cooperative cancellation for analysis entry points.

Every public analysis function accepts an optional token and checks it once
per method-level unit of work.
"""

import threading
from typing import Optional

from .errors import OperationCancelled


class CancellationToken:
    """Thread-safe cancellation flag shared between a host and the analysis."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def throw_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise OperationCancelled("Operation was cancelled")


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise OperationCancelled if ``token`` is set; ``None`` never cancels."""
    if token is not None:
        token.throw_if_cancelled()
