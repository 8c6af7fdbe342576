"""Cooperative cancellation for long generation requests.

Model extraction checks the token between mesh parts, surface sampling
between ray batches.  The token wraps a ``threading.Event`` so a UI or
loader thread can cancel while the generating thread polls.
"""

import threading
from typing import Optional

from .errors import GenerationCancelled


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str = "generation") -> None:
        if self._event.is_set():
            raise GenerationCancelled(f"{stage} cancelled")


def check_cancelled(token: Optional[CancellationToken], stage: str) -> None:
    """No-op when *token* is None."""
    if token is not None:
        token.raise_if_cancelled(stage)
