"""
@file: cancellation.py
Cooperative cancellation shared by model acquisition and question answering.

A CancellationToken is a thread-safe flag. Code checks it at well-defined
checkpoints (retry boundaries, before and after waiting on the model) and
stops with QACancelledError once it is set. Nothing is interrupted
asynchronously.
"""
import logging
import threading

from bert_qa.exceptions import QACancelledError

logger = logging.getLogger(__name__)

class CancellationToken:
    """Thread-safe, one-way cancellation flag."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        if not self._event.is_set():
            logger.info("Cancellation requested")
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, where: str = None) -> None:
        """
        Raise QACancelledError if cancellation has been requested.

        Args:
            where: Optional checkpoint name, included in the error message.
        """
        if self._event.is_set():
            message = f"Operation cancelled ({where})" if where else "Operation cancelled"
            logger.debug(message)
            raise QACancelledError(message)

    def wait(self, timeout: float = None) -> bool:
        """Block until cancelled or until timeout. Returns True if cancelled."""
        return self._event.wait(timeout)

    def __repr__(self):
        return f"CancellationToken(cancelled={self.is_cancelled})"
