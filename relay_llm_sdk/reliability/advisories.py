"""
User-facing advisories emitted by the failover orchestrator.

The core only formats the messages; showing them is up to the host, which
plugs in its own ``AdvisoryNotifier``.
"""

from abc import ABC, abstractmethod

from ..observability.logging import ProviderLogger


class AdvisoryNotifier(ABC):
    """Receives advisory text. Implementations must not block."""

    @abstractmethod
    def advise(self, message: str) -> None:
        """Transient notice, e.g. that the next candidate is being tried."""

    @abstractmethod
    def warn(self, message: str) -> None:
        """Terminal warning for a call that failed for good."""


class LoggingNotifier(AdvisoryNotifier):
    """Default notifier: writes advisories to the SDK log."""

    def __init__(self):
        self.logger = ProviderLogger("advisory")

    def advise(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)
