"""Email channel port: abstract interface for email dispatch."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> dict:
        """Send an email message.

        ``to`` is the recipient's user id; adapters resolve it to an address.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
