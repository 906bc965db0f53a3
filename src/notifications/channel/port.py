"""Notification sink port: abstract interface for buyer notices."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Notice:
    """A notice addressed to a buyer about one of their orders."""

    code: str
    category: str
    title: str
    body: str
    order_id: str
    recipient: str


class NotificationSink(ABC):
    """Abstract interface for notice delivery adapters."""

    @abstractmethod
    def notify(self, notice: Notice) -> dict:
        """Deliver a notice.

        Returns:
            dict with keys: notice_id, status ("sent" or "failed"), error (optional)
        """
        ...
