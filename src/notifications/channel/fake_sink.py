"""Fake notification sink: records sent notices for testing."""

from uuid import uuid4

from notifications.channel.port import Notice, NotificationSink


class FakeNotificationSink(NotificationSink):
    """Sink that records notices in memory for test assertions."""

    def __init__(self):
        self.sent: list[Notice] = []
        self.should_succeed = True
        self.failure_reason = "Notice delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notice delivery failed"):
        """Configure the fake sink behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def notify(self, notice: Notice) -> dict:
        if not self.should_succeed:
            return {
                "notice_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        self.sent.append(notice)
        return {"notice_id": f"notice-{uuid4().hex[:12]}", "status": "sent"}

    def sent_for(self, order_id: str) -> list[Notice]:
        return [notice for notice in self.sent if notice.order_id == order_id]

    def reset(self):
        """Clear sent notices (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notice delivery failed"
