"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state. State tracks the ids returned
by earlier steps so follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CheckoutState:
    """Tracks one simulated crew member through checkout."""

    user_id: str
    user_email: str
    product_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    current_status: str | None = None
    provider_order_id: str | None = None
    message_count: int = 0
