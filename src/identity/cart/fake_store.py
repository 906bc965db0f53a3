"""In-memory cart store that records writes for test assertions."""

import copy

from identity.cart.port import CartStore, CartStoreError


class FakeCartStore(CartStore):
    def __init__(self) -> None:
        self.carts: dict[str, list[dict]] = {}
        self.writes: list[dict] = []
        self.should_succeed: bool = True
        self.failure_reason: str = "User record unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "User record unavailable") -> None:
        """Configure the fake store behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def get_cart(self, user_id: str) -> list[dict]:
        if not self.should_succeed:
            raise CartStoreError(self.failure_reason)
        return copy.deepcopy(self.carts.get(str(user_id), []))

    def replace_cart(self, user_id: str, items: list[dict]) -> None:
        if not self.should_succeed:
            raise CartStoreError(self.failure_reason)
        self.carts[str(user_id)] = copy.deepcopy(items)
        self.writes.append({"user_id": str(user_id), "items": copy.deepcopy(items)})

    def reset(self) -> None:
        """Clear carts and recorded writes (useful between tests)."""
        self.carts.clear()
        self.writes.clear()
        self.should_succeed = True
        self.failure_reason = "User record unavailable"
