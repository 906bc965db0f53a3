"""Consistency check run before a buyer may confirm a reviewed order.

The check is all-or-nothing over the selected lines. Every selected line must
have a favourable staff verdict, a staff-approved quantity covering the
request when stock is limited, and a price snapshot that still matches the
catalogue at cent precision.

A failing check is not an error: callers receive a report describing each
offending line and decide how to present it.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from catalogue.pricing.port import ProductPrice

from ordering.order.status import AdminStatus


class IssueReason(Enum):
    NOTHING_SELECTED = "nothing_selected"
    PENDING_REVIEW = "pending_review"
    OUT_OF_STOCK = "out_of_stock"
    ALTERNATIVE_OFFER = "alternative_offer"
    INSUFFICIENT_QUANTITY = "insufficient_quantity"
    UNKNOWN_PRODUCT = "unknown_product"
    PRICE_CHANGED = "price_changed"
    DISCOUNT_CHANGED = "discount_changed"


@dataclass(frozen=True)
class LineIssue:
    """One reason a selected line blocks confirmation."""

    product_id: str
    reason: IssueReason
    detail: str


@dataclass(frozen=True)
class ConsistencyReport:
    """Outcome of a consistency check."""

    issues: tuple[LineIssue, ...] = ()

    @property
    def holds(self) -> bool:
        return not self.issues

    @property
    def messages(self) -> list[str]:
        return [issue.detail for issue in self.issues]

    def issues_for(self, product_id: str) -> list[LineIssue]:
        return [issue for issue in self.issues if issue.product_id == str(product_id)]


def to_cents(amount: float | None) -> Decimal:
    """Round a monetary amount to two decimals, half away from zero."""
    return Decimal(str(amount or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def check_consistency(lines: Iterable, current_prices: Mapping[str, ProductPrice]) -> ConsistencyReport:
    """Check the selected order lines against staff verdicts and live prices.

    Args:
        lines: Order lines (``OrderItem`` entities or equivalents).
        current_prices: Current catalogue price per product id. A product
            missing from the mapping is treated as no longer sold.
    """
    selected = [line for line in lines if line.selected]
    if not selected:
        return ConsistencyReport(
            issues=(LineIssue("", IssueReason.NOTHING_SELECTED, "Select at least one item to confirm"),)
        )

    issues: list[LineIssue] = []
    for line in selected:
        issues.extend(_line_issues(line, current_prices.get(str(line.product_id))))
    return ConsistencyReport(issues=tuple(issues))


def _line_issues(line, price: ProductPrice | None) -> Iterator[LineIssue]:
    product_id = str(line.product_id)
    label = line.name or product_id
    verdict = AdminStatus(line.admin_status)

    if verdict == AdminStatus.OUT_OF_STOCK:
        yield LineIssue(product_id, IssueReason.OUT_OF_STOCK, f"{label} is out of stock")
    elif verdict == AdminStatus.ALTERNATIVE_OFFER:
        yield LineIssue(
            product_id,
            IssueReason.ALTERNATIVE_OFFER,
            f"{label} has an alternative offer; review it in the messages",
        )
    elif verdict == AdminStatus.PENDING_REVIEW:
        yield LineIssue(product_id, IssueReason.PENDING_REVIEW, f"{label} has not been reviewed yet")
    elif verdict == AdminStatus.LIMITED and (line.admin_quantity or 0) < line.quantity:
        yield LineIssue(
            product_id,
            IssueReason.INSUFFICIENT_QUANTITY,
            f"Only {line.admin_quantity or 0} of {line.quantity} {label} can be supplied",
        )

    if price is None:
        yield LineIssue(product_id, IssueReason.UNKNOWN_PRODUCT, f"{label} is no longer in the catalogue")
        return

    if to_cents(line.unit_price) != to_cents(price.calculated_price):
        yield LineIssue(
            product_id,
            IssueReason.PRICE_CHANGED,
            f"The price of {label} changed from {to_cents(line.unit_price)} to {to_cents(price.calculated_price)}",
        )
    if to_cents(line.discount) != to_cents(price.discount):
        yield LineIssue(
            product_id,
            IssueReason.DISCOUNT_CHANGED,
            f"The discount on {label} changed from {to_cents(line.discount)} to {to_cents(price.discount)}",
        )
