"""Buyer notices sent after payment and delivery transitions.

Notices are fire-and-forget: a failed delivery is logged and never stops the
order from progressing.
"""

import structlog
from notifications.channel import get_sink
from notifications.templates import build_notice
from notifications.templates.codes import NoticeCode

from ordering.order.status import DeliveryOption

logger = structlog.get_logger(__name__)


def _context(order) -> dict:
    pricing = order.pricing
    details = order.delivery_details
    return {
        "order_id": str(order.id),
        "total_amount": f"{pricing.total_amount:.2f}" if pricing else "0.00",
        "currency": pricing.currency if pricing else "USD",
        "port_name": details.port_name if details else None,
        "address": details.address if details else None,
    }


def delivery_notice_code(order) -> NoticeCode:
    """Onboard deliveries are done on handover; shore deliveries go out by courier."""
    details = order.delivery_details
    if details is not None and details.option == DeliveryOption.ONBOARD.value:
        return NoticeCode.DELIVERED
    return NoticeCode.SHIPPING_IN_PROGRESS


def notify_buyer(order, code: NoticeCode) -> bool:
    """Send a notice about ``order`` to its buyer. Returns True when it was delivered."""
    try:
        notice = build_notice(code.value, order.user_email, _context(order))
        result = get_sink().notify(notice)
    except Exception:
        logger.exception("Failed to notify buyer", order_id=str(order.id), code=code.value)
        return False

    if result.get("status") != "sent":
        logger.warning(
            "Buyer notice was not delivered",
            order_id=str(order.id),
            code=code.value,
            error=result.get("error"),
        )
        return False

    logger.info("Buyer notified", order_id=str(order.id), code=code.value)
    return True
