"""Template registry: maps notice codes to template classes.

Each template knows its category and how to render a title and body from
order context data.
"""

from notifications.channel.port import Notice
from notifications.templates.cash_payment import CashPaymentTemplate
from notifications.templates.codes import NoticeCode
from notifications.templates.delivered import DeliveredTemplate
from notifications.templates.payment_confirmed import PaymentConfirmedTemplate
from notifications.templates.paypal_receipt import PayPalReceiptTemplate
from notifications.templates.shipping_in_progress import ShippingInProgressTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NoticeCode.PAYMENT_CONFIRMED.value: PaymentConfirmedTemplate,
    NoticeCode.PAY_IN_CASH.value: CashPaymentTemplate,
    NoticeCode.PAYPAL_PAID.value: PayPalReceiptTemplate,
    NoticeCode.DELIVERED.value: DeliveredTemplate,
    NoticeCode.SHIPPING_IN_PROGRESS.value: ShippingInProgressTemplate,
}


def get_template(code: str):
    """Look up a template class by notice code."""
    template_cls = TEMPLATE_REGISTRY.get(code)
    if template_cls is None:
        raise ValueError(f"No template registered for notice code: {code}")
    return template_cls


def build_notice(code: str, recipient: str, context: dict) -> Notice:
    """Render the template for ``code`` into a Notice for ``recipient``."""
    template_cls = get_template(code)
    rendered = template_cls.render(context)
    return Notice(
        code=template_cls.code,
        category=template_cls.category,
        title=rendered["title"],
        body=rendered["body"],
        order_id=str(context.get("order_id", "")),
        recipient=recipient,
    )
