"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. Business rules stay in the domain: fields the
domain validates are kept loose here so violations surface as 400s.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class DeliveryDetailsSchema(BaseModel):
    option: str
    port_name: str | None = None
    expected_shipping_date: str | None = None
    address: str | None = None
    postal_code: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "option": "onboard",
                    "port_name": "MSC Aurora",
                    "expected_shipping_date": "2025-08-01",
                }
            ]
        }
    }


class OrderLineSchema(BaseModel):
    product_id: str
    name: str
    sku: str | None = None
    quantity: int
    unit_price: float
    discount: float = 0.0
    admin_status: str
    admin_quantity: int | None = None
    alternative_offer: str | None = None
    selected: bool = True


class MessageSchema(BaseModel):
    id: int
    sender: str
    text: str | None = None
    image_url: str | None = None
    timestamp: datetime


class StatusChangeSchema(BaseModel):
    timestamp: datetime
    old_status: str | None = None
    new_status: str
    changed_by: str


class LineIssueSchema(BaseModel):
    product_id: str
    reason: str
    detail: str


# ---------------------------------------------------------------------------
# Buyer Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    user_email: str
    user_name: str | None = None
    ship_name: str | None = None
    phone_number: str | None = None
    selected_product_ids: list[str]
    delivery_details: DeliveryDetailsSchema
    message: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_email": "bosun@example.com",
                    "ship_name": "MV Northern Star",
                    "selected_product_ids": ["prod-001", "prod-002"],
                    "delivery_details": {
                        "option": "onboard",
                        "port_name": "MSC Aurora",
                        "expected_shipping_date": "2025-08-01",
                    },
                    "message": "Please pack the coffee separately.",
                }
            ]
        }
    }


class UpdateOrderItemRequest(BaseModel):
    quantity: int | None = None
    selected: bool | None = None


class PostMessageRequest(BaseModel):
    text: str | None = None
    image_url: str | None = None


class PayRequest(BaseModel):
    method: str = Field(description="cash or paypal")


class PayPalReturnRequest(BaseModel):
    paypal_order_id: str
    approved: bool = True


# ---------------------------------------------------------------------------
# Staff Request Schemas
# ---------------------------------------------------------------------------
class AnnotationSchema(BaseModel):
    product_id: str
    admin_status: str
    admin_quantity: int | None = None
    alternative_offer: str | None = None


class AnnotateItemsRequest(BaseModel):
    annotations: list[AnnotationSchema] = Field(min_length=1)
    annotated_by: str = "Admin"


class ConfirmPaymentRequest(BaseModel):
    confirmed_by: str = "Admin"


class MarkDeliveredRequest(BaseModel):
    changed_by: str = "Admin"
    delivered_on: date | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class OrderIdResponse(BaseModel):
    order_id: str


class OrderSummaryResponse(BaseModel):
    order_id: str
    status: str
    status_label: str
    user_email: str
    ship_name: str | None = None
    total_amount: float
    currency: str
    created_at: datetime | None = None


class OrderResponse(OrderSummaryResponse):
    user_name: str | None = None
    items: list[OrderLineSchema]
    delivery_details: DeliveryDetailsSchema | None = None
    messages: list[MessageSchema]
    status_history: list[StatusChangeSchema]
    subtotal: float
    shipping_fee: float
    tax: float
    payment_method: str | None = None
    actual_delivery: str | None = None


class ReconciliationResponse(BaseModel):
    order: OrderResponse
    can_confirm: bool
    notice: str | None = None
    issues: list[LineIssueSchema]


class ConfirmationResponse(BaseModel):
    order_id: str
    confirmed: bool
    issues: list[LineIssueSchema]


class ItemUpdateResponse(BaseModel):
    quantity: int
    selected: bool


class RemoveItemResponse(BaseModel):
    order_deleted: bool


class MessageResponse(BaseModel):
    message_id: int
    filtered: bool


class PaymentResponse(BaseModel):
    success: bool
    method: str
    status: str | None = None
    provider_order_id: str | None = None
    approve_url: str | None = None
    failure_reason: str | None = None
    next_actions: list[str] = []


# ---------------------------------------------------------------------------
# Sandbox (non-production) schemas
# ---------------------------------------------------------------------------
class SandboxCartLine(BaseModel):
    product_id: str
    name: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    discount: float = 0.0
    image_url: str | None = None


class SeedCartRequest(BaseModel):
    items: list[SandboxCartLine] = Field(min_length=1)


class SeedCartResponse(BaseModel):
    user_id: str
    item_count: int


class ConfigureCollaboratorRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str | None = None


class CollaboratorConfigResponse(BaseModel):
    adapter: str
    should_succeed: bool
    failure_reason: str
