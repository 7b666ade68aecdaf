"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept apart from the internal Protean commands.
Responses are built from aggregates with the ``from_*`` constructors.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressDraftSchema(BaseModel):
    name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    phone: str | None = None


class ShippingAddressSchema(BaseModel):
    name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str = "USA"


class BillingAddressSchema(BaseModel):
    name: str
    email: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str = "USA"


class PaymentInfoSchema(BaseModel):
    payment_id: str
    status: str
    method: str
    card_brand: str | None = None
    last4: str | None = None


class LineItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    color: str | None = None
    size: str | None = None
    price: float | None = None  # accepted for compatibility; the catalogue price is used


class StatusResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "ok"}]}}

    status: str = "ok"


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    color: str | None = None
    size: str | None = None


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class ApplyCouponRequest(BaseModel):
    coupon_code: str = Field(min_length=1)


class CheckoutRequest(BaseModel):
    email: str
    shipping_address: ShippingAddressSchema | None = None
    billing_address: BillingAddressSchema | None = None
    payment_info: PaymentInfoSchema | None = None
    notes: str | None = None
    is_gift: bool = False
    gift_message: str | None = None


class CartItemResponse(BaseModel):
    id: str
    product_id: str
    name: str
    price: float
    image: str | None = None
    sku: str | None = None
    color: str | None = None
    size: str | None = None
    quantity: int
    max_quantity: int
    in_stock: bool


class CartResponse(BaseModel):
    cart_id: str
    customer_id: str
    items: list[CartItemResponse]
    item_count: int
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    coupon_code: str | None = None
    shipping_address: AddressDraftSchema | None = None
    last_updated: datetime | None = None

    @classmethod
    def from_cart(cls, cart) -> "CartResponse":
        address = cart.shipping_address
        return cls(
            cart_id=str(cart.id),
            customer_id=str(cart.customer_id),
            items=[
                CartItemResponse(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    name=item.name,
                    price=item.price,
                    image=item.image,
                    sku=item.sku,
                    color=item.color,
                    size=item.size,
                    quantity=item.quantity,
                    max_quantity=item.max_quantity,
                    in_stock=bool(item.in_stock),
                )
                for item in cart.items
            ],
            item_count=cart.item_count,
            subtotal=cart.subtotal or 0.0,
            tax=cart.tax or 0.0,
            shipping=cart.shipping or 0.0,
            discount=cart.discount or 0.0,
            total=cart.total or 0.0,
            coupon_code=cart.coupon_code,
            shipping_address=AddressDraftSchema(**address.to_dict()) if address else None,
            last_updated=cart.last_updated,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    items: list[LineItemRequest]
    shipping_address: ShippingAddressSchema
    billing_address: BillingAddressSchema | None = None
    payment_info: PaymentInfoSchema | None = None
    coupon_code: str | None = None
    notes: str | None = None
    is_gift: bool = False
    gift_message: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "a1b2c3d4", "quantity": 2, "color": "Black", "size": "M"}],
                    "shipping_address": {
                        "name": "Jane Doe",
                        "email": "jane@example.com",
                        "phone": "555-0100",
                        "address": "123 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "zip_code": "62701",
                        "country": "USA",
                    },
                    "coupon_code": "SAVE10",
                }
            ]
        }
    }


class UpdateStatusRequest(BaseModel):
    status: str
    note: str | None = None
    carrier: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None


class CancelOrderRequest(BaseModel):
    note: str | None = None


class RefundRequest(BaseModel):
    reason: str = Field(min_length=1)
    amount: float | None = Field(default=None, gt=0)


class ReviewRefundRequest(BaseModel):
    approve: bool
    note: str | None = None


class CompleteRefundRequest(BaseModel):
    note: str | None = None


class OrderIdResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"order_id": "d4e5f6a7-b8c9-0123-def0-234567890123"}]}}

    order_id: str
    order_number: str | None = None


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    price: float
    quantity: int
    color: str | None = None
    size: str | None = None
    image: str | None = None
    sku: str | None = None


class StatusEntryResponse(BaseModel):
    status: str
    timestamp: datetime
    note: str | None = None


class ShippingInfoResponse(BaseModel):
    carrier: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None


class RefundInfoResponse(BaseModel):
    amount: float
    reason: str | None = None
    status: str
    requested_at: datetime | None = None
    processed_at: datetime | None = None


class TrackingResponse(BaseModel):
    order_number: str
    status: str
    status_history: list[StatusEntryResponse]
    shipping_info: ShippingInfoResponse
    estimated_delivery: datetime | None = None
    actual_delivery: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "TrackingResponse":
        return cls(**order.tracking())


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str | None = None
    status: str
    items: list[OrderItemResponse]
    total_items: int
    items_price: float
    tax_price: float
    shipping_price: float
    discount_amount: float
    total_price: float
    coupon_code: str | None = None
    shipping_address: ShippingAddressSchema
    billing_address: BillingAddressSchema | None = None
    tracking: TrackingResponse
    refund_info: RefundInfoResponse | None = None
    notes: str | None = None
    is_gift: bool = False
    gift_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        refund = order.refund_info
        return cls(
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id) if order.customer_id else None,
            status=order.status,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    color=item.color,
                    size=item.size,
                    image=item.image,
                    sku=item.sku,
                )
                for item in order.items
            ],
            total_items=order.total_items,
            items_price=order.items_price,
            tax_price=order.tax_price,
            shipping_price=order.shipping_price,
            discount_amount=order.discount_amount,
            total_price=order.total_price,
            coupon_code=order.coupon_code,
            shipping_address=ShippingAddressSchema(**order.shipping_address.to_dict()),
            billing_address=BillingAddressSchema(**order.billing_address.to_dict()) if order.billing_address else None,
            tracking=TrackingResponse.from_order(order),
            refund_info=(
                RefundInfoResponse(
                    amount=refund.amount,
                    reason=refund.reason,
                    status=refund.status,
                    requested_at=refund.requested_at,
                    processed_at=refund.processed_at,
                )
                if refund
                else None
            ),
            notes=order.notes,
            is_gift=bool(order.is_gift),
            gift_message=order.gift_message,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderSummaryResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    status: str
    refund_status: str | None = None
    total_items: int
    total_price: float
    created_at: datetime | None = None

    @classmethod
    def from_summary(cls, summary) -> "OrderSummaryResponse":
        return cls(
            order_id=str(summary.order_id),
            order_number=summary.order_number,
            customer_id=str(summary.customer_id) if summary.customer_id else None,
            customer_name=summary.customer_name,
            customer_email=summary.customer_email,
            status=summary.status,
            refund_status=summary.refund_status,
            total_items=summary.total_items or 0,
            total_price=summary.total_price or 0.0,
            created_at=summary.created_at,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderSummaryResponse]
    count: int
    total: int
    total_pages: int
    current_page: int


class DashboardResponse(BaseModel):
    products: int
    orders: int
    sales: float
    orders_by_status: dict[str, int]
    today: dict


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class ListProductRequest(BaseModel):
    name: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    sku: str | None = None
    image_url: str | None = None


class AddVariantRequest(BaseModel):
    color: str
    size: str
    stock: int = Field(ge=0, default=0)
    sku: str | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class VariantIdResponse(BaseModel):
    variant_id: str


class VariantResponse(BaseModel):
    variant_id: str
    color: str
    size: str
    sku: str | None = None
    stock: int


class ProductResponse(BaseModel):
    product_id: str
    name: str
    sku: str | None = None
    price: float
    image_url: str | None = None
    stock: int
    is_active: bool
    variants: list[VariantResponse]

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        return cls(
            product_id=str(product.id),
            name=product.name,
            sku=product.sku,
            price=product.price,
            image_url=product.image_url,
            stock=product.stock or 0,
            is_active=bool(product.is_active),
            variants=[
                VariantResponse(
                    variant_id=str(v.id),
                    color=v.color,
                    size=v.size,
                    sku=v.sku,
                    stock=v.stock or 0,
                )
                for v in product.variants
            ],
        )


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class PaymentIntentRequest(BaseModel):
    amount: float = Field(gt=0)
    currency: str = "usd"
    order_id: str | None = None


class PaymentIntentResponse(BaseModel):
    client_secret: str
    intent_id: str
    amount: int
    currency: str
