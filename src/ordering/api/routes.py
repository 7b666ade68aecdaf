"""FastAPI routes for the Ordering domain: cart, orders, admin, products and payments.

Caller identity arrives in the ``X-Customer-Id`` and ``X-User-Role`` headers,
set by the authenticating gateway in front of this service.
"""

import json

import structlog
from fastapi import APIRouter, Header, HTTPException, Request
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddToCartRequest,
    AddVariantRequest,
    AddressDraftSchema,
    ApplyCouponRequest,
    CancelOrderRequest,
    CartResponse,
    CheckoutRequest,
    CompleteRefundRequest,
    DashboardResponse,
    ListProductRequest,
    OrderIdResponse,
    OrderListResponse,
    OrderResponse,
    OrderSummaryResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductResponse,
    RefundRequest,
    ReviewRefundRequest,
    StatusResponse,
    TrackingResponse,
    UpdateCartItemRequest,
    UpdateStatusRequest,
    VariantIdResponse,
)
from ordering.cart.cart import Cart
from ordering.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from ordering.cart.items import AddToCart, RemoveFromCart, UpdateCartItemQuantity
from ordering.cart.management import ClearCart, OpenCart, cart_for
from ordering.cart.shipping import SetCartShippingAddress
from ordering.catalogue.management import AddProductVariant, DeactivateProduct, ListProduct
from ordering.catalogue.product import Product
from ordering.errors import ensure_admin, ensure_customer, ensure_owner_or_admin
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import CheckoutCart, PlaceOrder
from ordering.order.lookup import order_by_number
from ordering.order.order import Order
from ordering.order.refund import CompleteRefund, RequestRefund, ReviewRefund
from ordering.order.removal import DeleteOrder
from ordering.order.status import UpdateOrderStatus
from ordering.payment import get_gateway
from ordering.projections.dashboard import dashboard_stats
from ordering.projections.order_summary import list_order_summaries

logger = structlog.get_logger(__name__)


def _dumps(model) -> str | None:
    return json.dumps(model.model_dump()) if model is not None else None


def _cart_response(customer_id) -> CartResponse:
    return CartResponse.from_cart(cart_for(customer_id))


def _order_response(order_id) -> OrderResponse:
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(x_customer_id: str | None = Header(default=None)) -> CartResponse:
    customer_id = ensure_customer(x_customer_id)
    cart_id = current_domain.process(OpenCart(customer_id=customer_id), asynchronous=False)
    return CartResponse.from_cart(current_domain.repository_for(Cart).get(cart_id))


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, x_customer_id: str | None = Header(default=None)) -> CartResponse:
    customer_id = ensure_customer(x_customer_id)
    command = AddToCart(
        customer_id=customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
        color=body.color,
        size=body.size,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(customer_id)


@cart_router.put("/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    x_customer_id: str | None = Header(default=None),
) -> CartResponse:
    customer_id = ensure_customer(x_customer_id)
    command = UpdateCartItemQuantity(customer_id=customer_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(customer_id)


@cart_router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_cart_item(item_id: str, x_customer_id: str | None = Header(default=None)) -> CartResponse:
    customer_id = ensure_customer(x_customer_id)
    current_domain.process(RemoveFromCart(customer_id=customer_id, item_id=item_id), asynchronous=False)
    return _cart_response(customer_id)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(x_customer_id: str | None = Header(default=None)) -> CartResponse:
    customer_id = ensure_customer(x_customer_id)
    current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False)
    return _cart_response(customer_id)


@cart_router.post("/coupon", response_model=CartResponse)
async def apply_coupon(body: ApplyCouponRequest, x_customer_id: str | None = Header(default=None)) -> CartResponse:
    customer_id = ensure_customer(x_customer_id)
    command = ApplyCouponToCart(customer_id=customer_id, coupon_code=body.coupon_code)
    current_domain.process(command, asynchronous=False)
    return _cart_response(customer_id)


@cart_router.delete("/coupon", response_model=CartResponse)
async def remove_coupon(x_customer_id: str | None = Header(default=None)) -> CartResponse:
    customer_id = ensure_customer(x_customer_id)
    current_domain.process(RemoveCouponFromCart(customer_id=customer_id), asynchronous=False)
    return _cart_response(customer_id)


@cart_router.put("/shipping", response_model=CartResponse)
async def set_shipping_address(
    body: AddressDraftSchema,
    x_customer_id: str | None = Header(default=None),
) -> CartResponse:
    customer_id = ensure_customer(x_customer_id)
    command = SetCartShippingAddress(customer_id=customer_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return _cart_response(customer_id)


@cart_router.post("/checkout", status_code=201, response_model=OrderIdResponse)
async def checkout(body: CheckoutRequest, x_customer_id: str | None = Header(default=None)) -> OrderIdResponse:
    customer_id = ensure_customer(x_customer_id, "check out")
    command = CheckoutCart(
        customer_id=customer_id,
        email=body.email,
        shipping_address=_dumps(body.shipping_address),
        billing_address=_dumps(body.billing_address),
        payment_info=_dumps(body.payment_info),
        notes=body.notes,
        is_gift=body.is_gift,
        gift_message=body.gift_message,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return OrderIdResponse(order_id=order_id, order_number=order.order_number)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest, x_customer_id: str | None = Header(default=None)) -> OrderIdResponse:
    """Place an order directly. Guests (no ``X-Customer-Id``) may order too."""
    command = PlaceOrder(
        customer_id=x_customer_id or None,
        items=json.dumps(
            [{"product_id": i.product_id, "quantity": i.quantity, "color": i.color, "size": i.size} for i in body.items]
        ),
        shipping_address=_dumps(body.shipping_address),
        billing_address=_dumps(body.billing_address),
        payment_info=_dumps(body.payment_info),
        coupon_code=body.coupon_code,
        notes=body.notes,
        is_gift=body.is_gift,
        gift_message=body.gift_message,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return OrderIdResponse(order_id=order_id, order_number=order.order_number)


@order_router.get("", response_model=OrderListResponse)
async def list_my_orders(
    page: int = 1,
    limit: int = 20,
    x_customer_id: str | None = Header(default=None),
) -> OrderListResponse:
    customer_id = ensure_customer(x_customer_id, "view your orders")
    listing = list_order_summaries(customer_id=customer_id, page=page, limit=limit)
    return OrderListResponse(
        **{**listing, "orders": [OrderSummaryResponse.from_summary(s) for s in listing["orders"]]},
    )


@order_router.get("/track/{order_number}", response_model=TrackingResponse)
async def track_by_number(order_number: str) -> TrackingResponse:
    """Public tracking by order number."""
    return TrackingResponse.from_order(order_by_number(order_number))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    x_customer_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    ensure_owner_or_admin(order.customer_id, x_customer_id, x_user_role, "view this order")
    return OrderResponse.from_order(order)


@order_router.get("/{order_id}/tracking", response_model=TrackingResponse)
async def get_tracking(
    order_id: str,
    x_customer_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> TrackingResponse:
    order = current_domain.repository_for(Order).get(order_id)
    ensure_owner_or_admin(order.customer_id, x_customer_id, x_user_role, "track this order")
    return TrackingResponse.from_order(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_status(
    order_id: str,
    body: UpdateStatusRequest,
    x_user_role: str | None = Header(default=None),
) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        note=body.note,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        tracking_url=body.tracking_url,
        requested_by_role=x_user_role,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest | None = None,
    x_customer_id: str | None = Header(default=None),
) -> OrderResponse:
    command = CancelOrder(
        order_id=order_id,
        requested_by=ensure_customer(x_customer_id, "cancel an order"),
        note=body.note if body else None,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.post("/{order_id}/refund", response_model=OrderResponse)
async def request_refund(
    order_id: str,
    body: RefundRequest,
    x_customer_id: str | None = Header(default=None),
) -> OrderResponse:
    command = RequestRefund(
        order_id=order_id,
        requested_by=ensure_customer(x_customer_id, "request a refund"),
        reason=body.reason,
        amount=body.amount,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str, x_customer_id: str | None = Header(default=None)) -> StatusResponse:
    command = DeleteOrder(order_id=order_id, requested_by=ensure_customer(x_customer_id, "delete an order"))
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deleted")


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(x_user_role: str | None = Header(default=None)) -> DashboardResponse:
    ensure_admin(x_user_role, "view the dashboard")
    return DashboardResponse(**dashboard_stats())


@admin_router.get("/orders", response_model=OrderListResponse)
async def list_all_orders(
    status: str | None = None,
    page: int = 1,
    limit: int = 20,
    x_user_role: str | None = Header(default=None),
) -> OrderListResponse:
    ensure_admin(x_user_role, "access all orders")
    listing = list_order_summaries(status=status, page=page, limit=limit)
    return OrderListResponse(
        **{**listing, "orders": [OrderSummaryResponse.from_summary(s) for s in listing["orders"]]},
    )


@admin_router.put("/orders/{order_id}/refund", response_model=OrderResponse)
async def review_refund(
    order_id: str,
    body: ReviewRefundRequest,
    x_user_role: str | None = Header(default=None),
) -> OrderResponse:
    command = ReviewRefund(order_id=order_id, approve=body.approve, note=body.note, requested_by_role=x_user_role)
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@admin_router.post("/orders/{order_id}/refund/complete", response_model=OrderResponse)
async def complete_refund(
    order_id: str,
    body: CompleteRefundRequest | None = None,
    x_user_role: str | None = Header(default=None),
) -> OrderResponse:
    command = CompleteRefund(order_id=order_id, note=body.note if body else None, requested_by_role=x_user_role)
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def list_product(body: ListProductRequest, x_user_role: str | None = Header(default=None)) -> ProductIdResponse:
    ensure_admin(x_user_role, "manage products")
    command = ListProduct(
        name=body.name,
        price=body.price,
        stock=body.stock,
        sku=body.sku,
        image_url=body.image_url,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@product_router.post("/{product_id}/variants", status_code=201, response_model=VariantIdResponse)
async def add_variant(
    product_id: str,
    body: AddVariantRequest,
    x_user_role: str | None = Header(default=None),
) -> VariantIdResponse:
    ensure_admin(x_user_role, "manage products")
    command = AddProductVariant(
        product_id=product_id,
        color=body.color,
        size=body.size,
        stock=body.stock,
        sku=body.sku,
    )
    variant_id = current_domain.process(command, asynchronous=False)
    return VariantIdResponse(variant_id=variant_id)


@product_router.put("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str, x_user_role: str | None = Header(default=None)) -> StatusResponse:
    ensure_admin(x_user_role, "manage products")
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse(status="deactivated")


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return ProductResponse.from_product(current_domain.repository_for(Product).get(product_id))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/intents", status_code=201, response_model=PaymentIntentResponse)
async def create_payment_intent(body: PaymentIntentRequest) -> PaymentIntentResponse:
    metadata = {"order_id": body.order_id} if body.order_id else {}
    result = get_gateway().create_payment_intent(body.amount, currency=body.currency, metadata=metadata)
    if not result.success:
        raise ValidationError({"payment": [result.failure_reason or "Payment could not be authorized"]})

    logger.info("Payment intent created", intent_id=result.intent_id, amount=result.amount, currency=result.currency)
    return PaymentIntentResponse(
        client_secret=result.client_secret,
        intent_id=result.intent_id,
        amount=result.amount,
        currency=result.currency,
    )


@payment_router.post("/webhook", response_model=StatusResponse)
async def payment_webhook(request: Request, stripe_signature: str = Header(default="")) -> StatusResponse:
    """Verify and acknowledge a gateway webhook. Order state is not touched."""
    payload = (await request.body()).decode()
    if not get_gateway().verify_webhook_signature(payload, stripe_signature):
        raise HTTPException(status_code=400, detail="Invalid webhook signature")

    try:
        event = json.loads(payload)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Webhook payload is not valid JSON") from None

    logger.info("Payment webhook received", event_type=event.get("type"), event_id=event.get("id"))
    return StatusResponse(status="received")
