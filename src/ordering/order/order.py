"""Order aggregate (CQRS): the record of a purchase and its status lifecycle.

Status lifecycle:
    pending → processing → shipped → delivered
    pending / processing / shipped → cancelled  (stock goes back on the shelf)
    shipped / delivered → refunded               (after an approved refund request)

Administrators may move an order freely among the open statuses (pending,
processing, shipped), including backwards. Cancelled and refunded are final,
and a delivered order can only be refunded. Cancelling and refunding have
their own methods; ``update_status`` refuses to set either.

Every change appends a ``StatusEntry`` to ``status_history``, which is never
rewritten.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderDeleted,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
    RefundRequested,
    RefundReviewed,
)
from ordering.pricing.calculator import calculate_totals, current_policy
from ordering.utils.config import custom_setting

DEFAULT_ESTIMATED_DELIVERY_DAYS = 3
DEFAULT_CARRIER = "Standard Shipping"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class RefundStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.SHIPPED}
_REFUNDABLE_STATES = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}
_FINAL_STATES = {OrderStatus.CANCELLED, OrderStatus.REFUNDED}


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError({"status": [f"Invalid status '{value}'. Must be one of: {allowed}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes and who to tell about it. Captured once, never edited."""

    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(required=True, max_length=30)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100, default="USA")


@ordering.value_object(part_of="Order")
class BillingAddress:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100, default="USA")


@ordering.value_object(part_of="Order")
class PaymentInfo:
    """Gateway reference for how the order was paid."""

    payment_id = String(required=True, max_length=255)
    status = String(required=True, max_length=50)
    method = String(required=True, max_length=50)
    card_brand = String(max_length=30)
    last4 = String(max_length=4)


@ordering.value_object(part_of="Order")
class ShippingInfo:
    carrier = String(max_length=100, default=DEFAULT_CARRIER)
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=500)
    estimated_delivery = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()


@ordering.value_object(part_of="Order")
class RefundInfo:
    amount = Float(required=True, min_value=0.0)
    reason = String(max_length=500)
    status = String(choices=RefundStatus, default=RefundStatus.PENDING.value)
    requested_at = DateTime()
    processed_at = DateTime()
    gateway_refund_id = String(max_length=255)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """Product snapshot at the moment the order was placed."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    color = String(max_length=50)
    size = String(max_length=20)
    image = String(max_length=500)
    sku = String(max_length=50)


@ordering.entity(part_of="Order")
class StatusEntry:
    status = String(required=True, choices=OrderStatus)
    timestamp = DateTime(required=True)
    note = String(max_length=500)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    customer_id = Identifier()  # Empty for guest orders
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress, required=True)
    billing_address = ValueObject(BillingAddress)
    payment_info = ValueObject(PaymentInfo)
    items_price = Float(default=0.0)
    tax_price = Float(default=0.0)
    shipping_price = Float(default=0.0)
    discount_amount = Float(default=0.0)
    total_price = Float(default=0.0)
    coupon_code = String(max_length=100)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusEntry)
    shipping_info = ValueObject(ShippingInfo)
    refund_info = ValueObject(RefundInfo)
    stock_reserved = Boolean(default=False)
    notes = Text()
    is_gift = Boolean(default=False)
    gift_message = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        items,
        shipping_address,
        customer_id=None,
        billing_address=None,
        payment_info=None,
        coupon=None,
        policy=None,
        notes=None,
        is_gift=False,
        gift_message=None,
    ):
        """Create a pending order.

        Args:
            order_number: Number handed out by the day sequence.
            items: List of dicts with product_id, name, price, quantity and
                optionally color, size, image, sku. Prices are the catalogue's.
            shipping_address: Dict of ``ShippingAddress`` fields.
            billing_address: Dict of ``BillingAddress`` fields. Defaults to
                the shipping address.
            payment_info: Dict of ``PaymentInfo`` fields.
            coupon: Resolved ``Coupon`` to discount the order with.
            policy: ``PricingPolicy``; defaults to the configured one.
        """
        if not items:
            raise ValidationError({"items": ["No order items"]})

        order_items = [OrderItem(**item) for item in items]
        totals = calculate_totals(order_items, coupon, policy or current_policy())
        coupon_code = coupon.code if coupon else None

        now = datetime.now(UTC)
        shipping = ShippingAddress(**shipping_address)
        if billing_address:
            billing = BillingAddress(**billing_address)
        else:
            billing = BillingAddress(
                name=shipping.name,
                email=shipping.email,
                address=shipping.address,
                city=shipping.city,
                state=shipping.state,
                zip_code=shipping.zip_code,
                country=shipping.country,
            )

        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            items=order_items,
            shipping_address=shipping,
            billing_address=billing,
            payment_info=PaymentInfo(**payment_info) if payment_info else None,
            items_price=totals.subtotal,
            tax_price=totals.tax,
            shipping_price=totals.shipping,
            discount_amount=totals.discount,
            total_price=totals.total,
            coupon_code=coupon_code,
            status=OrderStatus.PENDING.value,
            status_history=[StatusEntry(status=OrderStatus.PENDING.value, timestamp=now, note="Order placed")],
            shipping_info=ShippingInfo(carrier=DEFAULT_CARRIER),
            notes=notes,
            is_gift=bool(is_gift),
            gift_message=gift_message,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id) if customer_id else None,
                customer_name=shipping.name,
                customer_email=shipping.email,
                items=json.dumps([order._item_payload(item) for item in order.items]),
                total_items=order.total_items,
                items_price=order.items_price,
                tax_price=order.tax_price,
                shipping_price=order.shipping_price,
                discount_amount=order.discount_amount,
                total_price=order.total_price,
                coupon_code=coupon_code,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def customer_email(self):
        return self.shipping_address.email if self.shipping_address else None

    @property
    def customer_name(self):
        return self.shipping_address.name if self.shipping_address else None

    def can_be_cancelled(self) -> bool:
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    def can_be_refunded(self) -> bool:
        return OrderStatus(self.status) in _REFUNDABLE_STATES

    def history(self) -> list:
        """Status history, oldest first."""
        return sorted(self.status_history, key=lambda entry: entry.timestamp)

    def summary(self) -> dict:
        return {
            "order_number": self.order_number,
            "total_items": self.total_items,
            "total_price": self.total_price,
            "status": self.status,
            "created_at": self.created_at,
        }

    def tracking(self) -> dict:
        info = self.shipping_info or ShippingInfo(carrier=DEFAULT_CARRIER)
        return {
            "order_number": self.order_number,
            "status": self.status,
            "status_history": [
                {"status": entry.status, "timestamp": entry.timestamp, "note": entry.note} for entry in self.history()
            ],
            "shipping_info": {
                "carrier": info.carrier,
                "tracking_number": info.tracking_number,
                "tracking_url": info.tracking_url,
                "shipped_at": info.shipped_at,
                "delivered_at": info.delivered_at,
            },
            "estimated_delivery": info.estimated_delivery,
            "actual_delivery": info.delivered_at,
        }

    @staticmethod
    def _item_payload(item) -> dict:
        return {
            "product_id": str(item.product_id),
            "name": item.name,
            "price": item.price,
            "quantity": item.quantity,
            "color": item.color,
            "size": item.size,
        }

    # -------------------------------------------------------------------
    # Status lifecycle
    # -------------------------------------------------------------------
    def _record_status(self, status: OrderStatus, note=None, at=None):
        at = at or datetime.now(UTC)
        self.status = status.value
        self.add_status_history(StatusEntry(status=status.value, timestamp=at, note=note or ""))
        self.updated_at = at

    def update_status(self, new_status, note=None, carrier=None, tracking_number=None, tracking_url=None):
        """Move the order to pending, processing, shipped or delivered."""
        target = parse_status(new_status)
        current = OrderStatus(self.status)

        if target == OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Orders are cancelled through cancellation, not a status update"]})
        if target == OrderStatus.REFUNDED:
            raise ValidationError({"status": ["Orders are refunded by completing an approved refund"]})
        if current in _FINAL_STATES:
            raise ValidationError({"status": [f"Order is {current.value} and can no longer change"]})
        if current == OrderStatus.DELIVERED:
            raise ValidationError({"status": ["A delivered order can only be refunded"]})

        now = datetime.now(UTC)
        info = self.shipping_info or ShippingInfo(carrier=DEFAULT_CARRIER)
        shipping = {
            "carrier": carrier or info.carrier or DEFAULT_CARRIER,
            "tracking_number": tracking_number or info.tracking_number,
            "tracking_url": tracking_url or info.tracking_url,
            "estimated_delivery": info.estimated_delivery,
            "shipped_at": info.shipped_at,
            "delivered_at": info.delivered_at,
        }
        if target == OrderStatus.SHIPPED:
            days = int(custom_setting("ESTIMATED_DELIVERY_DAYS", DEFAULT_ESTIMATED_DELIVERY_DAYS))
            shipping["shipped_at"] = now
            shipping["estimated_delivery"] = now + timedelta(days=days)
        elif target == OrderStatus.DELIVERED:
            shipping["delivered_at"] = now
        self.shipping_info = ShippingInfo(**shipping)

        self._record_status(target, note, now)
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_name=self.customer_name,
                customer_email=self.customer_email,
                previous_status=current.value,
                new_status=target.value,
                note=note,
                carrier=self.shipping_info.carrier,
                tracking_number=self.shipping_info.tracking_number,
                estimated_delivery=self.shipping_info.estimated_delivery,
                changed_at=now,
            )
        )

    def cancel(self, note=None):
        """Cancel the order. Stock release is the caller's job, in the same unit of work."""
        current = OrderStatus(self.status)
        if current not in _CANCELLABLE_STATES:
            raise ValidationError({"status": ["Order cannot be cancelled at this stage"]})

        now = datetime.now(UTC)
        self._record_status(OrderStatus.CANCELLED, note or "Order cancelled", now)
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_name=self.customer_name,
                customer_email=self.customer_email,
                previous_status=current.value,
                total_price=self.total_price,
                note=note,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def request_refund(self, reason, amount=None):
        if not self.can_be_refunded():
            raise ValidationError({"status": ["Order is not eligible for refund"]})
        if self.refund_info is not None:
            raise ValidationError({"refund": ["Refund already requested for this order"]})

        amount = self.total_price if amount is None else amount
        if amount <= 0 or amount > self.total_price:
            raise ValidationError({"amount": ["Refund amount must be positive and no more than the order total"]})

        now = datetime.now(UTC)
        self.refund_info = RefundInfo(
            amount=amount,
            reason=reason,
            status=RefundStatus.PENDING.value,
            requested_at=now,
        )
        self.updated_at = now

        self.raise_(
            RefundRequested(
                order_id=str(self.id),
                order_number=self.order_number,
                amount=amount,
                reason=reason,
                requested_at=now,
            )
        )

    def review_refund(self, approve, note=None):
        if self.refund_info is None or RefundStatus(self.refund_info.status) != RefundStatus.PENDING:
            raise ValidationError({"refund": ["No pending refund request to review"]})

        now = datetime.now(UTC)
        status = RefundStatus.APPROVED if approve else RefundStatus.REJECTED
        self.refund_info = RefundInfo(
            amount=self.refund_info.amount,
            reason=self.refund_info.reason,
            status=status.value,
            requested_at=self.refund_info.requested_at,
            processed_at=now,
        )
        self.updated_at = now

        self.raise_(
            RefundReviewed(
                order_id=str(self.id),
                order_number=self.order_number,
                refund_status=status.value,
                amount=self.refund_info.amount,
                note=note,
                reviewed_at=now,
            )
        )

    def assert_refund_payable(self):
        if self.refund_info is None or RefundStatus(self.refund_info.status) != RefundStatus.APPROVED:
            raise ValidationError({"refund": ["Only an approved refund can be completed"]})
        if not self.can_be_refunded():
            raise ValidationError({"status": ["Only shipped or delivered orders can be refunded"]})

    def complete_refund(self, gateway_refund_id=None, note=None):
        """Record that the approved refund was paid out; the order becomes refunded."""
        self.assert_refund_payable()

        current = OrderStatus(self.status)
        now = datetime.now(UTC)
        self.refund_info = RefundInfo(
            amount=self.refund_info.amount,
            reason=self.refund_info.reason,
            status=RefundStatus.COMPLETED.value,
            requested_at=self.refund_info.requested_at,
            processed_at=now,
            gateway_refund_id=gateway_refund_id,
        )
        self._record_status(OrderStatus.REFUNDED, note or "Refund completed", now)

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_name=self.customer_name,
                customer_email=self.customer_email,
                previous_status=current.value,
                amount=self.refund_info.amount,
                gateway_refund_id=gateway_refund_id,
                refunded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Removal
    # -------------------------------------------------------------------
    def mark_deleted(self):
        """Check the order may be deleted and announce it. The caller removes the record."""
        if not self.can_be_cancelled():
            raise ValidationError({"status": ["Order cannot be deleted at this stage"]})

        self.raise_(
            OrderDeleted(
                order_id=str(self.id),
                order_number=self.order_number,
                status=self.status,
                deleted_at=datetime.now(UTC),
            )
        )
