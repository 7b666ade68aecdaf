"""BDD tests for the order status lifecycle, cancellation and refunds."""

import json

import pytest
from ordering.catalogue.product import Product
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order
from ordering.order.refund import CompleteRefund, RequestRefund, ReviewRefund
from ordering.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_lifecycle.feature")


@pytest.fixture()
def catalogue():
    return {}


@pytest.fixture()
def placed():
    return {"order_id": None}


def _order(placed):
    return current_domain.repository_for(Order).get(placed["order_id"])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced at ${price:f} with {stock:d} in stock'))
def product_in_stock(make_product, catalogue, name, price, stock):
    catalogue[name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('the customer has ordered {quantity:d} "{name}"'))
def customer_ordered(customer_id, catalogue, placed, shipping_address, quantity, name):
    placed["order_id"] = current_domain.process(
        PlaceOrder(
            customer_id=customer_id,
            items=json.dumps([{"product_id": str(catalogue[name].id), "quantity": quantity}]),
            shipping_address=json.dumps(shipping_address),
        ),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('an administrator marks the order "{status}"'))
def mark_status(placed, status):
    current_domain.process(
        UpdateOrderStatus(order_id=placed["order_id"], status=status, requested_by_role="admin"),
        asynchronous=False,
    )


@when("the customer cancels the order")
def cancel(customer_id, placed, error):
    try:
        current_domain.process(CancelOrder(order_id=placed["order_id"], requested_by=customer_id), asynchronous=False)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the customer requests a refund because "{reason}"'))
def request_refund(customer_id, placed, reason):
    current_domain.process(
        RequestRefund(order_id=placed["order_id"], requested_by=customer_id, reason=reason), asynchronous=False
    )


@when("an administrator approves the refund")
def approve_refund(placed):
    current_domain.process(
        ReviewRefund(order_id=placed["order_id"], approve=True, requested_by_role="admin"), asynchronous=False
    )


@when("an administrator completes the refund")
def complete_refund(placed, gateway):
    current_domain.process(CompleteRefund(order_id=placed["order_id"], requested_by_role="admin"), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status(placed, status):
    assert _order(placed).status == status


@then("the order has an estimated delivery date")
def has_estimate(placed):
    assert _order(placed).shipping_info.estimated_delivery is not None


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def stock_level(catalogue, name, stock):
    assert current_domain.repository_for(Product).get(catalogue[name].id).stock == stock


@then("the order operation fails")
def operation_failed(error):
    assert isinstance(error["exc"], ValidationError)
