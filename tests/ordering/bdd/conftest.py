"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import then


@pytest.fixture()
def customer_id():
    return "cust-001"


@pytest.fixture()
def error():
    """Container for a captured validation error."""
    return {"exc": None}


@then("the cart operation fails")
def operation_failed(error):
    assert isinstance(error["exc"], ValidationError)
