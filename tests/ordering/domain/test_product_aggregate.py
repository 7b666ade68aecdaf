"""Tests for the Product aggregate: variants, availability and stock."""

import pytest
from ordering.catalogue.events import ProductListed, StockReleased, StockReserved, VariantAdded
from ordering.catalogue.product import Product
from protean.exceptions import ValidationError


def _product(stock=5):
    return Product.create(name="Tee", price=20.0, stock=stock, sku="TEE-1")


class TestProductCreation:
    def test_create_is_active(self):
        product = _product()
        assert product.is_active is True
        assert product.stock == 5

    def test_create_raises_listed_event(self):
        product = _product()
        assert isinstance(product._events[0], ProductListed)
        assert product._events[0].name == "Tee"


class TestVariants:
    def test_add_variant(self):
        product = _product()
        variant = product.add_variant(color="Red", size="M", stock=3)

        assert product.has_variants
        assert product.find_variant("Red", "M") is variant
        assert isinstance(product._events[-1], VariantAdded)

    def test_duplicate_variant_rejected(self):
        product = _product()
        product.add_variant(color="Red", size="M", stock=3)

        with pytest.raises(ValidationError):
            product.add_variant(color="Red", size="M", stock=1)

    def test_find_variant_needs_color_and_size(self):
        product = _product()
        product.add_variant(color="Red", size="M", stock=3)
        assert product.find_variant("Red", None) is None

    def test_variant_stock_used_when_variant_matches(self):
        product = _product(stock=5)
        product.add_variant(color="Red", size="M", stock=2)
        assert product.available_stock("Red", "M") == 2

    def test_top_level_stock_used_when_no_variant_matches(self):
        product = _product(stock=5)
        product.add_variant(color="Red", size="M", stock=2)
        assert product.available_stock("Blue", "L") == 5


class TestAvailability:
    def test_deactivate_and_activate(self):
        product = _product()
        product.deactivate()
        assert product.is_active is False

        product.activate()
        assert product.is_active is True

    def test_out_of_stock(self):
        assert _product(stock=0).is_in_stock() is False


class TestStockAdjustment:
    def test_reserve_decrements(self):
        product = _product(stock=5)
        product.reserve_stock(2)

        assert product.stock == 3
        assert isinstance(product._events[-1], StockReserved)
        assert product._events[-1].remaining_stock == 3

    def test_reserve_floors_at_zero(self):
        product = _product(stock=2)
        product.reserve_stock(5)
        assert product.stock == 0

    def test_reserve_variant(self):
        product = _product(stock=5)
        product.add_variant(color="Red", size="M", stock=4)
        product.reserve_stock(3, color="Red", size="M")

        assert product.find_variant("Red", "M").stock == 1
        assert product.stock == 5

    def test_release_increments(self):
        product = _product(stock=1)
        product.release_stock(2)

        assert product.stock == 3
        assert isinstance(product._events[-1], StockReleased)

    def test_quantity_must_be_positive(self):
        product = _product()
        with pytest.raises(ValidationError):
            product.reserve_stock(0)
        with pytest.raises(ValidationError):
            product.release_stock(0)
