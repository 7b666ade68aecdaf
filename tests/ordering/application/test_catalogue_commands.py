"""Application tests for catalogue maintenance commands."""

import pytest
from ordering.catalogue.management import ActivateProduct, AddProductVariant, DeactivateProduct, ListProduct
from ordering.catalogue.product import Product
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _list(**kwargs):
    kwargs.setdefault("name", "Tee")
    kwargs.setdefault("price", 20.0)
    return current_domain.process(ListProduct(**kwargs), asynchronous=False)


class TestListProduct:
    def test_persists_product(self):
        product_id = _list(stock=7, sku="TEE-1")
        product = current_domain.repository_for(Product).get(product_id)

        assert product.name == "Tee"
        assert product.stock == 7
        assert product.is_active is True

    def test_price_required(self):
        with pytest.raises(ValidationError):
            current_domain.process(ListProduct(name="Tee"), asynchronous=False)


class TestVariants:
    def test_add_variant(self):
        product_id = _list()
        current_domain.process(
            AddProductVariant(product_id=product_id, color="Red", size="M", stock=3), asynchronous=False
        )
        product = current_domain.repository_for(Product).get(product_id)
        assert product.available_stock("Red", "M") == 3

    def test_duplicate_variant(self):
        product_id = _list()
        current_domain.process(AddProductVariant(product_id=product_id, color="Red", size="M"), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(AddProductVariant(product_id=product_id, color="Red", size="M"), asynchronous=False)

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(AddProductVariant(product_id="nope", color="Red", size="M"), asynchronous=False)


class TestAvailability:
    def test_deactivate_then_activate(self):
        product_id = _list()
        repo = current_domain.repository_for(Product)

        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
        assert repo.get(product_id).is_active is False

        current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
        assert repo.get(product_id).is_active is True
