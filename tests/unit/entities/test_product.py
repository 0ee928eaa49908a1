"""Tests for the Product entity and its row mapping."""

import pytest
from pydantic import ValidationError

from src.products_api.entities.product import Product, ProductTable
from src.products_api.entities.product.repository import (
    to_entity,
    to_row,
    to_row_values,
)


class TestProductEntity:
    """Test Product domain entity."""

    def test_product_creation(self):
        product = Product(name="Widget", price=10, description="A widget")

        assert product.id is None
        assert product.name == "Widget"
        assert product.price == 10.0
        assert product.description == "A widget"

    def test_description_is_optional(self):
        product = Product(name="Widget", price=1.5)
        assert product.description is None

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Product(name="Widget", price=-1)

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Product(name="", price=1)

    def test_overlong_name_rejected(self):
        with pytest.raises(ValidationError):
            Product(name="A" * 201, price=1)

    def test_missing_price_rejected(self):
        with pytest.raises(ValidationError):
            Product(name="Widget")

    def test_equality_uses_all_fields(self):
        first = Product(id=1, name="Widget", price=10)
        second = Product(id=1, name="Widget", price=10)
        renamed = Product(id=1, name="Widget2", price=10)

        assert first == second
        assert first != renamed
        assert hash(first) == hash(second)

    def test_not_equal_to_other_types(self):
        assert Product(id=1, name="Widget", price=10) != {"id": 1}


class TestProductMapping:
    """Test conversions between the entity and the table row."""

    def test_to_row_drops_client_id(self):
        row = to_row(Product(id=99, name="Widget", price=10, description="d"))

        assert isinstance(row, ProductTable)
        assert row.id is None
        assert row.name == "Widget"
        assert row.price == 10.0
        assert row.description == "d"

    def test_to_entity_copies_columns(self):
        row = ProductTable(id=7, name="Gadget", price=3.25, description=None)

        product = to_entity(row)

        assert product == Product(id=7, name="Gadget", price=3.25)

    def test_to_row_values_excludes_key(self):
        values = to_row_values(Product(id=3, name="Widget", price=2))

        assert values == {"name": "Widget", "price": 2.0, "description": None}
