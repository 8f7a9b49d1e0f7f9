"""
Tests for cart models
"""

from decimal import Decimal

import pytest

from chronos.cart import Cart, CartItem
from conftest import make_product


class TestCartItem:
    """Tests for CartItem dataclass."""

    def test_create_cart_item(self):
        """Test creating a cart item."""
        item = CartItem(product_id=1, quantity=2, selected_band="black", price=299.0)

        assert item.key == (1, "black")
        assert item.price == Decimal("299.0")

    def test_none_band_is_empty(self):
        item = CartItem(product_id=1, quantity=1, selected_band=None)

        assert item.selected_band == ""

    def test_line_total(self):
        """Test total price for quantity."""
        item = CartItem(product_id=1, quantity=3, price="19.99")

        assert item.line_total == Decimal("59.97")

    def test_from_product_snapshot(self):
        """Test display fields are copied from the product."""
        product = make_product(7, price="450", brand="Tudor", model="Black Bay", stock_count=2)

        item = CartItem.from_product(product, 7, 1, "steel")

        assert item.brand == "Tudor"
        assert item.model == "Black Bay"
        assert item.price == Decimal("450")
        assert item.images == ["https://img.example/x.jpg"]
        assert item.stock_count == 2
        assert item.in_stock is True

    def test_to_dict(self):
        """Test serialization to the camelCase shape."""
        item = CartItem(product_id=1, quantity=1, price=100)

        data = item.to_dict()
        assert data["productId"] == 1
        assert data["selectedBand"] == ""
        assert data["price"] == "100"

    def test_from_dict(self):
        """Test deserialization from dict."""
        data = {
            "productId": "3",
            "quantity": 2,
            "selectedBand": "leather",
            "brand": "Seiko",
            "price": "120.50",
            "inStock": True,
            "stockCount": 4,
        }

        item = CartItem.from_dict(data)
        assert item.product_id == 3
        assert item.price == Decimal("120.50")
        assert item.images == []

    def test_from_dict_requires_product_id(self):
        with pytest.raises(KeyError):
            CartItem.from_dict({"quantity": 1})


class TestCart:
    """Tests for Cart dataclass."""

    def test_create_empty_cart(self):
        """Test creating an empty cart."""
        cart = Cart()

        assert cart.item_count == 0
        assert cart.subtotal == 0
        assert cart.tax == 0
        assert cart.total == 0

    def test_cart_with_items(self):
        """Test totals across lines."""
        cart = Cart(items=[
            CartItem(product_id=1, quantity=2, price=100),
            CartItem(product_id=2, quantity=1, price=50, selected_band="mesh"),
        ])

        assert cart.item_count == 3
        assert cart.subtotal == Decimal("250")
        assert cart.tax == Decimal("20")
        assert cart.total == Decimal("270")

    def test_find_uses_band(self):
        cart = Cart(items=[CartItem(product_id=1, quantity=1, selected_band="black")])

        assert cart.find(1, "black") is cart.items[0]
        assert cart.find(1) is None

    def test_copy_is_independent(self):
        cart = Cart(items=[CartItem(product_id=1, quantity=1, price=10)])

        clone = cart.copy()
        clone.items[0].quantity = 5

        assert cart.items[0].quantity == 1

    def test_cart_serialization(self):
        """Test cart serialization and deserialization."""
        cart = Cart(items=[CartItem(product_id=1, quantity=2, price=100, selected_band="black")])
        data = cart.to_dict()

        assert data["subtotal"] == "200"
        assert data["tax"] == "16.00"
        assert data["total"] == "216.00"

        restored = Cart.from_dict(data)
        assert len(restored.items) == 1
        assert restored.items[0].key == (1, "black")

    def test_stored_totals_are_ignored(self):
        data = {
            "items": [{"productId": 1, "quantity": 1, "price": "10"}],
            "subtotal": "999",
            "tax": "999",
            "total": "999",
        }

        assert Cart.from_dict(data).total == Decimal("10.80")

    def test_from_dict_repairs_lines(self):
        """Test non-positive lines are dropped and duplicate keys merged."""
        data = {"items": [
            {"productId": 1, "quantity": 2, "price": "10"},
            {"productId": 1, "quantity": 3, "price": "10"},
            {"productId": 2, "quantity": 0, "price": "10"},
        ]}

        cart = Cart.from_dict(data)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
