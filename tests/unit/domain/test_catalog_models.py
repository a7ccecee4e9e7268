"""
Unit tests for catalog, cart and order models.
"""

import pytest
from pydantic import ValidationError

from storefront.domain.catalog.models import (
    AboutUsContent,
    CartLineItem,
    DeliveryType,
    OrderDraft,
    Product,
    Wilaya,
)


class TestCartLineItem:
    def test_identity_and_unit_price(self, make_line):
        line = make_line(discount_price=800)

        assert line.identity == ("p1", "M", "red")
        assert line.unit_price == 800

    def test_zero_discount_still_wins(self, make_line):
        assert make_line(discount_price=0).unit_price == 0

    def test_accepts_legacy_field_names(self):
        line = CartLineItem.model_validate(
            {"id": "p9", "price": 100, "selectedSize": "L", "selectedColor": "blue"}
        )

        assert line.product_id == "p9"
        assert line.selected_size == "L"
        assert line.selected_color == "blue"
        assert "product_id" in line.model_dump()

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            CartLineItem(product_id="p1", price=1, quantity=-1)

    def test_from_product(self):
        product = Product(id="p2", name="Shirt", price=2000, discount_price=1500)
        line = CartLineItem.from_product(product, size="S", color="white", quantity=2)

        assert line.identity == ("p2", "S", "white")
        assert line.unit_price == 1500
        assert line.quantity == 2


class TestOrderDraft:
    @pytest.fixture
    def wilaya(self):
        return Wilaya(id="16", name="Alger", delivery_home=400, delivery_post=250)

    def test_from_cart_totals(self, make_line, wilaya):
        lines = [
            make_line("p1", quantity=2),
            make_line("p2", price=500, discount_price=300, quantity=1),
            make_line("p3", quantity=0),
        ]

        draft = OrderDraft.from_cart(
            lines,
            wilaya,
            DeliveryType.POST,
            first_name="Amina",
            last_name="Benali",
            phone="0550000000",
            municipality_name="Bab Ezzouar",
            instagram_account="  ",
        )

        assert draft.total_price == 2300 + 250
        assert [item.product_id for item in draft.items] == ["p1", "p2"]
        assert draft.items[1].price == 300
        assert draft.instagram_account is None
        assert draft.wilaya_id == "16"

    def test_home_delivery_fee(self, make_line, wilaya):
        draft = OrderDraft.from_cart(
            [make_line()],
            wilaya,
            DeliveryType.HOME,
            first_name="A",
            last_name="B",
            phone="1",
            municipality_name="M",
        )
        assert draft.total_price == 1000 + 400

    def test_order_row_shape(self, make_line, wilaya):
        draft = OrderDraft.from_cart(
            [make_line()],
            wilaya,
            DeliveryType.HOME,
            first_name="A",
            last_name="B",
            phone="1",
            municipality_name="M",
            address="1 Rue Didouche",
        )
        row = draft.to_order_row()

        assert row["status"] == "pending"
        assert row["delivery_type"] == "home"
        assert row["wilaya_id"] == "16"
        assert "items" not in row

        item_row = draft.items[0].to_row("order-1")
        assert item_row["order_id"] == "order-1"
        assert item_row["product_name"] == "Product p1"

    def test_empty_order_rejected(self, wilaya):
        with pytest.raises(ValidationError):
            OrderDraft.from_cart(
                [],
                wilaya,
                DeliveryType.HOME,
                first_name="A",
                last_name="B",
                phone="1",
                municipality_name="M",
            )


def test_about_us_null_features():
    content = AboutUsContent.model_validate({"title": "t", "content": "c", "features": None})
    assert content.features == []


def test_numeric_ids_coerced_to_strings():
    wilaya = Wilaya.model_validate(
        {"id": 16, "name": "Alger", "delivery_home": 400, "delivery_post": 250}
    )
    assert wilaya.id == "16"
