"""Tests for turning a cart into an order."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart
from storefront.catalogue.product import Product
from storefront.catalogue.product_management import DeactivateProduct
from storefront.errors import EmptyCart, InsufficientStock, ProductUnavailable
from storefront.order.order import Order, OrderStatus
from storefront.order.placement import PlaceOrder

ADDRESS = {
    "name": "Jane Doe",
    "street": "1 Market St",
    "city": "San Francisco",
    "state": "CA",
    "zip_code": "94105",
    "phone": "+1-555-0100",
}


def _add(account, product, quantity):
    current_domain.process(
        AddToCart(account_id=str(account.id), product_id=str(product.id), quantity=quantity),
        asynchronous=False,
    )


def _place(account, address=None):
    return current_domain.process(
        PlaceOrder(account_id=str(account.id), shipping_address=json.dumps(address or ADDRESS)),
        asynchronous=False,
    )


def _stock(product):
    return current_domain.repository_for(Product).get(product.id).stock_quantity


def _orders():
    return current_domain.repository_for(Order)._dao.query.all().items


class TestSuccessfulPlacement:
    @pytest.fixture
    def placed(self, customer, make_product):
        product_a = make_product(name="Product A", price=10.0, stock=10, weight=1.0)
        product_b = make_product(name="Product B", price=5.0, stock=10, weight=1.0)
        _add(customer, product_a, 2)
        _add(customer, product_b, 1)
        order_id = _place(customer)
        return current_domain.repository_for(Order).get(order_id), product_a, product_b

    def test_prices_the_order(self, placed):
        order, _, _ = placed
        assert order.items_price == 25.0
        assert order.tax_price == 2.19
        assert order.shipping_price == 10.0
        assert order.total_price == 37.19

    def test_order_starts_pending(self, placed):
        order, _, _ = placed
        assert order.status == OrderStatus.PENDING.value
        assert order.order_number.startswith("SF")
        assert order.shipping_address.state == "CA"

    def test_decrements_stock_exactly(self, placed):
        _, product_a, product_b = placed
        assert _stock(product_a) == 8
        assert _stock(product_b) == 9

    def test_empties_the_cart(self, placed, customer):
        cart = current_domain.repository_for(Cart).for_account(str(customer.id))
        assert cart.is_empty
        assert cart.total_amount == 0.0

    def test_snapshots_catalogue_data(self, placed):
        order, product_a, _ = placed
        line = next(line for line in order.items if str(line.product_id) == str(product_a.id))
        assert line.name == "Product A"
        assert line.unit_price == 10.0
        assert line.quantity == 2
        assert line.line_total == 20.0

    def test_sends_confirmation_email(self, placed, outbox, customer):
        order, _, _ = placed
        assert len(outbox.sent_emails) == 1
        email = outbox.sent_emails[0]
        assert email["to"] == customer.email
        assert order.order_number in email["subject"]


class TestRejectedPlacement:
    def test_empty_cart(self, customer):
        with pytest.raises(EmptyCart):
            _place(customer)

    def test_insufficient_stock_changes_nothing(self, customer, make_product):
        plenty = make_product(price=10.0, stock=10)
        scarce = make_product(price=5.0, stock=3)
        _add(customer, plenty, 2)
        _add(customer, scarce, 3)

        # Stock drops after the item was carted
        current_domain.repository_for(Product).decrement_stock(str(scarce.id), 2)

        with pytest.raises(InsufficientStock) as exc:
            _place(customer)

        assert exc.value.available == 1
        assert exc.value.requested == 3
        assert _stock(plenty) == 10
        assert _stock(scarce) == 1
        assert _orders() == []
        cart = current_domain.repository_for(Cart).for_account(str(customer.id))
        assert cart.total_items == 5

    def test_inactive_product(self, customer, make_product):
        product = make_product()
        _add(customer, product, 1)
        current_domain.process(DeactivateProduct(product_id=str(product.id)), asynchronous=False)

        with pytest.raises(ProductUnavailable):
            _place(customer)
        assert _orders() == []

    def test_malformed_address(self, customer, make_product):
        _add(customer, make_product(), 1)
        with pytest.raises(ValidationError):
            current_domain.process(
                PlaceOrder(account_id=str(customer.id), shipping_address="{not json"),
                asynchronous=False,
            )

    def test_incomplete_address(self, customer, make_product):
        _add(customer, make_product(), 1)
        with pytest.raises(ValidationError):
            _place(customer, {"name": "Jane", "city": "Nowhere"})


class TestUntrackedProducts:
    def test_stock_is_left_alone(self, customer, make_product):
        product = make_product(stock=0, track_quantity=False)
        _add(customer, product, 4)

        _place(customer)

        assert _stock(product) == 0
        assert len(_orders()) == 1
