"""Tests for the conditional stock counter updates."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.account.registration import RegisterAccount
from storefront.cart.items import AddToCart
from storefront.catalogue.product import Product
from storefront.catalogue.repository import MAX_STOCK_UPDATE_ATTEMPTS, ProductRepository
from storefront.catalogue.stock import AdjustStock
from storefront.errors import InsufficientStock, InternalError, NotFound, StockReconciliationError
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder

ADDRESS = json.dumps(
    {
        "name": "Jane Doe",
        "street": "1 Market St",
        "city": "Miami",
        "state": "FL",
        "zip_code": "33101",
        "phone": "+1-555-0100",
    }
)


def _repo():
    return current_domain.repository_for(Product)


def _stock(product):
    return _repo().get(product.id).stock_quantity


class TestCompareAndSet:
    def test_writes_when_counter_matches(self, make_product):
        product = make_product(stock=4)
        assert _repo()._compare_and_set(str(product.id), 4, 1) is True
        assert _stock(product) == 1

    def test_stale_expectation_leaves_counter_alone(self, make_product):
        product = make_product(stock=4)
        assert _repo()._compare_and_set(str(product.id), 5, 0) is False
        assert _stock(product) == 4

    def test_rating_write_keeps_stock(self, make_product):
        product = make_product(stock=7)
        _repo().decrement_stock(str(product.id), 3)

        assert _repo().record_rating(str(product.id), 4.5, 2) is True

        refreshed = _repo().get(product.id)
        assert refreshed.average_rating == 4.5
        assert refreshed.review_count == 2
        assert refreshed.stock_quantity == 4


class TestDecrement:
    def test_takes_units_off(self, make_product):
        product = make_product(stock=5)
        assert _repo().decrement_stock(str(product.id), 2) == 3
        assert _stock(product) == 3

    def test_refuses_to_go_negative(self, make_product):
        product = make_product(stock=1)
        with pytest.raises(InsufficientStock):
            _repo().decrement_stock(str(product.id), 2)
        assert _stock(product) == 1

    def test_last_unit_goes_to_exactly_one_caller(self, make_product):
        product = make_product(stock=1)
        outcomes = []
        for _ in range(2):
            try:
                _repo().decrement_stock(str(product.id), 1)
                outcomes.append("ok")
            except InsufficientStock:
                outcomes.append("insufficient")

        assert sorted(outcomes) == ["insufficient", "ok"]
        assert _stock(product) == 0

    def test_retries_when_counter_moves(self, make_product, monkeypatch):
        product = make_product(stock=5)
        original = ProductRepository._compare_and_set
        attempts = []

        def _racing_compare_and_set(self, product_id, expected, new):
            attempts.append(expected)
            if len(attempts) == 1:
                # Another buyer takes two units between our read and write
                original(self, product_id, expected, expected - 2)
                return False
            return original(self, product_id, expected, new)

        monkeypatch.setattr(ProductRepository, "_compare_and_set", _racing_compare_and_set)

        assert _repo().decrement_stock(str(product.id), 1) == 2
        assert attempts == [5, 3]

    def test_untracked_products_are_skipped(self, make_product):
        product = make_product(stock=0, track_quantity=False)
        assert _repo().decrement_stock(str(product.id), 3) is None
        assert _stock(product) == 0

    def test_unknown_product(self):
        with pytest.raises(NotFound):
            _repo().decrement_stock("missing", 1)


class TestIncrement:
    def test_returns_units(self, make_product):
        product = make_product(stock=1)
        assert _repo().increment_stock(str(product.id), 4) == 5

    def test_missing_product_is_skipped(self):
        assert _repo().increment_stock("missing", 1) is None

    def test_gives_up_after_persistent_contention(self, make_product, monkeypatch):
        product = make_product(stock=1)
        monkeypatch.setattr(ProductRepository, "_compare_and_set", lambda *args: False)

        with pytest.raises(InternalError):
            _repo().increment_stock(str(product.id), 1)
        assert MAX_STOCK_UPDATE_ATTEMPTS > 1


class TestCompetingPlacements:
    def test_one_of_two_buyers_gets_the_last_unit(self, make_product):
        product = make_product(stock=1)
        buyers = [
            current_domain.process(RegisterAccount(name=f"Buyer {n}", email=f"buyer{n}@example.com"), asynchronous=False)
            for n in range(2)
        ]
        for buyer in buyers:
            current_domain.process(
                AddToCart(account_id=buyer, product_id=str(product.id), quantity=1),
                asynchronous=False,
            )

        results = []
        for buyer in buyers:
            try:
                current_domain.process(PlaceOrder(account_id=buyer, shipping_address=ADDRESS), asynchronous=False)
                results.append("placed")
            except InsufficientStock:
                results.append("insufficient")

        assert sorted(results) == ["insufficient", "placed"]
        assert _stock(product) == 0
        assert len(current_domain.repository_for(Order)._dao.query.all().items) == 1

    def test_reservation_failure_after_partial_reservation(self, make_product, customer, monkeypatch):
        first = make_product(stock=5)
        second = make_product(stock=5)
        for product in (first, second):
            current_domain.process(
                AddToCart(account_id=str(customer.id), product_id=str(product.id), quantity=1),
                asynchronous=False,
            )

        original = ProductRepository.decrement_stock

        def _second_line_sold_out(self, product_id, quantity):
            if product_id == str(second.id):
                raise InsufficientStock("Sold out", 0, quantity)
            return original(self, product_id, quantity)

        monkeypatch.setattr(ProductRepository, "decrement_stock", _second_line_sold_out)

        with pytest.raises(StockReconciliationError) as exc:
            current_domain.process(PlaceOrder(account_id=str(customer.id), shipping_address=ADDRESS), asynchronous=False)

        assert exc.value.details["reserved"] == [{"product_id": str(first.id), "quantity": 1}]


class TestAdjustStock:
    def test_restock_and_write_off(self, make_product):
        product = make_product(stock=5)
        assert current_domain.process(AdjustStock(product_id=str(product.id), delta=10), asynchronous=False) == 15
        assert current_domain.process(AdjustStock(product_id=str(product.id), delta=-3), asynchronous=False) == 12

    def test_cannot_write_off_more_than_available(self, make_product):
        product = make_product(stock=2)
        with pytest.raises(InsufficientStock):
            current_domain.process(AdjustStock(product_id=str(product.id), delta=-3), asynchronous=False)

    def test_zero_delta(self, make_product):
        product = make_product(stock=2)
        with pytest.raises(ValidationError):
            current_domain.process(AdjustStock(product_id=str(product.id), delta=0), asynchronous=False)
