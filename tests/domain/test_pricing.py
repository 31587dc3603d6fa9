"""Tests for the tax and shipping policies."""

import pytest
from storefront.order.pricing import (
    MAX_SHIPPING,
    flat_tax,
    price_order,
    round_money,
    shipping_cost,
    state_tax,
    tax_rate_for,
)


class TestRoundMoney:
    def test_rounds_half_up(self):
        assert round_money(2.675) == 2.68
        assert round_money(0.005) == 0.01

    def test_keeps_exact_values(self):
        assert round_money(25.0) == 25.0


class TestTax:
    @pytest.mark.parametrize(
        "state, rate",
        [("CA", 0.0875), ("ny", 0.08), (" TX ", 0.0625), ("FL", 0.06), ("OR", 0.05), (None, 0.05)],
    )
    def test_state_rates(self, state, rate):
        assert tax_rate_for(state) == rate

    def test_state_tax_is_rounded(self):
        assert state_tax(25.0, "CA") == 2.19

    def test_flat_tax_ignores_state(self):
        assert flat_tax(25.0, "CA") == 2.0
        assert flat_tax(25.0) == 2.0


class TestShipping:
    def test_free_at_threshold(self):
        assert shipping_cost(100.0, 80.0) == 0.0

    def test_base_fee_for_light_orders(self):
        assert shipping_cost(25.0, 3.0) == 10.0
        assert shipping_cost(25.0, 10.0) == 10.0

    def test_surcharge_per_started_tier(self):
        assert shipping_cost(25.0, 10.5) == 15.0
        assert shipping_cost(25.0, 15.0) == 15.0
        assert shipping_cost(25.0, 15.1) == 20.0

    def test_capped(self):
        assert shipping_cost(25.0, 500.0) == MAX_SHIPPING


class TestPriceOrder:
    def test_breakdown_for_reference_cart(self):
        prices = price_order([20.0, 5.0], total_weight=3.0, state="CA")

        assert prices.items_price == 25.0
        assert prices.tax_price == 2.19
        assert prices.shipping_price == 10.0
        assert prices.total_price == 37.19

    def test_total_is_sum_of_parts(self):
        prices = price_order([33.33, 66.67, 0.01], total_weight=0.0, state="NY")
        assert prices.total_price == round_money(prices.items_price + prices.tax_price + prices.shipping_price)

    def test_tax_policy_is_pluggable(self):
        prices = price_order([50.0], total_weight=1.0, state="CA", tax_policy=flat_tax)
        assert prices.tax_price == 4.0
