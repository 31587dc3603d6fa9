"""Cart aggregate: the per-account staging area that becomes an order.

There is exactly one cart per account. Line prices follow the catalogue
(every add/update refreshes the snapshot); only order lines are frozen.
Line totals and cart totals are recomputed by the pure functions below on
every mutation and are never set directly.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from storefront.domain import storefront
from storefront.errors import NotFound
from storefront.order.pricing import round_money


def line_total(quantity: int, unit_price: float) -> float:
    return round_money(quantity * unit_price)


def cart_totals(lines) -> tuple[int, float]:
    """Return ``(total_items, total_amount)`` for the given lines."""
    total_items = sum(line.quantity for line in lines)
    total_amount = round_money(sum(line.line_total for line in lines))
    return total_items, total_amount


@storefront.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)


@storefront.aggregate
class Cart:
    account_id = Identifier(required=True, unique=True)
    items = HasMany(CartLine)
    total_items = Integer(default=0)
    total_amount = Float(default=0.0)
    last_modified = DateTime()

    @invariant.post
    def totals_must_match_lines(self):
        for line in self.items:
            if line.line_total != line_total(line.quantity, line.unit_price):
                raise ValidationError({"items": [f"Line total out of date for product {line.product_id}"]})
        if (self.total_items, self.total_amount) != cart_totals(self.items):
            raise ValidationError({"total_amount": ["Cart totals do not match its lines"]})

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(line.product_id) for line in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in the cart"]})

    @classmethod
    def create(cls, account_id):
        return cls(account_id=account_id, last_modified=datetime.now(UTC))

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def line_for(self, product_id):
        return next((line for line in self.items if str(line.product_id) == str(product_id)), None)

    def quantity_of(self, product_id) -> int:
        line = self.line_for(product_id)
        return line.quantity if line else 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def _put_line(self, product_id, quantity, unit_price):
        """Set the line for ``product_id`` to an absolute quantity and the current price."""
        line = self.line_for(product_id)
        if line is None:
            self.add_items(
                CartLine(
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    line_total=line_total(quantity, unit_price),
                )
            )
        else:
            line.quantity = quantity
            line.unit_price = unit_price
            line.line_total = line_total(quantity, unit_price)

    def _refresh_totals(self):
        self.total_items, self.total_amount = cart_totals(self.items)
        self.last_modified = datetime.now(UTC)

    def add_product(self, product_id, quantity, unit_price):
        """Add ``quantity`` units on top of whatever is already in the cart."""
        with atomic_change(self):
            self._put_line(product_id, self.quantity_of(product_id) + quantity, unit_price)
            self._refresh_totals()

    def set_quantity(self, product_id, quantity, unit_price):
        if self.line_for(product_id) is None:
            raise NotFound("Item not found in cart")

        with atomic_change(self):
            self._put_line(product_id, quantity, unit_price)
            self._refresh_totals()

    def remove_product(self, product_id):
        line = self.line_for(product_id)
        with atomic_change(self):
            if line is not None:
                self.remove_items(line)
            self._refresh_totals()

    def clear(self):
        with atomic_change(self):
            for line in list(self.items):
                self.remove_items(line)
            self._refresh_totals()

    def replace_lines(self, lines):
        """Replace the whole cart. ``lines`` is an iterable of (product_id, quantity, unit_price)."""
        with atomic_change(self):
            for line in list(self.items):
                self.remove_items(line)
            for product_id, quantity, unit_price in lines:
                self._put_line(product_id, quantity, unit_price)
            self._refresh_totals()

    def prune(self, keep) -> list[str]:
        """Drop every line whose product id fails ``keep``. Returns the dropped ids."""
        dropped = [line for line in self.items if not keep(str(line.product_id))]
        if not dropped:
            return []

        with atomic_change(self):
            for line in dropped:
                self.remove_items(line)
            self._refresh_totals()
        return [str(line.product_id) for line in dropped]
