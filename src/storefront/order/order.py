"""Order aggregate: the durable record of a purchase.

Line items, shipping address and the price breakdown are snapshots taken at
placement and never recomputed from catalogue data.

State machine:
    pending → confirmed → processing → shipped → delivered
    pending, confirmed, processing → cancelled
    delivered, cancelled → refunded

Every transition after placement appends exactly one status history entry.
Re-applying the current status is accepted and changes nothing except the
tracking fields.
"""

import json
import random
import time
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.errors import InvalidTransition
from storefront.order.events import OrderCancelled, OrderPaid, OrderPlaced, OrderStatusChanged
from storefront.order.pricing import round_money


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    CASH = "cash"


class CancellationActor(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: {OrderStatus.REFUNDED},
    OrderStatus.REFUNDED: set(),  # Terminal
}

# Customers may only cancel before the warehouse picks the order up
_CUSTOMER_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}

# Orders in these states still hold stock and block account/product removal
OPEN_STATES = frozenset(
    {
        OrderStatus.PENDING.value,
        OrderStatus.CONFIRMED.value,
        OrderStatus.PROCESSING.value,
        OrderStatus.SHIPPED.value,
    }
)


def generate_order_number() -> str:
    """``SF`` + last six digits of the millisecond clock + three random digits."""
    millis = str(int(time.time() * 1000))
    return f"SF{millis[-6:]}{random.randint(0, 999):03d}"  # noqa: S311


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes, captured at placement and never updated."""

    name = String(required=True, max_length=100)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=50)
    zip_code = String(required=True, max_length=20)
    country = String(max_length=100, default="USA")
    phone = String(required=True, max_length=20)


@storefront.value_object(part_of="Order")
class PaymentInfo:
    method = String(choices=PaymentMethod, default=PaymentMethod.STRIPE.value)
    transaction_id = String(max_length=255)
    paid_at = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A line item frozen at placement: later catalogue edits never reach it."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    image = String(max_length=500)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    line_total = Float(required=True, min_value=0.0)


@storefront.entity(part_of="Order")
class StatusChange:
    status = String(required=True, choices=OrderStatus)
    changed_at = DateTime(required=True)
    note = String(max_length=500)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    account_id = Identifier(required=True)
    items = HasMany(OrderLine)
    shipping_address = ValueObject(ShippingAddress)
    payment = ValueObject(PaymentInfo)
    items_price = Float(required=True, min_value=0.0)
    tax_price = Float(required=True, min_value=0.0)
    shipping_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    is_paid = Boolean(default=False)
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    notes = String(max_length=500)
    tracking_number = String(max_length=100)
    estimated_delivery = DateTime()
    status_history = HasMany(StatusChange)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_equal_sum_of_parts(self):
        if self.total_price != round_money(self.items_price + self.tax_price + self.shipping_price):
            raise ValidationError({"total_price": ["Total must equal items + tax + shipping"]})

    @invariant.post
    def paid_orders_carry_a_transaction(self):
        if self.is_paid and not (self.payment and self.payment.transaction_id):
            raise ValidationError({"payment": ["Paid orders must record a transaction id"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, account_id, lines, shipping_address, payment_method, prices, notes=None):
        """Create a pending order from line snapshots.

        Args:
            account_id: Owner of the order.
            lines: List of dicts with product_id, name, image, unit_price, quantity.
            shipping_address: Dict matching ``ShippingAddress``.
            payment_method: One of ``PaymentMethod`` values.
            prices: A ``PriceBreakdown``.
            notes: Optional customer notes.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=generate_order_number(),
            account_id=account_id,
            shipping_address=ShippingAddress(**shipping_address),
            payment=PaymentInfo(method=payment_method or PaymentMethod.STRIPE.value),
            items_price=prices.items_price,
            tax_price=prices.tax_price,
            shipping_price=prices.shipping_price,
            total_price=prices.total_price,
            status=OrderStatus.PENDING.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        with atomic_change(order):
            for line in lines:
                order.add_items(
                    OrderLine(
                        product_id=line["product_id"],
                        name=line["name"],
                        image=line.get("image"),
                        unit_price=line["unit_price"],
                        quantity=line["quantity"],
                        line_total=round_money(line["unit_price"] * line["quantity"]),
                    )
                )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                account_id=str(account_id),
                items=json.dumps(order.line_snapshots()),
                total_price=order.total_price,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def owned_by(self, account_id) -> bool:
        return str(self.account_id) == str(account_id)

    def line_snapshots(self) -> list[dict]:
        return [
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "line_total": line.line_total,
            }
            for line in self.items
        ]

    def history(self) -> list:
        """Status history, oldest first."""
        return sorted(self.status_history, key=lambda change: change.changed_at)

    @property
    def amount_in_cents(self) -> int:
        return round(self.total_price * 100)

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target: OrderStatus):
        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(current.value, target.value)

    def _apply_tracking(self, tracking_number=None, estimated_delivery=None):
        if tracking_number is not None:
            self.tracking_number = tracking_number
        if estimated_delivery is not None:
            self.estimated_delivery = estimated_delivery

    def _transition(self, target: OrderStatus, note=None):
        previous = self.status
        now = datetime.now(UTC)

        self.status = target.value
        self.add_status_history(StatusChange(status=target.value, changed_at=now, note=note))
        if target == OrderStatus.DELIVERED:
            self.is_delivered = True
            if self.delivered_at is None:
                self.delivered_at = now
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                note=note,
                changed_at=now,
            )
        )

    def change_status(self, new_status, note=None, tracking_number=None, estimated_delivery=None) -> bool:
        """Move the order to ``new_status`` on an administrator's behalf.

        Returns False when the order already had that status. Use ``cancel``
        for cancellations, which also carry the stock restoration.
        """
        target = OrderStatus(new_status)
        if target == OrderStatus.CANCELLED and self.status != target.value:
            raise ValidationError({"status": ["Use cancel() to cancel an order"]})

        with atomic_change(self):
            self._apply_tracking(tracking_number, estimated_delivery)
            if self.status == target.value:
                self.updated_at = datetime.now(UTC)
                return False

            self._assert_can_transition(target)
            self._transition(target, note)
        return True

    def cancel(self, actor=CancellationActor.CUSTOMER.value, note=None):
        current = OrderStatus(self.status)
        if actor == CancellationActor.CUSTOMER.value and current not in _CUSTOMER_CANCELLABLE_STATES:
            raise InvalidTransition(
                current.value,
                OrderStatus.CANCELLED.value,
                reason="Order cannot be cancelled at this stage",
            )
        self._assert_can_transition(OrderStatus.CANCELLED)

        cancelled_by = "admin" if actor == CancellationActor.ADMIN.value else "customer"
        with atomic_change(self):
            self._transition(OrderStatus.CANCELLED, note or f"Cancelled by {cancelled_by}")

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                cancelled_by=actor,
                cancelled_at=self.updated_at,
            )
        )

    def record_payment(self, transaction_id, paid_at=None) -> bool:
        """Mark the order paid. Returns False (and changes nothing) if it already is."""
        if self.is_paid:
            return False

        paid_at = paid_at or datetime.now(UTC)
        with atomic_change(self):
            self.is_paid = True
            self.payment = PaymentInfo(
                method=self.payment.method if self.payment else PaymentMethod.STRIPE.value,
                transaction_id=transaction_id,
                paid_at=paid_at,
            )
            if self.status == OrderStatus.PENDING.value:
                self._transition(OrderStatus.CONFIRMED, "Payment confirmed")
            self.updated_at = paid_at

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                order_number=self.order_number,
                transaction_id=transaction_id,
                amount=self.total_price,
                paid_at=paid_at,
            )
        )
        return True
