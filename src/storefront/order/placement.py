"""Order placement: turns the account's cart into a pending order.

All lines are validated against live catalogue data before anything is
written. The order is then registered, stock is taken line by line through
the repository's conditional decrement, and the cart is emptied. The handler
runs inside the domain's unit of work, so providers with transactions
discard the whole attempt on failure. Where the provider cannot, a
reservation failure after some lines were already taken is reported as a
``StockReconciliationError`` carrying what needs to be put back by hand.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import (
    EmptyCart,
    InsufficientStock,
    ProductUnavailable,
    StockReconciliationError,
    StorefrontError,
)
from storefront.notification.dispatch import notify_account, order_context
from storefront.notification.types import NotificationType
from storefront.order.order import Order, PaymentMethod
from storefront.order.pricing import price_order, round_money

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    account_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: ShippingAddress fields
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.STRIPE.value)
    notes = String(max_length=500)


def _snapshot_lines(cart):
    """Validate every cart line and capture what the order needs from the catalogue.

    Nothing is written here; a single bad line fails the whole placement.
    """
    product_repo = current_domain.repository_for(Product)
    snapshots = []
    total_weight = 0.0
    for line in cart.items:
        product = product_repo.find_active(line.product_id)
        if product is None:
            raise ProductUnavailable(str(line.product_id))
        if not product.has_stock_for(line.quantity):
            raise InsufficientStock(product.name, product.stock_quantity, line.quantity)

        snapshots.append(
            {
                "product_id": str(product.id),
                "name": product.name,
                "image": product.primary_image,
                "unit_price": product.price,
                "quantity": line.quantity,
                "track_quantity": product.track_quantity,
            }
        )
        total_weight += product.weight_in_pounds * line.quantity
    return snapshots, total_weight


def _reserve_stock(order, snapshots):
    product_repo = current_domain.repository_for(Product)
    reserved = []
    for snapshot in snapshots:
        if not snapshot["track_quantity"]:
            continue
        try:
            product_repo.decrement_stock(snapshot["product_id"], snapshot["quantity"])
        except StorefrontError as exc:
            if not reserved:
                raise
            logger.error(
                "Stock reservation failed after the order was registered",
                order_number=order.order_number,
                failed_product_id=snapshot["product_id"],
                reserved=reserved,
                error=exc.message,
            )
            raise StockReconciliationError(
                f"Order {order.order_number} could not reserve stock for every line",
                {"order_number": order.order_number, "reserved": reserved},
            ) from exc
        reserved.append({"product_id": snapshot["product_id"], "quantity": snapshot["quantity"]})


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_account(command.account_id)
        if cart is None or cart.is_empty:
            raise EmptyCart()

        try:
            shipping_address = json.loads(command.shipping_address)
        except ValueError as exc:
            raise ValidationError({"shipping_address": ["Shipping address must be valid JSON"]}) from exc

        snapshots, total_weight = _snapshot_lines(cart)
        prices = price_order(
            [round_money(s["unit_price"] * s["quantity"]) for s in snapshots],
            total_weight,
            shipping_address.get("state"),
        )

        order = Order.place(
            account_id=command.account_id,
            lines=snapshots,
            shipping_address=shipping_address,
            payment_method=command.payment_method,
            prices=prices,
            notes=command.notes,
        )
        current_domain.repository_for(Order).add(order)

        _reserve_stock(order, snapshots)

        cart.clear()
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_number=order.order_number,
            account_id=command.account_id,
            total_price=order.total_price,
        )
        notify_account(command.account_id, NotificationType.ORDER_CONFIRMATION.value, order_context(order))

        return str(order.id)
