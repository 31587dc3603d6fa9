"""Order status management and cancellation: commands and handlers."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import Forbidden, NotFound
from storefront.notification.dispatch import notify_account, order_context
from storefront.notification.types import NotificationType
from storefront.order.order import CancellationActor, Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    """Administrative status change, optionally with tracking details."""

    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)
    tracking_number = String(max_length=100)
    estimated_delivery = DateTime()


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    account_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    note = String(max_length=500)


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError as exc:
        raise NotFound("Order not found") from exc


def restore_stock(order: Order):
    """Give every line's quantity back to its product, skipping products that are gone."""
    product_repo = current_domain.repository_for(Product)
    for line in order.items:
        restored = product_repo.increment_stock(str(line.product_id), line.quantity)
        if restored is None:
            logger.info(
                "Skipped stock restore for untracked or missing product",
                order_number=order.order_number,
                product_id=str(line.product_id),
            )


def _notify_status(order: Order, note=None):
    context = {**order_context(order), "note": note}
    notify_account(str(order.account_id), NotificationType.ORDER_STATUS_UPDATE.value, context)


@storefront.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)

        if command.status == OrderStatus.CANCELLED.value and order.status != OrderStatus.CANCELLED.value:
            order.cancel(actor=CancellationActor.ADMIN.value, note=command.note)
            restore_stock(order)
            changed = True
        else:
            changed = order.change_status(
                command.status,
                note=command.note,
                tracking_number=command.tracking_number,
                estimated_delivery=command.estimated_delivery,
            )
        repo.add(order)

        if changed:
            logger.info("Order status changed", order_number=order.order_number, status=order.status)
            _notify_status(order, command.note)
        return changed

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)
        if not command.is_admin and not order.owned_by(command.account_id):
            raise Forbidden("Not authorized to cancel this order")

        actor = CancellationActor.ADMIN.value if command.is_admin else CancellationActor.CUSTOMER.value
        order.cancel(actor=actor, note=command.note)
        restore_stock(order)
        repo.add(order)

        logger.info("Order cancelled", order_number=order.order_number, cancelled_by=actor)
        _notify_status(order, command.note)
