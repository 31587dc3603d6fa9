"""Client-side payment flow: open an intent, then confirm it.

The caller must own the order. Confirmation asks the gateway for the
intent's status instead of trusting the client, and only ``succeeded``
marks the order paid.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import Conflict, ExternalServiceError, Forbidden, PaymentNotCompleted
from storefront.gateway import get_gateway
from storefront.gateway.port import GatewayError
from storefront.notification.dispatch import notify_account
from storefront.notification.types import NotificationType
from storefront.order.lifecycle import load_order
from storefront.order.order import Order

logger = structlog.get_logger(__name__)

CURRENCY = "usd"
SUCCEEDED = "succeeded"


@storefront.command(part_of="Order")
class CreatePaymentIntent:
    order_id = Identifier(required=True)
    account_id = Identifier(required=True)


@storefront.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    account_id = Identifier(required=True)
    payment_intent_id = String(required=True, max_length=255)


def _owned_order(order_id, account_id) -> Order:
    order = load_order(order_id)
    if not order.owned_by(account_id):
        raise Forbidden("Not authorized")
    return order


def apply_successful_payment(order: Order, transaction_id: str) -> bool:
    """Record the payment and tell the customer. False if the order was already paid."""
    if not order.record_payment(transaction_id):
        logger.info("Payment already recorded", order_number=order.order_number, transaction_id=transaction_id)
        return False

    current_domain.repository_for(Order).add(order)
    logger.info("Payment recorded", order_number=order.order_number, transaction_id=transaction_id)
    notify_account(
        str(order.account_id),
        NotificationType.PAYMENT_CONFIRMATION.value,
        {"order_number": order.order_number, "amount": order.total_price, "transaction_id": transaction_id},
    )
    return True


@storefront.command_handler(part_of=Order)
class PaymentIntentHandler:
    @handle(CreatePaymentIntent)
    def create_payment_intent(self, command):
        order = _owned_order(command.order_id, command.account_id)
        if order.is_paid:
            raise Conflict("Order is already paid")

        try:
            intent = get_gateway().create_intent(
                amount=order.amount_in_cents,
                currency=CURRENCY,
                metadata={"order_id": str(order.id), "account_id": str(order.account_id)},
            )
        except GatewayError as exc:
            logger.error("Payment intent creation failed", order_number=order.order_number, error=str(exc))
            raise ExternalServiceError("Payment processing failed") from exc

        return {"client_secret": intent.client_secret, "payment_intent_id": intent.id}

    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        order = _owned_order(command.order_id, command.account_id)

        try:
            intent = get_gateway().retrieve_intent(command.payment_intent_id)
        except GatewayError as exc:
            logger.error("Payment verification failed", order_number=order.order_number, error=str(exc))
            raise ExternalServiceError("Payment confirmation failed") from exc

        if intent.metadata.get("order_id") != str(order.id):
            raise Conflict("Payment intent does not belong to this order")
        if intent.amount != order.amount_in_cents:
            logger.warning(
                "Payment intent amount does not match order",
                order_number=order.order_number,
                intent_amount=intent.amount,
                order_amount=order.amount_in_cents,
            )
            raise Conflict("Payment amount does not match order total")

        if intent.status != SUCCEEDED:
            raise PaymentNotCompleted(intent.status)

        apply_successful_payment(order, intent.id)
        return str(order.id)
