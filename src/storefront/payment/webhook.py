"""Gateway-pushed payment events.

The payload reaching this handler has already passed signature verification.
Redelivered success events are harmless: the order's ``is_paid`` flag makes
the second application a no-op.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.notification.dispatch import notify_account, notify_admin
from storefront.notification.types import NotificationType
from storefront.order.order import Order
from storefront.payment.intents import apply_successful_payment

logger = structlog.get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"
DISPUTE_CREATED = "charge.dispute.created"


@storefront.command(part_of="Order")
class ProcessGatewayEvent:
    event_id = String(max_length=255)
    event_type = String(required=True, max_length=100)
    data = Text(required=True)  # JSON: the event's object


def _order_for_intent(intent: dict) -> Order | None:
    order_id = (intent.get("metadata") or {}).get("order_id")
    if not order_id:
        logger.warning("Payment intent carries no order id", payment_intent_id=intent.get("id"))
        return None
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        logger.warning("Payment intent refers to an unknown order", order_id=order_id)
        return None


@storefront.command_handler(part_of=Order)
class GatewayEventHandler:
    @handle(ProcessGatewayEvent)
    def process_event(self, command):
        data = json.loads(command.data)

        if command.event_type == PAYMENT_SUCCEEDED:
            order = _order_for_intent(data)
            if order is not None:
                apply_successful_payment(order, data["id"])

        elif command.event_type == PAYMENT_FAILED:
            order = _order_for_intent(data)
            if order is not None:
                reason = (data.get("last_payment_error") or {}).get("message")
                logger.info("Payment failed", order_number=order.order_number, reason=reason)
                notify_account(
                    str(order.account_id),
                    NotificationType.PAYMENT_FAILURE.value,
                    {"order_number": order.order_number, "reason": reason},
                )

        elif command.event_type == DISPUTE_CREATED:
            logger.warning("Payment dispute created", charge_id=data.get("charge"), reason=data.get("reason"))
            notify_admin(
                NotificationType.DISPUTE_ALERT.value,
                {
                    "charge_id": data.get("charge"),
                    "amount": (data.get("amount") or 0) / 100,
                    "reason": data.get("reason"),
                    "status": data.get("status"),
                },
            )

        else:
            logger.info("Unhandled gateway event", event_type=command.event_type, event_id=command.event_id)
