"""Best-effort notification dispatch.

Renders the template for a notification type and hands it to every default
channel. Nothing raised here reaches the caller: the order and payment
workflows must not fail because an email could not go out.
"""

import os

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.notification import get_channel
from storefront.notification.templates import get_template

logger = structlog.get_logger(__name__)


def send_notification(notification_type: str, recipient: str, context: dict) -> bool:
    """Render and send. Returns True only if every channel accepted the message."""
    try:
        template_cls = get_template(notification_type)
        rendered = template_cls.render(context)

        delivered = True
        for channel_type in template_cls.default_channels:
            result = get_channel(channel_type).send(
                to=recipient,
                subject=rendered["subject"],
                body=rendered["body"],
            )
            if result.get("status") != "sent":
                delivered = False
                logger.warning(
                    "Notification was not delivered",
                    notification_type=notification_type,
                    channel=channel_type,
                    recipient=recipient,
                    error=result.get("error"),
                )
        return delivered
    except Exception:
        logger.exception(
            "Notification dispatch failed",
            notification_type=notification_type,
            recipient=recipient,
        )
        return False


def notify_account(account_id: str, notification_type: str, context: dict) -> bool:
    """Send to the account holder's email address."""
    from storefront.account.account import Account

    try:
        account = current_domain.repository_for(Account).get(account_id)
    except ObjectNotFoundError:
        logger.warning("Cannot notify unknown account", account_id=account_id, notification_type=notification_type)
        return False

    return send_notification(notification_type, account.email, {"name": account.name, **context})


def notify_admin(notification_type: str, context: dict) -> bool:
    """Send to the store administrator configured in ``ADMIN_EMAIL``."""
    admin_email = os.getenv("ADMIN_EMAIL")
    if not admin_email:
        logger.warning("ADMIN_EMAIL is not set; dropping admin notification", notification_type=notification_type)
        return False

    return send_notification(notification_type, admin_email, context)


def order_context(order) -> dict:
    return {
        "order_number": order.order_number,
        "items": order.line_snapshots(),
        "items_price": order.items_price,
        "tax_price": order.tax_price,
        "shipping_price": order.shipping_price,
        "total_price": order.total_price,
        "status": order.status,
        "tracking_number": order.tracking_number,
    }
