"""Dispute alert: internal message to the store administrator."""

from storefront.notification.types import NotificationChannel, NotificationType


class DisputeAlertTemplate:
    notification_type = NotificationType.DISPUTE_ALERT.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": "Payment Dispute Alert",
            "body": (
                "A payment dispute has been created.\n\n"
                f"Charge ID: {context.get('charge_id', 'N/A')}\n"
                f"Amount: ${context.get('amount', 0):.2f}\n"
                f"Reason: {context.get('reason', 'N/A')}\n"
                f"Status: {context.get('status', 'N/A')}\n"
            ),
        }
