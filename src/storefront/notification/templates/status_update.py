"""Order status update: sent on every status change after placement."""

from storefront.notification.types import NotificationChannel, NotificationType

_MESSAGES = {
    "confirmed": "Your order has been confirmed and will be processed soon.",
    "processing": "Your order is being prepared for shipment.",
    "shipped": "Your order has been shipped and is on its way.",
    "delivered": "Your order has been delivered. Enjoy your purchase!",
    "cancelled": "Your order has been cancelled.",
    "refunded": "Your order has been refunded.",
}


class OrderStatusUpdateTemplate:
    notification_type = NotificationType.ORDER_STATUS_UPDATE.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        status = context.get("status", "")
        body = f"Hi {context.get('name', 'there')},\n\n{_MESSAGES.get(status, f'Your order is now {status}.')}\n"
        if context.get("tracking_number"):
            body += f"\nTracking number: {context['tracking_number']}\n"
        if context.get("note"):
            body += f"\nNote: {context['note']}\n"
        return {
            "subject": f"Order Update - {order_number}",
            "body": body,
        }
