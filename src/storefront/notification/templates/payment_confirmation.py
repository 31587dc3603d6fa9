from storefront.notification.types import NotificationChannel, NotificationType


class PaymentConfirmationTemplate:
    notification_type = NotificationType.PAYMENT_CONFIRMATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Payment Confirmed - Order {order_number}",
            "body": (
                f"Hi {context.get('name', 'there')},\n\n"
                f"We received your payment of ${context.get('amount', 0):.2f} for order #{order_number}.\n"
                f"Transaction: {context.get('transaction_id', 'N/A')}\n"
            ),
        }
