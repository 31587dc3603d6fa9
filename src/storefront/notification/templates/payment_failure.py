from storefront.notification.types import NotificationChannel, NotificationType


class PaymentFailureTemplate:
    notification_type = NotificationType.PAYMENT_FAILURE.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Payment Failed - Order {order_number}",
            "body": (
                f"Hi {context.get('name', 'there')},\n\n"
                f"Your payment for order #{order_number} could not be processed.\n"
                f"Reason: {context.get('reason') or 'Unknown error'}\n\n"
                "Your order is still open; please try again with another payment method."
            ),
        }
