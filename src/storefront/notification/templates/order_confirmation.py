"""Order confirmation: sent when an order is placed."""

from storefront.notification.types import NotificationChannel, NotificationType


class OrderConfirmationTemplate:
    notification_type = NotificationType.ORDER_CONFIRMATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        lines = "\n".join(
            f"  {item['name']} x {item['quantity']}: ${item['line_total']:.2f}" for item in context.get("items", [])
        )
        return {
            "subject": f"Order Confirmation - {order_number}",
            "body": (
                f"Hi {context.get('name', 'there')},\n\n"
                f"Thank you for your order #{order_number}.\n\n"
                f"{lines}\n\n"
                f"Items: ${context.get('items_price', 0):.2f}\n"
                f"Tax: ${context.get('tax_price', 0):.2f}\n"
                f"Shipping: ${context.get('shipping_price', 0):.2f}\n"
                f"Total: ${context.get('total_price', 0):.2f}\n\n"
                "We'll let you know when it ships."
            ),
        }
