"""Template registry: notification type -> template class."""

from storefront.notification.templates.dispute_alert import DisputeAlertTemplate
from storefront.notification.templates.order_confirmation import OrderConfirmationTemplate
from storefront.notification.templates.payment_confirmation import PaymentConfirmationTemplate
from storefront.notification.templates.payment_failure import PaymentFailureTemplate
from storefront.notification.templates.status_update import OrderStatusUpdateTemplate
from storefront.notification.types import NotificationType

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_CONFIRMATION.value: OrderConfirmationTemplate,
    NotificationType.ORDER_STATUS_UPDATE.value: OrderStatusUpdateTemplate,
    NotificationType.PAYMENT_CONFIRMATION.value: PaymentConfirmationTemplate,
    NotificationType.PAYMENT_FAILURE.value: PaymentFailureTemplate,
    NotificationType.DISPUTE_ALERT.value: DisputeAlertTemplate,
}


def get_template(notification_type: str):
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
