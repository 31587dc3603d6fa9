"""Stripe adapter for the payment gateway port (stripe-python SDK)."""

import stripe

from storefront.gateway.port import (
    GatewayError,
    GatewayEvent,
    PaymentGateway,
    PaymentIntent,
    SignatureVerificationError,
    parse_event,
)

# Seconds a signed webhook stays valid
WEBHOOK_TOLERANCE = 300


def _to_intent(intent) -> PaymentIntent:
    last_error = getattr(intent, "last_payment_error", None)
    return PaymentIntent(
        id=intent.id,
        status=intent.status,
        amount=intent.amount,
        currency=intent.currency,
        client_secret=getattr(intent, "client_secret", None),
        metadata=dict(intent.metadata or {}),
        last_error=getattr(last_error, "message", None) if last_error else None,
    )


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def create_intent(self, amount: int, currency: str, metadata: dict) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                metadata=metadata,
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            raise GatewayError(exc.user_message or str(exc)) from exc
        return _to_intent(intent)

    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise GatewayError(exc.user_message or str(exc)) from exc
        return _to_intent(intent)

    def construct_event(self, payload: bytes, signature: str) -> GatewayEvent:
        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SignatureVerificationError("Payload is not UTF-8") from exc

        try:
            stripe.WebhookSignature.verify_header(body, signature, self.webhook_secret, WEBHOOK_TOLERANCE)
        except stripe.SignatureVerificationError as exc:
            raise SignatureVerificationError(str(exc)) from exc

        return parse_event(body)
