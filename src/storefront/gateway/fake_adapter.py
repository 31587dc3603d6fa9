"""In-memory payment gateway for development and tests.

Intents live in a dict. Tests drive their outcome with ``succeed_intent`` /
``fail_intent`` and produce webhook deliveries with ``sign`` + ``event_payload``.
Signatures follow Stripe's ``t=<timestamp>,v1=<hmac-sha256>`` header layout.
"""

import hashlib
import hmac
import json
import time
from uuid import uuid4

from storefront.gateway.port import (
    GatewayError,
    GatewayEvent,
    PaymentGateway,
    PaymentIntent,
    SignatureVerificationError,
    parse_event,
)

DEFAULT_WEBHOOK_SECRET = "whsec_fake"


class FakeGateway(PaymentGateway):
    def __init__(self, webhook_secret: str = DEFAULT_WEBHOOK_SECRET) -> None:
        self.webhook_secret = webhook_secret
        self.intents: dict[str, PaymentIntent] = {}
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """With ``should_succeed=False`` every API call raises ``GatewayError``."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _check_available(self):
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

    # -------------------------------------------------------------------
    # Port
    # -------------------------------------------------------------------
    def create_intent(self, amount: int, currency: str, metadata: dict) -> PaymentIntent:
        self.calls.append({"method": "create_intent", "amount": amount, "currency": currency, "metadata": metadata})
        self._check_available()

        intent_id = f"pi_fake_{uuid4().hex[:16]}"
        intent = PaymentIntent(
            id=intent_id,
            status="requires_payment_method",
            amount=amount,
            currency=currency,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        return intent

    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        self.calls.append({"method": "retrieve_intent", "intent_id": intent_id})
        self._check_available()

        if intent_id not in self.intents:
            raise GatewayError(f"No such payment_intent: '{intent_id}'")
        return self.intents[intent_id]

    def construct_event(self, payload: bytes, signature: str) -> GatewayEvent:
        self.calls.append({"method": "construct_event"})

        parts = dict(item.split("=", 1) for item in (signature or "").split(",") if "=" in item)
        timestamp, provided = parts.get("t"), parts.get("v1")
        if not timestamp or not provided:
            raise SignatureVerificationError("Unable to extract timestamp and signatures from header")
        if not hmac.compare_digest(provided, self._signature(payload, timestamp)):
            raise SignatureVerificationError("No signatures found matching the expected signature for payload")

        return parse_event(payload)

    # -------------------------------------------------------------------
    # Test controls
    # -------------------------------------------------------------------
    def _set_status(self, intent_id: str, status: str, last_error: str | None = None) -> PaymentIntent:
        current = self.intents[intent_id]
        updated = PaymentIntent(
            id=current.id,
            status=status,
            amount=current.amount,
            currency=current.currency,
            client_secret=current.client_secret,
            metadata=current.metadata,
            last_error=last_error,
        )
        self.intents[intent_id] = updated
        return updated

    def succeed_intent(self, intent_id: str) -> PaymentIntent:
        return self._set_status(intent_id, "succeeded")

    def fail_intent(self, intent_id: str, message: str = "Your card was declined.") -> PaymentIntent:
        return self._set_status(intent_id, "requires_payment_method", last_error=message)

    def _signature(self, payload: bytes, timestamp: str) -> str:
        signed = f"{timestamp}.".encode() + payload
        return hmac.new(self.webhook_secret.encode(), signed, hashlib.sha256).hexdigest()

    def sign(self, payload: bytes, timestamp: int | None = None) -> str:
        """Build the signature header a real delivery of ``payload`` would carry."""
        timestamp = str(timestamp or int(time.time()))
        return f"t={timestamp},v1={self._signature(payload, timestamp)}"

    @staticmethod
    def event_payload(event_type: str, obj: dict, event_id: str | None = None) -> bytes:
        return json.dumps(
            {"id": event_id or f"evt_fake_{uuid4().hex[:16]}", "type": event_type, "data": {"object": obj}}
        ).encode()
