"""Payment gateway port.

Application code only talks to this interface, so the Stripe adapter and the
in-memory fake are interchangeable.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PaymentIntent:
    """The gateway's view of a charge attempt."""

    id: str
    status: str
    amount: int  # smallest currency unit
    currency: str
    client_secret: str | None = None
    metadata: dict = field(default_factory=dict)
    last_error: str | None = None


@dataclass(frozen=True)
class GatewayEvent:
    """A verified webhook delivery: event type plus the event's object."""

    id: str
    type: str
    data: dict


class GatewayError(Exception):
    """The gateway could not be reached or rejected the request."""


class SignatureVerificationError(GatewayError):
    """The webhook payload was not signed with the shared secret."""


class PaymentGateway(ABC):
    @abstractmethod
    def create_intent(self, amount: int, currency: str, metadata: dict) -> PaymentIntent:
        """Open a payment intent for ``amount`` (in cents)."""
        ...

    @abstractmethod
    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        ...

    @abstractmethod
    def construct_event(self, payload: bytes, signature: str) -> GatewayEvent:
        """Verify ``signature`` over the raw ``payload`` and parse it.

        Raises:
            SignatureVerificationError: if the signature does not match.
        """
        ...


def parse_event(body: bytes | str) -> GatewayEvent:
    """Read a verified delivery's JSON body into a ``GatewayEvent``.

    A body that is not UTF-8 JSON, or that lacks ``type`` or ``data.object``,
    is rejected the same way a bad signature is.
    """
    try:
        event = json.loads(body)
        return GatewayEvent(id=event.get("id", ""), type=event["type"], data=event["data"]["object"])
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise SignatureVerificationError("Invalid payload") from exc
