"""Payment gateway factory.

``get_gateway()`` returns the process-wide adapter: Stripe when
``STRIPE_SECRET_KEY`` is configured, the in-memory fake otherwise.
``set_gateway()`` / ``reset_gateway()`` swap it out in tests.
"""

import os

from storefront.gateway.fake_adapter import DEFAULT_WEBHOOK_SECRET, FakeGateway
from storefront.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _gateway_from_environment() -> PaymentGateway:
    api_key = os.getenv("STRIPE_SECRET_KEY")
    if api_key:
        from storefront.gateway.stripe_adapter import StripeGateway

        return StripeGateway(api_key=api_key, webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET", ""))
    return FakeGateway(webhook_secret=os.getenv("FAKE_GATEWAY_WEBHOOK_SECRET", DEFAULT_WEBHOOK_SECRET))


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _gateway_from_environment()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
