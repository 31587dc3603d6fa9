"""Tests for gateway selection and the Stripe adapter (SDK calls stubbed)."""

import json
from types import SimpleNamespace

import pytest
import stripe
from storefront.gateway import get_gateway, reset_gateway
from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import GatewayError, SignatureVerificationError
from storefront.gateway.stripe_adapter import StripeGateway


class TestGatewaySelection:
    def test_fake_without_stripe_key(self, monkeypatch):
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
        monkeypatch.setenv("FAKE_GATEWAY_WEBHOOK_SECRET", "whsec_local")
        reset_gateway()

        gateway = get_gateway()
        assert isinstance(gateway, FakeGateway)
        assert gateway.webhook_secret == "whsec_local"
        assert get_gateway() is gateway

    def test_stripe_with_key(self, monkeypatch):
        monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
        monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", "whsec_live")
        reset_gateway()

        gateway = get_gateway()
        assert isinstance(gateway, StripeGateway)
        assert gateway.webhook_secret == "whsec_live"


class TestFakeGatewaySignatures:
    def test_round_trip(self):
        gateway = FakeGateway(webhook_secret="whsec_a")
        payload = FakeGateway.event_payload("payment_intent.succeeded", {"id": "pi_1"}, event_id="evt_1")

        event = gateway.construct_event(payload, gateway.sign(payload))

        assert (event.id, event.type, event.data) == ("evt_1", "payment_intent.succeeded", {"id": "pi_1"})

    def test_other_secret_is_rejected(self):
        payload = FakeGateway.event_payload("payment_intent.succeeded", {"id": "pi_1"})
        signature = FakeGateway(webhook_secret="whsec_other").sign(payload)

        with pytest.raises(SignatureVerificationError):
            FakeGateway(webhook_secret="whsec_a").construct_event(payload, signature)

    @pytest.mark.parametrize(
        "payload",
        [
            b"\xff\xfe not utf-8",
            b'{"id": "evt_1", "data": {"object": {}}}',
            b'{"id": "evt_1", "type": "payment_intent.succeeded"}',
            b"[1, 2]",
        ],
    )
    def test_signed_but_malformed_payload_is_rejected(self, payload):
        gateway = FakeGateway(webhook_secret="whsec_a")

        with pytest.raises(SignatureVerificationError):
            gateway.construct_event(payload, gateway.sign(payload))

    def test_unknown_intent(self):
        with pytest.raises(GatewayError):
            FakeGateway().retrieve_intent("pi_missing")


def _sdk_intent(**overrides):
    fields = {
        "id": "pi_123",
        "status": "requires_payment_method",
        "amount": 3719,
        "currency": "usd",
        "client_secret": "pi_123_secret",
        "metadata": {"order_id": "ord-1"},
        "last_payment_error": None,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestStripeGateway:
    @pytest.fixture
    def gateway(self):
        return StripeGateway(api_key="sk_test_123", webhook_secret="whsec_live")

    def test_create_intent(self, gateway, monkeypatch):
        calls = {}

        def _create(**kwargs):
            calls.update(kwargs)
            return _sdk_intent()

        monkeypatch.setattr(stripe.PaymentIntent, "create", _create)

        intent = gateway.create_intent(3719, "usd", {"order_id": "ord-1"})

        assert calls["amount"] == 3719
        assert calls["api_key"] == "sk_test_123"
        assert intent.client_secret == "pi_123_secret"
        assert intent.metadata == {"order_id": "ord-1"}

    def test_retrieve_intent_maps_last_error(self, gateway, monkeypatch):
        declined = _sdk_intent(last_payment_error=SimpleNamespace(message="Card declined"))
        monkeypatch.setattr(stripe.PaymentIntent, "retrieve", lambda intent_id, api_key: declined)

        assert gateway.retrieve_intent("pi_123").last_error == "Card declined"

    def test_sdk_errors_become_gateway_errors(self, gateway, monkeypatch):
        def _fail(**kwargs):
            raise stripe.APIConnectionError("Network down")

        monkeypatch.setattr(stripe.PaymentIntent, "create", _fail)

        with pytest.raises(GatewayError):
            gateway.create_intent(100, "usd", {})

    def test_construct_event(self, gateway, monkeypatch):
        monkeypatch.setattr(stripe.WebhookSignature, "verify_header", lambda *args: True)
        payload = json.dumps({"id": "evt_1", "type": "charge.dispute.created", "data": {"object": {"id": "dp_1"}}})

        event = gateway.construct_event(payload.encode(), "t=1,v1=abc")

        assert event.type == "charge.dispute.created"
        assert event.data == {"id": "dp_1"}

    def test_construct_event_bad_signature(self, gateway, monkeypatch):
        def _reject(*args):
            raise stripe.SignatureVerificationError("No signatures found", "t=1,v1=abc")

        monkeypatch.setattr(stripe.WebhookSignature, "verify_header", _reject)

        with pytest.raises(SignatureVerificationError):
            gateway.construct_event(b"{}", "t=1,v1=abc")

    def test_construct_event_non_utf8_payload(self, gateway, monkeypatch):
        monkeypatch.setattr(stripe.WebhookSignature, "verify_header", lambda *args: True)

        with pytest.raises(SignatureVerificationError):
            gateway.construct_event(b"\xff\xfe", "t=1,v1=abc")

    def test_construct_event_without_object(self, gateway, monkeypatch):
        monkeypatch.setattr(stripe.WebhookSignature, "verify_header", lambda *args: True)
        payload = json.dumps({"id": "evt_1", "type": "charge.dispute.created"})

        with pytest.raises(SignatureVerificationError):
            gateway.construct_event(payload.encode(), "t=1,v1=abc")
