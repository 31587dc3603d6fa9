"""Payment gateway webhook endpoint.

The raw request body is verified against the ``Stripe-Signature`` header
before anything is parsed. Verified events are handed to
``ProcessGatewayEvent`` and acknowledged.
"""

import json

import structlog
from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from storefront.gateway import get_gateway
from storefront.gateway.port import SignatureVerificationError
from storefront.payment.webhook import ProcessGatewayEvent

logger = structlog.get_logger(__name__)

webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.post("/stripe")
async def stripe_webhook(request: Request, stripe_signature: str | None = Header(default=None)):
    payload = await request.body()
    try:
        event = get_gateway().construct_event(payload, stripe_signature or "")
    except SignatureVerificationError as exc:
        logger.warning("Webhook signature verification failed", error=str(exc))
        return JSONResponse(status_code=400, content={"success": False, "error": f"Webhook Error: {exc}"})

    logger.info("Webhook received", event_id=event.id, event_type=event.type)
    command = ProcessGatewayEvent(event_id=event.id, event_type=event.type, data=json.dumps(event.data))
    current_domain.process(command, asynchronous=False)
    return {"received": True}
