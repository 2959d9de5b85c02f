"""FastAPI endpoints for checkout payments and gateway webhooks."""

import json

import structlog
from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from memorials.api.schemas import (
    CancelPaymentRequest,
    ConfigureGatewayRequest,
    ConfirmPaymentRequest,
    CreateIntentRequest,
    IntentResponse,
    PaymentStatusResponse,
    RefundRequest,
    StatusResponse,
)
from memorials.checkout.cancellation import CancelPayment
from memorials.checkout.confirmation import ConfirmPayment
from memorials.checkout.intent import CreatePaymentIntent
from memorials.checkout.refund import RefundOrder
from memorials.checkout.webhook import ReconcileGatewayEvent
from memorials.gateway import get_gateway
from memorials.gateway.fake_adapter import FakeGateway
from memorials.gateway.port import SignatureVerificationFailed
from memorials.shared.money import from_minor_units
from memorials.utils.logging import current_env

logger = structlog.get_logger(__name__)

payment_router = APIRouter(prefix="/payment", tags=["payments"])
webhook_router = APIRouter(prefix="/webhook", tags=["webhooks"])


def _json(value) -> str | None:
    return json.dumps(value) if value is not None else None


# --- Payment endpoints ---


@payment_router.post("/create-intent", response_model=IntentResponse)
async def create_intent(
    body: CreateIntentRequest,
    x_user_id: str | None = Header(None),
) -> IntentResponse:
    products = [p.model_dump(exclude_none=True) for p in body.products] if body.products else None
    command = CreatePaymentIntent(
        cart_id=body.cart_id,
        user_id=x_user_id,
        products=_json(products),
        currency=body.currency,
        billing_details=_json(body.billing_details.model_dump(exclude_none=True) if body.billing_details else None),
        shipping_details=_json(body.shipping_details.model_dump(exclude_none=True) if body.shipping_details else None),
        order_id=body.order_id,
        obituary_id=body.obituary_id,
        obituary_name=body.obituary_name,
        dedication_message=body.dedication_message,
        order_notes=body.order_notes,
        **({"payment_method": body.payment_method} if body.payment_method else {}),
    )
    result = current_domain.process(command, asynchronous=False)
    return IntentResponse(**result)


@payment_router.post("/confirm")
async def confirm_payment(body: ConfirmPaymentRequest) -> dict:
    command = ConfirmPayment(
        payment_intent_id=body.payment_intent_id,
        order_id=body.order_id,
        cart_id=body.cart_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return {"success": True, "order": result}


@payment_router.post("/cancel")
async def cancel_payment(body: CancelPaymentRequest) -> dict:
    command = CancelPayment(
        payment_intent_id=body.payment_intent_id,
        order_id=body.order_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return {"success": True, **result}


@payment_router.post("/refund")
async def refund_payment(body: RefundRequest) -> dict:
    command = RefundOrder(
        order_id=body.order_id,
        amount=body.amount,
        **({"reason": body.reason} if body.reason else {}),
    )
    result = current_domain.process(command, asynchronous=False)
    return {"success": True, "refund": result}


@payment_router.get("/status/{payment_intent_id}", response_model=PaymentStatusResponse)
async def payment_status(payment_intent_id: str) -> PaymentStatusResponse:
    intent = get_gateway().retrieve_intent(payment_intent_id)
    return PaymentStatusResponse(
        status=intent.status,
        amount=from_minor_units(intent.amount),
        currency=intent.currency,
    )


@payment_router.post("/gateway/configure", response_model=StatusResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> StatusResponse:
    """Steer the fake gateway's outcome. Test and demo environments only."""
    if current_env() == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration is disabled in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Only the fake gateway can be configured")

    if body.failure_reason:
        gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    else:
        gateway.configure(should_succeed=body.should_succeed)
    return StatusResponse()


# --- Webhook endpoint ---


@webhook_router.post("/gateway")
async def gateway_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
) -> JSONResponse:
    payload = await request.body()
    try:
        event = get_gateway().construct_event(payload, stripe_signature or "")
    except SignatureVerificationFailed as exc:
        logger.warning("webhook_signature_rejected", error=exc.message)
        return JSONResponse(status_code=400, content={"error": f"Webhook Error: {exc.message}"})

    last_error = event.data.get("last_payment_error") or {}
    amount_refunded = event.data.get("amount_refunded")
    command = ReconcileGatewayEvent(
        event_id=event.id,
        event_type=event.type,
        payment_intent_id=event.payment_intent_id,
        failure_reason=last_error.get("message"),
        amount_refunded=str(amount_refunded) if amount_refunded is not None else None,
    )
    try:
        outcome = current_domain.process(command, asynchronous=False)
    except Exception:
        # A 5xx makes the gateway redeliver the event later
        logger.exception("webhook_processing_failed", event_id=event.id, event_type=event.type)
        return JSONResponse(status_code=500, content={"error": "Webhook processing failed"})

    logger.info("webhook_processed", event_id=event.id, event_type=event.type, outcome=outcome)
    return JSONResponse(content={"received": True})
