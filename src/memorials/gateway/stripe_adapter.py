"""Stripe adapter over the stripe-python SDK.

The API key is passed per request rather than set on the ``stripe`` module,
so several configured gateways can coexist in one process (tests, admin
tooling).
"""

import json

import stripe
import structlog

from memorials.gateway.port import (
    GatewayError,
    GatewayEvent,
    IntentResult,
    PaymentGateway,
    RefundResult,
    SignatureVerificationFailed,
)

logger = structlog.get_logger(__name__)


def _gateway_error(exc: stripe.StripeError) -> GatewayError:
    message = exc.user_message or str(exc)
    return GatewayError(message, code=exc.code)


def _intent_result(intent) -> IntentResult:
    return IntentResult(
        id=intent.id,
        status=intent.status,
        amount=intent.amount,
        currency=intent.currency,
        client_secret=intent.client_secret,
    )


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str, webhook_secret: str | None) -> None:
        if not api_key:
            raise GatewayError("Stripe secret key is not configured")
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def create_intent(self, amount: int, currency: str, metadata: dict[str, str]) -> IntentResult:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                metadata=metadata,
                automatic_payment_methods={"enabled": True},
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            logger.error("stripe_create_intent_failed", amount=amount, error=str(exc))
            raise _gateway_error(exc) from exc
        return _intent_result(intent)

    def retrieve_intent(self, intent_id: str) -> IntentResult:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise _gateway_error(exc) from exc
        return _intent_result(intent)

    def cancel_intent(self, intent_id: str) -> IntentResult:
        try:
            intent = stripe.PaymentIntent.cancel(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            logger.error("stripe_cancel_intent_failed", payment_intent_id=intent_id, error=str(exc))
            raise _gateway_error(exc) from exc
        return _intent_result(intent)

    def create_refund(self, intent_id: str, amount: int | None, reason: str) -> RefundResult:
        params = {"payment_intent": intent_id, "reason": reason}
        if amount is not None:
            params["amount"] = amount
        try:
            refund = stripe.Refund.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            logger.error("stripe_refund_failed", payment_intent_id=intent_id, error=str(exc))
            raise _gateway_error(exc) from exc
        return RefundResult(
            id=refund.id,
            status=refund.status,
            amount=refund.amount,
            payment_intent_id=intent_id,
        )

    def construct_event(self, payload: bytes, signature: str) -> GatewayEvent:
        if not self.webhook_secret:
            raise SignatureVerificationFailed("Stripe webhook secret is not configured")
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            raise SignatureVerificationFailed(str(exc)) from exc
        except ValueError as exc:
            raise SignatureVerificationFailed(f"Invalid payload: {exc}") from exc
        return GatewayEvent.from_payload(json.loads(payload))
