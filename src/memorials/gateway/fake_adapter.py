"""In-memory payment gateway for development and tests.

Keeps intents in a dict and mimics the lifecycle of a real gateway: an
intent starts in ``requires_payment_method`` and only reaches ``succeeded``
when the buyer's side completes it (``complete_intent`` here). Can be told to
fail every call, to exercise the error paths.
"""

import json
from uuid import uuid4

from memorials.gateway.port import (
    INTENT_CANCELED,
    INTENT_SUCCEEDED,
    GatewayError,
    GatewayEvent,
    IntentResult,
    PaymentGateway,
    RefundResult,
    SignatureVerificationFailed,
)

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Your card was declined."
        self.intents: dict[str, dict] = {}
        self.refunds: dict[str, dict] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Your card was declined.") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _record(self, method: str, **kwargs) -> None:
        self.calls.append({"method": method, **kwargs})
        if not self.should_succeed:
            raise GatewayError(self.failure_reason, code="card_declined")

    def _intent(self, intent_id: str) -> dict:
        try:
            return self.intents[intent_id]
        except KeyError:
            raise GatewayError(f"No such payment_intent: '{intent_id}'", code="resource_missing") from None

    @staticmethod
    def _result(intent: dict) -> IntentResult:
        return IntentResult(
            id=intent["id"],
            status=intent["status"],
            amount=intent["amount"],
            currency=intent["currency"],
            client_secret=intent["client_secret"],
        )

    def create_intent(self, amount: int, currency: str, metadata: dict[str, str]) -> IntentResult:
        self._record("create_intent", amount=amount, currency=currency, metadata=dict(metadata))
        intent_id = f"pi_fake_{uuid4().hex[:16]}"
        intent = {
            "id": intent_id,
            "status": "requires_payment_method",
            "amount": amount,
            "currency": currency,
            "client_secret": f"{intent_id}_secret_{uuid4().hex[:8]}",
            "metadata": dict(metadata),
        }
        self.intents[intent_id] = intent
        return self._result(intent)

    def retrieve_intent(self, intent_id: str) -> IntentResult:
        self._record("retrieve_intent", intent_id=intent_id)
        return self._result(self._intent(intent_id))

    def cancel_intent(self, intent_id: str) -> IntentResult:
        self._record("cancel_intent", intent_id=intent_id)
        intent = self._intent(intent_id)
        if intent["status"] == INTENT_SUCCEEDED:
            raise GatewayError(
                "You cannot cancel this PaymentIntent because it has a status of succeeded.",
                code="payment_intent_unexpected_state",
            )
        intent["status"] = INTENT_CANCELED
        return self._result(intent)

    def create_refund(self, intent_id: str, amount: int | None, reason: str) -> RefundResult:
        self._record("create_refund", intent_id=intent_id, amount=amount, reason=reason)
        intent = self._intent(intent_id)
        if intent["status"] != INTENT_SUCCEEDED:
            raise GatewayError(
                f"PaymentIntent {intent_id} does not have a successful charge to refund.",
                code="charge_not_refundable",
            )
        refund = {
            "id": f"re_fake_{uuid4().hex[:16]}",
            "status": "succeeded",
            "amount": intent["amount"] if amount is None else amount,
            "payment_intent_id": intent_id,
            "reason": reason,
        }
        self.refunds[refund["id"]] = refund
        return RefundResult(
            id=refund["id"],
            status=refund["status"],
            amount=refund["amount"],
            payment_intent_id=intent_id,
        )

    def construct_event(self, payload: bytes, signature: str) -> GatewayEvent:
        if signature != TEST_SIGNATURE:
            raise SignatureVerificationFailed("No signatures found matching the expected signature for payload")
        try:
            return GatewayEvent.from_payload(json.loads(payload))
        except ValueError as exc:
            raise SignatureVerificationFailed(f"Invalid payload: {exc}") from exc

    # -- test helpers --------------------------------------------------------

    def complete_intent(self, intent_id: str, status: str = INTENT_SUCCEEDED) -> None:
        """Simulate the buyer finishing (or abandoning) the payment in the browser."""
        self._intent(intent_id)["status"] = status
