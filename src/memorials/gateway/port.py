"""Payment gateway port.

Every adapter speaks in minor currency units and returns frozen result
objects. Gateway failures surface as ``GatewayError`` with the gateway's own
message, which the API passes through verbatim.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

INTENT_SUCCEEDED = "succeeded"
INTENT_CANCELED = "canceled"


class GatewayError(Exception):
    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class SignatureVerificationFailed(GatewayError):
    pass


@dataclass(frozen=True)
class IntentResult:
    """A payment intent as the gateway currently sees it."""

    id: str
    status: str
    amount: int
    currency: str
    client_secret: str | None = None


@dataclass(frozen=True)
class RefundResult:
    id: str
    status: str
    amount: int
    payment_intent_id: str


@dataclass(frozen=True)
class GatewayEvent:
    """A verified webhook event, reduced to what reconciliation needs."""

    id: str
    type: str
    payment_intent_id: str | None = None
    data: dict = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict) -> "GatewayEvent":
        obj = (payload.get("data") or {}).get("object") or {}
        if obj.get("object") == "charge" or payload.get("type", "").startswith("charge."):
            intent_id = obj.get("payment_intent")
        else:
            intent_id = obj.get("id")
        return cls(
            id=payload.get("id", ""),
            type=payload.get("type", ""),
            payment_intent_id=intent_id,
            data=obj,
        )


class PaymentGateway(ABC):
    @abstractmethod
    def create_intent(self, amount: int, currency: str, metadata: dict[str, str]) -> IntentResult:
        """Open a payment intent for ``amount`` minor units."""
        ...

    @abstractmethod
    def retrieve_intent(self, intent_id: str) -> IntentResult: ...

    @abstractmethod
    def cancel_intent(self, intent_id: str) -> IntentResult: ...

    @abstractmethod
    def create_refund(self, intent_id: str, amount: int | None, reason: str) -> RefundResult:
        """Refund ``amount`` minor units, or the full charge when ``amount`` is None."""
        ...

    @abstractmethod
    def construct_event(self, payload: bytes, signature: str) -> GatewayEvent:
        """Verify the signature over the raw body and parse the event.

        Raises ``SignatureVerificationFailed`` when the signature does not match.
        """
        ...

    def close(self) -> None:
        """Release any client resources. Called at application shutdown."""
