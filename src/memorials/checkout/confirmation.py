"""Payment confirmation — command and handler.

Called by the client once the buyer has completed payment. The gateway is
the source of truth: unless it reports the intent as ``succeeded`` the call
is rejected with the status it did report.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from memorials.checkout.settlement import settle_successful_payment
from memorials.domain import memorials
from memorials.gateway import get_gateway
from memorials.gateway.port import INTENT_SUCCEEDED
from memorials.order.order import Order, PaymentStatus
from memorials.shared.money import to_minor_units

logger = structlog.get_logger(__name__)


class PaymentNotCompleted(ValidationError):
    """The gateway does not (yet) report the intent as succeeded."""

    def __init__(self, status: str) -> None:
        super().__init__({"payment": [f"Payment not completed (status: {status})"]})
        self.status = status


@memorials.command(part_of="Order")
class ConfirmPayment:
    payment_intent_id: String(required=True, max_length=255)
    order_id: Identifier()
    cart_id: Identifier()


def locate_order(payment_intent_id: str, order_id: str | None = None, cart_id: str | None = None) -> Order:
    """Find the order by explicit id, then by stored intent id, then by cart."""
    orders = current_domain.repository_for(Order)
    order = None
    if order_id:
        order = orders.find(order_id)
    if order is None:
        order = orders.find_by_intent(payment_intent_id)
    if order is None and cart_id:
        order = orders.find_by_cart(cart_id)
    if order is None:
        raise ObjectNotFoundError(f"No order found for payment intent `{payment_intent_id}`")
    return order


def ensure_intent_pays_for(order: Order, intent) -> None:
    """Reject an intent that was not opened for this order or charged a different amount."""
    if order.payment_intent_id != intent.id:
        raise ValidationError({"payment_intent_id": ["Payment intent does not belong to this order"]})
    if intent.amount != to_minor_units(order.total_with_tax):
        raise ValidationError(
            {"amount": [f"Payment of {intent.amount} does not match order total {to_minor_units(order.total_with_tax)}"]}
        )


@memorials.command_handler(part_of=Order)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm(self, command):
        intent = get_gateway().retrieve_intent(command.payment_intent_id)
        if intent.status != INTENT_SUCCEEDED:
            logger.info("payment_not_completed", payment_intent_id=intent.id, status=intent.status)
            raise PaymentNotCompleted(intent.status)

        order = locate_order(command.payment_intent_id, command.order_id, command.cart_id)
        ensure_intent_pays_for(order, intent)

        if order.payment_is(PaymentStatus.SUCCEEDED):
            logger.info("payment_already_confirmed", order_id=str(order.id), payment_intent_id=intent.id)
            return _confirmation(order, condolence_created=bool(order.condolence_id), already_confirmed=True)

        if not order.is_payment_pending:
            raise ValidationError(
                {"payment_status": [f"Order is {order.payment_status} and can no longer be confirmed"]}
            )

        settlement = settle_successful_payment(order, source="confirm")
        return _confirmation(settlement.order, condolence_created=settlement.condolence_created)


def _confirmation(order: Order, condolence_created: bool, already_confirmed: bool = False) -> dict:
    return {
        "id": str(order.id),
        "total": order.total_with_tax,
        "payment_status": order.payment_status,
        "order_status": order.order_status,
        "condolence_created": condolence_created,
        "condolence_id": str(order.condolence_id) if order.condolence_id else None,
        "already_confirmed": already_confirmed,
    }
