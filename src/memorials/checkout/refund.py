"""Order refund — command and handler.

The gateway refund happens first; the order, the stock and the memorial
condolence are only touched once the gateway has accepted it.
"""

from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from memorials.checkout.settlement import release_order
from memorials.domain import memorials
from memorials.gateway import get_gateway
from memorials.order.order import Order, PaymentStatus
from memorials.shared.money import from_minor_units, round_half_up, to_minor_units

logger = structlog.get_logger(__name__)


class RefundReason(Enum):
    REQUESTED_BY_CUSTOMER = "requested_by_customer"
    DUPLICATE = "duplicate"
    FRAUDULENT = "fraudulent"


@memorials.command(part_of="Order")
class RefundOrder:
    order_id: Identifier(required=True)
    amount: Float(min_value=0.01)  # major units; full refund when omitted
    reason: String(choices=RefundReason, default=RefundReason.REQUESTED_BY_CUSTOMER.value)


@memorials.command_handler(part_of=Order)
class RefundOrderHandler:
    @handle(RefundOrder)
    def refund(self, command):
        orders = current_domain.repository_for(Order)
        order = orders.get(command.order_id)

        if not order.payment_intent_id:
            raise ObjectNotFoundError(f"No payment found for order `{command.order_id}`")

        if order.payment_is(PaymentStatus.REFUNDED):
            logger.info("refund_already_recorded", order_id=str(order.id), refund_id=order.refund_id)
            return _refund_summary(order, already_refunded=True)

        if not order.payment_is(PaymentStatus.SUCCEEDED):
            raise ValidationError({"payment_status": [f"Only paid orders can be refunded (order is {order.payment_status})"]})

        if command.amount is not None and round_half_up(command.amount) > round_half_up(order.total_with_tax):
            raise ValidationError({"amount": ["Refund amount cannot exceed the order total"]})

        refund = get_gateway().create_refund(
            intent_id=order.payment_intent_id,
            amount=to_minor_units(command.amount) if command.amount is not None else None,
            reason=command.reason,
        )

        order.record_refund(amount=from_minor_units(refund.amount), refund_id=refund.id)
        release_order(order)
        orders.add(order)

        logger.info(
            "order_refunded",
            order_id=str(order.id),
            payment_intent_id=order.payment_intent_id,
            refund_id=refund.id,
            amount=refund.amount,
            reason=command.reason,
        )
        return _refund_summary(order)


def _refund_summary(order: Order, already_refunded: bool = False) -> dict:
    return {
        "order_id": str(order.id),
        "refund_id": order.refund_id,
        "amount": order.amount_refunded,
        "payment_status": order.payment_status,
        "order_status": order.order_status,
        "already_refunded": already_refunded,
    }
