"""Payment cancellation — command and handler.

Abandons an unpaid checkout: the intent is cancelled at the gateway and the
order closed as cancelled. Paid orders go through a refund instead.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from memorials.checkout.settlement import load_cart, restore_stock
from memorials.domain import memorials
from memorials.gateway import get_gateway
from memorials.gateway.port import INTENT_CANCELED, INTENT_SUCCEEDED
from memorials.order.order import Order, PaymentStatus

logger = structlog.get_logger(__name__)


@memorials.command(part_of="Order")
class CancelPayment:
    payment_intent_id: String(max_length=255)
    order_id: Identifier()


@memorials.command_handler(part_of=Order)
class CancelPaymentHandler:
    @handle(CancelPayment)
    def cancel(self, command):
        if not command.payment_intent_id and not command.order_id:
            raise ValidationError({"payment_intent_id": ["A payment intent id or an order id is required"]})

        orders = current_domain.repository_for(Order)
        order = orders.find(command.order_id) if command.order_id else None
        if order is None and command.payment_intent_id:
            order = orders.find_by_intent(command.payment_intent_id)
        if order is None and command.order_id:
            raise ObjectNotFoundError(f"Order `{command.order_id}` not found")

        intent_id = command.payment_intent_id or (order.payment_intent_id if order else None)

        if order is not None and order.payment_is(PaymentStatus.SUCCEEDED, PaymentStatus.REFUNDED):
            raise ValidationError({"payment_status": ["This order has been paid; request a refund instead"]})

        if intent_id:
            gateway = get_gateway()
            intent = gateway.retrieve_intent(intent_id)
            if intent.status == INTENT_SUCCEEDED:
                raise ValidationError({"payment_status": ["This payment has succeeded; request a refund instead"]})
            if intent.status != INTENT_CANCELED:
                intent = gateway.cancel_intent(intent_id)
            logger.info("payment_intent_cancelled", payment_intent_id=intent_id, status=intent.status)

        if order is None:
            logger.info("payment_cancelled_without_order", payment_intent_id=intent_id)
            return {"payment_intent_id": intent_id, "order_id": None, "payment_status": PaymentStatus.CANCELLED.value}

        if order.is_payment_pending:
            order.record_cancellation()
            restore_stock(order, load_cart(order))
            orders.add(order)
        else:
            logger.info("payment_cancel_noop", order_id=str(order.id), payment_status=order.payment_status)

        return {
            "payment_intent_id": intent_id,
            "order_id": str(order.id),
            "payment_status": order.payment_status,
            "order_status": order.order_status,
        }
