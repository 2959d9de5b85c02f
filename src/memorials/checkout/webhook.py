"""Gateway webhook reconciliation — command and handler.

Verified gateway events replay the same outcomes as the synchronous calls,
independently of them. Every event is safe to receive twice and in any
order relative to the confirm call: an order that already reached the
outcome an event describes is left alone, and events for orders that do
not exist (yet) are logged and acknowledged.
"""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from memorials.checkout.settlement import load_cart, release_order, restore_stock, settle_successful_payment
from memorials.domain import memorials
from memorials.order.order import Order, PaymentStatus

logger = structlog.get_logger(__name__)

INTENT_SUCCEEDED_EVENT = "payment_intent.succeeded"
INTENT_FAILED_EVENT = "payment_intent.payment_failed"
INTENT_CANCELED_EVENT = "payment_intent.canceled"
CHARGE_REFUNDED_EVENT = "charge.refunded"

HANDLED_EVENTS = frozenset({INTENT_SUCCEEDED_EVENT, INTENT_FAILED_EVENT, INTENT_CANCELED_EVENT, CHARGE_REFUNDED_EVENT})


@memorials.command(part_of="Order")
class ReconcileGatewayEvent:
    event_id: String(max_length=255)
    event_type: String(required=True, max_length=100)
    payment_intent_id: String(max_length=255)
    failure_reason: String(max_length=500)
    amount_refunded: String(max_length=20)  # minor units, as sent by the gateway


@memorials.command_handler(part_of=Order)
class ReconcileGatewayEventHandler:
    @handle(ReconcileGatewayEvent)
    def reconcile(self, command):
        log = logger.bind(event_id=command.event_id, event_type=command.event_type, payment_intent_id=command.payment_intent_id)

        if command.event_type not in HANDLED_EVENTS:
            log.info("gateway_event_ignored")
            return "ignored"

        if not command.payment_intent_id:
            log.warning("gateway_event_without_intent")
            return "ignored"

        orders = current_domain.repository_for(Order)
        order = orders.find_by_intent(command.payment_intent_id)
        if order is None:
            log.warning("gateway_event_for_unknown_order")
            return "no_order"

        if command.event_type == INTENT_SUCCEEDED_EVENT:
            if not order.is_payment_pending:
                log.info("gateway_event_duplicate", payment_status=order.payment_status)
                return "duplicate"
            settle_successful_payment(order, source="webhook")
            return "settled"

        if command.event_type == INTENT_FAILED_EVENT:
            if not order.is_payment_pending:
                log.info("gateway_event_duplicate", payment_status=order.payment_status)
                return "duplicate"
            order.record_payment_failure(command.failure_reason)
            restore_stock(order, load_cart(order))
            orders.add(order)
            log.info("payment_failed_recorded", order_id=str(order.id))
            return "failed"

        if command.event_type == INTENT_CANCELED_EVENT:
            if not order.is_payment_pending:
                log.info("gateway_event_duplicate", payment_status=order.payment_status)
                return "duplicate"
            order.record_cancellation()
            restore_stock(order, load_cart(order))
            orders.add(order)
            log.info("payment_cancel_recorded", order_id=str(order.id))
            return "cancelled"

        # charge.refunded
        if not order.payment_is(PaymentStatus.SUCCEEDED):
            log.info("gateway_event_duplicate", payment_status=order.payment_status)
            return "duplicate"
        amount = int(command.amount_refunded) / 100 if command.amount_refunded else order.total_with_tax
        order.record_refund(amount=amount)
        release_order(order)
        orders.add(order)
        log.info("refund_recorded", order_id=str(order.id))
        return "refunded"
