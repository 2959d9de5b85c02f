"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from memorials.domain import memorials


@memorials.event(part_of="Order")
class OrderPlaced:
    """A pending order was opened for a cart at the start of checkout."""

    __version__ = 1

    order_id: Identifier(required=True)
    cart_id: Identifier(required=True)
    user_id: Identifier()
    subtotal: Float(required=True)
    tax: Float(required=True)
    total_with_tax: Float(required=True)
    currency: String(required=True)
    obituary_id: Identifier()
    placed_at: DateTime()


@memorials.event(part_of="Order")
class PaymentConfirmed:
    __version__ = 1

    order_id: Identifier(required=True)
    payment_intent_id: String(required=True)
    total_with_tax: Float(required=True)
    confirmed_at: DateTime()


@memorials.event(part_of="Order")
class PaymentFailed:
    __version__ = 1

    order_id: Identifier(required=True)
    payment_intent_id: String()
    reason: String()
    failed_at: DateTime()


@memorials.event(part_of="Order")
class PaymentCancelled:
    __version__ = 1

    order_id: Identifier(required=True)
    payment_intent_id: String()
    cancelled_at: DateTime()


@memorials.event(part_of="Order")
class OrderRefunded:
    __version__ = 1

    order_id: Identifier(required=True)
    payment_intent_id: String(required=True)
    refund_id: String()
    amount: Float(required=True)
    refunded_at: DateTime()


@memorials.event(part_of="Order")
class FulfilmentAdvanced:
    __version__ = 1

    order_id: Identifier(required=True)
    previous_status: String(required=True)
    new_status: String(required=True)
    changed_at: DateTime()
