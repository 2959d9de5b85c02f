"""Order aggregate — the ledger entry for one checkout.

An order is opened (pending) when a payment intent is requested and then
moves through two independent state machines: one for the money, one for
fulfilment.

Payment:
    pending -> succeeded | failed | cancelled
    succeeded -> refunded
    failed, cancelled, refunded are terminal

Fulfilment:
    pending -> processing | cancelled
    processing -> shipped | cancelled
    shipped -> delivered, and -> cancelled only through a refund
    delivered -> cancelled only through a refund
    cancelled is terminal
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, String, Text, ValueObject

from memorials.domain import memorials
from memorials.order.events import (
    FulfilmentAdvanced,
    OrderPlaced,
    OrderRefunded,
    PaymentCancelled,
    PaymentConfirmed,
    PaymentFailed,
)


class PaymentStatus(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CARD = "card"
    WALLET = "wallet"


_PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.SUCCEEDED, PaymentStatus.FAILED, PaymentStatus.CANCELLED},
    PaymentStatus.SUCCEEDED: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),
    PaymentStatus.CANCELLED: set(),
    PaymentStatus.REFUNDED: set(),
}

_ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

# Goods already out the door can only be cancelled by refunding them
_REFUND_ONLY_CANCELLATIONS = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}


@memorials.value_object(part_of="Order")
class ContactDetails:
    """Billing or shipping contact, snapshotted at checkout."""

    name: String(max_length=150)
    email: String(max_length=254)
    phone: String(max_length=50)
    line1: String(max_length=255)
    line2: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=100)

    @classmethod
    def from_dict(cls, data: dict | None) -> "ContactDetails | None":
        """Build from the gateway-style shape, ``{name, email, phone, address: {...}}``."""
        if not data:
            return None
        address = data.get("address") or {}
        return cls(
            name=data.get("name"),
            email=data.get("email"),
            phone=data.get("phone"),
            line1=address.get("line1"),
            line2=address.get("line2"),
            city=address.get("city"),
            state=address.get("state"),
            postal_code=address.get("postal_code"),
            country=address.get("country"),
        )


@memorials.aggregate
class Order:
    cart_id: Identifier(required=True)
    user_id: Identifier()
    subtotal: Float(default=0.0, min_value=0.0)
    tax: Float(default=0.0, min_value=0.0)
    total_with_tax: Float(default=0.0, min_value=0.0)
    currency: String(max_length=3, default="usd")
    payment_intent_id: String(max_length=255)
    payment_status: String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    order_status: String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method: String(choices=PaymentMethod, default=PaymentMethod.CARD.value)
    billing_details: ValueObject(ContactDetails)
    shipping_details: ValueObject(ContactDetails)
    obituary_id: Identifier()
    obituary_name: String(max_length=255)
    dedication_message: Text()
    condolence_id: Identifier()
    stock_committed: Boolean(default=False)
    amount_refunded: Float(default=0.0, min_value=0.0)
    refund_id: String(max_length=255)
    failure_reason: String(max_length=500)
    order_notes: Text()
    created_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        cart_id,
        subtotal: Decimal,
        tax: Decimal,
        total_with_tax: Decimal,
        currency="usd",
        user_id=None,
        billing_details=None,
        shipping_details=None,
        obituary_id=None,
        obituary_name=None,
        dedication_message=None,
        order_notes=None,
    ):
        now = datetime.now(UTC)
        order = cls(
            cart_id=cart_id,
            user_id=user_id,
            subtotal=float(subtotal),
            tax=float(tax),
            total_with_tax=float(total_with_tax),
            currency=currency,
            billing_details=billing_details,
            shipping_details=shipping_details,
            obituary_id=obituary_id,
            obituary_name=obituary_name,
            dedication_message=dedication_message,
            order_notes=order_notes,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                cart_id=str(cart_id),
                user_id=str(user_id) if user_id else None,
                subtotal=order.subtotal,
                tax=order.tax,
                total_with_tax=order.total_with_tax,
                currency=currency,
                obituary_id=str(obituary_id) if obituary_id else None,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State machine helpers
    # -------------------------------------------------------------------
    def _move_payment(self, target: PaymentStatus):
        current = PaymentStatus(self.payment_status)
        if target not in _PAYMENT_TRANSITIONS[current]:
            raise ValidationError(
                {"payment_status": [f"Cannot move payment from {current.value} to {target.value}"]}
            )
        self.payment_status = target.value

    def _move_order(self, target: OrderStatus, refunding: bool = False):
        current = OrderStatus(self.order_status)
        allowed = set(_ORDER_TRANSITIONS[current])
        if refunding and current in _REFUND_ONLY_CANCELLATIONS:
            allowed.add(OrderStatus.CANCELLED)
        if target not in allowed:
            raise ValidationError({"order_status": [f"Cannot move order from {current.value} to {target.value}"]})
        self.order_status = target.value

    def _touch(self):
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def payment_is(self, *statuses: PaymentStatus) -> bool:
        return PaymentStatus(self.payment_status) in statuses

    @property
    def is_payment_pending(self) -> bool:
        return self.payment_is(PaymentStatus.PENDING)

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def reprice(
        self,
        cart_id,
        subtotal: Decimal,
        tax: Decimal,
        total_with_tax: Decimal,
        billing_details=None,
        shipping_details=None,
        obituary_id=None,
        obituary_name=None,
        dedication_message=None,
        order_notes=None,
    ):
        """Rebind an unpaid order to the cart being checked out and refresh its totals.

        Snapshots that are not supplied keep their previous values.
        """
        if not self.is_payment_pending:
            raise ValidationError({"payment_status": ["Only pending orders can be repriced"]})
        self.cart_id = str(cart_id)
        self.subtotal = float(subtotal)
        self.tax = float(tax)
        self.total_with_tax = float(total_with_tax)
        if billing_details is not None:
            self.billing_details = billing_details
        if shipping_details is not None:
            self.shipping_details = shipping_details
        if obituary_id:
            self.obituary_id = obituary_id
            self.obituary_name = obituary_name
        if dedication_message is not None:
            self.dedication_message = dedication_message
        if order_notes is not None:
            self.order_notes = order_notes
        self._touch()

    def attach_intent(self, payment_intent_id: str):
        if not self.is_payment_pending:
            raise ValidationError({"payment_status": ["A payment intent can only be attached to a pending order"]})
        self.payment_intent_id = payment_intent_id
        self._touch()

    def record_payment_success(self):
        self._move_payment(PaymentStatus.SUCCEEDED)
        self._move_order(OrderStatus.PROCESSING)
        self._touch()
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                payment_intent_id=self.payment_intent_id,
                total_with_tax=self.total_with_tax,
                confirmed_at=self.updated_at,
            )
        )

    def record_payment_failure(self, reason: str | None = None):
        self._move_payment(PaymentStatus.FAILED)
        self._move_order(OrderStatus.CANCELLED)
        self.failure_reason = reason
        self._touch()
        self.raise_(
            PaymentFailed(
                order_id=str(self.id),
                payment_intent_id=self.payment_intent_id,
                reason=reason,
                failed_at=self.updated_at,
            )
        )

    def record_cancellation(self):
        self._move_payment(PaymentStatus.CANCELLED)
        self._move_order(OrderStatus.CANCELLED)
        self._touch()
        self.raise_(
            PaymentCancelled(
                order_id=str(self.id),
                payment_intent_id=self.payment_intent_id,
                cancelled_at=self.updated_at,
            )
        )

    def record_refund(self, amount: float, refund_id: str | None = None):
        self._move_payment(PaymentStatus.REFUNDED)
        if OrderStatus(self.order_status) != OrderStatus.CANCELLED:
            self._move_order(OrderStatus.CANCELLED, refunding=True)
        self.amount_refunded = float(amount)
        self.refund_id = refund_id
        self._touch()
        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                payment_intent_id=self.payment_intent_id,
                refund_id=refund_id,
                amount=self.amount_refunded,
                refunded_at=self.updated_at,
            )
        )

    # -------------------------------------------------------------------
    # Stock and condolence bookkeeping
    # -------------------------------------------------------------------
    def mark_stock_committed(self):
        self.stock_committed = True
        self._touch()

    def mark_stock_restored(self):
        self.stock_committed = False
        self._touch()

    def link_condolence(self, condolence_id):
        self.condolence_id = condolence_id
        self._touch()

    def unlink_condolence(self):
        self.condolence_id = None
        self._touch()

    # -------------------------------------------------------------------
    # Fulfilment
    # -------------------------------------------------------------------
    def advance_fulfilment(self, target: OrderStatus):
        """Ship or deliver a paid order."""
        if target not in (OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            raise ValidationError({"order_status": ["Fulfilment can only move an order to shipped or delivered"]})
        if not self.payment_is(PaymentStatus.SUCCEEDED):
            raise ValidationError({"payment_status": ["Only paid orders can be fulfilled"]})

        previous = self.order_status
        self._move_order(target)
        self._touch()
        self.raise_(
            FulfilmentAdvanced(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_at=self.updated_at,
            )
        )

    def cancel_fulfilment(self):
        """Stop fulfilment after every line was cancelled. Money is untouched."""
        previous = self.order_status
        self._move_order(OrderStatus.CANCELLED)
        self._touch()
        self.raise_(
            FulfilmentAdvanced(
                order_id=str(self.id),
                previous_status=previous,
                new_status=OrderStatus.CANCELLED.value,
                changed_at=self.updated_at,
            )
        )
