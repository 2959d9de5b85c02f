"""Condolence aggregate.

Messages left on an obituary. Visitors submit them by hand (and they wait
for moderation), or checkout generates one when a memorial gift is bought
for the obituary, in which case it carries a summary of the purchase.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text, ValueObject

from memorials.domain import memorials


class CondolenceType(Enum):
    MESSAGE = "message"
    TREE = "tree"
    FLOWER = "flower"
    GIFT = "gift"
    MIXED = "mixed"  # one purchase spanning several product types


@memorials.value_object(part_of="Condolence")
class ProductDetails:
    """What was bought alongside the condolence, frozen at purchase time."""

    product_id: Identifier()
    product_name: String(max_length=255)
    product_type: String(choices=CondolenceType)
    variant_name: String(max_length=100)
    quantity: Integer(min_value=0)
    total_price: Float(min_value=0.0)
    sku: String(max_length=50)


@memorials.aggregate
class Condolence:
    obituary_id: Identifier(required=True)
    name: String(required=True, max_length=150)
    email: String(max_length=254)
    message: Text(required=True)
    is_private: Boolean(default=False)
    has_candle: Boolean(default=False)
    gesture_id: String(max_length=100)
    gesture_description: String(max_length=500)
    is_approved: Boolean(default=False)
    condolence_type: String(choices=CondolenceType, default=CondolenceType.MESSAGE.value)
    order_id: Identifier()
    product_details: ValueObject(ProductDetails)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def purchase_condolences_reference_an_order(self):
        if self.condolence_type != CondolenceType.MESSAGE.value and not self.order_id:
            raise ValidationError({"order_id": ["Purchase condolences must reference the originating order"]})

    @classmethod
    def submit(cls, obituary_id, name, message, email=None, is_private=False, has_candle=False, **gesture):
        """A visitor's handwritten condolence. Held for moderation."""
        now = datetime.now(UTC)
        return cls(
            obituary_id=obituary_id,
            name=name.strip(),
            email=email.strip().lower() if email else None,
            message=message,
            is_private=bool(is_private),
            has_candle=bool(has_candle),
            gesture_id=gesture.get("gesture_id"),
            gesture_description=gesture.get("gesture_description"),
            is_approved=False,
            condolence_type=CondolenceType.MESSAGE.value,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_purchase(cls, obituary_id, order_id, name, message, condolence_type, product_details, email=None):
        """A condolence generated from a paid memorial order. Public and pre-approved."""
        now = datetime.now(UTC)
        return cls(
            obituary_id=obituary_id,
            order_id=order_id,
            name=name,
            email=email.strip().lower() if email else None,
            message=message,
            is_private=False,
            has_candle=False,
            is_approved=True,
            condolence_type=condolence_type,
            product_details=product_details,
            created_at=now,
            updated_at=now,
        )

    def edit(self, name=None, email=None, message=None, is_private=None, has_candle=None):
        if name is not None:
            self.name = name.strip()
        if email is not None:
            self.email = email.strip().lower()
        if message is not None:
            self.message = message
        if is_private is not None:
            self.is_private = is_private
        if has_candle is not None:
            self.has_candle = has_candle
        self.updated_at = datetime.now(UTC)

    def approve(self):
        self.is_approved = True
        self.updated_at = datetime.now(UTC)

    def reject(self):
        self.is_approved = False
        self.updated_at = datetime.now(UTC)
