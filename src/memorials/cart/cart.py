"""Cart aggregate.

Carts may belong to a signed-in user or be anonymous. Each line captures the
product's price at the moment it was added, so later catalogue price changes
never reprice an existing cart. Lines carry their own fulfilment status so a
single item can be cancelled after purchase without touching the rest.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from memorials.cart.events import CartItemAdded, CartItemCancelled, CartItemRemoved
from memorials.domain import memorials
from memorials.shared.money import line_total


class ItemStatus(Enum):
    NOT_PROCESSED = "Not_processed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


@memorials.entity(part_of="Cart")
class CartItem:
    product_id: Identifier(required=True)
    product_name: String(required=True, max_length=255)
    product_type: String(max_length=20)
    sku: String(max_length=50)
    variant_name: String(max_length=100)
    quantity: Integer(required=True, min_value=1)
    purchase_price: Float(required=True, min_value=0.0)
    total_price: Float(min_value=0.0)
    status: String(choices=ItemStatus, default=ItemStatus.NOT_PROCESSED.value)

    @property
    def is_cancelled(self) -> bool:
        return self.status == ItemStatus.CANCELLED.value


@memorials.aggregate
class Cart:
    user_id: Identifier()  # None for guest carts
    items: HasMany(CartItem)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, user_id=None):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def active_items(self) -> list[CartItem]:
        return [i for i in self.items or [] if not i.is_cancelled]

    @property
    def is_empty(self) -> bool:
        return not self.active_items()

    @property
    def subtotal(self) -> Decimal:
        return sum((line_total(i.purchase_price, i.quantity) for i in self.active_items()), Decimal("0"))

    def item(self, item_id) -> CartItem:
        item = next((i for i in self.items or [] if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return item

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, product_name, quantity, purchase_price, product_type=None, sku=None, variant_name=None):
        """Add a line, or grow the quantity of the same product/variant already in the cart.

        A merged line keeps the price captured when it was first added.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = next(
            (
                i
                for i in self.active_items()
                if str(i.product_id) == str(product_id) and (i.variant_name or None) == (variant_name or None)
            ),
            None,
        )
        if existing:
            existing.quantity += quantity
            existing.total_price = float(line_total(existing.purchase_price, existing.quantity))
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                product_name=product_name,
                product_type=product_type,
                sku=sku,
                variant_name=variant_name,
                quantity=quantity,
                purchase_price=purchase_price,
                total_price=float(line_total(purchase_price, quantity)),
            )
            self.add_items(item)

        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity,
                purchase_price=item.purchase_price,
            )
        )
        return item

    def remove_product(self, product_id):
        """Drop every line for ``product_id``."""
        matching = [i for i in self.items or [] if str(i.product_id) == str(product_id)]
        if not matching:
            raise ValidationError({"product_id": ["Product is not in the cart"]})

        for item in matching:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    # -------------------------------------------------------------------
    # Post-purchase line status
    # -------------------------------------------------------------------
    def mark_items(self, status: ItemStatus):
        """Move every live line to ``status`` (cancelled lines stay cancelled)."""
        for item in self.active_items():
            item.status = status.value
        self.updated_at = datetime.now(UTC)

    def cancel_item(self, item_id) -> CartItem:
        item = self.item(item_id)
        if item.is_cancelled:
            raise ValidationError({"item_id": ["Item is already cancelled"]})

        item.status = ItemStatus.CANCELLED.value
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartItemCancelled(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(item.product_id),
                quantity=item.quantity,
            )
        )
        return item
