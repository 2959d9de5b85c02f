"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer

from memorials.domain import memorials


@memorials.event(part_of="Cart")
class CartItemAdded:
    __version__ = 1

    cart_id: Identifier(required=True)
    item_id: Identifier(required=True)
    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    purchase_price: Float(required=True)


@memorials.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id: Identifier(required=True)
    product_id: Identifier(required=True)


@memorials.event(part_of="Cart")
class CartItemCancelled:
    """A purchased line was cancelled; its stock goes back on the shelf."""

    __version__ = 1

    cart_id: Identifier(required=True)
    item_id: Identifier(required=True)
    product_id: Identifier(required=True)
    quantity: Integer(required=True)
