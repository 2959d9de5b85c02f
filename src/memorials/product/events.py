"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from memorials.domain import memorials


@memorials.event(part_of="Product")
class ProductCreated:
    __version__ = 1

    product_id: Identifier(required=True)
    sku: String(required=True)
    name: String(required=True)
    product_type: String(required=True)
    created_at: DateTime()


@memorials.event(part_of="Product")
class StockAdjusted:
    """Stock moved because of a sale, a restore or a manual correction."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_quantity: Integer(required=True)
    new_quantity: Integer(required=True)
    delta: Integer(required=True)
    reason: String(required=True)
