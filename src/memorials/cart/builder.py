"""Cart resolution for checkout.

Checkout can be started three ways, tried in this order, first non-empty
cart wins:

1. an explicit cart id (an unknown or empty cart falls through),
2. the signed-in user's most recent cart,
3. a raw product list sent by the client, priced from the catalogue.

A cart assembled from a product list is new and unsaved: the caller adds it
to the repository together with the order, inside the same unit of work.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from memorials.cart.cart import Cart
from memorials.product.product import Product

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RequestedItem:
    """One entry of a client-sent product list."""

    product_id: str
    quantity: int = 1
    price: float | None = None
    variant_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "RequestedItem":
        product = data.get("product_id") or data.get("product")
        if isinstance(product, dict):
            product = product.get("id") or product.get("_id")
        variant = data.get("variant_name") or data.get("variant")
        if isinstance(variant, dict):
            variant = variant.get("name")
        return cls(
            product_id=str(product) if product else "",
            quantity=int(data.get("quantity") or 1),
            price=data.get("price"),
            variant_name=variant,
        )


@dataclass(frozen=True)
class ResolvedCart:
    cart: Cart
    is_new: bool
    strategy: str


def add_requested_item(cart: Cart, requested: RequestedItem) -> bool:
    """Price ``requested`` from the catalogue and add it to ``cart``.

    The catalogue price wins; the client's price is only used when the product
    has no active variant to price from. Returns False (and logs) when the
    item cannot be added.
    """
    if requested.quantity < 1:
        raise ValidationError({"quantity": [f"Invalid quantity {requested.quantity} for product {requested.product_id}"]})

    product = current_domain.repository_for(Product).find(requested.product_id) if requested.product_id else None
    if product is None or not product.is_active:
        logger.warning("cart_item_skipped", product_id=requested.product_id, reason="unknown or inactive product")
        return False

    price = product.price_for(requested.variant_name)
    if price is None:
        price = requested.price
    if price is None:
        logger.warning("cart_item_skipped", product_id=requested.product_id, reason="no price available")
        return False

    variant = product.variant_named(requested.variant_name) or product.default_variant()
    cart.add_item(
        product_id=str(product.id),
        product_name=product.name,
        product_type=product.product_type,
        sku=(variant.sku if variant and variant.sku else product.sku),
        variant_name=variant.name if variant else requested.variant_name,
        quantity=requested.quantity,
        purchase_price=float(price),
    )
    return True


class CartBuilder:
    def resolve(self, cart_id: str | None = None, user_id: str | None = None, products: list[dict] | None = None) -> ResolvedCart:
        carts = current_domain.repository_for(Cart)

        if cart_id:
            cart = carts.find(cart_id)
            if cart is not None and not cart.is_empty:
                return ResolvedCart(cart=cart, is_new=False, strategy="cart_id")
            logger.info("cart_id_fell_through", cart_id=cart_id, found=cart is not None)

        if user_id:
            cart = carts.latest_for_user(user_id)
            if cart is not None:
                return ResolvedCart(cart=cart, is_new=False, strategy="user")

        if products:
            cart = Cart.create(user_id=user_id)
            for entry in products:
                add_requested_item(cart, RequestedItem.from_dict(entry))
            if not cart.is_empty:
                return ResolvedCart(cart=cart, is_new=True, strategy="products")

        raise ValidationError({"cart": ["Could not find or create cart"]})
