"""Side effects of money moving, shared by the confirm call and the webhook.

Everything here runs inside the caller's command handler, so the order
update, every product stock change and the condolence insert commit
together or not at all.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from memorials.cart.cart import Cart, ItemStatus
from memorials.condolence.condolence import Condolence
from memorials.condolence.generation import PurchasedItem, generate_condolence
from memorials.order.order import Order
from memorials.product.product import Product

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Settlement:
    order: Order
    condolence_created: bool = False


def purchased_items(cart: Cart) -> list[PurchasedItem]:
    return [
        PurchasedItem(
            product_id=str(item.product_id),
            product_name=item.product_name,
            product_type=item.product_type,
            quantity=item.quantity,
            unit_price=item.purchase_price,
            variant_name=item.variant_name,
            sku=item.sku,
        )
        for item in cart.active_items()
    ]


def _quantities_by_product(cart: Cart) -> dict[str, int]:
    # One stock move per product even when several variants of it were bought
    quantities = {}
    for item in cart.active_items():
        key = str(item.product_id)
        quantities[key] = quantities.get(key, 0) + item.quantity
    return quantities


def _move_stock(cart: Cart, direction: int, reason: str, order_id: str) -> None:
    products = current_domain.repository_for(Product)
    for product_id, quantity in _quantities_by_product(cart).items():
        product = products.find(product_id)
        if product is None:
            logger.warning("stock_product_missing", order_id=order_id, product_id=product_id, reason=reason)
            continue
        product.adjust_stock(direction * quantity, reason=reason)
        products.add(product)


def commit_stock(order: Order, cart: Cart | None) -> None:
    if order.stock_committed or cart is None:
        return
    _move_stock(cart, -1, "sale", str(order.id))
    order.mark_stock_committed()
    logger.info("stock_committed", order_id=str(order.id), cart_id=str(cart.id))


def restore_stock(order: Order, cart: Cart | None) -> None:
    """Put back what ``commit_stock`` took. A no-op when nothing was taken."""
    if not order.stock_committed or cart is None:
        return
    _move_stock(cart, 1, "restore", str(order.id))
    order.mark_stock_restored()
    logger.info("stock_restored", order_id=str(order.id), cart_id=str(cart.id))


def load_cart(order: Order) -> Cart | None:
    cart = current_domain.repository_for(Cart).find(order.cart_id)
    if cart is None:
        logger.warning("order_cart_missing", order_id=str(order.id), cart_id=str(order.cart_id))
    return cart


def settle_successful_payment(order: Order, source: str) -> Settlement:
    """Mark ``order`` paid, take the stock and post the memorial condolence.

    Callers check for an already-paid order first; this records the
    transition unconditionally.
    """
    order.record_payment_success()

    cart = load_cart(order)
    commit_stock(order, cart)
    if cart is not None:
        cart.mark_items(ItemStatus.PROCESSING)
        current_domain.repository_for(Cart).add(cart)

    condolence_created = False
    if order.obituary_id and cart is not None:
        items = [i for i in purchased_items(cart) if i.is_memorial]
        if items:
            billing = order.billing_details
            result = generate_condolence(
                obituary_id=str(order.obituary_id),
                order_id=str(order.id),
                items=items,
                customer_name=billing.name if billing else None,
                email=billing.email if billing else None,
                dedication=order.dedication_message,
            )
            if result.success:
                order.link_condolence(str(result.condolence.id))
                condolence_created = True

    current_domain.repository_for(Order).add(order)
    logger.info(
        "payment_settled",
        order_id=str(order.id),
        payment_intent_id=order.payment_intent_id,
        source=source,
        condolence_created=condolence_created,
    )
    return Settlement(order=order, condolence_created=condolence_created)


def release_order(order: Order, cart: Cart | None = None) -> None:
    """Undo the purchase side effects: restock and withdraw the memorial condolence."""
    restore_stock(order, cart if cart is not None else load_cart(order))
    remove_linked_condolence(order)


def remove_linked_condolence(order: Order) -> None:
    if not order.condolence_id:
        return
    condolences = current_domain.repository_for(Condolence)
    condolence = condolences._dao.query.filter(id=order.condolence_id).all().first
    if condolence is not None:
        condolences._dao.delete(condolence)
        logger.info("condolence_withdrawn", order_id=str(order.id), condolence_id=str(order.condolence_id))
    order.unlink_condolence()
