"""Order fulfilment — shipping, line cancellation and removal of unpaid orders."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from memorials.cart.cart import Cart, ItemStatus
from memorials.domain import memorials
from memorials.order.order import Order, OrderStatus, PaymentStatus
from memorials.product.product import Product

logger = structlog.get_logger(__name__)

_LINE_STATUS_FOR = {
    OrderStatus.SHIPPED: ItemStatus.SHIPPED,
    OrderStatus.DELIVERED: ItemStatus.DELIVERED,
}

# Only paid orders that have not shipped have cancellable lines
_CANCELLABLE_ORDER_STATUSES = {OrderStatus.PROCESSING.value}


@memorials.command(part_of="Order")
class AdvanceFulfilment:
    order_id: Identifier(required=True)
    status: String(required=True, choices=OrderStatus)


@memorials.command(part_of="Order")
class CancelOrderItem:
    order_id: Identifier(required=True)
    item_id: Identifier(required=True)


@memorials.command(part_of="Order")
class DeleteOrder:
    order_id: Identifier(required=True)


@memorials.command_handler(part_of=Order)
class FulfilmentHandler:
    @handle(AdvanceFulfilment)
    def advance(self, command):
        orders = current_domain.repository_for(Order)
        order = orders.get(command.order_id)
        target = OrderStatus(command.status)

        order.advance_fulfilment(target)

        carts = current_domain.repository_for(Cart)
        cart = carts.find(order.cart_id)
        if cart is not None:
            cart.mark_items(_LINE_STATUS_FOR[target])
            carts.add(cart)

        orders.add(order)
        logger.info("fulfilment_advanced", order_id=str(order.id), order_status=order.order_status)
        return order.to_dict()

    @handle(CancelOrderItem)
    def cancel_item(self, command):
        orders = current_domain.repository_for(Order)
        order = orders.get(command.order_id)
        if not order.payment_is(PaymentStatus.SUCCEEDED):
            raise ValidationError({"payment_status": [f"Items of a {order.payment_status} order cannot be cancelled"]})
        if order.order_status not in _CANCELLABLE_ORDER_STATUSES:
            raise ValidationError({"order_status": [f"Items of a {order.order_status} order cannot be cancelled"]})

        carts = current_domain.repository_for(Cart)
        cart = carts.get(order.cart_id)
        item = cart.cancel_item(command.item_id)

        if order.stock_committed:
            products = current_domain.repository_for(Product)
            product = products.find(item.product_id)
            if product is not None:
                product.adjust_stock(item.quantity, reason="restore")
                products.add(product)
            else:
                logger.warning("stock_product_missing", order_id=str(order.id), product_id=str(item.product_id))

        if cart.is_empty:
            order.cancel_fulfilment()
        carts.add(cart)
        orders.add(order)

        logger.info(
            "order_item_cancelled",
            order_id=str(order.id),
            item_id=str(item.id),
            order_status=order.order_status,
        )
        return order.to_dict()

    @handle(DeleteOrder)
    def delete(self, command):
        orders = current_domain.repository_for(Order)
        order = orders.get(command.order_id)
        if order.payment_is(PaymentStatus.SUCCEEDED, PaymentStatus.REFUNDED):
            raise ValidationError({"payment_status": ["Paid orders cannot be deleted; refund them instead"]})

        carts = current_domain.repository_for(Cart)
        cart = carts.find(order.cart_id)
        if cart is not None:
            carts._dao.delete(cart)
        orders._dao.delete(order)
        logger.info("order_deleted", order_id=str(order.id), cart_deleted=cart is not None)
