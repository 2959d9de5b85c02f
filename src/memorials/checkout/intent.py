"""Payment intent creation — command and handler.

Resolves the cart, prices it with tax, opens (or reprices) a pending order
and asks the gateway for an intent over the total in minor units. Nothing
is written when the gateway refuses: the order and any freshly built cart
are only added to the unit of work once the intent exists.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from memorials.cart.builder import CartBuilder
from memorials.cart.cart import Cart
from memorials.config import get_settings
from memorials.domain import memorials
from memorials.gateway import get_gateway
from memorials.obituary.obituary import Obituary
from memorials.order.order import ContactDetails, Order, PaymentMethod
from memorials.shared.money import price_with_tax, to_minor_units

logger = structlog.get_logger(__name__)


def _json_or_none(value):
    return json.loads(value) if value else None


@memorials.command(part_of="Order")
class CreatePaymentIntent:
    cart_id: Identifier()
    user_id: Identifier()
    products: Text()  # JSON: list of {product_id, quantity, variant_name?, price?}
    currency: String(max_length=3)
    billing_details: Text()  # JSON: {name, email, phone, address: {...}}
    shipping_details: Text()
    order_id: Identifier()
    obituary_id: Identifier()
    obituary_name: String(max_length=255)
    dedication_message: Text()
    order_notes: Text()
    payment_method: String(choices=PaymentMethod, default=PaymentMethod.CARD.value)


@memorials.command_handler(part_of=Order)
class CreatePaymentIntentHandler:
    @handle(CreatePaymentIntent)
    def create_intent(self, command):
        settings = get_settings()
        currency = (command.currency or settings.currency).lower()

        resolved = CartBuilder().resolve(
            cart_id=command.cart_id,
            user_id=command.user_id,
            products=_json_or_none(command.products),
        )
        cart = resolved.cart
        subtotal, tax, total = price_with_tax(cart.subtotal, settings.tax_rate)
        if total <= 0:
            raise ValidationError({"amount": ["Order total must be greater than zero"]})

        obituary_name = command.obituary_name
        if command.obituary_id and not obituary_name:
            obituary_name = current_domain.repository_for(Obituary).get(command.obituary_id).full_name

        snapshots = dict(
            billing_details=ContactDetails.from_dict(_json_or_none(command.billing_details)),
            shipping_details=ContactDetails.from_dict(_json_or_none(command.shipping_details)),
            obituary_id=command.obituary_id,
            obituary_name=obituary_name,
            dedication_message=command.dedication_message,
            order_notes=command.order_notes,
        )

        orders = current_domain.repository_for(Order)
        if command.order_id:
            order = orders.get(command.order_id)
            order.reprice(str(cart.id), subtotal, tax, total, **snapshots)
        else:
            order = Order.place(
                cart_id=str(cart.id),
                user_id=command.user_id,
                subtotal=subtotal,
                tax=tax,
                total_with_tax=total,
                currency=currency,
                **snapshots,
            )
            order.payment_method = command.payment_method

        # GatewayError propagates as-is; nothing has been added to the unit of work yet
        intent = get_gateway().create_intent(
            amount=to_minor_units(total),
            currency=currency,
            metadata={"order_id": str(order.id), "cart_id": str(cart.id)},
        )
        order.attach_intent(intent.id)

        if resolved.is_new:
            current_domain.repository_for(Cart).add(cart)
        orders.add(order)

        logger.info(
            "payment_intent_created",
            order_id=str(order.id),
            cart_id=str(cart.id),
            payment_intent_id=intent.id,
            amount=intent.amount,
            cart_strategy=resolved.strategy,
        )
        return {
            "client_secret": intent.client_secret,
            "payment_intent_id": intent.id,
            "order_id": str(order.id),
            "cart_id": str(cart.id),
            "amount": intent.amount,
            "tax": float(tax),
            "total_with_tax": float(total),
        }
