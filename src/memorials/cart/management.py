"""Cart management — commands and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from memorials.cart.builder import RequestedItem, add_requested_item
from memorials.cart.cart import Cart
from memorials.domain import memorials


@memorials.command(part_of="Cart")
class CreateCart:
    user_id: Identifier()
    products: Text(required=True)  # JSON: list of {product_id, quantity, variant_name?, price?}


@memorials.command(part_of="Cart")
class AddCartItem:
    cart_id: Identifier(required=True)
    product_id: Identifier(required=True)
    quantity: Integer(default=1, min_value=1)
    variant_name: String(max_length=100)
    price: Float(min_value=0.0)


@memorials.command(part_of="Cart")
class RemoveCartItem:
    cart_id: Identifier(required=True)
    product_id: Identifier(required=True)


@memorials.command(part_of="Cart")
class DeleteCart:
    cart_id: Identifier(required=True)


@memorials.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(user_id=command.user_id)
        for entry in json.loads(command.products):
            add_requested_item(cart, RequestedItem.from_dict(entry))

        if cart.is_empty:
            raise ValidationError({"products": ["None of the requested products are available"]})

        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(AddCartItem)
    def add_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)

        requested = RequestedItem(
            product_id=command.product_id,
            quantity=command.quantity,
            price=command.price,
            variant_name=command.variant_name,
        )
        if not add_requested_item(cart, requested):
            raise ValidationError({"product_id": [f"Product {command.product_id} is not available"]})

        repo.add(cart)

    @handle(RemoveCartItem)
    def remove_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.remove_product(command.product_id)
        repo.add(cart)

    @handle(DeleteCart)
    def delete_cart(self, command):
        repo = current_domain.repository_for(Cart)
        repo._dao.delete(repo.get(command.cart_id))
