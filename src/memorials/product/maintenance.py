"""Catalogue maintenance: details, variants, availability, stock corrections and removal."""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from memorials.domain import memorials
from memorials.product.product import Product


@memorials.command(part_of="Product")
class UpdateProductDetails:
    product_id: Identifier(required=True)
    name: String(max_length=255)
    description: Text()
    highlights: Text()
    images: Text()
    taxable: Boolean()
    brand_id: Identifier()


@memorials.command(part_of="Product")
class AddVariant:
    product_id: Identifier(required=True)
    name: String(required=True, max_length=100)
    price: Float(required=True, min_value=0.0)
    quantity: String(max_length=100)
    compare_at_price: Float(min_value=0.0)
    sku: String(max_length=50)
    is_default: Boolean(default=False)


@memorials.command(part_of="Product")
class ActivateProduct:
    product_id: Identifier(required=True)


@memorials.command(part_of="Product")
class DeactivateProduct:
    product_id: Identifier(required=True)


@memorials.command(part_of="Product")
class AdjustStock:
    """Manual stock correction (restock, shrinkage)."""

    product_id: Identifier(required=True)
    delta: Integer(required=True)
    reason: String(max_length=100, default="manual_adjustment")


@memorials.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


@memorials.command_handler(part_of=Product)
class ProductMaintenanceHandler:
    @handle(UpdateProductDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            name=command.name,
            description=command.description,
            highlights=json.loads(command.highlights) if command.highlights else None,
            images=json.loads(command.images) if command.images else None,
            taxable=command.taxable,
            brand_id=command.brand_id,
        )
        repo.add(product)

    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        variant = product.add_variant(
            name=command.name,
            price=command.price,
            quantity=command.quantity,
            compare_at_price=command.compare_at_price,
            sku=command.sku,
            is_default=command.is_default,
        )
        repo.add(product)
        return str(variant.id)

    @handle(ActivateProduct)
    def activate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.activate()
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.adjust_stock(command.delta, reason=command.reason)
        repo.add(product)
        return product.stock_quantity

    @handle(DeleteProduct)
    def delete(self, command):
        """Remove the product from the catalogue. Orders keep their own cart snapshots."""
        repo = current_domain.repository_for(Product)
        repo._dao.delete(repo.get(command.product_id))
