"""Product creation — command and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from memorials.domain import memorials
from memorials.product.product import Product, ProductType
from memorials.shared.slug import slugify, unique_slug


@memorials.command(part_of="Product")
class CreateProduct:
    sku: String(required=True, max_length=50)
    name: String(required=True, max_length=255)
    product_type: String(choices=ProductType, default=ProductType.TREE.value)
    slug: String(max_length=255)
    description: Text()
    highlights: Text()  # JSON array of strings
    images: Text()  # JSON array of URLs
    variants: Text()  # JSON array of {name, price, quantity, compare_at_price, sku, is_default, is_active}
    taxable: Boolean(default=False)
    brand_id: Identifier()
    stock_quantity: Integer(default=0)


@memorials.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        repo = current_domain.repository_for(Product)

        if repo.by_sku(command.sku) is not None:
            raise ValidationError({"sku": [f"A product with SKU '{command.sku}' already exists"]})

        product = Product.create(
            sku=command.sku,
            name=command.name,
            product_type=command.product_type,
            slug=unique_slug(command.slug or slugify(command.name), repo.slug_taken),
            description=command.description,
            highlights=json.loads(command.highlights) if command.highlights else None,
            images=json.loads(command.images) if command.images else None,
            taxable=command.taxable,
            brand_id=command.brand_id,
            stock_quantity=command.stock_quantity,
            variants=json.loads(command.variants) if command.variants else None,
        )
        repo.add(product)
        return str(product.id)
