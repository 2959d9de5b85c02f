"""Product aggregate — memorial trees, flowers and gifts.

A product is sold through its variants (e.g. "Single Tree", "Grove of 5"),
each with its own price. The product-level ``stock_quantity`` is what
checkout decrements on payment and restores on refund or cancellation.
"""

import json
from datetime import UTC, datetime
from enum import Enum

import structlog
from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from memorials.domain import memorials
from memorials.product.events import ProductCreated, StockAdjusted
from memorials.shared.slug import slugify

logger = structlog.get_logger(__name__)


class ProductType(Enum):
    TREE = "tree"
    FLOWER = "flower"
    GIFT = "gift"


MEMORIAL_TYPES = frozenset(t.value for t in ProductType)


@memorials.entity(part_of="Product")
class Variant:
    name: String(required=True, max_length=100)
    quantity: String(max_length=100)  # descriptor, e.g. "1 tree", "Bouquet of 12"
    price: Float(required=True, min_value=0.0)
    compare_at_price: Float(min_value=0.0)
    sku: String(max_length=50)
    is_default: Boolean(default=False)
    is_active: Boolean(default=True)


@memorials.aggregate
class Product:
    sku: String(required=True, max_length=50)
    name: String(required=True, max_length=255)
    slug: String(required=True, max_length=255)
    product_type: String(choices=ProductType, default=ProductType.TREE.value)
    description: Text()
    highlights: Text()  # JSON array of strings
    images: Text()  # JSON array of URLs
    variants: HasMany(Variant)
    taxable: Boolean(default=False)
    brand_id: Identifier()
    is_active: Boolean(default=True)
    stock_quantity: Integer(default=0)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def at_most_one_default_variant(self):
        defaults = [v for v in self.variants or [] if v.is_default]
        if len(defaults) > 1:
            raise ValidationError({"variants": ["Only one variant can be marked as default"]})

    @invariant.post
    def variant_skus_must_be_unique(self):
        skus = [v.sku for v in self.variants or [] if v.sku]
        if len(skus) != len(set(skus)):
            raise ValidationError({"variants": ["Variant SKUs must be unique within a product"]})

    @classmethod
    def create(
        cls,
        sku,
        name,
        product_type=ProductType.TREE.value,
        slug=None,
        description=None,
        highlights=None,
        images=None,
        taxable=False,
        brand_id=None,
        stock_quantity=0,
        variants=None,
    ):
        now = datetime.now(UTC)
        product = cls(
            sku=sku,
            name=name,
            slug=slug or slugify(name),
            product_type=product_type,
            description=description,
            highlights=json.dumps(highlights or []),
            images=json.dumps(images or []),
            taxable=taxable,
            brand_id=brand_id,
            stock_quantity=stock_quantity,
            created_at=now,
            updated_at=now,
        )
        for variant_data in variants or []:
            product.add_variant(**variant_data)

        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                sku=sku,
                name=name,
                product_type=product.product_type,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def default_variant(self) -> Variant | None:
        active = [v for v in self.variants or [] if v.is_active]
        return next((v for v in active if v.is_default), active[0] if active else None)

    def variant_named(self, name: str | None) -> Variant | None:
        if not name:
            return None
        return next((v for v in self.variants or [] if v.is_active and v.name == name), None)

    def price_for(self, variant_name: str | None = None) -> float | None:
        """Current price of the named variant, else of the default one.

        None when the product has no active variant at all.
        """
        variant = self.variant_named(variant_name) or self.default_variant()
        return variant.price if variant else None

    # -------------------------------------------------------------------
    # Catalogue maintenance
    # -------------------------------------------------------------------
    def add_variant(self, name, price, quantity=None, compare_at_price=None, sku=None, is_default=False, is_active=True):
        if any(v.name == name for v in self.variants or []):
            raise ValidationError({"variants": [f"Variant '{name}' already exists"]})

        variant = Variant(
            name=name,
            quantity=quantity,
            price=price,
            compare_at_price=compare_at_price,
            sku=sku,
            is_default=is_default,
            is_active=is_active,
        )
        with atomic_change(self):
            if is_default:
                for existing in self.variants or []:
                    if existing.is_default:
                        existing.is_default = False
            self.add_variants(variant)
        self.updated_at = datetime.now(UTC)
        return variant

    def update_details(self, name=None, description=None, highlights=None, images=None, taxable=None, brand_id=None):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if highlights is not None:
            self.highlights = json.dumps(highlights)
        if images is not None:
            self.images = json.dumps(images)
        if taxable is not None:
            self.taxable = taxable
        if brand_id is not None:
            self.brand_id = brand_id
        self.updated_at = datetime.now(UTC)

    def activate(self):
        self.is_active = True
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def adjust_stock(self, delta: int, reason: str):
        """Move stock by ``delta`` (negative on sale, positive on restore).

        Stock may go below zero: the payment has already been taken when a
        sale is recorded, so an oversell is logged rather than refused.
        """
        previous = self.stock_quantity or 0
        self.stock_quantity = previous + delta
        self.updated_at = datetime.now(UTC)

        if self.stock_quantity < 0:
            logger.warning(
                "product_oversold",
                product_id=str(self.id),
                sku=self.sku,
                stock_quantity=self.stock_quantity,
            )

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                previous_quantity=previous,
                new_quantity=self.stock_quantity,
                delta=delta,
                reason=reason,
            )
        )

    def highlight_list(self) -> list[str]:
        return json.loads(self.highlights) if self.highlights else []

    def image_list(self) -> list[str]:
        return json.loads(self.images) if self.images else []
