from protean.exceptions import ObjectNotFoundError

from memorials.domain import memorials
from memorials.product.product import MEMORIAL_TYPES, Product

LISTING_LIMIT = 500


@memorials.repository(part_of=Product)
class ProductRepository:
    def by_sku(self, sku: str) -> Product | None:
        return self._dao.query.filter(sku=sku).all().first

    def by_slug(self, slug: str) -> Product | None:
        return self._dao.query.filter(slug=slug).all().first

    def slug_taken(self, slug: str) -> bool:
        return self.by_slug(slug) is not None

    def active_by_slug(self, slug: str) -> Product:
        product = self.by_slug(slug)
        if product is None or not product.is_active:
            raise ObjectNotFoundError(f"Product `{slug}` not found")
        return product

    def find(self, product_id: str) -> Product | None:
        """Like ``get`` but returns None for unknown ids."""
        return self._dao.query.filter(id=product_id).all().first

    def memorial_products(self, product_type: str | None = None) -> list[Product]:
        """Active memorial products, newest first; all memorial types unless one is given."""
        types = [product_type] if product_type else sorted(MEMORIAL_TYPES)
        return (
            self._dao.query.filter(is_active=True, product_type__in=types)
            .order_by("-created_at")
            .limit(LISTING_LIMIT)
            .all()
            .items
        )

    def search_by_name(self, term: str) -> list[Product]:
        return self._dao.query.filter(is_active=True, name__icontains=term).order_by("name").limit(LISTING_LIMIT).all().items
