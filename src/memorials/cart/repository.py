from memorials.cart.cart import Cart
from memorials.domain import memorials


@memorials.repository(part_of=Cart)
class CartRepository:
    def find(self, cart_id: str) -> Cart | None:
        return self._dao.query.filter(id=cart_id).all().first

    def latest_for_user(self, user_id: str) -> Cart | None:
        """The user's most recently created cart that still has live items."""
        carts = self._dao.query.filter(user_id=user_id).order_by("-created_at").limit(20).all().items
        return next((c for c in carts if not c.is_empty), None)
