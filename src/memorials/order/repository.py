from memorials.domain import memorials
from memorials.order.order import Order


@memorials.repository(part_of=Order)
class OrderRepository:
    def find(self, order_id: str) -> Order | None:
        return self._dao.query.filter(id=order_id).all().first

    def find_by_intent(self, payment_intent_id: str) -> Order | None:
        return self._dao.query.filter(payment_intent_id=payment_intent_id).all().first

    def find_by_cart(self, cart_id: str) -> Order | None:
        """The most recent order opened for ``cart_id``."""
        return self._dao.query.filter(cart_id=cart_id).order_by("-created_at").all().first

    def for_user(self, user_id: str) -> list[Order]:
        return self._dao.query.filter(user_id=user_id).order_by("-created_at").limit(200).all().items

    def page(self, page: int, limit: int):
        """Every order, newest first, for the back office. Returns the ResultSet."""
        return self._dao.query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
