from memorials.condolence.condolence import Condolence
from memorials.domain import memorials

OBITUARY_LIMIT = 500


@memorials.repository(part_of=Condolence)
class CondolenceRepository:
    def for_obituary(self, obituary_id: str, include_private: bool = False) -> list[Condolence]:
        """Approved condolences for an obituary, newest first."""
        criteria = {"obituary_id": obituary_id, "is_approved": True}
        if not include_private:
            criteria["is_private"] = False
        return self._dao.query.filter(**criteria).order_by("-created_at").limit(OBITUARY_LIMIT).all().items

    def for_order(self, order_id: str) -> Condolence | None:
        return self._dao.query.filter(order_id=order_id).all().first

    def page(self, page: int, limit: int):
        return self._dao.query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()

    def stats(self, obituary_id: str) -> dict[str, int]:
        """Counts over every condolence left for the obituary, approved or not."""
        condolences = self._dao.query.filter(obituary_id=obituary_id)
        total = condolences.count()
        private = condolences.filter(is_private=True).count()
        return {
            "total": total,
            "with_candles": condolences.filter(has_candle=True).count(),
            "private": private,
            "public": total - private,
        }
