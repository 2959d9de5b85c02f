from memorials.domain import memorials
from memorials.tribute.tribute import Tribute


@memorials.repository(part_of=Tribute)
class TributeRepository:
    def approved_for_obituary(self, obituary_id: str) -> list[Tribute]:
        return (
            self._dao.query.filter(obituary_id=obituary_id, is_approved=True)
            .order_by("-created_at")
            .limit(500)
            .all()
            .items
        )
