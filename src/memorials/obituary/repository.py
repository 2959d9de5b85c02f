"""Read-side queries over published obituaries."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.query import Q

from memorials.domain import memorials
from memorials.obituary.obituary import Obituary

RECENT_LIMIT = 12
SEARCH_LIMIT = 50


def newest_death_first(query, limit: int) -> list[Obituary]:
    """Order by date of death, newest first, before limiting. Undated deaths come last."""
    dated = query.filter(death_date__isnull=False).order_by("-death_date").limit(limit).all().items
    if len(dated) < limit:
        undated = query.filter(death_date__isnull=True).order_by("-created_at").limit(limit - len(dated))
        dated = dated + undated.all().items
    return dated


@memorials.repository(part_of=Obituary)
class ObituaryRepository:
    def recent(self, limit: int = RECENT_LIMIT) -> list[Obituary]:
        return newest_death_first(self._dao.query.filter(is_published=True), limit)

    def search(self, term: str, limit: int = SEARCH_LIMIT) -> list[Obituary]:
        """Case-insensitive match on any name part or the location."""
        condition = (
            Q(first_name__icontains=term)
            | Q(middle_name__icontains=term)
            | Q(last_name__icontains=term)
            | Q(location__icontains=term)
        )
        return newest_death_first(self._dao.query.filter(condition, is_published=True), limit)

    def published_page(self, page: int, limit: int):
        """One page of published obituaries, most recently added first. Returns the ResultSet."""
        return (
            self._dao.query.filter(is_published=True)
            .order_by("-created_at")
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

    def by_slug(self, slug: str) -> Obituary | None:
        return self._dao.query.filter(slug=slug).all().first

    def slug_taken(self, slug: str) -> bool:
        return self.by_slug(slug) is not None

    def published_by_slug_or_id(self, slug_or_id: str) -> Obituary:
        obituary = self.by_slug(slug_or_id)
        if obituary is None:
            obituary = self._dao.query.filter(id=slug_or_id).all().first
        if obituary is None or not obituary.is_published:
            raise ObjectNotFoundError(f"Obituary `{slug_or_id}` not found")
        return obituary
