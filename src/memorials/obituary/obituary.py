"""Obituary aggregate.

The page everything else hangs off: condolences, tributes and memorial
orders all reference an obituary. Unpublished obituaries stay in the store
but drop out of every public listing.
"""

from datetime import UTC, date, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, DateTime, Integer, String, Text

from memorials.domain import memorials
from memorials.shared.slug import slugify

DEFAULT_LOCATION = "Unknown"
DEFAULT_SERVICE_TYPE = "PRIVATE FAMILY SERVICE"
DAYS_PER_YEAR = 365.25


def age_between(birth_date: date, death_date: date) -> int:
    """Whole years between two dates, on a 365.25-day year."""
    return int((death_date - birth_date).days // DAYS_PER_YEAR)


@memorials.aggregate
class Obituary:
    first_name: String(required=True, max_length=100)
    middle_name: String(max_length=100, default="")
    last_name: String(required=True, max_length=100)
    birth_date: Date()
    death_date: Date()
    age: Integer(min_value=0)
    photo: String(max_length=500)
    location: String(max_length=255, default=DEFAULT_LOCATION)
    biography: Text()
    video_url: String(max_length=500)
    external_video: String(max_length=500)
    embedded_video: Text()
    service_type: String(max_length=100, default=DEFAULT_SERVICE_TYPE)
    service_date: DateTime()
    service_location: String(max_length=255)
    floral_store_link: String(max_length=500)
    tree_planting_link: String(max_length=500)
    background_image: String(max_length=500)
    slug: String(required=True, max_length=255)
    is_published: Boolean(default=True)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def death_cannot_precede_birth(self):
        if self.birth_date and self.death_date and self.death_date < self.birth_date:
            raise ValidationError({"death_date": ["Date of death cannot be before date of birth"]})

    @classmethod
    def create(cls, first_name, last_name, slug=None, **details):
        details = {name: value for name, value in details.items() if value is not None}
        now = datetime.now(UTC)
        obituary = cls(
            first_name=first_name,
            last_name=last_name,
            slug=slug or slugify(first_name, details.get("middle_name"), last_name),
            created_at=now,
            updated_at=now,
            **details,
        )
        obituary._derive_age()
        return obituary

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.middle_name, self.last_name) if p)

    def _derive_age(self):
        if self.age is None and self.birth_date and self.death_date and self.death_date >= self.birth_date:
            self.age = age_between(self.birth_date, self.death_date)

    def update(self, **changes):
        """Apply the given (non-None) field changes and refresh the derived age."""
        changes = {name: value for name, value in changes.items() if value is not None}
        with atomic_change(self):
            for name, value in changes.items():
                setattr(self, name, value)

            if "age" not in changes and changes.keys() & {"birth_date", "death_date"}:
                self.age = None
            self._derive_age()
        self.updated_at = datetime.now(UTC)

    def publish(self):
        self.is_published = True
        self.updated_at = datetime.now(UTC)

    def unpublish(self):
        self.is_published = False
        self.updated_at = datetime.now(UTC)
