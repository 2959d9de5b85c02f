"""Tribute aggregate — longer remembrances with photos and videos, always moderated."""

import json
from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Identifier, String, Text

from memorials.domain import memorials

DEFAULT_INITIAL = "G"


def initial_for(name: str | None) -> str:
    name = (name or "").strip()
    return name[0].upper() if name else DEFAULT_INITIAL


@memorials.aggregate
class Tribute:
    obituary_id: Identifier(required=True)
    name: String(required=True, max_length=150)
    email: String(max_length=254)
    message: Text(required=True)
    initial: String(max_length=1, default=DEFAULT_INITIAL)
    is_approved: Boolean(default=False)
    photos: Text()  # JSON array of URLs
    videos: Text()  # JSON array of URLs
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, obituary_id, name, message, email=None, photos=None, videos=None):
        now = datetime.now(UTC)
        return cls(
            obituary_id=obituary_id,
            name=name.strip(),
            email=email.strip().lower() if email else None,
            message=message,
            initial=initial_for(name),
            is_approved=False,
            photos=json.dumps(photos or []),
            videos=json.dumps(videos or []),
            created_at=now,
            updated_at=now,
        )

    def edit(self, name=None, email=None, message=None, photos=None, videos=None):
        if name is not None:
            self.name = name.strip()
            self.initial = initial_for(name)
        if email is not None:
            self.email = email.strip().lower()
        if message is not None:
            self.message = message
        if photos is not None:
            self.photos = json.dumps(photos)
        if videos is not None:
            self.videos = json.dumps(videos)
        self.updated_at = datetime.now(UTC)

    def approve(self):
        self.is_approved = True
        self.updated_at = datetime.now(UTC)

    def photo_list(self) -> list[str]:
        return json.loads(self.photos) if self.photos else []

    def video_list(self) -> list[str]:
        return json.loads(self.videos) if self.videos else []
