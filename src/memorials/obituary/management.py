"""Obituary management — commands and handler.

Create, edit, publish/unpublish and delete obituaries. Slugs are unique:
a clash on create gets a numeric suffix, a clash on an explicit rename is
rejected.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from memorials.domain import memorials
from memorials.obituary.obituary import Obituary
from memorials.shared.slug import slugify, unique_slug

_DETAIL_FIELDS = (
    "middle_name",
    "birth_date",
    "death_date",
    "age",
    "photo",
    "location",
    "biography",
    "video_url",
    "external_video",
    "embedded_video",
    "service_type",
    "service_date",
    "service_location",
    "floral_store_link",
    "tree_planting_link",
    "background_image",
)


@memorials.command(part_of="Obituary")
class CreateObituary:
    first_name: String(required=True, max_length=100)
    middle_name: String(max_length=100)
    last_name: String(required=True, max_length=100)
    birth_date: Date()
    death_date: Date()
    age: Integer(min_value=0)
    photo: String(max_length=500)
    location: String(max_length=255)
    biography: Text()
    video_url: String(max_length=500)
    external_video: String(max_length=500)
    embedded_video: Text()
    service_type: String(max_length=100)
    service_date: DateTime()
    service_location: String(max_length=255)
    floral_store_link: String(max_length=500)
    tree_planting_link: String(max_length=500)
    background_image: String(max_length=500)
    slug: String(max_length=255)
    is_published: Boolean(default=True)


@memorials.command(part_of="Obituary")
class UpdateObituary:
    obituary_id: Identifier(required=True)
    first_name: String(max_length=100)
    middle_name: String(max_length=100)
    last_name: String(max_length=100)
    birth_date: Date()
    death_date: Date()
    age: Integer(min_value=0)
    photo: String(max_length=500)
    location: String(max_length=255)
    biography: Text()
    video_url: String(max_length=500)
    external_video: String(max_length=500)
    embedded_video: Text()
    service_type: String(max_length=100)
    service_date: DateTime()
    service_location: String(max_length=255)
    floral_store_link: String(max_length=500)
    tree_planting_link: String(max_length=500)
    background_image: String(max_length=500)
    slug: String(max_length=255)
    is_published: Boolean()


@memorials.command(part_of="Obituary")
class DeleteObituary:
    obituary_id: Identifier(required=True)


@memorials.command_handler(part_of=Obituary)
class ManageObituaryHandler:
    @handle(CreateObituary)
    def create_obituary(self, command):
        repo = current_domain.repository_for(Obituary)

        base = command.slug or slugify(command.first_name, command.middle_name, command.last_name)
        obituary = Obituary.create(
            first_name=command.first_name,
            last_name=command.last_name,
            slug=unique_slug(base, repo.slug_taken),
            is_published=command.is_published,
            **{name: getattr(command, name) for name in _DETAIL_FIELDS},
        )
        repo.add(obituary)
        return str(obituary.id)

    @handle(UpdateObituary)
    def update_obituary(self, command):
        repo = current_domain.repository_for(Obituary)
        obituary = repo.get(command.obituary_id)

        if command.slug and command.slug != obituary.slug:
            existing = repo.by_slug(command.slug)
            if existing is not None and str(existing.id) != str(obituary.id):
                raise ValidationError({"slug": [f"Slug '{command.slug}' is already in use"]})

        obituary.update(
            first_name=command.first_name,
            last_name=command.last_name,
            slug=command.slug,
            **{name: getattr(command, name) for name in _DETAIL_FIELDS},
        )
        if command.is_published is True:
            obituary.publish()
        elif command.is_published is False:
            obituary.unpublish()

        repo.add(obituary)

    @handle(DeleteObituary)
    def delete_obituary(self, command):
        repo = current_domain.repository_for(Obituary)
        obituary = repo.get(command.obituary_id)
        repo._dao.delete(obituary)
