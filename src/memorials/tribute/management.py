"""Tribute management — commands and handler."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from memorials.domain import memorials
from memorials.obituary.obituary import Obituary
from memorials.tribute.tribute import Tribute


def _urls(value):
    return json.loads(value) if value else None


@memorials.command(part_of="Tribute")
class CreateTribute:
    obituary_id: Identifier(required=True)
    name: String(required=True, max_length=150)
    email: String(max_length=254)
    message: Text(required=True)
    photos: Text()  # JSON array of URLs
    videos: Text()  # JSON array of URLs


@memorials.command(part_of="Tribute")
class UpdateTribute:
    tribute_id: Identifier(required=True)
    name: String(max_length=150)
    email: String(max_length=254)
    message: Text()
    photos: Text()
    videos: Text()


@memorials.command(part_of="Tribute")
class ApproveTribute:
    tribute_id: Identifier(required=True)


@memorials.command(part_of="Tribute")
class DeleteTribute:
    tribute_id: Identifier(required=True)


@memorials.command_handler(part_of=Tribute)
class ManageTributeHandler:
    @handle(CreateTribute)
    def create(self, command):
        current_domain.repository_for(Obituary).get(command.obituary_id)

        tribute = Tribute.create(
            obituary_id=command.obituary_id,
            name=command.name,
            message=command.message,
            email=command.email,
            photos=_urls(command.photos),
            videos=_urls(command.videos),
        )
        current_domain.repository_for(Tribute).add(tribute)
        return str(tribute.id)

    @handle(UpdateTribute)
    def update(self, command):
        repo = current_domain.repository_for(Tribute)
        tribute = repo.get(command.tribute_id)
        tribute.edit(
            name=command.name,
            email=command.email,
            message=command.message,
            photos=_urls(command.photos),
            videos=_urls(command.videos),
        )
        repo.add(tribute)

    @handle(ApproveTribute)
    def approve(self, command):
        repo = current_domain.repository_for(Tribute)
        tribute = repo.get(command.tribute_id)
        tribute.approve()
        repo.add(tribute)

    @handle(DeleteTribute)
    def delete(self, command):
        repo = current_domain.repository_for(Tribute)
        repo._dao.delete(repo.get(command.tribute_id))
