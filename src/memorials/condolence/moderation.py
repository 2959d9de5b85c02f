"""Condolence moderation — edit, approve/reject and delete."""

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from memorials.condolence.condolence import Condolence
from memorials.domain import memorials


@memorials.command(part_of="Condolence")
class UpdateCondolence:
    condolence_id: Identifier(required=True)
    name: String(max_length=150)
    email: String(max_length=254)
    message: Text()
    is_private: Boolean()
    has_candle: Boolean()
    is_approved: Boolean()


@memorials.command(part_of="Condolence")
class DeleteCondolence:
    condolence_id: Identifier(required=True)


@memorials.command_handler(part_of=Condolence)
class ModerateCondolenceHandler:
    @handle(UpdateCondolence)
    def update(self, command):
        repo = current_domain.repository_for(Condolence)
        condolence = repo.get(command.condolence_id)
        condolence.edit(
            name=command.name,
            email=command.email,
            message=command.message,
            is_private=command.is_private,
            has_candle=command.has_candle,
        )
        if command.is_approved is True:
            condolence.approve()
        elif command.is_approved is False:
            condolence.reject()
        repo.add(condolence)

    @handle(DeleteCondolence)
    def delete(self, command):
        repo = current_domain.repository_for(Condolence)
        repo._dao.delete(repo.get(command.condolence_id))
