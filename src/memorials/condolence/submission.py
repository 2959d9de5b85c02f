"""Condolence submission — command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from memorials.condolence.condolence import Condolence
from memorials.domain import memorials
from memorials.obituary.obituary import Obituary


@memorials.command(part_of="Condolence")
class SubmitCondolence:
    obituary_id: Identifier(required=True)
    name: String(required=True, max_length=150)
    email: String(max_length=254)
    message: Text(required=True)
    is_private: Boolean(default=False)
    has_candle: Boolean(default=False)
    gesture_id: String(max_length=100)
    gesture_description: String(max_length=500)


@memorials.command_handler(part_of=Condolence)
class SubmitCondolenceHandler:
    @handle(SubmitCondolence)
    def submit(self, command):
        # Raises ObjectNotFoundError for an unknown obituary
        current_domain.repository_for(Obituary).get(command.obituary_id)

        condolence = Condolence.submit(
            obituary_id=command.obituary_id,
            name=command.name,
            message=command.message,
            email=command.email,
            is_private=command.is_private,
            has_candle=command.has_candle,
            gesture_id=command.gesture_id,
            gesture_description=command.gesture_description,
        )
        current_domain.repository_for(Condolence).add(condolence)
        return str(condolence.id)
