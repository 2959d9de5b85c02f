"""Application tests for visitor condolences."""

import pytest
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from memorials.condolence.condolence import Condolence
from memorials.condolence.moderation import DeleteCondolence, UpdateCondolence
from memorials.condolence.repository import OBITUARY_LIMIT
from memorials.condolence.submission import SubmitCondolence


def _submit(obituary, **kwargs):
    kwargs.setdefault("name", "Ellen Park")
    kwargs.setdefault("message", "Margaret taught half this town to read.")
    return current_domain.process(SubmitCondolence(obituary_id=str(obituary.id), **kwargs), asynchronous=False)


def _approve(condolence_id):
    current_domain.process(UpdateCondolence(condolence_id=condolence_id, is_approved=True), asynchronous=False)


def _repo():
    return current_domain.repository_for(Condolence)


class TestSubmitCondolence:
    def test_held_for_moderation(self, obituary):
        condolence_id = _submit(obituary, email=" Ellen@Example.com ")

        condolence = _repo().get(condolence_id)
        assert condolence.is_approved is False
        assert condolence.condolence_type == "message"
        assert condolence.email == "ellen@example.com"
        assert _repo().for_obituary(str(obituary.id)) == []

    def test_unknown_obituary(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                SubmitCondolence(obituary_id="missing", name="Ellen", message="Thinking of you"),
                asynchronous=False,
            )


class TestModeration:
    def test_approved_condolences_are_listed(self, obituary):
        condolence_id = _submit(obituary)
        _approve(condolence_id)

        assert [str(c.id) for c in _repo().for_obituary(str(obituary.id))] == [condolence_id]

    def test_private_condolences_need_include_private(self, obituary):
        condolence_id = _submit(obituary, is_private=True)
        _approve(condolence_id)

        assert _repo().for_obituary(str(obituary.id)) == []
        assert len(_repo().for_obituary(str(obituary.id), include_private=True)) == 1

    def test_rejecting_hides_it_again(self, obituary):
        condolence_id = _submit(obituary)
        _approve(condolence_id)

        current_domain.process(UpdateCondolence(condolence_id=condolence_id, is_approved=False), asynchronous=False)

        assert _repo().for_obituary(str(obituary.id)) == []

    def test_edit_message(self, obituary):
        condolence_id = _submit(obituary)

        current_domain.process(
            UpdateCondolence(condolence_id=condolence_id, message="With love, the Park family"), asynchronous=False
        )

        assert _repo().get(condolence_id).message == "With love, the Park family"

    def test_delete(self, obituary):
        condolence_id = _submit(obituary)

        current_domain.process(DeleteCondolence(condolence_id=condolence_id), asynchronous=False)

        with pytest.raises(ObjectNotFoundError):
            _repo().get(condolence_id)


class TestStats:
    def test_counts_every_condolence(self, obituary):
        _submit(obituary, has_candle=True)
        _submit(obituary, is_private=True, has_candle=True)
        _submit(obituary)

        assert _repo().stats(str(obituary.id)) == {"total": 3, "with_candles": 2, "private": 1, "public": 2}

    @pytest.mark.slow
    def test_counts_past_the_listing_limit(self, obituary):
        for i in range(OBITUARY_LIMIT + 5):
            _submit(obituary, is_private=(i % 5 == 0), has_candle=(i % 2 == 0))

        assert _repo().stats(str(obituary.id)) == {"total": 505, "with_candles": 253, "private": 101, "public": 404}

    def test_page(self, obituary):
        for _ in range(3):
            _submit(obituary)

        result = _repo().page(page=1, limit=2)
        assert result.total == 3
        assert len(result.items) == 2
