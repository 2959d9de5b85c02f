"""Application tests for tributes."""

import json

import pytest
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from memorials.tribute.management import ApproveTribute, CreateTribute, DeleteTribute, UpdateTribute
from memorials.tribute.tribute import Tribute


def _create(obituary, **kwargs):
    kwargs.setdefault("name", "sam reyes")
    kwargs.setdefault("message", "Forty years of Sunday dinners.")
    return current_domain.process(CreateTribute(obituary_id=str(obituary.id), **kwargs), asynchronous=False)


def _repo():
    return current_domain.repository_for(Tribute)


def test_new_tributes_wait_for_approval(obituary):
    tribute_id = _create(obituary, photos=json.dumps(["https://cdn.example.com/1.jpg"]))

    tribute = _repo().get(tribute_id)
    assert tribute.initial == "S"
    assert tribute.photo_list() == ["https://cdn.example.com/1.jpg"]
    assert tribute.video_list() == []
    assert _repo().approved_for_obituary(str(obituary.id)) == []


def test_approved_tributes_are_listed(obituary):
    tribute_id = _create(obituary)

    current_domain.process(ApproveTribute(tribute_id=tribute_id), asynchronous=False)

    assert [str(t.id) for t in _repo().approved_for_obituary(str(obituary.id))] == [tribute_id]


def test_update_replaces_media(obituary):
    tribute_id = _create(obituary, photos=json.dumps(["https://cdn.example.com/1.jpg"]))

    current_domain.process(
        UpdateTribute(tribute_id=tribute_id, name="Alex Reyes", videos=json.dumps(["https://video.example.com/v"])),
        asynchronous=False,
    )

    tribute = _repo().get(tribute_id)
    assert tribute.initial == "A"
    assert tribute.photo_list() == ["https://cdn.example.com/1.jpg"]
    assert tribute.video_list() == ["https://video.example.com/v"]


def test_delete(obituary):
    tribute_id = _create(obituary)

    current_domain.process(DeleteTribute(tribute_id=tribute_id), asynchronous=False)

    with pytest.raises(ObjectNotFoundError):
        _repo().get(tribute_id)


def test_unknown_obituary():
    with pytest.raises(ObjectNotFoundError):
        current_domain.process(CreateTribute(obituary_id="missing", name="Sam", message="Hi"), asynchronous=False)
