"""Application tests for obituary commands and listings."""

from datetime import date

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from memorials.obituary.management import CreateObituary, DeleteObituary, UpdateObituary
from memorials.obituary.obituary import Obituary


def _create(**kwargs):
    return current_domain.process(CreateObituary(**kwargs), asynchronous=False)


def _repo():
    return current_domain.repository_for(Obituary)


class TestCreateObituary:
    def test_slug_and_age_are_derived(self):
        obituary_id = _create(
            first_name="Walter",
            middle_name="James",
            last_name="Okafor",
            birth_date=date(1950, 6, 1),
            death_date=date(2025, 1, 9),
        )

        obituary = _repo().get(obituary_id)
        assert obituary.slug == "walter-james-okafor"
        assert obituary.age == 74
        assert obituary.location == "Unknown"
        assert obituary.is_published is True

    def test_clashing_slug_gets_a_suffix(self, obituary):
        obituary_id = _create(first_name="Margaret", last_name="Hale")

        assert _repo().get(obituary_id).slug == "margaret-hale-2"


class TestUpdateObituary:
    def test_changing_dates_recomputes_age(self, obituary):
        current_domain.process(
            UpdateObituary(obituary_id=str(obituary.id), birth_date=date(1951, 3, 2)), asynchronous=False
        )

        assert _repo().get(obituary.id).age == 73

    def test_death_before_birth_is_rejected(self, obituary):
        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                UpdateObituary(obituary_id=str(obituary.id), death_date=date(1940, 1, 1)), asynchronous=False
            )

        assert "death_date" in exc.value.messages

    def test_renaming_to_a_taken_slug_is_rejected(self, obituary):
        other_id = _create(first_name="Ruth", last_name="Alder")

        with pytest.raises(ValidationError) as exc:
            current_domain.process(UpdateObituary(obituary_id=other_id, slug="margaret-hale"), asynchronous=False)

        assert "slug" in exc.value.messages

    def test_unpublishing_hides_the_page(self, obituary):
        current_domain.process(UpdateObituary(obituary_id=str(obituary.id), is_published=False), asynchronous=False)

        with pytest.raises(ObjectNotFoundError):
            _repo().published_by_slug_or_id("margaret-hale")


class TestDeleteObituary:
    def test_removes_the_record(self, obituary):
        current_domain.process(DeleteObituary(obituary_id=str(obituary.id)), asynchronous=False)

        assert _repo().by_slug("margaret-hale") is None

    def test_unknown_id(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(DeleteObituary(obituary_id="missing"), asynchronous=False)


class TestObituaryListings:
    @pytest.fixture()
    def several(self, obituary):
        _create(first_name="Ruth", last_name="Alder", death_date=date(2025, 2, 1), location="Salem, Oregon")
        _create(first_name="Tom", last_name="Birch", death_date=date(2023, 5, 5))
        _create(first_name="Hidden", last_name="Person", death_date=date(2025, 3, 1), is_published=False)

    def test_recent_is_newest_death_first(self, several):
        names = [o.first_name for o in _repo().recent()]

        assert names == ["Ruth", "Margaret", "Tom"]

    def test_search_matches_names_and_location(self, several):
        assert [o.first_name for o in _repo().search("oregon")] == ["Ruth", "Margaret"]
        assert [o.first_name for o in _repo().search("BIRCH")] == ["Tom"]
        assert _repo().search("person") == []

    def test_undated_deaths_come_last(self, several):
        _create(first_name="Undated", last_name="Oak")

        assert [o.first_name for o in _repo().recent()][-1] == "Undated"

    def test_search_orders_before_limiting(self):
        for year in range(1950, 2005):
            _create(first_name=f"Rowan{year}", last_name="Smith", death_date=date(year, 1, 1))

        matches = _repo().search("smith")

        assert len(matches) == 50
        assert matches[0].death_date == date(2004, 1, 1)
        assert matches[-1].death_date == date(1955, 1, 1)

    def test_recent_orders_before_limiting(self):
        for year in range(1990, 2010):
            _create(first_name=f"Rowan{year}", last_name="Ash", death_date=date(year, 6, 1))

        assert [o.death_date.year for o in _repo().recent(limit=3)] == [2009, 2008, 2007]

    def test_published_page(self, several):
        first = _repo().published_page(page=1, limit=2)
        second = _repo().published_page(page=2, limit=2)

        assert first.total == 3
        assert len(first.items) == 2
        assert len(second.items) == 1

    def test_lookup_by_slug_or_id(self, obituary):
        assert _repo().published_by_slug_or_id("margaret-hale").id == obituary.id
        assert _repo().published_by_slug_or_id(str(obituary.id)).slug == "margaret-hale"
