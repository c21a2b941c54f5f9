"""Tests for ride field rules."""

from datetime import timedelta, timezone, datetime

import pytest

from modules.rides.exceptions import InvalidDepartureError, InvalidRideFieldError
from modules.rides.validation import RideRules

from tests.conftest import START, make_settings


@pytest.fixture
def rules():
    return RideRules(make_settings())


class TestDeparture:
    def test_more_than_an_hour_ahead(self, rules):
        departure = START + timedelta(minutes=90)
        assert rules.departure(departure, START) == departure

    @pytest.mark.parametrize("lead", [timedelta(minutes=30), timedelta(hours=1), timedelta(hours=-1)])
    def test_too_soon(self, rules, lead):
        with pytest.raises(InvalidDepartureError):
            rules.departure(START + lead, START)

    def test_one_microsecond_past_boundary(self, rules):
        rules.departure(START + timedelta(hours=1, microseconds=1), START)

    def test_missing(self, rules):
        with pytest.raises(InvalidRideFieldError) as exc_info:
            rules.departure(None, START)
        assert exc_info.value.details["field"] == "departure_time"

    def test_converted_to_utc(self, rules):
        eastern = timezone(timedelta(hours=-5))
        local = datetime(2025, 1, 6, 10, 0, tzinfo=eastern)  # 15:00 UTC
        assert rules.departure(local, START).tzinfo == timezone.utc


class TestLocation:
    def test_minimum_length(self, rules):
        with pytest.raises(InvalidRideFieldError, match="Start location"):
            rules.location("start_location", "ab")
        assert rules.location("start_location", "abc") == "abc"

    def test_whitespace_is_trimmed_before_checking(self, rules):
        with pytest.raises(InvalidRideFieldError):
            rules.location("destination", "  ab  ")
        assert rules.location("destination", "  DC Library ") == "DC Library"

    def test_missing(self, rules):
        with pytest.raises(InvalidRideFieldError):
            rules.location("destination", None)


class TestNotes:
    def test_optional(self, rules):
        assert rules.notes(None) == ""

    def test_trimmed(self, rules):
        assert rules.notes("  two seats  ") == "two seats"

    def test_maximum_length(self, rules):
        assert len(rules.notes("x" * 500)) == 500
        with pytest.raises(InvalidRideFieldError) as exc_info:
            rules.notes("x" * 501)
        assert exc_info.value.details["field"] == "notes"
