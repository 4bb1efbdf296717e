from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from venuebook.core.clock import FixedClock
from venuebook.core.config import Settings
from venuebook.core.timezone_utils import get_venue_timezone, hours_between, venue_local_to_utc


class TestFixedClock:
    def test_naive_instant_is_treated_as_utc(self) -> None:
        clock = FixedClock(datetime(2026, 3, 2, 12, 0))
        assert clock.now() == datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

    def test_today_depends_on_timezone(self) -> None:
        clock = FixedClock(datetime(2026, 3, 2, 3, 0, tzinfo=timezone.utc))
        assert clock.today("UTC") == date(2026, 3, 2)
        assert clock.today("America/New_York") == date(2026, 3, 1)

    def test_advance(self) -> None:
        clock = FixedClock(datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc))
        clock.advance(timedelta(hours=1))
        assert clock.now().hour == 13


class TestVenueTimezones:
    def test_local_to_utc_follows_daylight_saving(self) -> None:
        before = venue_local_to_utc(date(2026, 3, 4), time(7), "America/New_York")
        after = venue_local_to_utc(date(2026, 3, 10), time(7), "America/New_York")
        assert before == datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)
        assert after == datetime(2026, 3, 10, 11, 0, tzinfo=timezone.utc)

    def test_unknown_timezone_falls_back_to_default(self) -> None:
        assert get_venue_timezone("Mars/Olympus_Mons").zone == "America/New_York"
        assert get_venue_timezone(None).zone == "America/New_York"

    def test_hours_between_is_signed(self) -> None:
        start = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
        assert hours_between(start, start + timedelta(minutes=90)) == 1.5
        assert hours_between(start + timedelta(hours=2), start) == -2.0


class TestSettings:
    def test_invalid_log_level_defaults_to_info(self) -> None:
        assert Settings(LOG_LEVEL="loud").log_level == "INFO"
        assert Settings(LOG_LEVEL="debug").log_level == "DEBUG"

    def test_stripe_key_is_optional(self) -> None:
        assert Settings(STRIPE_SECRET_KEY="").stripe_api_key() is None
        assert Settings(STRIPE_SECRET_KEY="sk_test_1").stripe_api_key() == "sk_test_1"
