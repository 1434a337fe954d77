from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import TIMESTAMP, Boolean, Date, DateTime, Integer, String
from sqlalchemy.types import TypeDecorator

from publishable import clock
from publishable.behaviour import behaviour_for, coerce_flag
from publishable.column_kind import ColumnKind, column_kind, is_timezone_aware


class UTCDateTime(TypeDecorator):
    impl = DateTime
    cache_ok = True


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, True),
        (False, False),
        (None, False),
        (1, True),
        (0, False),
        ("true", True),
        (" TRUE ", True),
        ("1", True),
        ("yes", True),
        ("false", False),
        ("0", False),
        ("off", False),
    ],
)
def test_coerce_flag(value, expected):
    assert coerce_flag(value) is expected


@pytest.mark.parametrize("value", ["maybe", "y", "", 2, -1, 1.5, object()])
def test_coerce_flag_rejects_garbage(value):
    with pytest.raises(ValueError):
        coerce_flag(value)


@pytest.mark.parametrize(
    "type_, expected",
    [
        (Boolean(), ColumnKind.BOOLEAN),
        (Date(), ColumnKind.DATE),
        (DateTime(), ColumnKind.DATETIME),
        (DateTime(timezone=True), ColumnKind.DATETIME),
        (TIMESTAMP(), ColumnKind.DATETIME),
        (UTCDateTime(), ColumnKind.DATETIME),
        (String(), None),
        (Integer(), None),
    ],
)
def test_column_kind(type_, expected):
    assert column_kind(type_) is expected


def test_is_timezone_aware():
    assert is_timezone_aware(DateTime(timezone=True))
    assert not is_timezone_aware(DateTime())
    assert not is_timezone_aware(Date())


def test_temporal_is_published_boundary_is_inclusive():
    behaviour = behaviour_for(ColumnKind.DATETIME)
    at = datetime(2024, 5, 1, 12, 0, 0)

    assert behaviour.is_published(at, at)
    assert behaviour.is_published(at - timedelta(seconds=1), at)
    assert not behaviour.is_published(at + timedelta(seconds=1), at)
    assert not behaviour.is_published(None, at)


def test_temporal_published_value_keeps_published_values():
    behaviour = behaviour_for(ColumnKind.DATE)
    earlier = date(2024, 1, 1)
    later = date(2024, 6, 1)

    # Already published on `later`, nothing changes
    assert behaviour.published_value(earlier, later) is earlier
    # Not published yet, the new moment wins
    assert behaviour.published_value(later, earlier) == earlier
    assert behaviour.published_value(None, earlier) == earlier


def test_boolean_behaviour_ignores_moments():
    behaviour = behaviour_for(ColumnKind.BOOLEAN)

    assert behaviour.is_published(True, None)
    assert not behaviour.is_published("false", datetime(2000, 1, 1))
    assert behaviour.published_value(False, None) is True
    assert behaviour.unpublished_value() is False


def test_normalize_resolves_now_once():
    before = clock.now()
    at = clock.normalize(None, ColumnKind.DATETIME)
    after = clock.now()

    assert before <= at <= after
    assert at.tzinfo is None
    assert clock.normalize(None, ColumnKind.DATETIME, aware=True).tzinfo is timezone.utc
    assert clock.normalize(None, ColumnKind.DATE) == clock.today()
    assert clock.normalize(None, ColumnKind.BOOLEAN) is None


def test_normalize_converts_between_dates_and_datetimes():
    at = datetime(2024, 5, 1, 12, 30)

    assert clock.normalize(at, ColumnKind.DATE) == date(2024, 5, 1)
    assert clock.normalize(date(2024, 5, 1), ColumnKind.DATETIME) == datetime(2024, 5, 1)
    assert clock.normalize(date(2024, 5, 1), ColumnKind.DATETIME, aware=True) == datetime(
        2024, 5, 1, tzinfo=timezone.utc
    )
    assert clock.normalize(at, ColumnKind.DATETIME) is at

    with pytest.raises(TypeError):
        clock.normalize("2024-05-01", ColumnKind.DATE)


def test_normalize_converts_aware_moments_to_utc():
    eastern = timezone(timedelta(hours=-5))
    at = datetime(2024, 5, 1, 7, 30, tzinfo=eastern)

    # Naive columns hold naive UTC
    assert clock.normalize(at, ColumnKind.DATETIME) == datetime(2024, 5, 1, 12, 30)
    assert clock.normalize(at, ColumnKind.DATETIME).tzinfo is None

    aware = clock.normalize(at, ColumnKind.DATETIME, aware=True)
    assert aware.tzinfo is timezone.utc
    assert aware == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    # Naive moments are already UTC
    assert clock.normalize(
        datetime(2024, 5, 1, 12, 30), ColumnKind.DATETIME, aware=True
    ) == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    # Late evening in UTC-05:00 is already the next day in UTC
    assert clock.normalize(
        datetime(2024, 5, 1, 22, 0, tzinfo=eastern), ColumnKind.DATE
    ) == date(2024, 5, 2)


def test_temporal_is_published_mixes_naive_and_aware_values():
    behaviour = behaviour_for(ColumnKind.DATETIME)
    naive = datetime(2024, 5, 1, 12, 0)
    aware = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    eastern = timezone(timedelta(hours=-5))

    assert behaviour.is_published(naive, aware)
    assert behaviour.is_published(aware, naive)
    assert behaviour.is_published(naive, datetime(2024, 5, 1, 7, 0, tzinfo=eastern))
    assert not behaviour.is_published(
        naive, datetime(2024, 5, 1, 6, 59, tzinfo=eastern)
    )
