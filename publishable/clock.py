from datetime import date, datetime, time, timezone

from publishable.column_kind import ColumnKind

Moment = date | datetime


def now(aware: bool = False) -> datetime:
    """
    Current UTC time.

    Naive unless `aware` is set, to match what a DateTime() column stores.
    """

    current = datetime.now(timezone.utc)
    return current if aware else current.replace(tzinfo=None)


def today() -> date:
    return now().date()


def current(kind: ColumnKind, aware: bool = False) -> Moment | None:
    if kind is ColumnKind.DATE:
        return today()
    elif kind is ColumnKind.DATETIME:
        return now(aware)
    else:
        return None


def to_utc(moment: datetime, aware: bool = False) -> datetime:
    """
    Express `moment` in UTC, naive unless `aware` is set.

    Naive moments are taken to be in UTC already.
    """

    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
        return moment if aware else moment.replace(tzinfo=None)

    return moment.replace(tzinfo=timezone.utc) if aware else moment


def comparable(value: Moment) -> Moment:
    """
    Datetimes as naive UTC, so stored values and moments compare whatever
    the driver gave back. Dates are left alone.
    """

    if isinstance(value, datetime):
        return to_utc(value)
    return value


def normalize(at: Moment | None, kind: ColumnKind, aware: bool = False) -> Moment | None:
    """
    Make `at` comparable with the values of a column of the given kind.

    None means "right now" and is resolved here, once per call. Datetimes
    are converted to UTC, matching how the column stores them.
    """

    if kind is ColumnKind.BOOLEAN:
        return None

    if at is None:
        return current(kind, aware)

    # datetime is a subclass of date, check it first.
    if isinstance(at, datetime):
        at = to_utc(at, aware)
        return at.date() if kind is ColumnKind.DATE else at
    elif isinstance(at, date):
        if kind is ColumnKind.DATE:
            return at
        return to_utc(datetime.combine(at, time.min), aware)
    else:
        raise TypeError(f"Expected a date or a datetime, got {type(at).__name__}")
