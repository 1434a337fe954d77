from enum import Enum

from sqlalchemy import Boolean, Date, DateTime
from sqlalchemy.types import TypeDecorator, TypeEngine


class ColumnKind(Enum):
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"

    @property
    def is_temporal(self) -> bool:
        return self is not ColumnKind.BOOLEAN


def column_kind(type_: TypeEngine) -> ColumnKind | None:
    """
    Map a SQLAlchemy column type to the kind of publish column it can carry.

    Custom types built with TypeDecorator are judged by the type they wrap.
    Returns None for types that can't carry a publish state.
    """

    type_ = _unwrap(type_)

    # Date and DateTime are unrelated classes, but TIMESTAMP subclasses DateTime.
    if isinstance(type_, DateTime):
        return ColumnKind.DATETIME
    elif isinstance(type_, Date):
        return ColumnKind.DATE
    elif isinstance(type_, Boolean):
        return ColumnKind.BOOLEAN
    else:
        return None


def is_timezone_aware(type_: TypeEngine) -> bool:
    return bool(getattr(_unwrap(type_), "timezone", False))


def _unwrap(type_: TypeEngine) -> TypeEngine:
    while isinstance(type_, TypeDecorator):
        type_ = type_.impl
    return type_
