from typing import Any, Protocol

from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql import ColumnElement

from publishable.clock import Moment, comparable
from publishable.column_kind import ColumnKind

_TRUTHY = frozenset(["true", "t", "1", "yes", "on"])
_FALSY = frozenset(["false", "f", "0", "no", "off"])


def coerce_flag(value: Any) -> bool:
    """
    Turn the loosely typed values a boolean column may hold before it's
    flushed ("1", "false", 0...) into a strict bool.
    """

    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUTHY:
            return True
        if normalized in _FALSY:
            return False

    raise ValueError(f"Can't interpret {value!r} as a boolean")


class PublishBehaviour(Protocol):
    """
    What "published" means for one kind of column.

    Moments are expected to be normalized already (see clock.normalize),
    behaviours never read the clock themselves.
    """

    kind: ColumnKind

    def is_published(self, value: Any, at: Moment | None) -> bool:
        ...

    def published_value(self, value: Any, at: Moment | None) -> Any:
        """
        The value the column should hold once published at `at`.
        """
        ...

    def unpublished_value(self) -> Any:
        ...

    def published_clause(self, column: Any, at: Moment | None) -> ColumnElement[bool]:
        ...

    def unpublished_clause(
        self, column: Any, at: Moment | None, include_unset: bool = True
    ) -> ColumnElement[bool]:
        """
        With `include_unset`, NULL rows count as unpublished like they do for
        is_published.
        """
        ...


class BooleanBehaviour(PublishBehaviour):
    kind = ColumnKind.BOOLEAN

    def is_published(self, value: Any, at: Moment | None) -> bool:
        return coerce_flag(value)

    def published_value(self, value: Any, at: Moment | None) -> bool:
        return True

    def unpublished_value(self) -> bool:
        return False

    def published_clause(self, column: Any, at: Moment | None) -> ColumnElement[bool]:
        return column == true()

    def unpublished_clause(
        self, column: Any, at: Moment | None, include_unset: bool = True
    ) -> ColumnElement[bool]:
        if include_unset:
            return or_(column.is_(None), column == false())
        return column == false()


class TemporalBehaviour(PublishBehaviour):
    """
    Date and datetime columns: published once the stored moment is reached.

    The boundary is inclusive, a value equal to `at` is published.
    """

    def __init__(self, kind: ColumnKind) -> None:
        assert kind.is_temporal
        self.kind = kind

    def __repr__(self) -> str:
        return f"TemporalBehaviour({self.kind.value})"

    def is_published(self, value: Any, at: Moment | None) -> bool:
        return value is not None and comparable(value) <= comparable(at)

    def published_value(self, value: Any, at: Moment | None) -> Any:
        return value if self.is_published(value, at) else at

    def unpublished_value(self) -> None:
        return None

    def published_clause(self, column: Any, at: Moment | None) -> ColumnElement[bool]:
        return and_(column.is_not(None), column <= at)

    def unpublished_clause(
        self, column: Any, at: Moment | None, include_unset: bool = True
    ) -> ColumnElement[bool]:
        if include_unset:
            return or_(column.is_(None), column > at)
        return and_(column.is_not(None), column > at)


_BEHAVIOURS: dict[ColumnKind, PublishBehaviour] = {
    ColumnKind.BOOLEAN: BooleanBehaviour(),
    ColumnKind.DATE: TemporalBehaviour(ColumnKind.DATE),
    ColumnKind.DATETIME: TemporalBehaviour(ColumnKind.DATETIME),
}


def behaviour_for(kind: ColumnKind) -> PublishBehaviour:
    return _BEHAVIOURS[kind]
