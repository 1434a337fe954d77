import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, inspect as sa_inspect, select
from sqlalchemy.orm import Mapper, Session, object_session
from sqlalchemy.sql import ColumnElement

from publishable.behaviour import PublishBehaviour, behaviour_for
from publishable.clock import Moment, normalize
from publishable.column_kind import ColumnKind, column_kind, is_timezone_aware
from publishable.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_NAMES = ("published", "published_at")


@dataclass(frozen=True)
class PublishBinding:
    """
    A model's publish column, resolved once at configuration time.

    Every operation reads the column through the behaviour matching its kind.
    """

    model: type
    column_name: str
    kind: ColumnKind
    behaviour: PublishBehaviour
    timezone_aware: bool = False
    include_unset: bool = True

    @property
    def column(self) -> Any:
        return getattr(self.model, self.column_name)

    def moment(self, at: Moment | None = None) -> Moment | None:
        return normalize(at, self.kind, aware=self.timezone_aware)

    # Instance operations

    def is_published(self, instance: Any, at: Moment | None = None) -> bool:
        return self.behaviour.is_published(
            getattr(instance, self.column_name), self.moment(at)
        )

    def is_unpublished(self, instance: Any, at: Moment | None = None) -> bool:
        return not self.is_published(instance, at)

    def publish(self, instance: Any, at: Moment | None = None) -> None:
        value = getattr(instance, self.column_name)
        new_value = self.behaviour.published_value(value, self.moment(at))
        # Leave already published instances untouched.
        if new_value is not value:
            setattr(instance, self.column_name, new_value)

    def unpublish(self, instance: Any) -> None:
        setattr(instance, self.column_name, self.behaviour.unpublished_value())

    def publish_and_save(
        self,
        instance: Any,
        at: Moment | None = None,
        session: Session | None = None,
    ) -> None:
        self.publish(instance, at)
        save(instance, session)

    def unpublish_and_save(self, instance: Any, session: Session | None = None) -> None:
        self.unpublish(instance)
        save(instance, session)

    # Query filters

    def published_clause(self, at: Moment | None = None) -> ColumnElement[bool]:
        return self.behaviour.published_clause(self.column, self.moment(at))

    def unpublished_clause(self, at: Moment | None = None) -> ColumnElement[bool]:
        return self.behaviour.unpublished_clause(
            self.column, self.moment(at), self.include_unset
        )

    def published(self, at: Moment | None = None) -> Select:
        return select(self.model).where(self.published_clause(at))

    def unpublished(self, at: Moment | None = None) -> Select:
        return select(self.model).where(self.unpublished_clause(at))


@dataclass(frozen=True)
class TemporalPublishBinding(PublishBinding):
    """
    Binding on a date or datetime column, which gives published items an order.
    """

    def recent(self, limit: int | None = None) -> Select:
        """
        Published items, most recently published first.
        """

        return _limited(self.published().order_by(self.column.desc()), limit)

    def upcoming(self, limit: int | None = None) -> Select:
        """
        Items still to be published, soonest first. Items without a publish
        moment come last.
        """

        return _limited(
            self.unpublished().order_by(self.column.asc().nulls_last()), limit
        )


def bind(
    model: type,
    on: str | None = None,
    *,
    skip_missing: bool = False,
    include_unset: bool = True,
) -> PublishBinding | None:
    """
    Resolve the publish column of a mapped model.

    When `on` isn't given, "published" then "published_at" are looked up.
    A missing column (or an unmapped model) raises a ConfigurationError,
    unless `skip_missing` is set in which case None is returned.

    `include_unset` makes rows without a value (NULL) match the unpublished
    queries, as they already fail is_published. Turn it off to only match
    rows explicitly unpublished.
    """

    existing = getattr(model, "__publishable__", None)
    if existing is not None:
        raise ConfigurationError(
            f"Model {model.__name__} is already publishable on '{existing.column_name}'"
        )

    mapper = sa_inspect(model, raiseerr=False)
    if not isinstance(mapper, Mapper):
        return _missing(f"{model!r} is not a mapped class", skip_missing)

    column_name = on or _default_column_name(mapper)
    column = mapper.columns.get(column_name)
    if column is None:
        return _missing(
            f"No '{column_name}' column available for publishable column "
            f"on model {model.__name__}",
            skip_missing,
        )

    kind = column_kind(column.type)
    if kind is None:
        raise ConfigurationError(
            f"Invalid column type {column.type!r} for publishable column "
            f"'{column_name}' on model {model.__name__}"
        )

    binding_class = TemporalPublishBinding if kind.is_temporal else PublishBinding
    binding = binding_class(
        model=model,
        column_name=column_name,
        kind=kind,
        behaviour=behaviour_for(kind),
        timezone_aware=is_timezone_aware(column.type),
        include_unset=include_unset,
    )
    logger.debug(
        "%s is publishable on %s column '%s'",
        model.__name__,
        kind.value,
        column_name,
    )
    return binding


def save(instance: Any, session: Session | None = None) -> None:
    """
    Persist `instance` with the first save operation available: the given
    session, the instance's own save(), then the session it's attached to.
    Transient instances without any of those are left unsaved.
    """

    if session is None:
        instance_save = getattr(instance, "save", None)
        if callable(instance_save):
            instance_save()
            return
        session = object_session(instance)

    if session is None:
        logger.debug("No session to save %r, skipping", instance)
        return

    session.add(instance)
    session.commit()


def _default_column_name(mapper: Mapper) -> str:
    for name in DEFAULT_COLUMN_NAMES:
        if name in mapper.columns:
            return name
    return DEFAULT_COLUMN_NAMES[0]


def _missing(message: str, skip_missing: bool) -> None:
    if not skip_missing:
        raise ConfigurationError(message)

    logger.info("%s, not making it publishable", message)
    return None


def _limited(statement: Select, limit: int | None) -> Select:
    if limit is None:
        return statement
    if limit < 0:
        raise ValueError(f"Limit must be positive, got {limit}")
    return statement.limit(limit)
