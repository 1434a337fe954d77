"""
Class decorator turning a mapped model into a publishable one.

    @publishable(on="published_at")
    class Album(Base):
        ...

    session.scalars(Album.select_recent(10))
    album.publish_and_save()

Boolean columns are a simple on/off flag. Date and datetime columns make an
item published once the stored moment is reached, and also get the
select_recent/select_upcoming queries.
"""
from typing import Any, Callable, TypeVar, overload

from sqlalchemy import Select
from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement

from publishable.binding import PublishBinding, TemporalPublishBinding, bind
from publishable.clock import Moment
from publishable.errors import ConfigurationError

M = TypeVar("M", bound=type)


@overload
def publishable(cls: M) -> M:
    ...


@overload
def publishable(
    cls: None = None,
    *,
    on: str | None = None,
    skip_missing: bool = False,
    include_unset: bool = True,
) -> Callable[[M], M]:
    ...


def publishable(cls=None, *, on=None, skip_missing=False, include_unset=True):
    def decorate(model: M) -> M:
        binding = bind(
            model, on, skip_missing=skip_missing, include_unset=include_unset
        )
        if binding is None:
            return model

        attributes = {
            **_instance_methods(binding),
            **_class_methods(binding),
        }

        # Check everything first, so a failure installs nothing.
        taken = sorted(name for name in attributes if hasattr(model, name))
        if taken:
            raise ConfigurationError(
                f"Model {model.__name__} already defines {', '.join(taken)}"
            )

        model.__publishable__ = binding
        for name, attribute in attributes.items():
            setattr(model, name, attribute)

        return model

    if cls is None:
        return decorate
    return decorate(cls)


def _instance_methods(binding: PublishBinding) -> dict[str, Any]:
    def is_published(self, at: Moment | None = None) -> bool:
        return binding.is_published(self, at)

    def is_unpublished(self, at: Moment | None = None) -> bool:
        return binding.is_unpublished(self, at)

    def publish(self, at: Moment | None = None) -> None:
        binding.publish(self, at)

    def unpublish(self) -> None:
        binding.unpublish(self)

    def publish_and_save(
        self, at: Moment | None = None, session: Session | None = None
    ) -> None:
        binding.publish_and_save(self, at, session)

    def unpublish_and_save(self, session: Session | None = None) -> None:
        binding.unpublish_and_save(self, session)

    return {
        "is_published": is_published,
        "is_unpublished": is_unpublished,
        "publish": publish,
        "unpublish": unpublish,
        "publish_and_save": publish_and_save,
        "unpublish_and_save": unpublish_and_save,
    }


def _class_methods(binding: PublishBinding) -> dict[str, Any]:
    def select_published(cls, at: Moment | None = None) -> Select:
        return binding.published(at)

    def select_unpublished(cls, at: Moment | None = None) -> Select:
        return binding.unpublished(at)

    def published_clause(cls, at: Moment | None = None) -> ColumnElement[bool]:
        return binding.published_clause(at)

    def unpublished_clause(cls, at: Moment | None = None) -> ColumnElement[bool]:
        return binding.unpublished_clause(at)

    methods = {
        "select_published": classmethod(select_published),
        "select_unpublished": classmethod(select_unpublished),
        "published_clause": classmethod(published_clause),
        "unpublished_clause": classmethod(unpublished_clause),
    }

    # Boolean columns have no order to sort on.
    if isinstance(binding, TemporalPublishBinding):

        def select_recent(cls, limit: int | None = None) -> Select:
            return binding.recent(limit)

        def select_upcoming(cls, limit: int | None = None) -> Select:
            return binding.upcoming(limit)

        methods["select_recent"] = classmethod(select_recent)
        methods["select_upcoming"] = classmethod(select_upcoming)

    return methods
