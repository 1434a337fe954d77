from datetime import date

from sqlalchemy import Date
from sqlalchemy.orm import Mapped, mapped_column


class PublishedOnMixin:
    published_on: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        index=True,
    )
