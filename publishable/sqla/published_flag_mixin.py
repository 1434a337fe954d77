from sqlalchemy import Boolean, false
from sqlalchemy.orm import Mapped, mapped_column


class PublishedFlagMixin:
    published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
