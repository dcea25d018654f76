"""
SQLAlchemy column mixins for queryable resources.

``ResourceConfig.from_model`` looks for the ``created_at`` / ``updated_at``
columns these mixins declare and adds them to the searchable fields.
Models that name their timestamps differently can set
``__created_at_column__`` / ``__updated_at_column__`` (or pass the names
to ``ResourceConfig`` explicitly); setting either to ``None`` disables it.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampModelMixin:
    """Adds created_at and updated_at columns maintained on insert/update."""

    __created_at_column__: str | None = "created_at"
    __updated_at_column__: str | None = "updated_at"

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=_utcnow,
        onupdate=_utcnow,
        index=True,
    )
