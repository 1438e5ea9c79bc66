"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, TimestampMixin, CreatedByMixin, and the combined
AuditedModel used by CRM tables.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """Mixin for created_at and updated_at (timezone-aware).

    Python-side defaults keep microsecond precision on every backend, which
    creation-order tie breaks depend on; server defaults cover raw inserts.
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            nullable=False,
            index=True,
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            onupdate=utc_now,
            nullable=False,
        )


class CreatedByMixin:
    """Mixin for created_by (actor id or 'system'; no FK, actors live outside this service)."""

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True, index=True)


class AuditedModel(CuidMixin, TimestampMixin, CreatedByMixin):
    """Combined mixin: CUID + created_at/updated_at + created_by."""

    __abstract__ = True
