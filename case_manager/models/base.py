from datetime import datetime
from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """Server-maintained creation and modification timestamps"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


class AuditMixin:
    """
    Audit columns stamped by the audit field injector.

    created_by is written once on insert and stripped from every update payload.
    """

    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)


# Columns callers may send back but never write
READ_ONLY_COLUMNS = frozenset({"id", "created_at", "updated_at"})
