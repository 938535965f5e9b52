"""Centre model: the tenant itself."""

from sqlalchemy import String, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from case_manager.models.base import Base, TimestampMixin, AuditMixin


class Centre(Base, TimestampMixin, AuditMixin):
    """
    An organisation (centre) using the system.

    Every tenant-scoped row carries, directly or through a parent, the id of
    the centre it belongs to. Managed by App Admin only.
    """

    __tablename__ = "center_detail"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organisation_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Centre(id={self.id}, organisation_name='{self.organisation_name}')>"
