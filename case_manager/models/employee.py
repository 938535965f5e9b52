from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from case_manager.models.base import Base, TimestampMixin, AuditMixin


class Employee(Base, TimestampMixin, AuditMixin):
    """
    Staff member of a centre; also the login record for the auth service.

    user_type holds the numeric Role code. App Admin employees have no centre.
    """

    __tablename__ = "employee"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    center_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("center_detail.id", ondelete="CASCADE"),
        nullable=True,
        index=True,  # Critical for multi-tenant queries
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    surname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    user_type: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    contact_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
