from sqlalchemy import String, Integer, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from case_manager.models.base import Base, TimestampMixin, AuditMixin


class Applicant(Base, TimestampMixin, AuditMixin):
    """
    A person applying to a centre for assistance.

    The central record of a case; assessments and their income lines hang off it.
    """

    __tablename__ = "applicant_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    center_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("center_detail.id", ondelete="CASCADE"),
        nullable=False,
        index=True,  # Critical for multi-tenant queries
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    surname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    id_number: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    cell_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    file_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
