from sqlalchemy import Integer, ForeignKey, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from case_manager.models.base import Base, TimestampMixin, AuditMixin


class FinancialAssessment(Base, TimestampMixin, AuditMixin):
    """
    Means test for an applicant.

    Owns the centre for its income lines, which carry no centre column of their own.
    """

    __tablename__ = "financial_assessment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    center_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("center_detail.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("applicant_details.id", ondelete="CASCADE"), nullable=False, index=True
    )
    total_income: Mapped[float | None] = mapped_column(Numeric(precision=12, scale=2), nullable=True)
    total_expenses: Mapped[float | None] = mapped_column(Numeric(precision=12, scale=2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
