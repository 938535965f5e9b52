from sqlalchemy import String, Integer, ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from case_manager.models.base import Base, TimestampMixin, AuditMixin


class ApplicantIncome(Base, TimestampMixin, AuditMixin):
    """
    One income line on a financial assessment.

    No centre column: tenancy is enforced through financial_assessment.center_id.
    """

    __tablename__ = "applicant_income"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    financial_assessment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("financial_assessment.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    income_type: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
