from sqlalchemy import String, Integer, ForeignKey, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from case_manager.models.base import Base, TimestampMixin, AuditMixin


class EmployeeSkill(Base, TimestampMixin, AuditMixin):
    """Training or qualification held by an employee, with an optional certificate scan"""

    __tablename__ = "employee_skills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    center_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("center_detail.id", ondelete="CASCADE"), nullable=False, index=True
    )
    employee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course: Mapped[str] = mapped_column(String(255), nullable=False)
    institution: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attachment: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    attachment_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
