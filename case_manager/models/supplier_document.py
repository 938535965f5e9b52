from sqlalchemy import String, Integer, ForeignKey, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from case_manager.models.base import Base, TimestampMixin, AuditMixin


class SupplierDocument(Base, TimestampMixin, AuditMixin):
    """
    Compliance document uploaded for a supplier.

    No centre column: tenancy is enforced through supplier_profile.center_id.
    """

    __tablename__ = "supplier_document"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    supplier_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("supplier_profile.id", ondelete="CASCADE"), nullable=False, index=True
    )
    doc_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    file_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_mime: Mapped[str | None] = mapped_column(String(255), nullable=True)
