from sqlalchemy import String, Integer, ForeignKey, LargeBinary, Text
from sqlalchemy.orm import Mapped, mapped_column

from case_manager.models.base import Base, TimestampMixin, AuditMixin


class Message(Base, TimestampMixin, AuditMixin):
    """
    One chat message, optionally with an attachment.

    No centre column: tenancy is enforced through conversations.center_id.
    """

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    conversation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("employee.id", ondelete="SET NULL"), nullable=True
    )
    message_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    attachment: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    attachment_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    read_status: Mapped[str] = mapped_column(String(20), nullable=False, default="Unread")
