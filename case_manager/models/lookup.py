"""Reference tables shared by every centre (dropdown values on forms).

They carry no centre column; see the Global tenancy strategy.
"""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from case_manager.models.base import Base, TimestampMixin, AuditMixin


class LookupMixin(TimestampMixin, AuditMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)


class Gender(Base, LookupMixin):
    __tablename__ = "gender"


class Nationality(Base, LookupMixin):
    __tablename__ = "nationality"


class Suburb(Base, LookupMixin):
    __tablename__ = "suburb"


class FileStatus(Base, LookupMixin):
    __tablename__ = "file_status"


class IncomeType(Base, LookupMixin):
    __tablename__ = "income_type"


class SupplierCategory(Base, LookupMixin):
    __tablename__ = "supplier_category"


class Skill(Base, LookupMixin):
    __tablename__ = "skills"
