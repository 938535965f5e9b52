"""Entity descriptors.

The registry is static configuration: each entity's table, policy class and
tenancy strategy are fixed here and never come from request data. All table
and column names used in generated statements are read from these
descriptors.
"""

from dataclasses import dataclass, field
from types import MappingProxyType

from sqlalchemy import Table

from case_manager.access.capabilities import EntityClass
from case_manager.access.tenancy import (
    Direct,
    ExistsThrough,
    Global,
    JoinedThrough,
    TenancyStrategy,
)
from case_manager.models.applicant import Applicant
from case_manager.models.applicant_income import ApplicantIncome
from case_manager.models.base import READ_ONLY_COLUMNS
from case_manager.models.centre import Centre
from case_manager.models.conversation import Conversation
from case_manager.models.employee import Employee
from case_manager.models.employee_skill import EmployeeSkill
from case_manager.models.financial_assessment import FinancialAssessment
from case_manager.models.folder import Folder
from case_manager.models.inventory_item import InventoryItem
from case_manager.models.lookup import (
    FileStatus,
    Gender,
    IncomeType,
    Nationality,
    Skill,
    Suburb,
    SupplierCategory,
)
from case_manager.models.message import Message
from case_manager.models.personal_file import PersonalFile
from case_manager.models.role import Role
from case_manager.models.supplier_document import SupplierDocument
from case_manager.models.supplier_profile import SupplierProfile
from case_manager.services.binary_fields import BinaryField


@dataclass(frozen=True)
class EntityDescriptor:
    name: str
    model: type
    entity_class: EntityClass
    strategy: TenancyStrategy
    binary_fields: tuple[BinaryField, ...] = field(default_factory=tuple)
    subtype_column: str | None = None
    # Subtype values whose rows never belong to a centre
    centreless_subtypes: frozenset[int] = frozenset()

    @property
    def table(self) -> Table:
        return self.model.__table__

    @property
    def label(self) -> str:
        return self.model.__name__

    @property
    def column_names(self) -> frozenset[str]:
        return frozenset(self.table.c.keys())

    @property
    def writable_columns(self) -> frozenset[str]:
        return self.column_names - READ_ONLY_COLUMNS

    @property
    def tenant_column(self) -> str | None:
        """The entity's own tenant column; None for through-strategies"""
        if isinstance(self.strategy, Direct):
            return self.strategy.tenant_column
        return None

    @property
    def is_through(self) -> bool:
        return isinstance(self.strategy, (JoinedThrough, ExistsThrough))

    def binary_field(self, column: str | None = None) -> BinaryField | None:
        """Named binary field, or the first declared one when column is None"""
        for candidate in self.binary_fields:
            if column is None or candidate.column == column:
                return candidate
        return None


_FILE_FIELD = BinaryField("file", filename_column="file_filename", mime_column="file_mime")

_DESCRIPTORS = (
    EntityDescriptor(
        name="centres",
        model=Centre,
        entity_class=EntityClass.CENTRE_MANAGEMENT,
        strategy=Direct(tenant_column="id"),
    ),
    EntityDescriptor(
        name="employees",
        model=Employee,
        entity_class=EntityClass.STAFF,
        strategy=Direct(),
        subtype_column="user_type",
        centreless_subtypes=frozenset({Role.APP_ADMIN.value}),
    ),
    EntityDescriptor(
        name="employee-skills",
        model=EmployeeSkill,
        entity_class=EntityClass.STAFF,
        strategy=Direct(),
        binary_fields=(BinaryField("attachment", filename_column="attachment_filename"),),
    ),
    EntityDescriptor(
        name="applicants",
        model=Applicant,
        entity_class=EntityClass.APPLICANTS,
        strategy=Direct(),
    ),
    EntityDescriptor(
        name="financial-assessments",
        model=FinancialAssessment,
        entity_class=EntityClass.APPLICANTS,
        strategy=Direct(),
    ),
    EntityDescriptor(
        name="applicant-income",
        model=ApplicantIncome,
        entity_class=EntityClass.APPLICANTS,
        strategy=JoinedThrough(parent=FinancialAssessment, foreign_key="financial_assessment_id"),
    ),
    EntityDescriptor(
        name="personal-files",
        model=PersonalFile,
        entity_class=EntityClass.FILE_MANAGER,
        strategy=Direct(),
        binary_fields=(_FILE_FIELD,),
    ),
    EntityDescriptor(
        name="inventory-items",
        model=InventoryItem,
        entity_class=EntityClass.INVENTORY,
        strategy=Direct(),
    ),
    EntityDescriptor(
        name="supplier-profiles",
        model=SupplierProfile,
        entity_class=EntityClass.SUPPLIERS,
        strategy=Direct(),
    ),
    EntityDescriptor(
        name="supplier-documents",
        model=SupplierDocument,
        entity_class=EntityClass.SUPPLIERS,
        strategy=ExistsThrough(parent=SupplierProfile, foreign_key="supplier_id"),
        binary_fields=(_FILE_FIELD,),
    ),
    EntityDescriptor(
        name="folders",
        model=Folder,
        entity_class=EntityClass.FILE_MANAGER,
        strategy=Direct(),
    ),
    EntityDescriptor(
        name="conversations",
        model=Conversation,
        entity_class=EntityClass.CHAT,
        strategy=Direct(),
    ),
    EntityDescriptor(
        name="messages",
        model=Message,
        entity_class=EntityClass.CHAT,
        strategy=ExistsThrough(parent=Conversation, foreign_key="conversation_id"),
        binary_fields=(BinaryField("attachment", filename_column="attachment_filename"),),
    ),
)

_LOOKUP_MODELS = (Gender, Nationality, Suburb, FileStatus, IncomeType, SupplierCategory, Skill)

_DESCRIPTORS += tuple(
    EntityDescriptor(
        name="lookup/" + model.__tablename__.replace("_", "-"),
        model=model,
        entity_class=EntityClass.LOOKUP,
        strategy=Global(),
    )
    for model in _LOOKUP_MODELS
)

ENTITIES: MappingProxyType = MappingProxyType({d.name: d for d in _DESCRIPTORS})


def get_entity(name: str) -> EntityDescriptor:
    """Look up a registered entity by route name (KeyError if unknown)"""
    return ENTITIES[name]
