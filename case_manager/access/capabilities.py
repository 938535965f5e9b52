"""Role capability table.

One static table keyed by (role, entity class, operation). A key that is
absent is denied; nothing is granted by omission or derived from role order.

A grant may carry:
- bypasses_tenancy: the tenancy predicate is a tautology (App Admin only)
- subtype_allowlist: a secondary filter on the entity's subtype column,
  layered on top of the tenancy predicate. Every centre-bound grant that can
  write staff records carries one, so only a bypass grant can assign the
  App Admin type.
"""

from dataclasses import dataclass
from enum import Enum as PyEnum
from types import MappingProxyType

from case_manager.core.exceptions import ForbiddenException
from case_manager.core.logging_config import get_security_logger
from case_manager.models.role import Role

security_logger = get_security_logger()


class Operation(str, PyEnum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class EntityClass(str, PyEnum):
    """Policy groupings of entities sharing the same capability rules"""

    CENTRE_MANAGEMENT = "centre_management"
    APPLICANTS = "applicants"
    STAFF = "staff"
    INVENTORY = "inventory"
    SUPPLIERS = "suppliers"
    FILE_MANAGER = "file_manager"
    CHAT = "chat"
    LOOKUP = "lookup"


@dataclass(frozen=True)
class CapabilityGrant:
    bypasses_tenancy: bool = False
    subtype_allowlist: frozenset[int] | None = None


ALL_OPERATIONS = tuple(Operation)
READ_ONLY = (Operation.READ,)

# Org Admin manages centre-level staff only: Org Admin, Org Executive, Caseworker
CENTRE_STAFF_TYPES = frozenset({Role.ORG_ADMIN.value, Role.ORG_EXECUTIVE.value, Role.CASEWORKER.value})

# HQ manages every centre-bound type, never App Admin
CENTRE_BOUND_TYPES = CENTRE_STAFF_TYPES | {Role.HQ.value}

_BYPASS = CapabilityGrant(bypasses_tenancy=True)
_SCOPED = CapabilityGrant()
_CENTRE_STAFF_ONLY = CapabilityGrant(subtype_allowlist=CENTRE_STAFF_TYPES)
_CENTRE_BOUND_ONLY = CapabilityGrant(subtype_allowlist=CENTRE_BOUND_TYPES)

_NON_CENTRE_CLASSES = tuple(c for c in EntityClass if c != EntityClass.CENTRE_MANAGEMENT)


def _grant(
    table: dict,
    role: Role,
    classes: tuple[EntityClass, ...],
    operations: tuple[Operation, ...],
    grant: CapabilityGrant,
) -> None:
    for entity_class in classes:
        for operation in operations:
            table[(role, entity_class, operation)] = grant


def _build_table() -> MappingProxyType:
    table: dict[tuple[Role, EntityClass, Operation], CapabilityGrant] = {}

    # App Admin: everything, every centre
    _grant(table, Role.APP_ADMIN, tuple(EntityClass), ALL_OPERATIONS, _BYPASS)

    # HQ: everything except centre management, own centre
    _grant(table, Role.HQ, _NON_CENTRE_CLASSES, ALL_OPERATIONS, _SCOPED)
    _grant(table, Role.HQ, (EntityClass.STAFF,), ALL_OPERATIONS, _CENTRE_BOUND_ONLY)

    # Org Admin: everything except centre management, own centre, centre staff only
    _grant(table, Role.ORG_ADMIN, _NON_CENTRE_CLASSES, ALL_OPERATIONS, _SCOPED)
    _grant(table, Role.ORG_ADMIN, (EntityClass.STAFF,), ALL_OPERATIONS, _CENTRE_STAFF_ONLY)

    # Org Executive: read-only, except the file manager, chat and lookups
    _grant(table, Role.ORG_EXECUTIVE, _NON_CENTRE_CLASSES, READ_ONLY, _SCOPED)
    _grant(
        table,
        Role.ORG_EXECUTIVE,
        (EntityClass.FILE_MANAGER, EntityClass.CHAT, EntityClass.LOOKUP),
        ALL_OPERATIONS,
        _SCOPED,
    )

    # Caseworker: applicants, file manager and chat; staff and lookups for form dropdowns
    _grant(
        table,
        Role.CASEWORKER,
        (EntityClass.APPLICANTS, EntityClass.FILE_MANAGER, EntityClass.CHAT),
        ALL_OPERATIONS,
        _SCOPED,
    )
    _grant(table, Role.CASEWORKER, (EntityClass.STAFF, EntityClass.LOOKUP), READ_ONLY, _SCOPED)

    return MappingProxyType(table)


# Loaded once at import, never mutated
CAPABILITY_TABLE = _build_table()


def lookup(role: Role, entity_class: EntityClass, operation: Operation) -> CapabilityGrant | None:
    """Return the grant for this combination, or None when denied"""
    return CAPABILITY_TABLE.get((role, entity_class, operation))


def authorize(role: Role, entity_class: EntityClass, operation: Operation) -> CapabilityGrant:
    """
    Authorize an operation on an entity class.

    Args:
        role: Acting principal's role
        entity_class: Policy class of the target entity
        operation: Requested operation

    Returns:
        The matching CapabilityGrant

    Raises:
        ForbiddenException: If the role has no grant (default deny)
    """
    grant = lookup(role, entity_class, operation)
    if grant is None:
        security_logger.warning(
            "Denied %s on %s for role %s", operation.value, entity_class.value, role.label
        )
        raise ForbiddenException(
            f"Forbidden: {role.label} cannot {operation.value} {entity_class.value.replace('_', ' ')} records"
        )
    return grant
