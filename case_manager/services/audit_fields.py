"""Audit field injection for writes.

Pure functions: they never mutate the caller's dict and never touch the store.
"""

from typing import Any

from case_manager.access.tenancy import normalize_tenant_id
from case_manager.core.exceptions import ForbiddenException
from case_manager.models.principal import Principal

CREATED_BY = "created_by"
UPDATED_BY = "updated_by"


def stamp_create(
    principal: Principal,
    fields: dict[str, Any],
    *,
    tenant_column: str | None,
    bypasses_tenancy: bool,
) -> dict[str, Any]:
    """
    Stamp a create payload.

    - created_by / updated_by are always the acting principal
    - tenant column (when the entity has one): a bypass principal may target
      any centre explicitly, otherwise it is the principal's own centre

    Args:
        principal: Acting principal
        fields: Caller-supplied values
        tenant_column: Entity's own centre column, None for through-strategies
        bypasses_tenancy: Whether the principal's grant bypasses tenancy

    Returns:
        New dict ready for insert

    Raises:
        ForbiddenException: If a centre-bound principal has no usable centre
    """
    stamped = dict(fields)
    stamped[CREATED_BY] = principal.username
    stamped[UPDATED_BY] = principal.username

    if tenant_column is None:
        return stamped

    if bypasses_tenancy:
        # 0, "" and non-numeric targets mean "no explicit centre"
        stamped[tenant_column] = normalize_tenant_id(stamped.get(tenant_column))
    else:
        tenant_id = principal.tenant_id
        if tenant_id is None:
            raise ForbiddenException("Forbidden: no centre is assigned to this user")
        stamped[tenant_column] = tenant_id

    return stamped


def stamp_update(
    principal: Principal,
    fields: dict[str, Any],
    *,
    tenant_column: str | None,
    bypasses_tenancy: bool,
) -> dict[str, Any]:
    """
    Stamp an update payload.

    created_by is immutable and always removed; updated_by is always the
    acting principal, whatever the payload claimed. Centre-bound principals
    cannot move a row to another centre, so their tenant column is dropped.
    A bypass principal moves the row only to a valid centre; 0, "" or junk
    leave it in place.
    """
    stamped = dict(fields)
    stamped.pop(CREATED_BY, None)
    stamped[UPDATED_BY] = principal.username

    if tenant_column is not None and tenant_column in stamped:
        target = normalize_tenant_id(stamped[tenant_column]) if bypasses_tenancy else None
        if target is None:
            # No valid target means the row stays where it is
            del stamped[tenant_column]
        else:
            stamped[tenant_column] = target

    return stamped
