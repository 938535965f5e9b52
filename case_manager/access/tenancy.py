"""Tenancy strategies and tenant id normalisation.

Every entity declares exactly one strategy:

- Direct: the entity carries its own centre column.
- JoinedThrough: the centre column lives on a parent reached by foreign key.
  Reads join the parent; updates and deletes use a correlated EXISTS.
- ExistsThrough: as JoinedThrough, but every operation uses EXISTS.
- Global: shared reference data with no centre at all. Whoever holds a
  grant sees every row.

Tenant ids are positive integers. Zero, negatives, booleans, blank or
non-numeric strings and non-integral floats are all "absent". What "absent"
means depends on who holds it. A bypass principal's explicit target tenant
becomes no target: a create lands in no centre and an update leaves the
row where it is. Anyone else's home tenant matches nothing.
"""

from dataclasses import dataclass
from typing import Any, Union


def normalize_tenant_id(value: Any) -> int | None:
    """
    Coerce a tenant id to a positive int.

    Returns:
        The tenant id, or None if the value is missing or not a valid id
    """
    return _positive_int(value)


def normalize_record_id(value: Any) -> int | None:
    """Coerce a per-record primary key to a positive int, or None"""
    return _positive_int(value)


def _positive_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        number = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            return None
        number = int(text)
    else:
        return None

    return number if number > 0 else None


@dataclass(frozen=True)
class Direct:
    """Entity has its own tenant column"""

    tenant_column: str = "center_id"


@dataclass(frozen=True)
class Global:
    """Entity is not centre-scoped"""


@dataclass(frozen=True)
class _Through:
    parent: type
    foreign_key: str
    tenant_column: str = "center_id"
    parent_key: str = "id"

    @property
    def parent_table(self):
        return self.parent.__table__


@dataclass(frozen=True)
class JoinedThrough(_Through):
    """Tenant column on a parent; reads join, writes use EXISTS"""


@dataclass(frozen=True)
class ExistsThrough(_Through):
    """Tenant column on a parent; every operation uses EXISTS"""


TenancyStrategy = Union[Direct, JoinedThrough, ExistsThrough, Global]
