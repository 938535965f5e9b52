"""Tenancy predicate builder.

Produces composable, parameterized filter conditions. A Predicate is an
SQLAlchemy boolean clause (values always bound, never interpolated) plus
any joins the condition needs. Identifiers come from the entity
descriptor only.

Three outcomes for the tenancy filter:
- bypass grant or a Global entity: tautology, no filter
- principal without a usable centre: contradiction, matches nothing
- otherwise: centre equality, expressed per the entity's strategy
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, FromClause, Select, and_, false, select, true

from case_manager.access.capabilities import CapabilityGrant, Operation, lookup
from case_manager.access.entities import EntityDescriptor
from case_manager.access.tenancy import Direct, Global, JoinedThrough, normalize_record_id
from case_manager.models.principal import Principal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Predicate:
    """
    A filter condition plus the joins it depends on.

    Joins are only produced for reads; write predicates are always
    self-contained so they can sit in an UPDATE or DELETE WHERE clause.
    """

    clause: ColumnElement[bool]
    joins: tuple[tuple[FromClause, ColumnElement[bool]], ...] = ()
    matches_nothing: bool = False
    is_tautology: bool = False

    @classmethod
    def everything(cls) -> "Predicate":
        return cls(clause=true(), is_tautology=True)

    @classmethod
    def nothing(cls) -> "Predicate":
        return cls(clause=false(), matches_nothing=True)

    def and_(self, *others: "Predicate | ColumnElement[bool]") -> "Predicate":
        """
        AND further mandatory conditions onto this predicate.

        Every condition must hold for a row to match; nothing here can
        widen the match.
        """
        clauses = [self.clause]
        joins = list(self.joins)
        matches_nothing = self.matches_nothing
        is_tautology = self.is_tautology

        for other in others:
            if isinstance(other, Predicate):
                clauses.append(other.clause)
                joins.extend(other.joins)
                matches_nothing = matches_nothing or other.matches_nothing
                is_tautology = is_tautology and other.is_tautology
            else:
                clauses.append(other)
                is_tautology = False

        if matches_nothing:
            return Predicate.nothing()
        return Predicate(
            clause=and_(*clauses),
            joins=tuple(joins),
            is_tautology=is_tautology,
        )

    def apply(self, stmt: Select) -> Select:
        """Add this predicate's joins and WHERE condition to a SELECT"""
        for target, onclause in self.joins:
            stmt = stmt.join(target, onclause)
        return stmt.where(self.clause)

    @property
    def bound_values(self) -> list[Any]:
        """Bound parameter values in statement order"""
        return list(self.clause.compile().params.values())


def bypasses_tenancy(principal: Principal, entity: EntityDescriptor, operation: Operation) -> bool:
    grant = lookup(principal.role, entity.entity_class, operation)
    return grant is not None and grant.bypasses_tenancy


def build_tenancy_predicate(
    principal: Principal,
    entity: EntityDescriptor,
    operation: Operation = Operation.READ,
) -> Predicate:
    """
    Build the centre filter for one principal, entity and operation.

    Args:
        principal: Acting principal
        entity: Target entity descriptor
        operation: READ uses joins for JoinedThrough; writes use EXISTS

    Returns:
        Predicate safe to AND into any statement on entity.table
    """
    if bypasses_tenancy(principal, entity, operation) or isinstance(entity.strategy, Global):
        return Predicate.everything()

    tenant_id = principal.tenant_id
    if tenant_id is None:
        logger.debug(
            "No usable centre for %s on %s; predicate matches nothing",
            principal.role.label,
            entity.label,
        )
        return Predicate.nothing()

    strategy = entity.strategy
    table = entity.table

    if isinstance(strategy, Direct):
        return Predicate(clause=table.c[strategy.tenant_column] == tenant_id)

    parent = strategy.parent_table
    foreign_key = table.c[strategy.foreign_key]

    if isinstance(strategy, JoinedThrough) and operation == Operation.READ:
        onclause = parent.c[strategy.parent_key] == foreign_key
        return Predicate(
            clause=parent.c[strategy.tenant_column] == tenant_id,
            joins=((parent, onclause),),
        )

    return Predicate(clause=_parent_exists(strategy, foreign_key, tenant_id, correlate_to=table))


def build_parent_guard(
    principal: Principal,
    entity: EntityDescriptor,
    parent_id: Any,
    operation: Operation = Operation.CREATE,
) -> Predicate:
    """
    Guard for writes that attach a through-strategy row to a parent.

    The parent named by parent_id must belong to the principal's centre.
    Direct entities and bypass principals get a tautology.
    """
    if not entity.is_through or bypasses_tenancy(principal, entity, operation):
        return Predicate.everything()

    tenant_id = principal.tenant_id
    parent_key = normalize_record_id(parent_id)
    if tenant_id is None or parent_key is None:
        return Predicate.nothing()

    return Predicate(clause=_parent_exists(entity.strategy, parent_key, tenant_id))


def build_subtype_predicate(grant: CapabilityGrant, entity: EntityDescriptor) -> Predicate:
    """
    Secondary, non-tenancy filter restricting visible record subtypes.

    Always ANDed with the tenancy predicate, never used in its place.
    """
    if grant.subtype_allowlist is None or entity.subtype_column is None:
        return Predicate.everything()
    column = entity.table.c[entity.subtype_column]
    return Predicate(clause=column.in_(sorted(grant.subtype_allowlist)))


def subtype_allowed(grant: CapabilityGrant, entity: EntityDescriptor, value: Any) -> bool:
    """Whether a subtype value in a write payload is inside the grant's allow-list"""
    if grant.subtype_allowlist is None or entity.subtype_column is None:
        return True
    return normalize_record_id(value) in grant.subtype_allowlist


def _parent_exists(strategy, parent_ref, tenant_id: int, correlate_to=None) -> ColumnElement[bool]:
    parent = strategy.parent_table
    subquery = select(parent.c[strategy.parent_key]).where(
        parent.c[strategy.parent_key] == parent_ref,
        parent.c[strategy.tenant_column] == tenant_id,
    )
    if correlate_to is not None:
        subquery = subquery.correlate(correlate_to)
    return subquery.exists()
