import logging
from typing import Any

from sqlalchemy.orm import Session

from case_manager.access.capabilities import CapabilityGrant, Operation, authorize
from case_manager.access.entities import EntityDescriptor
from case_manager.access.predicate import (
    Predicate,
    build_parent_guard,
    build_subtype_predicate,
    build_tenancy_predicate,
    subtype_allowed,
)
from case_manager.access.tenancy import normalize_record_id, normalize_tenant_id
from case_manager.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from case_manager.models.base import READ_ONLY_COLUMNS
from case_manager.models.principal import Principal
from case_manager.repositories.record_repository import RecordRepository
from case_manager.services.audit_fields import stamp_create, stamp_update
from case_manager.services.binary_fields import (
    StoredFile,
    decode_payload,
    extract_file,
    materialize_for_detail,
    materialize_for_list,
)

logger = logging.getLogger(__name__)


class RecordService:
    """
    Service layer running the access pipeline for every entity:
    authorize -> tenancy predicate -> audit stamp (writes) -> one statement
    -> binary materialisation (reads).

    Denied (ForbiddenException) means the role may not perform the operation
    at all. NotFound means it may, but no row matches id AND centre; absent
    rows and rows of another centre are reported identically.
    """

    def __init__(self, db: Session):
        self.db = db

    def list_records(self, principal: Principal, entity: EntityDescriptor) -> list[dict[str, Any]]:
        """
        List every row the principal may see. An empty list is a success.

        Raises:
            ForbiddenException: If the role cannot read this entity class
        """
        grant = authorize(principal.role, entity.entity_class, Operation.READ)
        predicate = self._read_predicate(principal, entity, grant)
        if predicate.matches_nothing:
            return []

        rows = RecordRepository(self.db, entity).select_rows(predicate)
        return [materialize_for_list(row, entity.binary_fields) for row in rows]

    def get_record(self, principal: Principal, entity: EntityDescriptor, record_id: Any) -> dict[str, Any]:
        """
        Get one row by id, with raw binary payloads.

        Raises:
            ForbiddenException: If the role cannot read this entity class
            NotFoundException: If no visible row has this id
        """
        grant = authorize(principal.role, entity.entity_class, Operation.READ)
        key = self._record_key(entity, record_id)
        predicate = self._read_predicate(principal, entity, grant).and_(entity.table.c.id == key)
        if predicate.matches_nothing:
            raise self._not_found(entity, record_id)

        row = RecordRepository(self.db, entity).select_one(predicate)
        if row is None:
            raise self._not_found(entity, record_id)
        return materialize_for_detail(row, entity.binary_fields)

    def create_record(self, principal: Principal, entity: EntityDescriptor, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Create a row stamped with audit fields and the resolved centre.

        A bypass principal may target any centre explicitly; everyone else
        always writes into their own centre. Through-strategy rows are only
        inserted when their parent is visible to the principal.

        Raises:
            ForbiddenException: If the role cannot create, or the subtype is not allowed
            NotFoundException: If the parent of a through-strategy row is not visible
            ValidationException: If the payload has unknown fields or bad binaries,
                or a subtype that needs a centre was given none
        """
        grant = authorize(principal.role, entity.entity_class, Operation.CREATE)
        values = stamp_create(
            principal,
            self._prepare_fields(entity, fields),
            tenant_column=entity.tenant_column,
            bypasses_tenancy=grant.bypasses_tenancy,
        )
        values = self._drop_read_only(values)
        self._check_subtype(grant, entity, values, required=True)
        values = self._place_by_subtype(entity, values, creating=True)

        repo = RecordRepository(self.db, entity)
        if entity.is_through and not grant.bypasses_tenancy:
            foreign_key = entity.strategy.foreign_key
            guard = build_parent_guard(principal, entity, values.get(foreign_key), Operation.CREATE)
            row = None if guard.matches_nothing else repo.insert_guarded(values, guard)
            if row is None:
                raise self._not_found_parent(entity, values.get(foreign_key))
        else:
            row = repo.insert(values)

        logger.info("%s %s created by %s", entity.label, row["id"], principal.username)
        return materialize_for_detail(row, entity.binary_fields)

    def update_record(
        self,
        principal: Principal,
        entity: EntityDescriptor,
        record_id: Any,
        fields: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Update a row by id.

        created_by is never changed and updated_by is always the acting
        principal. Centre-bound principals cannot move a row to another
        centre, directly or by re-pointing it at another centre's parent.

        Raises:
            ForbiddenException: If the role cannot update, or the subtype is not allowed
            NotFoundException: If no visible row has this id
            ValidationException: If the payload has unknown fields or bad binaries
        """
        grant = authorize(principal.role, entity.entity_class, Operation.UPDATE)
        key = self._record_key(entity, record_id)
        values = stamp_update(
            principal,
            self._prepare_fields(entity, fields),
            tenant_column=entity.tenant_column,
            bypasses_tenancy=grant.bypasses_tenancy,
        )
        values = self._drop_read_only(values)
        self._check_subtype(grant, entity, values, required=False)
        values = self._place_by_subtype(entity, values, creating=False)

        predicate = self._write_predicate(principal, entity, grant, Operation.UPDATE, key)
        if entity.is_through and entity.strategy.foreign_key in values:
            predicate = predicate.and_(
                build_parent_guard(
                    principal, entity, values[entity.strategy.foreign_key], Operation.UPDATE
                )
            )
        if predicate.matches_nothing:
            raise self._not_found(entity, record_id)

        row = RecordRepository(self.db, entity).update(values, predicate)
        if row is None:
            raise self._not_found(entity, record_id)

        logger.info("%s %s updated by %s", entity.label, key, principal.username)
        return materialize_for_detail(row, entity.binary_fields)

    def delete_record(self, principal: Principal, entity: EntityDescriptor, record_id: Any) -> dict[str, Any]:
        """
        Delete a row by id. Deleting an absent or foreign row is NotFound.

        Returns:
            The deleted row

        Raises:
            ForbiddenException: If the role cannot delete this entity class
            NotFoundException: If no visible row has this id
        """
        grant = authorize(principal.role, entity.entity_class, Operation.DELETE)
        key = self._record_key(entity, record_id)
        predicate = self._write_predicate(principal, entity, grant, Operation.DELETE, key)
        if predicate.matches_nothing:
            raise self._not_found(entity, record_id)

        row = RecordRepository(self.db, entity).delete(predicate)
        if row is None:
            raise self._not_found(entity, record_id)

        logger.info("%s %s deleted by %s", entity.label, key, principal.username)
        return row

    def get_file(
        self,
        principal: Principal,
        entity: EntityDescriptor,
        record_id: Any,
        column: str | None = None,
    ) -> StoredFile:
        """
        Fetch a binary payload for streaming. Goes through get_record, so it
        is authorized and centre-filtered exactly like a normal read.

        Raises:
            NotFoundException: If the entity has no such binary field, the row
                is not visible, or the row has no payload
        """
        field = entity.binary_field(column)
        if field is None:
            raise NotFoundException(f"{entity.label} has no file field")

        row = self.get_record(principal, entity, record_id)
        stored = extract_file(row, field)
        if stored is None:
            raise NotFoundException("No file found")
        return stored

    def _read_predicate(
        self, principal: Principal, entity: EntityDescriptor, grant: CapabilityGrant
    ) -> Predicate:
        return build_tenancy_predicate(principal, entity, Operation.READ).and_(
            build_subtype_predicate(grant, entity)
        )

    def _write_predicate(
        self,
        principal: Principal,
        entity: EntityDescriptor,
        grant: CapabilityGrant,
        operation: Operation,
        key: int,
    ) -> Predicate:
        return build_tenancy_predicate(principal, entity, operation).and_(
            build_subtype_predicate(grant, entity),
            entity.table.c.id == key,
        )

    def _record_key(self, entity: EntityDescriptor, record_id: Any) -> int:
        key = normalize_record_id(record_id)
        if key is None:
            raise self._not_found(entity, record_id)
        return key

    def _prepare_fields(self, entity: EntityDescriptor, fields: dict[str, Any]) -> dict[str, Any]:
        """Reject unknown columns, drop read-only ones, decode binary payloads"""
        if not isinstance(fields, dict):
            raise ValidationException("Request body must be a JSON object")

        unknown = sorted(set(fields) - entity.column_names)
        if unknown:
            raise ValidationException(f"Unknown field(s) for {entity.label}: {', '.join(unknown)}")

        values = self._drop_read_only(fields)
        for binary in entity.binary_fields:
            if binary.column in values:
                values[binary.column] = decode_payload(values[binary.column])
        return values

    def _drop_read_only(self, values: dict[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in values.items() if key not in READ_ONLY_COLUMNS}

    def _check_subtype(
        self,
        grant: CapabilityGrant,
        entity: EntityDescriptor,
        values: dict[str, Any],
        required: bool,
    ) -> None:
        column = entity.subtype_column
        if column is None or grant.subtype_allowlist is None:
            return
        if not required and column not in values:
            return
        if not subtype_allowed(grant, entity, values.get(column)):
            raise ForbiddenException(f"Forbidden: not allowed to assign this {column} on {entity.label}")

    def _place_by_subtype(
        self, entity: EntityDescriptor, values: dict[str, Any], creating: bool
    ) -> dict[str, Any]:
        """
        Rows of a centreless subtype (App Admin employees) never carry a centre;
        every other subtype must have one when created.
        """
        column = entity.subtype_column
        tenant_column = entity.tenant_column
        if not entity.centreless_subtypes or tenant_column is None:
            return values

        if column in values and normalize_record_id(values[column]) in entity.centreless_subtypes:
            return {**values, tenant_column: None}

        if creating and normalize_tenant_id(values.get(tenant_column)) is None:
            raise ValidationException(f"{entity.label} must be assigned to a centre unless it is an App Admin")
        return values

    def _not_found(self, entity: EntityDescriptor, record_id: Any) -> NotFoundException:
        return NotFoundException(f"{entity.label} {record_id} not found")

    def _not_found_parent(self, entity: EntityDescriptor, parent_id: Any) -> NotFoundException:
        return NotFoundException(f"{entity.strategy.parent.__name__} {parent_id} not found")
