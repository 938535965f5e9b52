"""Repository executing single-statement CRUD for any registered entity."""

import logging
from contextlib import contextmanager
from typing import Any

from sqlalchemy import delete, insert, literal, select, update
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import Session

from case_manager.access.entities import EntityDescriptor
from case_manager.access.predicate import Predicate
from case_manager.core.exceptions import (
    StoreException,
    TransientStoreException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class RecordRepository:
    """
    Repository for tenant-scoped row access on one entity.

    Every method runs exactly one statement with the caller's predicate in
    its WHERE clause, then commits. There is no read-then-write window: a
    row outside the predicate is never touched.
    """

    def __init__(self, db: Session, entity: EntityDescriptor):
        self.db = db
        self.entity = entity
        self.table = entity.table

    def select_rows(self, predicate: Predicate) -> list[dict[str, Any]]:
        """Get all rows matching predicate, ordered by id"""
        stmt = predicate.apply(select(self.table)).order_by(self.table.c.id)
        with self._store_errors("list"):
            result = self.db.execute(stmt)
            return [dict(row._mapping) for row in result]

    def select_one(self, predicate: Predicate) -> dict[str, Any] | None:
        """Get the single row matching predicate (which must include the id condition)"""
        stmt = predicate.apply(select(self.table))
        with self._store_errors("get"):
            row = self.db.execute(stmt).first()
            return dict(row._mapping) if row is not None else None

    def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it with generated columns"""
        stmt = insert(self.table).values(**values).returning(*self.table.c)
        with self._store_errors("create"):
            row = self.db.execute(stmt).one()
            self.db.commit()
            return dict(row._mapping)

    def insert_guarded(self, values: dict[str, Any], guard: Predicate) -> dict[str, Any] | None:
        """
        Insert a row only if guard holds, as one INSERT ... SELECT ... WHERE.

        Returns:
            The inserted row, or None when the guard matched nothing
        """
        names = list(values)
        source = select(
            *[literal(values[name], type_=self.table.c[name].type) for name in names]
        ).where(guard.clause)
        stmt = insert(self.table).from_select(names, source).returning(*self.table.c)
        with self._store_errors("create"):
            row = self.db.execute(stmt).first()
            self.db.commit()
            return dict(row._mapping) if row is not None else None

    def update(self, values: dict[str, Any], predicate: Predicate) -> dict[str, Any] | None:
        """
        Update the row matching predicate.

        Returns:
            Updated row, or None if no row matched
        """
        self._require_self_contained(predicate)
        stmt = (
            update(self.table)
            .where(predicate.clause)
            .values(**values)
            .returning(*self.table.c)
        )
        with self._store_errors("update"):
            row = self.db.execute(stmt).first()
            self.db.commit()
            return dict(row._mapping) if row is not None else None

    def delete(self, predicate: Predicate) -> dict[str, Any] | None:
        """
        Delete the row matching predicate.

        Returns:
            Deleted row, or None if no row matched
        """
        self._require_self_contained(predicate)
        stmt = delete(self.table).where(predicate.clause).returning(*self.table.c)
        with self._store_errors("delete"):
            row = self.db.execute(stmt).first()
            self.db.commit()
            return dict(row._mapping) if row is not None else None

    def _require_self_contained(self, predicate: Predicate) -> None:
        # UPDATE and DELETE cannot carry joins
        if predicate.joins:
            raise ValueError(f"Write predicate for {self.entity.label} must not require joins")

    @contextmanager
    def _store_errors(self, operation: str):
        """
        Translate store failures into the core error taxonomy.

        The caught exception is not chained: its message contains bound
        parameter values.
        """
        label = self.entity.label
        try:
            yield
        except IntegrityError:
            self.db.rollback()
            logger.warning("%s on %s violated a data constraint", operation, label)
            raise ValidationException(f"{operation} on {label} violates a data constraint") from None
        except (OperationalError, PoolTimeoutError) as exc:
            self.db.rollback()
            logger.error("%s on %s failed transiently (%s)", operation, label, type(exc).__name__)
            raise TransientStoreException(operation, label) from None
        except DBAPIError as exc:
            self.db.rollback()
            if exc.connection_invalidated:
                logger.error("%s on %s lost its connection", operation, label)
                raise TransientStoreException(operation, label) from None
            logger.error("%s on %s failed (%s)", operation, label, type(exc).__name__)
            raise StoreException(operation, label) from None
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("%s on %s failed (%s)", operation, label, type(exc).__name__)
            raise StoreException(operation, label) from None
