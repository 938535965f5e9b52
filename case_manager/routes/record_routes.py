"""Generic record routes.

One router per registered entity, all delegating to RecordService. Status
mapping lives in the exception handlers in main.py.

Handlers are plain functions so FastAPI runs the blocking store calls in its
threadpool instead of on the event loop.
"""

from decimal import Decimal
from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from case_manager.access.entities import EntityDescriptor
from case_manager.database import get_db
from case_manager.dependencies import get_principal
from case_manager.models.principal import Principal
from case_manager.schemas.record_schemas import RecordDeleteResponse, RecordListResponse
from case_manager.services.binary_fields import StoredFile, encode_payload
from case_manager.services.record_service import RecordService


def to_json_record(row: dict[str, Any]) -> dict[str, Any]:
    """Base64-encode raw binary payloads and turn numerics into floats for JSON"""
    return {key: _json_value(value) for key, value in row.items()}


def _json_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return encode_payload(value)
    if isinstance(value, Decimal):
        return float(value)
    return value


def file_response(stored: StoredFile, disposition: str) -> Response:
    return Response(
        content=stored.content,
        media_type=stored.mime_type,
        headers={
            "Content-Disposition": f'{disposition}; filename="{quote(stored.filename)}"',
        },
    )


def build_record_router(entity: EntityDescriptor) -> APIRouter:
    """Create list/get/create/update/delete routes (and file routes) for one entity"""
    router = APIRouter()

    @router.get("", response_model=RecordListResponse)
    def list_records(
        principal: Principal = Depends(get_principal), db: Session = Depends(get_db)
    ):
        """List records visible to the caller"""
        service = RecordService(db)
        records = [to_json_record(row) for row in service.list_records(principal, entity)]
        return RecordListResponse(records=records, total=len(records))

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_record(
        fields: dict[str, Any] = Body(...),
        principal: Principal = Depends(get_principal),
        db: Session = Depends(get_db),
    ):
        """Create a record in the caller's centre (App Admin may target any centre)"""
        service = RecordService(db)
        return to_json_record(service.create_record(principal, entity, fields))

    @router.get("/{record_id}")
    def get_record(
        record_id: str, principal: Principal = Depends(get_principal), db: Session = Depends(get_db)
    ):
        """Get a specific record"""
        service = RecordService(db)
        return to_json_record(service.get_record(principal, entity, record_id))

    @router.put("/{record_id}")
    @router.patch("/{record_id}")
    def update_record(
        record_id: str,
        fields: dict[str, Any] = Body(...),
        principal: Principal = Depends(get_principal),
        db: Session = Depends(get_db),
    ):
        """Update a record; created_by is ignored, updated_by is always the caller"""
        service = RecordService(db)
        return to_json_record(service.update_record(principal, entity, record_id, fields))

    @router.delete("/{record_id}", response_model=RecordDeleteResponse)
    def delete_record(
        record_id: str, principal: Principal = Depends(get_principal), db: Session = Depends(get_db)
    ):
        """Delete a record"""
        service = RecordService(db)
        deleted = service.delete_record(principal, entity, record_id)
        return RecordDeleteResponse(message="Deleted successfully", id=deleted["id"])

    if entity.binary_fields:

        @router.get("/{record_id}/view")
        def view_file(
            record_id: str,
            principal: Principal = Depends(get_principal),
            db: Session = Depends(get_db),
        ):
            """Stream the stored file inline"""
            service = RecordService(db)
            return file_response(service.get_file(principal, entity, record_id), "inline")

        @router.get("/{record_id}/download")
        def download_file(
            record_id: str,
            principal: Principal = Depends(get_principal),
            db: Session = Depends(get_db),
        ):
            """Stream the stored file as an attachment"""
            service = RecordService(db)
            return file_response(service.get_file(principal, entity, record_id), "attachment")

    return router
