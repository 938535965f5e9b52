from typing import Any
from pydantic import BaseModel


class RecordListResponse(BaseModel):
    """Schema for a list of records"""

    records: list[dict[str, Any]]
    total: int


class RecordDeleteResponse(BaseModel):
    """Response after deleting a record"""

    message: str
    id: int
