"""Schemas for generated documents."""

from datetime import datetime
from typing import Optional

from .base import CamelModel


class DocumentResponse(CamelModel):
    id: str
    doc_type: str
    candidate_id: Optional[str] = None
    employee_id: Optional[str] = None
    file_path: str
    issued_by: Optional[str] = None
    created_at: datetime
