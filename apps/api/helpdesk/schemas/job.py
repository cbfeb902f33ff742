"""Pydantic schemas for background jobs."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class JobRead(BaseModel):
    """Job response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    job_type: str
    payload: dict
    result: dict | None
    run_at: datetime
    status: str
    attempts: int
    max_attempts: int
    last_error: str | None
    idempotency_key: str | None
    created_at: datetime
    started_at: datetime | None
    completed_at: datetime | None


class JobListItem(BaseModel):
    """Job list item (minimal)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    job_type: str
    status: str
    run_at: datetime
    attempts: int
    created_at: datetime
    completed_at: datetime | None
