"""Background job ORM model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Text, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.db.base import Base, JSONType
from helpdesk.db.enums import DEFAULT_JOB_STATUS


class Job(Base):
    """
    Background job for async processing.

    Used for: AI triage of inbound ticket messages, knowledge indexing.
    The idempotency key collapses duplicate triggers onto one job.
    """

    __tablename__ = "jobs"
    __table_args__ = (
        Index("idx_jobs_pending", "status", "run_at"),
        Index("idx_jobs_org", "organization_id", "created_at"),
        Index("uq_job_idempotency", "idempotency_key", unique=True),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )

    job_type: Mapped[str] = mapped_column(String(50), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    result: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    run_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_JOB_STATUS.value, nullable=False
    )
    attempts: Mapped[int] = mapped_column(Integer, server_default=text("0"), default=0, nullable=False)
    max_attempts: Mapped[int] = mapped_column(Integer, server_default=text("3"), default=3, nullable=False)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    started_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Idempotency key for deduplication (unique index)
    idempotency_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
