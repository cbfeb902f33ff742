"""Job-related enums."""

from enum import Enum


class JobType(str, Enum):
    """Types of background jobs."""

    TICKET_MESSAGE_PROCESS = "ticket_message_process"  # AI triage of one inbound message
    KNOWLEDGE_INDEX = "knowledge_index"  # Chunk + embed a knowledge source


class JobStatus(str, Enum):
    """Status of background jobs."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
