"""Service layer modules."""

from helpdesk.services.org_service import (
    create_org,
    get_org_by_id,
    get_org_by_slug,
)

# Import service modules (not individual functions) for cleaner access
from helpdesk.services import notification_service
from helpdesk.services import ticketing_service
from helpdesk.services import job_service
from helpdesk.services import knowledge_service

__all__ = [
    # Org service
    "get_org_by_id",
    "get_org_by_slug",
    "create_org",
    # Service modules
    "notification_service",
    "ticketing_service",
    "job_service",
    "knowledge_service",
]
