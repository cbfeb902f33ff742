"""API routers."""

from helpdesk.routers.tickets import router as tickets_router
from helpdesk.routers.knowledge import router as knowledge_router
from helpdesk.routers.notifications import router as notifications_router
from helpdesk.routers.jobs import router as jobs_router

__all__ = [
    "tickets_router",
    "knowledge_router",
    "notifications_router",
    "jobs_router",
]
