"""User role enums."""

from enum import Enum


class UserRole(str, Enum):
    """Role of a helpdesk user profile."""

    CUSTOMER = "customer"
    AGENT = "agent"
    ADMIN = "admin"
