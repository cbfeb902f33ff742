"""Organization service - tenants, their users and support teams."""

from uuid import UUID

from sqlalchemy.orm import Session

from helpdesk.db.enums import UserRole
from helpdesk.db.models import Organization, SupportTeam, UserProfile


def get_org_by_id(db: Session, org_id: UUID) -> Organization | None:
    """Get organization by ID."""
    return db.query(Organization).filter(Organization.id == org_id).first()


def get_org_by_slug(db: Session, slug: str) -> Organization | None:
    """Get organization by slug."""
    return db.query(Organization).filter(Organization.slug == slug.lower()).first()


def create_org(db: Session, name: str, slug: str, ai_enabled: bool = True) -> Organization:
    """
    Create a new organization.

    Raises:
        IntegrityError: If slug already exists
    """
    org = Organization(name=name, slug=slug.lower(), ai_enabled=ai_enabled)
    db.add(org)
    db.commit()
    db.refresh(org)
    return org


def create_user_profile(
    db: Session,
    org_id: UUID,
    email: str,
    display_name: str | None = None,
    role: UserRole = UserRole.CUSTOMER,
) -> UserProfile:
    profile = UserProfile(
        organization_id=org_id,
        email=email.lower(),
        display_name=display_name,
        role=role.value,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def create_team(db: Session, org_id: UUID, name: str) -> SupportTeam:
    team = SupportTeam(organization_id=org_id, name=name)
    db.add(team)
    db.commit()
    db.refresh(team)
    return team
