"""Row-scoping rules for food-supply data.

Admins, managers and users granted the food-supply page see every record of
their organization. Everyone else only sees records they created.
"""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.organization import User

FOOD_SUPPLY_PAGE = "/food-supply"


@dataclass(frozen=True)
class AccessScope:
    """Who is asking, for which tenant, and whether rows are user-filtered."""

    user_id: UUID
    organization_id: Optional[UUID]
    elevated: bool


def is_admin_or_manager(user: User) -> bool:
    return bool(user.is_admin) or user.role in (User.ROLE_ADMIN, User.ROLE_MANAGER)


def has_page_access(user: User, path: str) -> bool:
    """True only for an explicit grant; missing or malformed maps deny."""
    page_access = user.page_access
    if not isinstance(page_access, dict):
        return False
    return page_access.get(path) is True


def get_user_profile(db: Session, user_id: UUID) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def build_access_scope(user: User, page: str = FOOD_SUPPLY_PAGE) -> AccessScope:
    return AccessScope(
        user_id=user.id,
        organization_id=user.organization_id,
        elevated=is_admin_or_manager(user) or has_page_access(user, page),
    )
