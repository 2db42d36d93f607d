"""Organization (tenant) and User profile models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Boolean, TIMESTAMP, ForeignKey, JSON, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from . import Base


class Organization(Base):
    """A tenant. Kitchens and supplies belong to exactly one organization."""

    __tablename__ = "organizations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)

    # Relationships
    users = relationship("User", back_populates="organization")
    kitchens = relationship("Kitchen", back_populates="organization")

    def __repr__(self):
        return f"<Organization(name='{self.name}')>"


class User(Base):
    """Profile record for an identity issued by the auth service.

    The primary key is the auth service's subject id, so a verified token
    maps directly onto a row here.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_organization", "organization_id"),
    )

    ROLE_ADMIN = "ADMIN"
    ROLE_MANAGER = "MANAGER"
    ROLE_STAFF = "STAFF"

    id = Column(UUID(as_uuid=True), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default=ROLE_STAFF)
    is_admin = Column(Boolean, default=False)
    page_access = Column(JSON)  # {"/food-supply": true, ...}
    organization_id = Column(UUID(as_uuid=True), ForeignKey("organizations.id"))
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="users")

    def __repr__(self):
        return f"<User(email='{self.email}', role='{self.role}')>"
