"""Kitchen model."""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Integer, TIMESTAMP, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from . import Base


class Kitchen(Base):
    """A physical kitchen. Grouping key for consumption reporting."""

    __tablename__ = "kitchens"
    __table_args__ = (
        Index("idx_kitchens_organization", "organization_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    floor_number = Column(Integer)
    organization_id = Column(UUID(as_uuid=True), ForeignKey("organizations.id"))
    created_at = Column(TIMESTAMP, default=datetime.utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="kitchens")
    food_supplies = relationship("FoodSupply", back_populates="kitchen")
    consumptions = relationship("FoodConsumption", back_populates="kitchen")
    disposals = relationship("FoodDisposal", back_populates="kitchen")
    recipe_usages = relationship("RecipeUsage", back_populates="kitchen")

    def __repr__(self):
        return f"<Kitchen(name='{self.name}')>"
