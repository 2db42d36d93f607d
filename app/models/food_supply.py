"""FoodSupply, FoodConsumption, and FoodDisposal models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Float, Text, TIMESTAMP, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from . import Base


class FoodSupply(Base):
    """Stocked food item held by a kitchen."""

    __tablename__ = "food_supplies"
    __table_args__ = (
        Index("idx_food_supplies_kitchen", "kitchen_id"),
        Index("idx_food_supplies_expiration", "expiration_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    unit = Column(String(20))  # 'kg', 'l', 'units'
    category = Column(String(50))
    quantity = Column(Float, default=0)
    price_per_unit = Column(Float)
    expiration_date = Column(TIMESTAMP)
    kitchen_id = Column(UUID(as_uuid=True), ForeignKey("kitchens.id"))
    organization_id = Column(UUID(as_uuid=True), ForeignKey("organizations.id"))
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    kitchen = relationship("Kitchen", back_populates="food_supplies")
    consumptions = relationship("FoodConsumption", back_populates="food_supply")
    disposals = relationship("FoodDisposal", back_populates="food_supply")

    def __repr__(self):
        return f"<FoodSupply(name='{self.name}')>"


class FoodConsumption(Base):
    """One recorded use of an ingredient in a kitchen."""

    __tablename__ = "food_consumptions"
    __table_args__ = (
        Index("idx_food_consumptions_kitchen_date", "kitchen_id", "date"),
        Index("idx_food_consumptions_user", "user_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    date = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    kitchen_id = Column(UUID(as_uuid=True), ForeignKey("kitchens.id"), nullable=False)
    food_supply_id = Column(UUID(as_uuid=True), ForeignKey("food_supplies.id"))
    quantity = Column(Float, nullable=False, default=0)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    notes = Column(Text)

    # Relationships
    kitchen = relationship("Kitchen", back_populates="consumptions")
    food_supply = relationship("FoodSupply", back_populates="consumptions")
    user = relationship("User")

    def __repr__(self):
        return f"<FoodConsumption(quantity={self.quantity}, date={self.date})>"


class FoodDisposal(Base):
    """Explicit waste record.

    kitchen_id is nullable for older records; those are attributed to the
    kitchen of the disposed supply.
    """

    __tablename__ = "food_disposals"
    __table_args__ = (
        Index("idx_food_disposals_kitchen_created", "kitchen_id", "created_at"),
        Index("idx_food_disposals_supply", "food_supply_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    kitchen_id = Column(UUID(as_uuid=True), ForeignKey("kitchens.id"))
    food_supply_id = Column(UUID(as_uuid=True), ForeignKey("food_supplies.id"))
    recipe_id = Column(UUID(as_uuid=True), ForeignKey("recipes.id"))
    quantity = Column(Float, nullable=False, default=0)
    reason = Column(String(50))  # 'expired', 'overproduction', 'spoiled', ...
    source = Column(String(20))  # 'direct', 'recipe'
    notes = Column(Text)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))

    # Relationships
    kitchen = relationship("Kitchen", back_populates="disposals")
    food_supply = relationship("FoodSupply", back_populates="disposals")
    recipe = relationship("Recipe")
    user = relationship("User")

    def __repr__(self):
        return f"<FoodDisposal(quantity={self.quantity}, reason='{self.reason}')>"
