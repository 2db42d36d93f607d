"""Recipe and RecipeUsage models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Boolean, Float, TIMESTAMP, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from . import Base


class Recipe(Base):
    """Recipe or sub-recipe prepared in a kitchen."""

    __tablename__ = "recipes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    is_subrecipe = Column(Boolean, default=False)
    total_cost = Column(Float)  # Cost per serving
    selling_price = Column(Float)  # Price per serving
    kitchen_id = Column(UUID(as_uuid=True), ForeignKey("kitchens.id"))
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    usages = relationship("RecipeUsage", back_populates="recipe")

    def __repr__(self):
        return f"<Recipe(name='{self.name}')>"


class RecipeUsage(Base):
    """One preparation of a recipe.

    Financial and waste figures are captured at preparation time so later
    price changes do not rewrite history.
    """

    __tablename__ = "recipe_usages"
    __table_args__ = (
        Index("idx_recipe_usages_kitchen_created", "kitchen_id", "created_at"),
        Index("idx_recipe_usages_user", "user_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    kitchen_id = Column(UUID(as_uuid=True), ForeignKey("kitchens.id"), nullable=False)
    recipe_id = Column(UUID(as_uuid=True), ForeignKey("recipes.id"))
    servings_used = Column(Float)
    cost = Column(Float)
    selling_price = Column(Float)
    waste = Column(Float)
    profit = Column(Float)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))

    # Relationships
    kitchen = relationship("Kitchen", back_populates="recipe_usages")
    recipe = relationship("Recipe", back_populates="usages")

    def __repr__(self):
        return f"<RecipeUsage(recipe_id={self.recipe_id}, servings_used={self.servings_used})>"
