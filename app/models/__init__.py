"""SQLAlchemy models for the kitchen operations store."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models to register them with Base.metadata
from .organization import Organization, User
from .kitchen import Kitchen
from .food_supply import FoodSupply, FoodConsumption, FoodDisposal
from .recipe import Recipe, RecipeUsage

__all__ = [
    "Base",
    "Organization",
    "User",
    "Kitchen",
    "FoodSupply",
    "FoodConsumption",
    "FoodDisposal",
    "Recipe",
    "RecipeUsage",
]
