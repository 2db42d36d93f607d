"""Test fixtures and configuration."""
import uuid
from datetime import datetime

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base
from app.models.food_supply import FoodConsumption, FoodDisposal, FoodSupply
from app.models.kitchen import Kitchen
from app.models.organization import Organization, User
from app.models.recipe import Recipe, RecipeUsage


@pytest.fixture(scope="function")
def engine():
    """Create an in-memory SQLite engine for testing."""
    # Use check_same_thread=False for compatibility with FastAPI TestClient
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=OFF")
        cursor.close()

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Create a test database session."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------

def make_uuid():
    return uuid.uuid4()


@pytest.fixture
def organization(db):
    """Default tenant shared by the factories below."""
    org = Organization(id=make_uuid(), name="Test Hospital")
    db.add(org)
    db.flush()
    return org


@pytest.fixture
def user_factory(db, organization):
    """Factory to create user profiles."""
    def _create(email=None, role="STAFF", **kwargs):
        user = User(
            id=kwargs.pop("id", make_uuid()),
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            role=role,
            is_admin=kwargs.pop("is_admin", False),
            page_access=kwargs.pop("page_access", {}),
            organization_id=kwargs.pop("organization_id", organization.id),
            **kwargs,
        )
        db.add(user)
        db.flush()
        return user
    return _create


@pytest.fixture
def kitchen_factory(db, organization):
    """Factory to create kitchens."""
    def _create(name="Main Kitchen", **kwargs):
        kitchen = Kitchen(
            id=kwargs.pop("id", make_uuid()),
            name=name,
            organization_id=kwargs.pop("organization_id", organization.id),
            **kwargs,
        )
        db.add(kitchen)
        db.flush()
        return kitchen
    return _create


@pytest.fixture
def food_supply_factory(db, organization):
    """Factory to create food supplies."""
    def _create(kitchen, name="Rice", unit="kg", price_per_unit=2.0, **kwargs):
        supply = FoodSupply(
            id=kwargs.pop("id", make_uuid()),
            name=name,
            unit=unit,
            price_per_unit=price_per_unit,
            quantity=kwargs.pop("quantity", 0),
            kitchen_id=kitchen.id if kitchen else None,
            organization_id=kwargs.pop("organization_id", organization.id),
            **kwargs,
        )
        db.add(supply)
        db.flush()
        return supply
    return _create


@pytest.fixture
def consumption_factory(db):
    """Factory to create ingredient consumption records."""
    def _create(kitchen, food_supply=None, quantity=1.0, date=None, **kwargs):
        consumption = FoodConsumption(
            id=kwargs.pop("id", make_uuid()),
            kitchen_id=kitchen.id,
            food_supply_id=food_supply.id if food_supply else None,
            quantity=quantity,
            date=date or datetime.utcnow(),
            **kwargs,
        )
        db.add(consumption)
        db.flush()
        return consumption
    return _create


@pytest.fixture
def recipe_factory(db):
    """Factory to create recipes."""
    def _create(name="Chicken Curry", is_subrecipe=False, **kwargs):
        recipe = Recipe(
            id=kwargs.pop("id", make_uuid()),
            name=name,
            is_subrecipe=is_subrecipe,
            **kwargs,
        )
        db.add(recipe)
        db.flush()
        return recipe
    return _create


@pytest.fixture
def recipe_usage_factory(db):
    """Factory to create recipe usage records."""
    def _create(kitchen, recipe=None, servings_used=1, created_at=None, **kwargs):
        usage = RecipeUsage(
            id=kwargs.pop("id", make_uuid()),
            kitchen_id=kitchen.id,
            recipe_id=recipe.id if recipe else None,
            servings_used=servings_used,
            created_at=created_at or datetime.utcnow(),
            **kwargs,
        )
        db.add(usage)
        db.flush()
        return usage
    return _create


@pytest.fixture
def disposal_factory(db):
    """Factory to create disposal (waste) records."""
    def _create(food_supply, quantity=1.0, reason="spoiled", kitchen=None, created_at=None, **kwargs):
        disposal = FoodDisposal(
            id=kwargs.pop("id", make_uuid()),
            food_supply_id=food_supply.id if food_supply else None,
            kitchen_id=kitchen.id if kitchen else None,
            quantity=quantity,
            reason=reason,
            created_at=created_at or datetime.utcnow(),
            **kwargs,
        )
        db.add(disposal)
        db.flush()
        return disposal
    return _create
