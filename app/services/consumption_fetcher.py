"""Fetch consumption, recipe usage and waste rows for a reporting period.

ORM rows are normalized here, once, into plain dataclasses so the
aggregation code never deals with missing joins: unknown names become
"Unknown", missing units "units", and missing numbers 0.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query, Session, contains_eager, joinedload

from app.models.food_supply import FoodConsumption, FoodDisposal, FoodSupply
from app.models.kitchen import Kitchen
from app.models.recipe import RecipeUsage
from app.services.access import AccessScope
from app.services.periods import Period

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"
DEFAULT_UNIT = "units"
UNKNOWN_REASON = "unknown"
EXPIRED_REASON = "expired"


@dataclass(frozen=True)
class KitchenRef:
    id: UUID
    name: str
    floor_number: Optional[int] = None


@dataclass(frozen=True)
class ConsumptionRow:
    """One ingredient consumption event."""

    kitchen_id: UUID
    date: datetime
    quantity: float
    item_name: str
    unit: str
    price_per_unit: float

    @property
    def cost(self) -> float:
        return self.quantity * self.price_per_unit


@dataclass(frozen=True)
class RecipeUsageRow:
    """One recipe or sub-recipe preparation with its recorded financials."""

    kitchen_id: UUID
    created_at: datetime
    recipe_name: str
    is_subrecipe: bool
    servings_used: float
    cost: float
    selling_price: float
    waste: float
    profit: float


@dataclass(frozen=True)
class WasteRow:
    """A disposal record, or an expired supply counted as waste."""

    kitchen_id: Optional[UUID]
    occurred_at: Optional[datetime]
    quantity: float
    reason: str
    item_name: str
    unit: str
    price_per_unit: float

    @property
    def cost(self) -> float:
        return self.quantity * self.price_per_unit


@dataclass
class KitchenRows:
    """One kitchen's slice of a snapshot."""

    consumptions: list[ConsumptionRow] = field(default_factory=list)
    recipe_usages: list[RecipeUsageRow] = field(default_factory=list)
    waste: list[WasteRow] = field(default_factory=list)
    previous_consumptions: list[ConsumptionRow] = field(default_factory=list)


@dataclass
class ConsumptionSnapshot:
    """Everything the aggregator needs for one report, read in one pass."""

    kitchens: list[KitchenRef] = field(default_factory=list)
    consumptions: list[ConsumptionRow] = field(default_factory=list)
    recipe_usages: list[RecipeUsageRow] = field(default_factory=list)
    waste: list[WasteRow] = field(default_factory=list)
    previous_consumptions: list[ConsumptionRow] = field(default_factory=list)
    previous_waste: list[WasteRow] = field(default_factory=list)

    def for_kitchen(self, kitchen_id: UUID) -> KitchenRows:
        return KitchenRows(
            consumptions=[r for r in self.consumptions if r.kitchen_id == kitchen_id],
            recipe_usages=[r for r in self.recipe_usages if r.kitchen_id == kitchen_id],
            waste=[r for r in self.waste if r.kitchen_id == kitchen_id],
            previous_consumptions=[
                r for r in self.previous_consumptions if r.kitchen_id == kitchen_id
            ],
        )


# ============================================================================
# Normalization
# ============================================================================


def _number(value) -> float:
    return float(value) if value is not None else 0.0


def to_consumption_row(consumption: FoodConsumption) -> ConsumptionRow:
    supply = consumption.food_supply
    return ConsumptionRow(
        kitchen_id=consumption.kitchen_id,
        date=consumption.date,
        quantity=_number(consumption.quantity),
        item_name=(supply.name if supply else None) or UNKNOWN_NAME,
        unit=(supply.unit if supply else None) or DEFAULT_UNIT,
        price_per_unit=_number(supply.price_per_unit if supply else None),
    )


def to_recipe_usage_row(usage: RecipeUsage) -> RecipeUsageRow:
    recipe = usage.recipe
    return RecipeUsageRow(
        kitchen_id=usage.kitchen_id,
        created_at=usage.created_at,
        recipe_name=(recipe.name if recipe else None) or UNKNOWN_NAME,
        is_subrecipe=bool(recipe.is_subrecipe) if recipe else False,
        # A usage without a serving count is one preparation
        servings_used=_number(usage.servings_used) or 1.0,
        cost=_number(usage.cost),
        selling_price=_number(usage.selling_price),
        waste=_number(usage.waste),
        profit=_number(usage.profit),
    )


def to_disposal_waste_row(disposal: FoodDisposal) -> WasteRow:
    supply = disposal.food_supply
    return WasteRow(
        kitchen_id=disposal.kitchen_id or (supply.kitchen_id if supply else None),
        occurred_at=disposal.created_at,
        quantity=_number(disposal.quantity),
        reason=disposal.reason or UNKNOWN_REASON,
        item_name=(supply.name if supply else None) or UNKNOWN_NAME,
        unit=(supply.unit if supply else None) or DEFAULT_UNIT,
        price_per_unit=_number(supply.price_per_unit if supply else None),
    )


def to_expired_waste_row(supply: FoodSupply) -> WasteRow:
    return WasteRow(
        kitchen_id=supply.kitchen_id,
        occurred_at=supply.expiration_date,
        quantity=_number(supply.quantity),
        reason=EXPIRED_REASON,
        item_name=supply.name or UNKNOWN_NAME,
        unit=supply.unit or DEFAULT_UNIT,
        price_per_unit=_number(supply.price_per_unit),
    )


# ============================================================================
# Queries
# ============================================================================


def _owned_by(query: Query, user_column, scope: AccessScope) -> Query:
    """Restrict a query to the caller's own rows unless they are elevated."""
    if scope.elevated:
        return query
    return query.filter(user_column == scope.user_id)


def get_tenant_kitchens(db: Session, scope: AccessScope) -> list[KitchenRef]:
    """Kitchens of the caller's organization; none without an organization."""
    if scope.organization_id is None:
        return []
    kitchens = (
        db.query(Kitchen)
        .filter(Kitchen.organization_id == scope.organization_id)
        .order_by(Kitchen.name, Kitchen.id)
        .all()
    )
    return [KitchenRef(id=k.id, name=k.name, floor_number=k.floor_number) for k in kitchens]


def fetch_consumptions(
    db: Session,
    scope: AccessScope,
    kitchen_ids: list[UUID],
    start: datetime,
    end: datetime,
    include_end: bool = True,
) -> list[ConsumptionRow]:
    end_clause = FoodConsumption.date <= end if include_end else FoodConsumption.date < end
    query = (
        db.query(FoodConsumption)
        .options(joinedload(FoodConsumption.food_supply))
        .filter(FoodConsumption.kitchen_id.in_(kitchen_ids))
        .filter(FoodConsumption.date >= start, end_clause)
        .order_by(FoodConsumption.date, FoodConsumption.id)
    )
    query = _owned_by(query, FoodConsumption.user_id, scope)
    return [to_consumption_row(c) for c in query.all()]


def fetch_recipe_usages(
    db: Session,
    scope: AccessScope,
    kitchen_ids: list[UUID],
    start: datetime,
    end: datetime,
) -> list[RecipeUsageRow]:
    query = (
        db.query(RecipeUsage)
        .options(joinedload(RecipeUsage.recipe))
        .filter(RecipeUsage.kitchen_id.in_(kitchen_ids))
        .filter(RecipeUsage.created_at >= start, RecipeUsage.created_at <= end)
        .order_by(RecipeUsage.created_at, RecipeUsage.id)
    )
    query = _owned_by(query, RecipeUsage.user_id, scope)
    return [to_recipe_usage_row(u) for u in query.all()]


def fetch_disposals(
    db: Session,
    scope: AccessScope,
    kitchen_ids: list[UUID],
    start: datetime,
    end: datetime,
    include_end: bool = True,
) -> list[WasteRow]:
    """Disposals in the window, including legacy rows with no kitchen_id."""
    end_clause = FoodDisposal.created_at <= end if include_end else FoodDisposal.created_at < end
    query = (
        db.query(FoodDisposal)
        .outerjoin(FoodDisposal.food_supply)
        .options(contains_eager(FoodDisposal.food_supply))
        .filter(
            or_(
                FoodDisposal.kitchen_id.in_(kitchen_ids),
                and_(
                    FoodDisposal.kitchen_id.is_(None),
                    FoodSupply.kitchen_id.in_(kitchen_ids),
                ),
            )
        )
        .filter(FoodDisposal.created_at >= start, end_clause)
        .order_by(FoodDisposal.created_at, FoodDisposal.id)
    )
    query = _owned_by(query, FoodDisposal.user_id, scope)
    return [to_disposal_waste_row(d) for d in query.all()]


def fetch_expired_supplies(
    db: Session,
    scope: AccessScope,
    kitchen_ids: list[UUID],
    start: datetime,
    end: datetime,
    include_end: bool = True,
) -> list[WasteRow]:
    """Supplies whose expiration date falls in the window, as implicit waste."""
    end_clause = (
        FoodSupply.expiration_date <= end if include_end else FoodSupply.expiration_date < end
    )
    query = (
        db.query(FoodSupply)
        .filter(FoodSupply.kitchen_id.in_(kitchen_ids))
        .filter(FoodSupply.expiration_date >= start, end_clause)
        .order_by(FoodSupply.expiration_date, FoodSupply.id)
    )
    query = _owned_by(query, FoodSupply.user_id, scope)
    return [to_expired_waste_row(s) for s in query.all()]


def fetch_consumption_snapshot(
    db: Session,
    scope: AccessScope,
    period: Period,
) -> ConsumptionSnapshot:
    """Read every row set a consumption report needs.

    Store errors propagate to the caller; a snapshot is either complete or
    not returned at all.
    """
    kitchens = get_tenant_kitchens(db, scope)
    if not kitchens:
        return ConsumptionSnapshot()

    kitchen_ids = [k.id for k in kitchens]
    current = (period.current_start, period.current_end)
    previous = (period.previous_start, period.previous_end)

    snapshot = ConsumptionSnapshot(
        kitchens=kitchens,
        consumptions=fetch_consumptions(db, scope, kitchen_ids, *current),
        recipe_usages=fetch_recipe_usages(db, scope, kitchen_ids, *current),
        waste=(
            fetch_disposals(db, scope, kitchen_ids, *current)
            + fetch_expired_supplies(db, scope, kitchen_ids, *current)
        ),
        previous_consumptions=fetch_consumptions(
            db, scope, kitchen_ids, *previous, include_end=False
        ),
        previous_waste=(
            fetch_disposals(db, scope, kitchen_ids, *previous, include_end=False)
            + fetch_expired_supplies(db, scope, kitchen_ids, *previous, include_end=False)
        ),
    )

    logger.debug(
        f"Fetched {len(snapshot.consumptions)} consumptions, "
        f"{len(snapshot.recipe_usages)} recipe usages and {len(snapshot.waste)} waste rows "
        f"for {len(kitchens)} kitchens"
    )
    return snapshot
