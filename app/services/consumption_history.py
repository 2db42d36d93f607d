"""Per-kitchen waste reasons and the combined consumption/waste history feed."""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session, contains_eager, joinedload

from app.models.food_supply import FoodConsumption, FoodDisposal, FoodSupply
from app.models.kitchen import Kitchen
from app.schemas.consumption import (
    ConsumptionHistoryRecord,
    HistoryFoodSupply,
    HistoryKitchen,
    KitchenWasteReason,
    KitchenWasteReasons,
)
from app.services.access import AccessScope
from app.services.consumption_fetcher import UNKNOWN_NAME

logger = logging.getLogger(__name__)


def get_tenant_kitchen(db: Session, scope: AccessScope, kitchen_id: UUID) -> Optional[Kitchen]:
    if scope.organization_id is None:
        return None
    return (
        db.query(Kitchen)
        .filter(Kitchen.id == kitchen_id)
        .filter(Kitchen.organization_id == scope.organization_id)
        .first()
    )


def get_kitchen_waste_reasons(db: Session, kitchen_id: UUID) -> KitchenWasteReasons:
    """Disposed quantity per reason for supplies stocked by a kitchen.

    Percentages are whole numbers of the kitchen's total disposed quantity.
    """
    rows = (
        db.query(FoodDisposal.reason, func.sum(FoodDisposal.quantity).label("quantity"))
        .join(FoodSupply, FoodDisposal.food_supply_id == FoodSupply.id)
        .filter(FoodSupply.kitchen_id == kitchen_id)
        .group_by(FoodDisposal.reason)
        .all()
    )
    if not rows:
        return KitchenWasteReasons(reasons=[], total_waste=0)

    total_waste = sum(row.quantity or 0 for row in rows)
    reasons = [
        KitchenWasteReason(
            reason=row.reason or "Unknown",
            percentage=round((row.quantity or 0) / total_waste * 100) if total_waste > 0 else 0,
            quantity=row.quantity or 0,
        )
        for row in rows
    ]
    reasons.sort(key=lambda r: r.percentage, reverse=True)
    return KitchenWasteReasons(reasons=reasons, total_waste=total_waste)


def _supply_info(supply: Optional[FoodSupply]) -> Optional[HistoryFoodSupply]:
    if supply is None:
        return None
    return HistoryFoodSupply(
        name=supply.name or UNKNOWN_NAME,
        unit=supply.unit,
        price_per_unit=supply.price_per_unit,
    )


def get_consumption_history(
    db: Session,
    scope: AccessScope,
    food_supply_id: Optional[UUID] = None,
    kitchen_id: Optional[UUID] = None,
) -> list[ConsumptionHistoryRecord]:
    """Consumption and disposal records, newest first.

    Disposals are flagged with is_waste and labelled by where they came from
    instead of the kitchen they belong to. Disposals without a kitchen are
    attributed to their supply's kitchen, as in the consumption report.
    """
    if scope.organization_id is None:
        return []

    tenant_kitchens = select(Kitchen.id).where(Kitchen.organization_id == scope.organization_id)

    consumptions = (
        db.query(FoodConsumption)
        .options(
            joinedload(FoodConsumption.kitchen),
            joinedload(FoodConsumption.food_supply),
            joinedload(FoodConsumption.user),
        )
        .filter(FoodConsumption.kitchen_id.in_(tenant_kitchens))
    )
    disposals = (
        db.query(FoodDisposal)
        .outerjoin(FoodDisposal.food_supply)
        .options(
            contains_eager(FoodDisposal.food_supply),
            joinedload(FoodDisposal.recipe),
            joinedload(FoodDisposal.user),
        )
        .filter(
            or_(
                FoodDisposal.kitchen_id.in_(tenant_kitchens),
                and_(FoodDisposal.kitchen_id.is_(None), FoodSupply.kitchen_id.in_(tenant_kitchens)),
            )
        )
    )

    if food_supply_id:
        consumptions = consumptions.filter(FoodConsumption.food_supply_id == food_supply_id)
        disposals = disposals.filter(FoodDisposal.food_supply_id == food_supply_id)
    if kitchen_id:
        consumptions = consumptions.filter(FoodConsumption.kitchen_id == kitchen_id)
        disposals = disposals.filter(
            or_(
                FoodDisposal.kitchen_id == kitchen_id,
                and_(FoodDisposal.kitchen_id.is_(None), FoodSupply.kitchen_id == kitchen_id),
            )
        )
    if not scope.elevated:
        consumptions = consumptions.filter(FoodConsumption.user_id == scope.user_id)
        disposals = disposals.filter(FoodDisposal.user_id == scope.user_id)

    records = [
        ConsumptionHistoryRecord(
            id=c.id,
            food_supply_id=c.food_supply_id,
            quantity=c.quantity or 0,
            date=c.date,
            kitchen=HistoryKitchen(
                name=c.kitchen.name,
                floor_number=str(c.kitchen.floor_number) if c.kitchen.floor_number is not None else None,
            ) if c.kitchen else None,
            food_supply=_supply_info(c.food_supply),
            user_email=c.user.email if c.user else None,
            notes=c.notes or "",
        )
        for c in consumptions.all()
    ]
    records.extend(
        ConsumptionHistoryRecord(
            id=d.id,
            food_supply_id=d.food_supply_id,
            quantity=d.quantity or 0,
            date=d.created_at,
            is_waste=True,
            reason=d.reason,
            source=d.source,
            recipe_id=d.recipe_id,
            recipe_name=d.recipe.name if d.recipe else None,
            kitchen=HistoryKitchen(
                name="Recipe Waste" if d.source == "recipe" else "Direct Waste",
                floor_number="-",
            ),
            food_supply=_supply_info(d.food_supply),
            user_email=d.user.email if d.user else None,
            notes=d.notes or "",
        )
        for d in disposals.all()
    )

    records.sort(key=lambda r: r.date, reverse=True)
    logger.debug(f"Consumption history returned {len(records)} records")
    return records
