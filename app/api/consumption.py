"""Kitchen consumption, monthly financials, waste reason and consumption history endpoints."""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth import get_access_scope
from app.database import get_db
from app.schemas.consumption import (
    ConsumptionHistoryRecord,
    ConsumptionResponse,
    KitchenWasteReasons,
    MonthlyKitchenConsumption,
)
from app.services.access import AccessScope
from app.services.consumption_history import (
    get_consumption_history,
    get_kitchen_waste_reasons,
    get_tenant_kitchen,
)
from app.services.consumption_report import build_consumption_report
from app.services.monthly_consumption import get_monthly_kitchen_consumption

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/food-supply", tags=["food-supply"])
kitchens_router = APIRouter(prefix="/kitchens", tags=["kitchens"])

CACHE_CONTROL = "private, max-age=60, stale-while-revalidate=30"


@router.get("/kitchen-consumption", response_model=ConsumptionResponse)
def kitchen_consumption(
    response: Response,
    days: Optional[str] = Query(None, description="Window length in days; invalid values use the default"),
    top_n: int = Query(3, ge=1, le=20, description="Items listed in most consumed/wasted"),
    include_breakdowns: bool = Query(True, description="Include per-day and per-month item series"),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Consumption and waste per kitchen with a tenant-wide summary.

    Returns `kitchens`, `summary` and `metadata`. Non-admin users without
    food-supply page access only see figures built from their own records.
    """
    try:
        report = build_consumption_report(
            db,
            scope,
            days=days,
            top_n=top_n,
            include_breakdowns=include_breakdowns,
        )
    except SQLAlchemyError:
        logger.exception("Kitchen consumption report failed")
        raise HTTPException(status_code=500, detail="Failed to load kitchen consumption data")

    response.headers["Cache-Control"] = CACHE_CONTROL
    return report


@router.get("/consumption-history", response_model=list[ConsumptionHistoryRecord])
def consumption_history(
    response: Response,
    food_supply_id: Optional[UUID] = None,
    kitchen_id: Optional[UUID] = None,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Consumption and disposal records in one feed, newest first."""
    try:
        records = get_consumption_history(db, scope, food_supply_id, kitchen_id)
    except SQLAlchemyError:
        logger.exception("Consumption history query failed")
        raise HTTPException(status_code=500, detail="Failed to load consumption history")

    response.headers["Cache-Control"] = CACHE_CONTROL
    return records


@kitchens_router.get("/monthly-consumption", response_model=MonthlyKitchenConsumption)
def monthly_kitchen_consumption(
    response: Response,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Cost, revenue and profit per kitchen and month over the last year."""
    try:
        report = get_monthly_kitchen_consumption(db, scope)
    except SQLAlchemyError:
        logger.exception("Monthly kitchen consumption query failed")
        raise HTTPException(status_code=500, detail="Failed to load monthly kitchen consumption")

    response.headers["Cache-Control"] = CACHE_CONTROL
    return report


@kitchens_router.get("/{kitchen_id}/waste-reasons", response_model=KitchenWasteReasons)
def kitchen_waste_reasons(
    kitchen_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Share of disposed quantity per waste reason for one kitchen."""
    try:
        kitchen = get_tenant_kitchen(db, scope, kitchen_id)
        if not kitchen:
            raise HTTPException(status_code=404, detail="Kitchen not found")
        return get_kitchen_waste_reasons(db, kitchen.id)
    except SQLAlchemyError:
        logger.exception(f"Waste reasons query failed for kitchen {kitchen_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch waste reasons")
