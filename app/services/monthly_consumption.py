"""Monthly cost, revenue and profit per kitchen over the last twelve months."""
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.schemas.consumption import (
    KitchenFinancialTotals,
    KitchenMonthFinancials,
    MonthFinancials,
    MonthlyKitchenConsumption,
)
from app.services.access import AccessScope
from app.services.consumption_aggregator import finite
from app.services.consumption_fetcher import (
    ConsumptionRow,
    KitchenRef,
    RecipeUsageRow,
    fetch_consumptions,
    fetch_recipe_usages,
    get_tenant_kitchens,
)
from app.services.periods import months_before

logger = logging.getLogger(__name__)

MONTHLY_WINDOW_MONTHS = 12


def summarize_monthly_financials(
    kitchens: list[KitchenRef],
    consumptions: list[ConsumptionRow],
    recipe_usages: list[RecipeUsageRow],
) -> MonthlyKitchenConsumption:
    """Group ingredient and recipe financials by month and kitchen.

    Ingredient consumption only adds cost. Recipe usages add their recorded
    cost, selling price and profit. Months without any rows are left out;
    the remaining ones are listed oldest first with every kitchen present.
    Kitchen totals are ordered by total cost, highest first.
    """
    # (month, kitchen_id) -> [cost, revenue, profit]
    figures: dict[tuple[str, UUID], list[float]] = {}

    for row in consumptions:
        entry = figures.setdefault((row.date.strftime("%Y-%m"), row.kitchen_id), [0.0, 0.0, 0.0])
        entry[0] += finite(row.cost)
    for row in recipe_usages:
        entry = figures.setdefault((row.created_at.strftime("%Y-%m"), row.kitchen_id), [0.0, 0.0, 0.0])
        entry[0] += finite(row.cost)
        entry[1] += finite(row.selling_price)
        entry[2] += finite(row.profit)

    months = sorted({month for month, _ in figures})
    chart_data = []
    for month in months:
        per_kitchen = []
        for kitchen in kitchens:
            cost, revenue, profit = figures.get((month, kitchen.id), (0.0, 0.0, 0.0))
            per_kitchen.append(KitchenMonthFinancials(
                kitchen_id=kitchen.id, name=kitchen.name, cost=cost, revenue=revenue, profit=profit,
            ))
        chart_data.append(MonthFinancials(month=month, kitchens=per_kitchen))

    totals = []
    for kitchen in kitchens:
        rows = [value for (_, kitchen_id), value in figures.items() if kitchen_id == kitchen.id]
        totals.append(KitchenFinancialTotals(
            id=kitchen.id,
            name=kitchen.name,
            floor_number=kitchen.floor_number,
            total_cost=finite(sum(r[0] for r in rows)),
            total_revenue=finite(sum(r[1] for r in rows)),
            total_profit=finite(sum(r[2] for r in rows)),
        ))
    totals.sort(key=lambda t: t.total_cost, reverse=True)

    return MonthlyKitchenConsumption(months=months, chart_data=chart_data, kitchen_totals=totals)


def get_monthly_kitchen_consumption(
    db: Session,
    scope: AccessScope,
    now: Optional[datetime] = None,
) -> MonthlyKitchenConsumption:
    if now is None:
        now = datetime.utcnow()
    start = months_before(now, MONTHLY_WINDOW_MONTHS)

    kitchens = get_tenant_kitchens(db, scope)
    if not kitchens:
        return MonthlyKitchenConsumption(months=[], chart_data=[], kitchen_totals=[])

    kitchen_ids = [k.id for k in kitchens]
    consumptions = fetch_consumptions(db, scope, kitchen_ids, start, now)
    recipe_usages = fetch_recipe_usages(db, scope, kitchen_ids, start, now)

    logger.info(
        f"Monthly kitchen consumption: {len(consumptions)} consumptions and "
        f"{len(recipe_usages)} recipe usages across {len(kitchens)} kitchens"
    )
    return summarize_monthly_financials(kitchens, consumptions, recipe_usages)
