"""Per-kitchen aggregation and tenant roll-up of consumption and waste.

Pure functions over a ConsumptionSnapshot; no database access. Every
division is guarded so the response never carries NaN or Infinity: zero
denominators and non-finite results become 0.

Two waste definitions coexist. Headline figures (totalWasted,
wastePercentage, costs) use the waste recorded on recipe usages, while
mostWastedItems and topWasteReasons use disposal records plus expired
supplies.
"""
import math
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional, TypeVar

from app.config import get_settings
from app.schemas.consumption import (
    ConsumedItem,
    ConsumptionSummary,
    CostData,
    DailyConsumption,
    KitchenConsumption,
    MonthlyConsumption,
    PeriodComparison,
    WastedItem,
    WasteReason,
)
from app.services.consumption_fetcher import (
    ConsumptionSnapshot,
    KitchenRef,
    KitchenRows,
)
from app.services.periods import Period

T = TypeVar("T")

KITCHEN_TREND_RANGE = (-100.0, 200.0)
SUMMARY_CHANGE_RANGE = (-100.0, 1000.0)
DEFAULT_TOP_N = 3


# ============================================================================
# Arithmetic helpers
# ============================================================================


def finite(value: Optional[float]) -> float:
    """Coerce None, NaN and +/-Infinity to 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return float(value)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def safe_percentage(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 when undefined."""
    numerator = finite(numerator)
    denominator = finite(denominator)
    if denominator <= 0:
        return 0.0
    return finite(numerator / denominator * 100)


def waste_percentage(wasted: float, consumed: float) -> float:
    """Share of waste in everything used, clamped to [0, 100]."""
    wasted = finite(wasted)
    return clamp(safe_percentage(wasted, finite(consumed) + wasted), 0.0, 100.0)


def percentage_change(
    current: float,
    previous: float,
    bounds: tuple[float, float] = SUMMARY_CHANGE_RANGE,
) -> float:
    """Change from previous to current in percent.

    0 when both are zero and 100 when only the previous value is zero.
    """
    current = finite(current)
    previous = finite(previous)
    if previous > 0:
        change = finite((current - previous) / previous * 100)
    elif current > 0:
        change = 100.0
    else:
        change = 0.0
    return clamp(change, *bounds)


def top_n_by(items: Iterable[T], key: Callable[[T], float], n: int) -> list[T]:
    """The n items with the largest key; ties keep their input order."""
    return sorted(items, key=key, reverse=True)[:n]


# ============================================================================
# Item grouping
# ============================================================================


def _item_type(is_subrecipe: bool) -> str:
    return "subrecipe" if is_subrecipe else "recipe"


def _item_key(item_type: str, name: str) -> tuple[str, str]:
    return item_type, name


def _catalog_items(rows: KitchenRows) -> dict[tuple[str, str], ConsumedItem]:
    """Every item the kitchen touched, ingredients first, at zero quantity."""
    catalog: dict[tuple[str, str], ConsumedItem] = {}
    for row in rows.consumptions:
        catalog[_item_key("ingredient", row.item_name)] = ConsumedItem(
            name=row.item_name, type="ingredient", quantity=0.0, unit=row.unit,
        )
    for row in rows.recipe_usages:
        item_type = _item_type(row.is_subrecipe)
        catalog[_item_key(item_type, row.recipe_name)] = ConsumedItem(
            name=row.recipe_name, type=item_type, quantity=0.0, unit=item_type,
        )
    return catalog


def _quantities_by(
    rows: KitchenRows,
    bucket: Callable[[datetime], str],
) -> dict[tuple[str, tuple[str, str]], float]:
    """Sum quantities per (bucket, item key)."""
    totals: dict[tuple[str, tuple[str, str]], float] = {}
    for row in rows.consumptions:
        key = (bucket(row.date), _item_key("ingredient", row.item_name))
        totals[key] = totals.get(key, 0.0) + row.quantity
    for row in rows.recipe_usages:
        key = (bucket(row.created_at), _item_key(_item_type(row.is_subrecipe), row.recipe_name))
        totals[key] = totals.get(key, 0.0) + row.servings_used
    return totals


def _dense_items(
    catalog: dict[tuple[str, str], ConsumedItem],
    totals: dict[tuple[str, tuple[str, str]], float],
    bucket_key: str,
) -> list[ConsumedItem]:
    return [
        item.model_copy(update={"quantity": totals.get((bucket_key, key), 0.0)})
        for key, item in catalog.items()
    ]


def days_in_window(period: Period) -> list[str]:
    """Every calendar day touched by the current window, as YYYY-MM-DD."""
    days = []
    cursor = period.current_start.date()
    last = period.current_end.date()
    while cursor <= last:
        days.append(cursor.isoformat())
        cursor += timedelta(days=1)
    return days


def months_to_date(period: Period) -> list[str]:
    """January of the end year through the end month, as YYYY-MM."""
    end = period.current_end
    return [f"{end.year:04d}-{month:02d}" for month in range(1, end.month + 1)]


def consumption_by_day(rows: KitchenRows, period: Period) -> list[DailyConsumption]:
    catalog = _catalog_items(rows)
    totals = _quantities_by(rows, lambda moment: moment.date().isoformat())
    return [
        DailyConsumption(date=day, items=_dense_items(catalog, totals, day))
        for day in days_in_window(period)
    ]


def consumption_by_month(rows: KitchenRows, period: Period) -> list[MonthlyConsumption]:
    catalog = _catalog_items(rows)
    totals = _quantities_by(rows, lambda moment: moment.strftime("%Y-%m"))
    return [
        MonthlyConsumption(month=month, items=_dense_items(catalog, totals, month))
        for month in months_to_date(period)
    ]


def most_consumed_items(rows: KitchenRows, n: int) -> list[ConsumedItem]:
    """Ingredients and recipes ranked together by consumed quantity."""
    items: dict[tuple[str, str], ConsumedItem] = {}
    for row in rows.consumptions:
        key = _item_key("ingredient", row.item_name)
        if key not in items:
            items[key] = ConsumedItem(name=row.item_name, type="ingredient", quantity=0.0, unit=row.unit)
        items[key].quantity += row.quantity
    for row in rows.recipe_usages:
        item_type = _item_type(row.is_subrecipe)
        key = _item_key(item_type, row.recipe_name)
        if key not in items:
            items[key] = ConsumedItem(name=row.recipe_name, type=item_type, quantity=0.0, unit=item_type)
        items[key].quantity += row.servings_used
    return top_n_by(items.values(), key=lambda item: item.quantity, n=n)


def most_wasted_items(rows: KitchenRows, n: int) -> list[WastedItem]:
    """Disposed and expired items ranked by wasted quantity."""
    items: dict[str, WastedItem] = {}
    reasons: dict[str, list[str]] = {}
    for row in rows.waste:
        if row.item_name not in items:
            items[row.item_name] = WastedItem(
                name=row.item_name, quantity=0.0, unit=row.unit, reason="", cost=0.0,
            )
            reasons[row.item_name] = []
        item = items[row.item_name]
        item.quantity += row.quantity
        item.cost += finite(row.cost)
        if row.reason not in reasons[row.item_name]:
            reasons[row.item_name].append(row.reason)
            item.reason = ", ".join(reasons[row.item_name])
    return top_n_by(items.values(), key=lambda item: item.quantity, n=n)


# ============================================================================
# Kitchen aggregation and roll-up
# ============================================================================


def aggregate_kitchen(
    kitchen: KitchenRef,
    rows: KitchenRows,
    period: Period,
    top_n: int = DEFAULT_TOP_N,
    include_breakdowns: bool = True,
    recovery_ratio: Optional[float] = None,
) -> KitchenConsumption:
    """Summarize one kitchen's rows. Kitchens with no rows get all zeros."""
    if recovery_ratio is None:
        recovery_ratio = get_settings().WASTE_RECOVERY_RATIO

    total_consumed = finite(sum(row.quantity for row in rows.consumptions))
    total_recipe_cost = finite(sum(row.cost for row in rows.recipe_usages))
    total_recipe_revenue = finite(sum(row.selling_price for row in rows.recipe_usages))
    total_recipe_waste = finite(sum(row.waste for row in rows.recipe_usages))
    total_recipe_profit = finite(sum(row.profit for row in rows.recipe_usages))
    total_wasted = total_recipe_waste

    previous_consumed = sum(row.quantity for row in rows.previous_consumptions)
    trend = round(percentage_change(total_consumed, previous_consumed, KITCHEN_TREND_RANGE), 1)

    return KitchenConsumption(
        id=kitchen.id,
        name=kitchen.name,
        total_consumed=total_consumed,
        total_wasted=total_wasted,
        waste_percentage=waste_percentage(total_wasted, total_consumed),
        consumption_trend=trend,
        most_consumed_items=most_consumed_items(rows, top_n),
        most_wasted_items=most_wasted_items(rows, top_n),
        cost_data=CostData(
            total_cost=total_recipe_cost,
            waste_cost=total_recipe_waste,
            savings_opportunity=finite(total_recipe_waste * recovery_ratio),
        ),
        total_recipe_cost=total_recipe_cost,
        total_recipe_revenue=total_recipe_revenue,
        total_recipe_waste=total_recipe_waste,
        total_recipe_profit=total_recipe_profit,
        consumption_by_day=consumption_by_day(rows, period) if include_breakdowns else [],
        consumption_by_month=consumption_by_month(rows, period) if include_breakdowns else [],
    )


def top_waste_reasons(snapshot: ConsumptionSnapshot) -> list[WasteReason]:
    """Waste grouped by reason, as a share of all disposed and expired quantity."""
    by_reason: dict[str, dict[str, float]] = {}
    for row in snapshot.waste:
        entry = by_reason.setdefault(row.reason, {"quantity": 0.0, "cost": 0.0})
        entry["quantity"] += finite(row.quantity)
        entry["cost"] += finite(row.cost)

    total_quantity = sum(entry["quantity"] for entry in by_reason.values())
    reasons = [
        WasteReason(
            reason=reason,
            percentage=clamp(safe_percentage(entry["quantity"], total_quantity), 0.0, 100.0),
            cost=entry["cost"],
        )
        for reason, entry in by_reason.items()
    ]
    return top_n_by(reasons, key=lambda r: r.percentage, n=len(reasons))


def roll_up_summary(
    kitchens: list[KitchenConsumption],
    snapshot: ConsumptionSnapshot,
) -> ConsumptionSummary:
    """Combine per-kitchen figures into the tenant-wide summary."""
    total_consumed = finite(sum(k.total_consumed for k in kitchens))
    total_wasted = finite(sum(k.total_wasted for k in kitchens))
    previous_consumed = finite(sum(row.quantity for row in snapshot.previous_consumptions))
    previous_wasted = finite(sum(row.quantity for row in snapshot.previous_waste))

    return ConsumptionSummary(
        total_consumed=total_consumed,
        total_wasted=total_wasted,
        overall_waste_percentage=waste_percentage(total_wasted, total_consumed),
        total_cost=finite(sum(k.cost_data.total_cost for k in kitchens)),
        total_waste_cost=finite(sum(k.cost_data.waste_cost for k in kitchens)),
        potential_savings=finite(sum(k.cost_data.savings_opportunity for k in kitchens)),
        top_waste_reasons=top_waste_reasons(snapshot),
        period_comparison=PeriodComparison(
            current_period_consumption=total_consumed,
            previous_period_consumption=previous_consumed,
            percentage_change=percentage_change(total_consumed, previous_consumed),
            current_period_waste=total_wasted,
            previous_period_waste=previous_wasted,
            waste_percentage_change=percentage_change(total_wasted, previous_wasted),
        ),
    )
