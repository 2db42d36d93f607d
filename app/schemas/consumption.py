"""Pydantic schemas for kitchen consumption and waste reporting.

Response payloads are serialized in camelCase for the dashboard client.
"""
from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema emitting camelCase keys while accepting snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


ItemType = Literal["ingredient", "recipe", "subrecipe"]


# ============================================================================
# Per-kitchen schemas
# ============================================================================


class ConsumedItem(CamelModel):
    """An ingredient, recipe or sub-recipe with its consumed quantity."""

    name: str
    type: ItemType
    quantity: float
    unit: str


class WastedItem(CamelModel):
    """A disposed or expired item with its wasted quantity."""

    name: str
    quantity: float
    unit: str
    reason: str
    cost: float = 0.0


class CostData(CamelModel):
    total_cost: float = 0.0
    waste_cost: float = 0.0
    savings_opportunity: float = 0.0


class DailyConsumption(CamelModel):
    date: str = Field(..., description="YYYY-MM-DD")
    items: list[ConsumedItem]


class MonthlyConsumption(CamelModel):
    month: str = Field(..., description="YYYY-MM")
    items: list[ConsumedItem]


class KitchenConsumption(CamelModel):
    """Consumption, waste and cost figures for one kitchen."""

    id: UUID
    name: str
    total_consumed: float = 0.0
    total_wasted: float = 0.0
    waste_percentage: float = Field(0.0, ge=0, le=100)
    consumption_trend: float = Field(0.0, ge=-100, le=200)
    most_consumed_items: list[ConsumedItem] = []
    most_wasted_items: list[WastedItem] = []
    cost_data: CostData = CostData()
    total_recipe_cost: float = 0.0
    total_recipe_revenue: float = 0.0
    total_recipe_waste: float = 0.0
    total_recipe_profit: float = 0.0
    consumption_by_day: list[DailyConsumption] = []
    consumption_by_month: list[MonthlyConsumption] = []


# ============================================================================
# Tenant-wide schemas
# ============================================================================


class WasteReason(CamelModel):
    reason: str
    percentage: float
    cost: float


class PeriodComparison(CamelModel):
    current_period_consumption: float = 0.0
    previous_period_consumption: float = 0.0
    percentage_change: float = Field(0.0, ge=-100, le=1000)
    current_period_waste: float = 0.0
    previous_period_waste: float = 0.0
    waste_percentage_change: float = Field(0.0, ge=-100, le=1000)


class ConsumptionSummary(CamelModel):
    """Tenant-wide roll-up of every kitchen."""

    total_consumed: float = 0.0
    total_wasted: float = 0.0
    overall_waste_percentage: float = Field(0.0, ge=0, le=100)
    total_cost: float = 0.0
    total_waste_cost: float = 0.0
    potential_savings: float = 0.0
    top_waste_reasons: list[WasteReason] = []
    period_comparison: PeriodComparison = PeriodComparison()


class ReportMetadata(CamelModel):
    start_date: datetime
    end_date: datetime
    generated_at: datetime


class ConsumptionResponse(CamelModel):
    """Response of the kitchen consumption endpoint."""

    kitchens: list[KitchenConsumption]
    summary: ConsumptionSummary
    metadata: ReportMetadata


# ============================================================================
# Waste reasons and consumption history
# ============================================================================


class KitchenWasteReason(CamelModel):
    reason: str
    percentage: int
    quantity: float


class KitchenWasteReasons(CamelModel):
    reasons: list[KitchenWasteReason]
    total_waste: float


class HistoryKitchen(CamelModel):
    name: str
    floor_number: Optional[str] = None


class HistoryFoodSupply(CamelModel):
    name: str
    unit: Optional[str] = None
    price_per_unit: Optional[float] = None


class ConsumptionHistoryRecord(CamelModel):
    """A consumption or disposal record in the combined history feed."""

    id: UUID
    food_supply_id: Optional[UUID] = None
    quantity: float
    date: datetime
    is_waste: bool = False
    reason: Optional[str] = None
    source: Optional[str] = None
    recipe_id: Optional[UUID] = None
    recipe_name: Optional[str] = None
    kitchen: Optional[HistoryKitchen] = None
    food_supply: Optional[HistoryFoodSupply] = None
    user_email: Optional[str] = None
    notes: str = ""


class KitchenMonthFinancials(CamelModel):
    kitchen_id: UUID
    name: str
    cost: float = 0.0
    revenue: float = 0.0
    profit: float = 0.0


class MonthFinancials(CamelModel):
    """Every kitchen's cost, revenue and profit for one YYYY-MM month."""

    month: str
    kitchens: list[KitchenMonthFinancials]


class KitchenFinancialTotals(CamelModel):
    id: UUID
    name: str
    floor_number: Optional[int] = None
    total_cost: float = 0.0
    total_revenue: float = 0.0
    total_profit: float = 0.0


class MonthlyKitchenConsumption(CamelModel):
    months: list[str]
    chart_data: list[MonthFinancials]
    kitchen_totals: list[KitchenFinancialTotals]
