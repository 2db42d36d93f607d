"""Build the kitchen consumption report: resolve, fetch, aggregate, roll up."""
import logging
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from app.schemas.consumption import ConsumptionResponse, ReportMetadata
from app.services.access import AccessScope
from app.services.consumption_aggregator import (
    DEFAULT_TOP_N,
    aggregate_kitchen,
    roll_up_summary,
)
from app.services.consumption_fetcher import fetch_consumption_snapshot
from app.services.periods import resolve_period

logger = logging.getLogger(__name__)


def build_consumption_report(
    db: Session,
    scope: AccessScope,
    days: Union[int, str, None] = None,
    now: Optional[datetime] = None,
    top_n: int = DEFAULT_TOP_N,
    include_breakdowns: bool = True,
) -> ConsumptionResponse:
    """Consumption and waste per kitchen plus a tenant-wide summary.

    Every kitchen of the tenant appears exactly once, in name order, even
    when it has no activity in the window.
    """
    period = resolve_period(days, now)
    snapshot = fetch_consumption_snapshot(db, scope, period)

    kitchens = [
        aggregate_kitchen(
            kitchen,
            snapshot.for_kitchen(kitchen.id),
            period,
            top_n=top_n,
            include_breakdowns=include_breakdowns,
        )
        for kitchen in snapshot.kitchens
    ]
    summary = roll_up_summary(kitchens, snapshot)

    logger.info(
        f"Built consumption report for {len(kitchens)} kitchens over {period.days} days "
        f"(elevated={scope.elevated})"
    )
    return ConsumptionResponse(
        kitchens=kitchens,
        summary=summary,
        metadata=ReportMetadata(
            start_date=period.current_start,
            end_date=period.current_end,
            generated_at=datetime.utcnow(),
        ),
    )
