"""Break-even occupancy."""

import logging
from typing import Optional

from ..models.inputs import ProjectInputs
from .kpis import KPIResults, calculate_kpis
from .utils import round2

logger = logging.getLogger(__name__)


def calculate_break_even_occupancy(
    inputs: ProjectInputs,
    kpis: Optional[KPIResults] = None,
) -> float:
    """Occupancy (%) at which first-year revenue covers expenses and debt service.

    Closed form: the costs are taken from the KPIs at the nominal occupancy,
    so PERCENTAGE_REVENUE expense lines stay at their baseline amount rather
    than being re-solved at the break-even occupancy.

    Args:
        inputs: Project snapshot.
        kpis: Precomputed KPIs for ``inputs``, to avoid evaluating twice.

    Returns:
        Occupancy in percent, clamped to [0, 100]. A non-positive ADR can
        never break even and yields 100.
    """
    if kpis is None:
        kpis = calculate_kpis(inputs)

    adr = inputs.revenue.average_daily_rate.resolved
    days_per_year = inputs.revenue.days_per_year
    required_revenue = kpis.total_expenses + kpis.annual_debt_service

    if adr <= 0 or days_per_year <= 0:
        logger.debug("Break-even undefined for ADR=%s, days=%s; reporting 100%%", adr, days_per_year)
        return 100.0

    required_nights = required_revenue / adr
    break_even_rate = required_nights / days_per_year * 100

    return round2(min(100.0, max(0.0, break_even_rate)))
