"""Project-level statistics for developers.

Developers never see individual cases. Everything they receive comes from
here, and DeveloperAggregates has no field that could hold a case id, a
buyer name or contact details.
"""

from collections import Counter
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

import structlog

from .models import Case, CasePhase, DeveloperAggregates

logger = structlog.get_logger()

SECONDS_PER_DAY = Decimal(86400)


def conversion_rate(completed: int, total: int) -> int:
    """Completed share as a whole percentage, rounded half up. 0 when empty."""
    if total <= 0:
        return 0
    rate = Decimal(100 * completed) / Decimal(total)
    return int(rate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def average_processing_days(cases: Iterable[Case]) -> float:
    """Mean days from creation to last update over completed cases."""
    durations = [
        Decimal(str((case.updated_at - case.created_at).total_seconds())) / SECONDS_PER_DAY
        for case in cases
        if case.phase == CasePhase.COMPLETED
    ]
    if not durations:
        return 0.0
    mean = sum(durations, Decimal(0)) / len(durations)
    # Clock skew between writers can put updated_at before created_at
    mean = max(mean, Decimal(0))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def aggregate_for_developer(cases: Iterable[Case]) -> DeveloperAggregates:
    """
    Summarise a project's cases for the developer role.

    Args:
        cases: Cases belonging to the developer's project

    Returns:
        Totals, counts per phase, conversion rate and average processing days
    """
    cases = list(cases)
    counts = Counter(case.phase for case in cases)
    total = len(cases)

    aggregates = DeveloperAggregates(
        total_cases=total,
        counts_by_phase={phase: counts.get(phase, 0) for phase in CasePhase},
        conversion_rate=conversion_rate(counts.get(CasePhase.COMPLETED, 0), total),
        avg_processing_days=average_processing_days(cases),
    )

    logger.info(
        "developer_aggregates_built",
        total_cases=aggregates.total_cases,
        conversion_rate=aggregates.conversion_rate,
    )
    return aggregates
