"""Deduction calculations.

Turns deduction records into annual, basis-qualified dollar amounts and
folds them into the totals the tax calculator consumes. Also summarizes
logged trips for use as scenario travel deductions.
"""

from decimal import Decimal
from typing import Iterable, Mapping, Optional

import structlog

from .config import TaxRates
from .money import ZERO, round_currency
from .models import DeductionRecord, DeductionTotals, TripExpenseTotals, TripRecord, TripSummary
from .rates import MEALS_DEDUCTION_KEYS, MONTHS_PER_YEAR

logger = structlog.get_logger()


def calculate_deduction_amount(
    key: str,
    deduction: DeductionRecord,
    rates: Optional[TaxRates] = None,
) -> Decimal:
    """Calculate the annual amount for a deduction based on its type.

    The first matching rule wins:

    1. Disabled deductions are worth nothing.
    2. Home office: ``min(sqft, 300) × $5``.
    3. Mileage: ``round(miles × $0.67)``.
    4. Business or travel meals (by key): ``round(amount × 50%)``.
    5. Monthly amounts are annualized.
    6. Anything else is already annual.

    Args:
        key: The deduction's key, used to recognize meals.
        deduction: The deduction record.
        rates: Rate overrides (default: statutory rates).

    Returns:
        Annual deductible amount.
    """
    if not deduction.enabled:
        return ZERO

    rates = rates or TaxRates.defaults()

    if deduction.is_home_office:
        sqft = min(deduction.sqft, rates.home_office_max_sqft)
        return sqft * rates.home_office_rate_per_sqft
    if deduction.is_mileage:
        return round_currency(deduction.amount * rates.mileage_rate)
    if key in MEALS_DEDUCTION_KEYS:
        return round_currency(deduction.amount * rates.meals_deduction_rate)
    if deduction.is_monthly:
        return deduction.amount * MONTHS_PER_YEAR
    return deduction.amount


def calculate_deduction_totals(
    deductions: Mapping[str, Optional[DeductionRecord]],
    rates: Optional[TaxRates] = None,
) -> DeductionTotals:
    """Fold deductions into per-basis annual totals.

    Every enabled deduction counts once toward ``total_annual`` and,
    independently, toward each basis whose flag it sets.
    """
    total_annual = ZERO
    federal = ZERO
    state = ZERO
    fica = ZERO

    for key, deduction in deductions.items():
        if deduction is None or not deduction.enabled:
            continue

        annual_amount = calculate_deduction_amount(key, deduction, rates)
        logger.debug(
            "deduction_annualized",
            key=key,
            amount=str(deduction.amount),
            annual=str(annual_amount),
            federal=deduction.reduces_federal,
            state=deduction.reduces_state,
            fica=deduction.reduces_fica,
        )

        total_annual += annual_amount
        if deduction.reduces_federal:
            federal += annual_amount
        if deduction.reduces_state:
            state += annual_amount
        if deduction.reduces_fica:
            fica += annual_amount

    return DeductionTotals(
        total_annual=total_annual,
        federal_deductions=federal,
        state_deductions=state,
        fica_deductions=fica,
    )


def trip_deduction_total(
    trips: TripExpenseTotals,
    rates: Optional[TaxRates] = None,
) -> Decimal:
    """Deductible travel for a scenario, with meals at 50%.

    Returns zero when the scenario has travel turned off.
    """
    if not trips.enabled:
        return ZERO

    rates = rates or TaxRates.defaults()
    meals_deductible = round_currency(trips.meals * rates.meals_deduction_rate)
    return (
        trips.flights
        + trips.lodging
        + trips.ground_transport
        + meals_deductible
        + trips.per_diem
        + trips.other
    )


def summarize_trips(trips: Iterable[TripRecord]) -> TripSummary:
    """Total each travel category across logged trips."""
    summary = {
        "flights": ZERO,
        "lodging": ZERO,
        "ground_transport": ZERO,
        "meals": ZERO,
        "per_diem": ZERO,
        "other": ZERO,
    }
    count = 0
    for trip in trips:
        count += 1
        for category in summary:
            summary[category] += getattr(trip, category)

    return TripSummary(trip_count=count, **summary)


__all__ = [
    "calculate_deduction_amount",
    "calculate_deduction_totals",
    "trip_deduction_total",
    "summarize_trips",
]
