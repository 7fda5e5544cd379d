"""Baseline versus scenario comparison."""

from decimal import Decimal
from typing import NamedTuple

import structlog

from .money import clamp_non_negative
from .models import ComparisonRow, PercentChange, ScenarioComparison, ScenarioResult

logger = structlog.get_logger()

HUNDRED = Decimal("100")
MIN_VISIBLE_PERCENT = Decimal("0.1")


class Metric(NamedTuple):
    key: str
    label: str
    attribute: str
    inverted: bool = False


# Expenses and tax reserve improve when they go down
COMPARISON_METRICS = (
    Metric("revenue", "Monthly Revenue", "monthly_revenue"),
    Metric("expenses", "Monthly Expenses", "monthly_expenses", inverted=True),
    Metric("gross_profit", "Gross Profit", "gross_profit"),
    Metric("tax_reserve", "Tax Reserve", "estimated_monthly_tax", inverted=True),
    Metric("net_profit", "Net Profit", "net_profit"),
)


def _percent_change(baseline: Decimal, delta: Decimal, scenario: Decimal):
    if baseline == 0:
        if scenario > 0:
            return PercentChange.UNBOUNDED, None
        return PercentChange.NO_CHANGE, None

    percent = delta / baseline * HUNDRED
    if abs(percent) < MIN_VISIBLE_PERCENT:
        return PercentChange.NO_CHANGE, None
    return PercentChange.CHANGED, percent


def compare_metrics(baseline: ScenarioResult, scenario: ScenarioResult) -> list[ComparisonRow]:
    """Compare the headline metrics of a scenario against the baseline."""
    rows = []
    for metric in COMPARISON_METRICS:
        baseline_value = getattr(baseline, metric.attribute)
        scenario_value = getattr(scenario, metric.attribute)
        delta = scenario_value - baseline_value
        status, percent = _percent_change(baseline_value, delta, scenario_value)

        rows.append(ComparisonRow(
            key=metric.key,
            label=metric.label,
            baseline=baseline_value,
            scenario=scenario_value,
            delta=delta,
            percent_status=status,
            percent_delta=percent,
            inverted=metric.inverted,
        ))
    return rows


def calculate_tax_savings(baseline: ScenarioResult, scenario: ScenarioResult) -> Decimal:
    """Annual tax the scenario saves; never negative."""
    return clamp_non_negative(baseline.estimated_annual_tax - scenario.estimated_annual_tax)


def compare_scenarios(baseline: ScenarioResult, scenario: ScenarioResult) -> ScenarioComparison:
    """
    Full comparison of a scenario against the baseline.

    Args:
        baseline: Result for the current state
        scenario: Result for the what-if scenario

    Returns:
        ScenarioComparison with metric rows and the annual tax impact
    """
    comparison = ScenarioComparison(
        rows=compare_metrics(baseline, scenario),
        baseline_annual_tax=baseline.estimated_annual_tax,
        scenario_annual_tax=scenario.estimated_annual_tax,
        deductions_used=scenario.tax_deductions_total + scenario.trip_expenses_total,
        tax_savings=calculate_tax_savings(baseline, scenario),
    )

    logger.info(
        "scenario_compared",
        tax_savings=str(comparison.tax_savings),
        net_profit_delta=str(comparison.row("net_profit").delta),
    )
    return comparison


__all__ = [
    "COMPARISON_METRICS",
    "Metric",
    "compare_metrics",
    "calculate_tax_savings",
    "compare_scenarios",
]
