"""What-if scenario projections.

A scenario is the real financial state with an overlay applied. The
scenario calculator resolves the overlay, folds the scenario's deductions
and travel into deduction totals, runs the S-Corp tax calculator and
splits the projected net profit across the scenario's bank allocations.

The baseline is the same calculation with an overlay that changes nothing
and the default Operating/Tax Reserve/Owner Pay split.
"""

from decimal import Decimal
from typing import Optional, Sequence

import structlog

from .calculator import (
    SCorpTaxCalculator,
    total_annual_salary,
    total_contractor_pay,
    total_monthly_revenue,
    total_recurring_expenses,
)
from .config import TaxRates
from .deductions import calculate_deduction_totals, trip_deduction_total
from .money import ZERO, round_currency
from .models import (
    AllocationAmount,
    BankAllocation,
    ClientRecord,
    ContractorRecord,
    DeductionTotals,
    EmployeeRecord,
    ExpenseRecord,
    ScenarioOverlay,
    ScenarioResult,
    TaxCalculationInput,
)
from .overlay import resolve_overlay
from .rates import MONTHS_PER_YEAR

logger = structlog.get_logger()

FULL_ALLOCATION = Decimal("100")


def allocate_net_profit(
    net_profit: Decimal,
    allocations: Sequence[BankAllocation],
) -> list[AllocationAmount]:
    """Split monthly net profit by percentage, rounding each share.

    Percentages are used as given; they are not normalized to 100.
    """
    return [
        AllocationAmount(
            name=allocation.name,
            percentage=allocation.percentage,
            amount=round_currency(net_profit * allocation.percentage / FULL_ALLOCATION),
            color=allocation.color,
        )
        for allocation in allocations
    ]


class ScenarioCalculator:
    """
    Project monthly results for a scenario overlay.

    Deduction handling differs from the dashboard path: every enabled
    scenario deduction plus deductible travel reduces both federal and
    state taxable income, while only deductions flagged ``reduces_fica``
    reduce the FICA base. Travel never reduces FICA.
    """

    def __init__(self, rates: Optional[TaxRates] = None):
        self.rates = rates or TaxRates.defaults()
        self.tax_calculator = SCorpTaxCalculator(self.rates)

    def _deduction_totals(self, overlay: ScenarioOverlay) -> tuple[Decimal, Decimal, DeductionTotals]:
        scenario_totals = calculate_deduction_totals(overlay.tax_deductions, self.rates)
        tax_deductions_total = scenario_totals.total_annual
        trip_expenses_total = trip_deduction_total(overlay.trip_expenses, self.rates)

        total = tax_deductions_total + trip_expenses_total
        totals = DeductionTotals(
            total_annual=total,
            federal_deductions=total,
            state_deductions=total,
            fica_deductions=scenario_totals.fica_deductions,
        )
        return tax_deductions_total, trip_expenses_total, totals

    def calculate(
        self,
        overlay: ScenarioOverlay,
        clients: Sequence[ClientRecord],
        expenses: Sequence[ExpenseRecord],
        contractors: Sequence[ContractorRecord],
        employees: Sequence[EmployeeRecord],
    ) -> ScenarioResult:
        """
        Calculate projected results for a scenario.

        Args:
            overlay: The scenario's changes and settings
            clients: Real clients
            expenses: Real expenses
            contractors: Real contractors
            employees: Real employees

        Returns:
            ScenarioResult with taxes, net profit and allocation amounts
        """
        state = resolve_overlay(overlay, clients, expenses, contractors, employees)
        warnings = list(state.warnings)

        monthly_revenue = total_monthly_revenue(state.clients)
        monthly_recurring = total_recurring_expenses(state.expenses)
        monthly_contractors = total_contractor_pay(state.contractors)

        if overlay.salary_adjustment:
            logger.warning(
                "deprecated_salary_adjustment",
                salary_adjustment=str(overlay.salary_adjustment),
            )
        adjusted_salary = total_annual_salary(state.employees) + overlay.salary_adjustment
        monthly_salary = adjusted_salary / MONTHS_PER_YEAR

        tax_deductions_total, trip_expenses_total, deduction_totals = self._deduction_totals(overlay)

        taxes = self.tax_calculator.calculate(TaxCalculationInput(
            monthly_revenue=monthly_revenue,
            monthly_recurring_expenses=monthly_recurring,
            monthly_salary=monthly_salary,
            monthly_contractor_pay=monthly_contractors,
            annual_salary=adjusted_salary,
            deduction_totals=deduction_totals,
        ))

        allocations = allocate_net_profit(taxes.monthly_net_profit, overlay.bank_allocations)

        if overlay.bank_allocations:
            allocated = sum((a.percentage for a in overlay.bank_allocations), ZERO)
            if allocated != FULL_ALLOCATION:
                warnings.append(f"Bank allocations total {allocated}%, not 100%")
        if taxes.monthly_net_profit < 0:
            warnings.append(
                f"Projected monthly net profit is negative ({taxes.monthly_net_profit})"
            )

        logger.info(
            "scenario_calculated",
            monthly_revenue=str(monthly_revenue),
            net_profit=str(taxes.monthly_net_profit),
            annual_tax=str(taxes.annual_tax),
            warnings=len(warnings),
        )

        return ScenarioResult(
            monthly_revenue=monthly_revenue,
            monthly_expenses=taxes.monthly_expenses,
            monthly_contractors=monthly_contractors,
            monthly_salary=monthly_salary,
            monthly_recurring_expenses=monthly_recurring,
            gross_profit=taxes.monthly_gross_profit,
            adjusted_salary=adjusted_salary,
            tax_deductions_total=tax_deductions_total,
            trip_expenses_total=trip_expenses_total,
            taxable_income=taxes.annual_taxable_income,
            estimated_annual_tax=taxes.annual_tax,
            estimated_monthly_tax=taxes.monthly_tax_reserve,
            net_profit=taxes.monthly_net_profit,
            bank_allocations=allocations,
            tax_breakdown=taxes.tax_breakdown,
            expected_payments_total=overlay.expected_payments.total,
            taxes=taxes,
            warnings=warnings,
        )

    def calculate_baseline(
        self,
        clients: Sequence[ClientRecord],
        expenses: Sequence[ExpenseRecord],
        contractors: Sequence[ContractorRecord],
        employees: Sequence[EmployeeRecord],
    ) -> ScenarioResult:
        """Current reality: no changes, default bank allocations."""
        return self.calculate(ScenarioOverlay.baseline(), clients, expenses, contractors, employees)


def calculate_scenario(
    overlay: ScenarioOverlay,
    clients: Sequence[ClientRecord],
    expenses: Sequence[ExpenseRecord],
    contractors: Sequence[ContractorRecord],
    employees: Sequence[EmployeeRecord],
    rates: Optional[TaxRates] = None,
) -> ScenarioResult:
    return ScenarioCalculator(rates).calculate(overlay, clients, expenses, contractors, employees)


def calculate_baseline(
    clients: Sequence[ClientRecord],
    expenses: Sequence[ExpenseRecord],
    contractors: Sequence[ContractorRecord],
    employees: Sequence[EmployeeRecord],
    rates: Optional[TaxRates] = None,
) -> ScenarioResult:
    return ScenarioCalculator(rates).calculate_baseline(clients, expenses, contractors, employees)


__all__ = [
    "ScenarioCalculator",
    "allocate_net_profit",
    "calculate_scenario",
    "calculate_baseline",
]
