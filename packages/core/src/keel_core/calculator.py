"""S-Corp payroll and income tax calculations.

This module is the single source of tax math for the engine. The dashboard
path (real records, deductions split by basis) and the scenario path both
end up in :class:`SCorpTaxCalculator`.

Rounding rule: each tax component is rounded on its own and the annual
total is the sum of the rounded components, so a displayed breakdown always
adds up to the displayed total. Intermediate values (employer FICA feeding
K-1 income, taxable income) stay precise.
"""

from decimal import Decimal
from typing import Iterable, Mapping, Optional

import structlog

from .config import TaxRates
from .deductions import calculate_deduction_totals
from .money import ZERO, clamp_non_negative, round_currency, to_decimal, Numeric
from .models import (
    ClientRecord,
    ContractorRecord,
    DeductionRecord,
    DeductionTotals,
    EmployeeRecord,
    ExpenseRecord,
    TaxBreakdown,
    TaxCalculationInput,
    TaxCalculationResult,
)
from .rates import MONTHS_PER_YEAR, QUARTERS_PER_YEAR

logger = structlog.get_logger()

HUNDRED = Decimal("100")


# =============================================================================
# AGGREGATION HELPERS
# =============================================================================

def total_monthly_revenue(clients: Iterable[ClientRecord]) -> Decimal:
    """Sum of retainers from active clients."""
    return sum((c.monthly_retainer for c in clients if c.is_active), ZERO)


def total_recurring_expenses(expenses: Iterable[ExpenseRecord]) -> Decimal:
    """Sum of recurring expenses; one-time expenses are not projected."""
    return sum((e.amount for e in expenses if e.recurring), ZERO)


def total_contractor_pay(contractors: Iterable[ContractorRecord]) -> Decimal:
    """Sum of effective monthly contractor pay."""
    return sum((c.effective_monthly_pay for c in contractors), ZERO)


def total_annual_salary(employees: Iterable[EmployeeRecord]) -> Decimal:
    """Sum of annual W-2 salaries."""
    return sum((e.salary for e in employees), ZERO)


def build_tax_input(
    clients: Iterable[ClientRecord],
    expenses: Iterable[ExpenseRecord],
    employees: Iterable[EmployeeRecord],
    contractors: Iterable[ContractorRecord],
    deduction_totals: Optional[DeductionTotals] = None,
    deductions: Optional[Mapping[str, DeductionRecord]] = None,
) -> TaxCalculationInput:
    """Build a tax input from the business's real records."""
    annual_salary = total_annual_salary(employees)
    return TaxCalculationInput(
        monthly_revenue=total_monthly_revenue(clients),
        monthly_recurring_expenses=total_recurring_expenses(expenses),
        monthly_salary=annual_salary / MONTHS_PER_YEAR,
        monthly_contractor_pay=total_contractor_pay(contractors),
        annual_salary=annual_salary,
        deduction_totals=deduction_totals,
        deductions=dict(deductions) if deductions is not None else None,
    )


# =============================================================================
# CALCULATOR
# =============================================================================

class SCorpTaxCalculator:
    """
    Calculate S-Corp taxes for a single-owner business.

    Handles:
    - Employer FICA (7.65% of salary, a business expense)
    - Employee FICA (7.65% of salary, withheld from pay)
    - Federal income tax (22% of taxable income)
    - State income tax (5.75% of taxable income)
    - Deductions that reduce federal, state and FICA bases independently

    The calculator keeps no per-call state; one instance can serve any
    number of calculations, including concurrent ones.
    """

    def __init__(self, rates: Optional[TaxRates] = None):
        """
        Initialize calculator with tax rates.

        Args:
            rates: Rate overrides (default: statutory rates)
        """
        self.rates = rates or TaxRates.defaults()

    def _log_step(self, step: str, input_value: str, output_value: str) -> None:
        logger.debug(
            "tax_calculation_step",
            step=step,
            input=input_value,
            output=output_value,
        )

    def _resolve_deduction_totals(self, tax_input: TaxCalculationInput) -> DeductionTotals:
        if tax_input.deduction_totals is not None:
            return tax_input.deduction_totals
        if tax_input.deductions:
            return calculate_deduction_totals(tax_input.deductions, self.rates)
        return DeductionTotals()

    def calculate(self, tax_input: TaxCalculationInput) -> TaxCalculationResult:
        """
        Calculate annual and monthly taxes and profitability.

        Args:
            tax_input: Monthly operating figures and deductions

        Returns:
            TaxCalculationResult with rounded tax breakdown
        """
        rates = self.rates
        deduction_totals = self._resolve_deduction_totals(tax_input)

        monthly_revenue = tax_input.monthly_revenue
        annual_salary = tax_input.annual_salary

        # Step 1-3: Operating costs, gross profit, annualized
        monthly_expenses = (
            tax_input.monthly_recurring_expenses
            + tax_input.monthly_salary
            + tax_input.monthly_contractor_pay
        )
        monthly_gross_profit = monthly_revenue - monthly_expenses

        annual_revenue = monthly_revenue * MONTHS_PER_YEAR
        annual_expenses = monthly_expenses * MONTHS_PER_YEAR
        annual_gross_profit = monthly_gross_profit * MONTHS_PER_YEAR

        self._log_step(
            "gross_profit",
            f"{monthly_revenue} - ({tax_input.monthly_recurring_expenses} + "
            f"{tax_input.monthly_salary} + {tax_input.monthly_contractor_pay})",
            f"monthly={monthly_gross_profit}, annual={annual_gross_profit}",
        )

        # Step 4-5: FICA on salary less FICA-reducing deductions
        fica_taxable_salary = clamp_non_negative(annual_salary - deduction_totals.fica_deductions)
        employer_fica = fica_taxable_salary * rates.employer_fica_rate
        employee_fica = fica_taxable_salary * rates.employee_fica_rate
        monthly_employer_fica = employer_fica / MONTHS_PER_YEAR

        self._log_step(
            "fica",
            f"max(0, {annual_salary} - {deduction_totals.fica_deductions})",
            f"taxable={fica_taxable_salary}, employer={employer_fica}, employee={employee_fica}",
        )

        # Step 6-8: K-1 pass-through and taxable income per basis
        k1_income = annual_gross_profit - employer_fica
        taxable_before_deductions = annual_salary + k1_income

        taxable_federal = clamp_non_negative(
            taxable_before_deductions - deduction_totals.federal_deductions
        )
        taxable_state = clamp_non_negative(
            taxable_before_deductions - deduction_totals.state_deductions
        )

        self._log_step(
            "taxable_income",
            f"salary={annual_salary} + k1={k1_income}",
            f"federal={taxable_federal}, state={taxable_state}",
        )

        # Step 9-10: Round components, then sum
        breakdown = TaxBreakdown(
            employer_fica=round_currency(employer_fica),
            employee_fica=round_currency(employee_fica),
            federal_income=round_currency(taxable_federal * rates.federal_income_rate),
            state_income=round_currency(taxable_state * rates.state_income_rate),
        )
        annual_tax = clamp_non_negative(breakdown.total)

        # Step 11-12: Monthly reserve and net
        monthly_tax_reserve = round_currency(annual_tax / MONTHS_PER_YEAR)
        monthly_net_profit = monthly_gross_profit - monthly_tax_reserve

        # Step 13: Effective rate
        total_income = annual_salary + k1_income
        effective_rate = annual_tax / total_income * HUNDRED if total_income > 0 else ZERO

        logger.info(
            "scorp_tax_calculated",
            annual_tax=str(annual_tax),
            monthly_tax_reserve=str(monthly_tax_reserve),
            monthly_net_profit=str(monthly_net_profit),
        )

        return TaxCalculationResult(
            monthly_revenue=monthly_revenue,
            monthly_expenses=monthly_expenses,
            monthly_gross_profit=monthly_gross_profit,
            monthly_employer_fica=monthly_employer_fica,
            monthly_net_before_taxes=monthly_gross_profit - monthly_employer_fica,
            monthly_tax_reserve=monthly_tax_reserve,
            monthly_net_profit=monthly_net_profit,
            annual_revenue=annual_revenue,
            annual_expenses=annual_expenses,
            annual_gross_profit=annual_gross_profit,
            fica_taxable_salary=fica_taxable_salary,
            annual_taxable_income=max(taxable_federal, taxable_state),
            annual_taxable_income_federal=taxable_federal,
            annual_taxable_income_state=taxable_state,
            annual_tax=annual_tax,
            quarterly_tax_estimate=round_currency(annual_tax / QUARTERS_PER_YEAR),
            tax_breakdown=breakdown,
            k1_income=k1_income,
            deduction_totals=deduction_totals,
            effective_rate=effective_rate,
        )


def calculate_scorp_taxes(
    monthly_revenue: Numeric,
    monthly_recurring_expenses: Numeric,
    monthly_salary: Numeric,
    monthly_contractor_pay: Numeric,
    annual_salary: Numeric,
    deduction_totals: Optional[DeductionTotals] = None,
    *,
    deductions: Optional[Mapping[str, DeductionRecord]] = None,
    rates: Optional[TaxRates] = None,
) -> TaxCalculationResult:
    """Calculate S-Corp taxes from plain monthly figures.

    Convenience wrapper around :class:`SCorpTaxCalculator`. Numeric
    arguments may be ints, floats, strings or Decimals.
    """
    tax_input = TaxCalculationInput(
        monthly_revenue=to_decimal(monthly_revenue),
        monthly_recurring_expenses=to_decimal(monthly_recurring_expenses),
        monthly_salary=to_decimal(monthly_salary),
        monthly_contractor_pay=to_decimal(monthly_contractor_pay),
        annual_salary=to_decimal(annual_salary),
        deduction_totals=deduction_totals,
        deductions=dict(deductions) if deductions is not None else None,
    )
    return SCorpTaxCalculator(rates).calculate(tax_input)


__all__ = [
    "SCorpTaxCalculator",
    "calculate_scorp_taxes",
    "build_tax_input",
    "total_monthly_revenue",
    "total_recurring_expenses",
    "total_contractor_pay",
    "total_annual_salary",
]
