"""Calculation inputs and results handed to the presentation layer."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from .records import DeductionRecord


# =============================================================================
# TAX CALCULATION
# =============================================================================

class DeductionTotals(BaseModel):
    """Annual deductions split by the base each one reduces.

    ``total_annual`` counts every enabled deduction once; the basis totals
    may overlap because a deduction can reduce several bases.
    """
    total_annual: Decimal = Decimal("0")
    federal_deductions: Decimal = Decimal("0")
    state_deductions: Decimal = Decimal("0")
    fica_deductions: Decimal = Decimal("0")


class TaxCalculationInput(BaseModel):
    """Monthly operating figures for one S-Corp tax calculation.

    Pass either pre-computed ``deduction_totals`` or raw ``deductions``;
    totals win when both are present.
    """
    monthly_revenue: Decimal = Decimal("0")
    monthly_recurring_expenses: Decimal = Decimal("0")
    monthly_salary: Decimal = Decimal("0")
    monthly_contractor_pay: Decimal = Decimal("0")
    annual_salary: Decimal = Decimal("0")
    deduction_totals: Optional[DeductionTotals] = None
    deductions: Optional[dict[str, DeductionRecord]] = None


class TaxBreakdown(BaseModel):
    """Annual tax components, each rounded to whole units."""
    employer_fica: Decimal = Decimal("0")
    employee_fica: Decimal = Decimal("0")
    federal_income: Decimal = Decimal("0")
    state_income: Decimal = Decimal("0")

    @computed_field
    @property
    def total(self) -> Decimal:
        return self.employer_fica + self.employee_fica + self.federal_income + self.state_income


class TaxCalculationResult(BaseModel):
    """Full annual and monthly S-Corp tax and profitability breakdown."""

    # Monthly figures
    monthly_revenue: Decimal
    monthly_expenses: Decimal = Field(description="Total operating costs incl. salary and contractors")
    monthly_gross_profit: Decimal
    monthly_employer_fica: Decimal
    monthly_net_before_taxes: Decimal
    monthly_tax_reserve: Decimal
    monthly_net_profit: Decimal

    # Annual figures
    annual_revenue: Decimal
    annual_expenses: Decimal
    annual_gross_profit: Decimal
    fica_taxable_salary: Decimal
    annual_taxable_income: Decimal = Field(description="Larger of federal and state taxable income")
    annual_taxable_income_federal: Decimal
    annual_taxable_income_state: Decimal
    annual_tax: Decimal
    quarterly_tax_estimate: Decimal

    tax_breakdown: TaxBreakdown
    k1_income: Decimal = Field(description="Pass-through profit after employer FICA")
    deduction_totals: DeductionTotals
    effective_rate: Decimal = Field(description="Annual tax as a percentage of salary plus K-1 income")


# =============================================================================
# SCENARIOS
# =============================================================================

class AllocationAmount(BaseModel):
    """Dollar share of monthly net profit for one bank allocation."""
    name: str
    percentage: Decimal
    amount: Decimal
    color: Optional[str] = None


class ScenarioResult(BaseModel):
    """Projected monthly results for a scenario (or the baseline)."""
    monthly_revenue: Decimal
    monthly_expenses: Decimal
    monthly_contractors: Decimal
    monthly_salary: Decimal
    monthly_recurring_expenses: Decimal
    gross_profit: Decimal
    adjusted_salary: Decimal = Field(description="Effective annual salary")
    tax_deductions_total: Decimal
    trip_expenses_total: Decimal
    taxable_income: Decimal
    estimated_annual_tax: Decimal
    estimated_monthly_tax: Decimal
    net_profit: Decimal
    bank_allocations: list[AllocationAmount] = Field(default_factory=list)
    tax_breakdown: TaxBreakdown
    expected_payments_total: Decimal = Decimal("0")
    taxes: TaxCalculationResult
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# COMPARISON
# =============================================================================

class PercentChange(str, Enum):
    """How the percentage column of a comparison row should read."""
    CHANGED = "changed"
    UNBOUNDED = "unbounded"  # baseline of zero, scenario above it
    NO_CHANGE = "no_change"


class ComparisonRow(BaseModel):
    """One headline metric compared between baseline and scenario."""
    key: str
    label: str
    baseline: Decimal
    scenario: Decimal
    delta: Decimal
    percent_status: PercentChange
    percent_delta: Optional[Decimal] = None
    inverted: bool = Field(default=False, description="A decrease is an improvement")

    @property
    def is_improvement(self) -> bool:
        if self.inverted:
            return self.scenario < self.baseline
        return self.scenario > self.baseline

    @property
    def is_regression(self) -> bool:
        if self.inverted:
            return self.scenario > self.baseline
        return self.scenario < self.baseline

    @property
    def percent_label(self) -> str:
        """Percentage for display, e.g. ``+25.0%``, ``+∞%`` or ``—``."""
        if self.percent_status == PercentChange.UNBOUNDED:
            return "+∞%"
        if self.percent_status == PercentChange.NO_CHANGE or self.percent_delta is None:
            return "—"
        sign = "+" if self.percent_delta > 0 else ""
        return f"{sign}{self.percent_delta:.1f}%"


class ScenarioComparison(BaseModel):
    """Baseline versus scenario, metric by metric, plus the tax impact."""
    rows: list[ComparisonRow]
    baseline_annual_tax: Decimal
    scenario_annual_tax: Decimal
    deductions_used: Decimal
    tax_savings: Decimal

    def row(self, key: str) -> ComparisonRow:
        """Look up a row by metric key."""
        for row in self.rows:
            if row.key == key:
                return row
        raise KeyError(key)
