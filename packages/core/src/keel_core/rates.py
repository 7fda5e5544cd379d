"""Statutory rates for the S-Corp tax engine.

The engine models a single jurisdiction (Virginia) and a single entity type
(S-Corporation with one W-2 owner-employee). These values are the defaults
for :class:`keel_core.config.TaxRates`; callers that need different figures
pass a configured ``TaxRates`` instead of editing this module.

Sources:
- FICA: https://www.irs.gov/taxtopics/tc751
- Standard mileage rate 2024: https://www.irs.gov/tax-professionals/standard-mileage-rates
- Simplified home office method: https://www.irs.gov/businesses/small-businesses-self-employed/simplified-option-for-home-office-deduction
- Business meals: IRC §274(n), 50% limitation
"""

from decimal import Decimal


# =============================================================================
# PAYROLL AND INCOME TAX RATES
# =============================================================================

EMPLOYER_FICA_RATE = Decimal("0.0765")
EMPLOYEE_FICA_RATE = Decimal("0.0765")

# Flat marginal approximations used for reserve planning
FEDERAL_INCOME_RATE = Decimal("0.22")
STATE_INCOME_RATE = Decimal("0.0575")


# =============================================================================
# DEDUCTION RATES
# =============================================================================

HOME_OFFICE_RATE_PER_SQFT = Decimal("5")
HOME_OFFICE_MAX_SQFT = Decimal("300")
MILEAGE_RATE = Decimal("0.67")
MEALS_DEDUCTION_RATE = Decimal("0.5")

# Deduction keys that fall under the meals limitation
MEALS_DEDUCTION_KEYS = frozenset({
    "businessMeals",
    "travelMeals",
    "business_meals",
    "travel_meals",
})


# =============================================================================
# PERIOD CONVERSIONS
# =============================================================================

MONTHS_PER_YEAR = 12
QUARTERS_PER_YEAR = 4

# Average weeks in a month, converts weekly hours to monthly contractor pay
WEEKS_PER_MONTH = Decimal("4.33")


# =============================================================================
# BANK ALLOCATIONS
# =============================================================================

# (name, percentage, display color)
DEFAULT_BANK_ALLOCATIONS = (
    ("Operating", Decimal("50"), "#000000"),
    ("Tax Reserve", Decimal("30"), "#666666"),
    ("Owner Pay", Decimal("20"), "#999999"),
)
