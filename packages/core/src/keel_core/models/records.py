"""Input records supplied by the storage layer.

These are plain snapshots of what the business currently has on file:
clients, expenses, employees, contractors, deductions, trips and bank
allocation rules. The engine only reads them. Records are frozen so a
snapshot handed to a calculation cannot be altered by it.

Numeric fields accept ``int``, ``float``, ``str``, ``Decimal`` or ``None``;
``None`` becomes zero so partially filled forms still calculate.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from ..money import round_currency, to_decimal
from ..rates import MEALS_DEDUCTION_RATE, WEEKS_PER_MONTH


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ClientStatus(str, Enum):
    """Billing status of a client."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class PayType(str, Enum):
    """How a contractor is paid."""
    MONTHLY = "monthly"
    HOURLY = "hourly"


# =============================================================================
# BASE
# =============================================================================

class Record(BaseModel):
    """Base for all input records."""

    model_config = ConfigDict(frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def coerce_missing_amounts(cls, v, info):
        """Treat missing numeric values as zero and floats as exact decimals."""
        field = cls.model_fields[info.field_name]
        if field.annotation is Decimal:
            return to_decimal(v)
        return v


# =============================================================================
# BUSINESS ENTITIES
# =============================================================================

class ClientRecord(Record):
    """A client on a monthly retainer."""
    id: str
    name: Optional[str] = None
    monthly_retainer: Decimal = Decimal("0")
    status: ClientStatus = ClientStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == ClientStatus.ACTIVE


class ExpenseRecord(Record):
    """A business expense. Only recurring expenses are projected."""
    id: str
    description: Optional[str] = None
    amount: Decimal = Decimal("0")
    recurring: bool = False


class EmployeeRecord(Record):
    """A W-2 employee. ``salary`` is annual."""
    id: str
    name: Optional[str] = None
    salary: Decimal = Decimal("0")


class ContractorRecord(Record):
    """A 1099 contractor paid either a flat monthly amount or by the hour."""
    id: str
    name: Optional[str] = None
    pay_type: PayType = PayType.MONTHLY
    monthly_pay: Decimal = Decimal("0")
    hourly_rate: Decimal = Decimal("0")
    hours_per_week: Decimal = Decimal("0")

    @computed_field
    @property
    def effective_monthly_pay(self) -> Decimal:
        """Monthly cost of this contractor.

        Hourly contractors are converted with an average of 4.33 weeks per
        month.
        """
        if self.pay_type == PayType.HOURLY:
            return self.hours_per_week * WEEKS_PER_MONTH * self.hourly_rate
        return self.monthly_pay


# =============================================================================
# DEDUCTIONS
# =============================================================================

class DeductionRecord(Record):
    """A single tax deduction.

    ``amount`` means different things depending on the type flags: square
    footage is carried in ``sqft`` for the home office, ``amount`` is miles
    for mileage, a monthly figure when ``is_monthly`` is set, and an annual
    figure otherwise.

    The three ``reduces_*`` flags are independent; a deduction may reduce
    any combination of the federal, state and FICA bases.
    """
    enabled: bool = False
    amount: Decimal = Decimal("0")
    sqft: Decimal = Decimal("0")
    is_home_office: bool = False
    is_mileage: bool = False
    is_monthly: bool = False
    reduces_federal: bool = False
    reduces_state: bool = False
    reduces_fica: bool = False
    label: Optional[str] = None
    description: Optional[str] = None


# =============================================================================
# TRAVEL
# =============================================================================

class TripExpenseTotals(Record):
    """Summed travel costs applied to a scenario."""
    enabled: bool = False
    flights: Decimal = Decimal("0")
    lodging: Decimal = Decimal("0")
    ground_transport: Decimal = Decimal("0")
    meals: Decimal = Decimal("0")
    per_diem: Decimal = Decimal("0")
    other: Decimal = Decimal("0")


class TripRecord(Record):
    """One business trip as logged in the travel tracker."""
    id: str
    trip_name: str
    client_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    purpose: Optional[str] = None
    flights: Decimal = Decimal("0")
    lodging: Decimal = Decimal("0")
    ground_transport: Decimal = Decimal("0")
    meals: Decimal = Decimal("0")
    per_diem: Decimal = Decimal("0")
    other: Decimal = Decimal("0")


class TripSummary(BaseModel):
    """Category totals across a set of trips."""
    flights: Decimal = Decimal("0")
    lodging: Decimal = Decimal("0")
    ground_transport: Decimal = Decimal("0")
    meals: Decimal = Decimal("0")
    per_diem: Decimal = Decimal("0")
    other: Decimal = Decimal("0")
    trip_count: int = 0

    @computed_field
    @property
    def meals_deductible(self) -> Decimal:
        """Meals at the 50% limitation, rounded to whole units."""
        return round_currency(self.meals * MEALS_DEDUCTION_RATE)

    @computed_field
    @property
    def total(self) -> Decimal:
        return (
            self.flights + self.lodging + self.ground_transport
            + self.meals + self.per_diem + self.other
        )

    @computed_field
    @property
    def total_deductible(self) -> Decimal:
        return (
            self.flights + self.lodging + self.ground_transport
            + self.meals_deductible + self.per_diem + self.other
        )

    def to_scenario_totals(self, enabled: bool = True) -> TripExpenseTotals:
        """Carry these totals into a scenario's travel section."""
        return TripExpenseTotals(
            enabled=enabled,
            flights=self.flights,
            lodging=self.lodging,
            ground_transport=self.ground_transport,
            meals=self.meals,
            per_diem=self.per_diem,
            other=self.other,
        )


# =============================================================================
# ALLOCATIONS AND ONE-TIME PAYMENTS
# =============================================================================

class BankAllocation(Record):
    """A named share of projected monthly net profit.

    Percentages are not required to total 100; a mismatch is reported as
    a warning on the scenario result.
    """
    name: str
    percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    color: Optional[str] = None


class ExpectedPayment(Record):
    """A one-time payment a scenario expects to receive."""
    id: str
    client_name: Optional[str] = None
    amount: Decimal = Decimal("0")
    description: Optional[str] = None
    payment_date: Optional[date] = None


class ExpectedPayments(Record):
    """One-time payments attached to a scenario."""
    enabled: bool = False
    payments: tuple[ExpectedPayment, ...] = ()

    @property
    def total(self) -> Decimal:
        """Sum of payments when enabled, otherwise zero."""
        if not self.enabled:
            return Decimal("0")
        return sum((p.amount for p in self.payments), Decimal("0"))
