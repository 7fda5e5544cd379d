"""Scenario overlay models.

A scenario never edits the real records. It describes a diff per entity
type (ids to remove, fields to override, virtual entities to add) plus the
scenario-only settings: deductions, travel, bank allocations and expected
one-time payments.
"""

from decimal import Decimal
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

from ..money import to_decimal
from ..rates import DEFAULT_BANK_ALLOCATIONS
from .records import (
    BankAllocation,
    ClientRecord,
    ClientStatus,
    ContractorRecord,
    DeductionRecord,
    EmployeeRecord,
    ExpectedPayments,
    ExpenseRecord,
    PayType,
    TripExpenseTotals,
)


RecordT = TypeVar("RecordT", bound=BaseModel)
PatchT = TypeVar("PatchT", bound=BaseModel)


# =============================================================================
# PATCHES
# =============================================================================
# A patch holds only the fields a scenario replaces. Unset fields stay None
# and leave the base value untouched.

class Patch(BaseModel):
    """Base for per-entity overrides."""

    @field_validator("*", mode="before")
    @classmethod
    def coerce_amounts(cls, v, info):
        """Convert floats to exact decimals; keep None as 'not overridden'."""
        if v is None:
            return None
        if cls.model_fields[info.field_name].annotation == Optional[Decimal]:
            return to_decimal(v)
        return v

    def changes(self) -> dict:
        """Fields this patch sets."""
        return self.model_dump(exclude_none=True)


class ClientPatch(Patch):
    monthly_retainer: Optional[Decimal] = None
    status: Optional[ClientStatus] = None


class ExpensePatch(Patch):
    amount: Optional[Decimal] = None
    recurring: Optional[bool] = None


class EmployeePatch(Patch):
    salary: Optional[Decimal] = None


class ContractorPatch(Patch):
    """Contractor override.

    Setting ``monthly_pay`` without a ``pay_type`` switches the contractor
    to monthly pay, so the amount takes effect on hourly contractors too.
    """
    pay_type: Optional[PayType] = None
    monthly_pay: Optional[Decimal] = None
    hourly_rate: Optional[Decimal] = None
    hours_per_week: Optional[Decimal] = None

    def changes(self) -> dict:
        changes = super().changes()
        if "monthly_pay" in changes and "pay_type" not in changes:
            changes["pay_type"] = PayType.MONTHLY
        return changes


# =============================================================================
# DIFF
# =============================================================================

class EntityDiff(BaseModel, Generic[RecordT, PatchT]):
    """Changes a scenario makes to one entity type.

    Attributes:
        removed: Ids of real entities excluded from the scenario. Removal
            wins over any override for the same id.
        overridden: Field replacements for real entities, keyed by id.
        added: Virtual entities that exist only in the scenario.
    """
    removed: set[str] = Field(default_factory=set)
    overridden: dict[str, PatchT] = Field(default_factory=dict)
    added: list[RecordT] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.removed or self.overridden or self.added)


ClientDiff = EntityDiff[ClientRecord, ClientPatch]
ExpenseDiff = EntityDiff[ExpenseRecord, ExpensePatch]
ContractorDiff = EntityDiff[ContractorRecord, ContractorPatch]
EmployeeDiff = EntityDiff[EmployeeRecord, EmployeePatch]


def default_bank_allocations() -> list[BankAllocation]:
    """Operating 50%, Tax Reserve 30%, Owner Pay 20%."""
    return [
        BankAllocation(name=name, percentage=percentage, color=color)
        for name, percentage, color in DEFAULT_BANK_ALLOCATIONS
    ]


class ScenarioOverlay(BaseModel):
    """A what-if scenario layered over the real financial state."""
    clients: ClientDiff = Field(default_factory=ClientDiff)
    expenses: ExpenseDiff = Field(default_factory=ExpenseDiff)
    contractors: ContractorDiff = Field(default_factory=ContractorDiff)
    employees: EmployeeDiff = Field(default_factory=EmployeeDiff)

    tax_deductions: dict[str, DeductionRecord] = Field(default_factory=dict)
    trip_expenses: TripExpenseTotals = Field(default_factory=TripExpenseTotals)
    bank_allocations: list[BankAllocation] = Field(default_factory=list)
    expected_payments: ExpectedPayments = Field(default_factory=ExpectedPayments)

    # Deprecated: flat annual salary delta from before per-employee overrides
    salary_adjustment: Decimal = Decimal("0")

    @field_validator("salary_adjustment", mode="before")
    @classmethod
    def coerce_salary_adjustment(cls, v):
        return to_decimal(v)

    @classmethod
    def baseline(cls) -> "ScenarioOverlay":
        """An overlay that changes nothing, with the default bank split."""
        return cls(bank_allocations=default_bank_allocations())
