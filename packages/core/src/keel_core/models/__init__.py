"""Data models for keel-core.

This package provides the engine's data structures:
- Input records supplied by the storage layer (records.py)
- Scenario overlays: per-entity diffs and scenario settings (overlay.py)
- Calculation inputs, results and comparisons (results.py)
"""

from keel_core.models.records import (
    # Enumerations
    ClientStatus,
    PayType,
    # Business entities
    ClientRecord,
    ExpenseRecord,
    EmployeeRecord,
    ContractorRecord,
    # Deductions
    DeductionRecord,
    # Travel
    TripExpenseTotals,
    TripRecord,
    TripSummary,
    # Allocations and payments
    BankAllocation,
    ExpectedPayment,
    ExpectedPayments,
)

from keel_core.models.overlay import (
    ClientPatch,
    ExpensePatch,
    EmployeePatch,
    ContractorPatch,
    EntityDiff,
    ClientDiff,
    ExpenseDiff,
    ContractorDiff,
    EmployeeDiff,
    ScenarioOverlay,
    default_bank_allocations,
)

from keel_core.models.results import (
    DeductionTotals,
    TaxCalculationInput,
    TaxBreakdown,
    TaxCalculationResult,
    AllocationAmount,
    ScenarioResult,
    PercentChange,
    ComparisonRow,
    ScenarioComparison,
)

__all__ = [
    # Enumerations
    "ClientStatus",
    "PayType",
    # Records
    "ClientRecord",
    "ExpenseRecord",
    "EmployeeRecord",
    "ContractorRecord",
    "DeductionRecord",
    "TripExpenseTotals",
    "TripRecord",
    "TripSummary",
    "BankAllocation",
    "ExpectedPayment",
    "ExpectedPayments",
    # Overlay
    "ClientPatch",
    "ExpensePatch",
    "EmployeePatch",
    "ContractorPatch",
    "EntityDiff",
    "ClientDiff",
    "ExpenseDiff",
    "ContractorDiff",
    "EmployeeDiff",
    "ScenarioOverlay",
    "default_bank_allocations",
    # Results
    "DeductionTotals",
    "TaxCalculationInput",
    "TaxBreakdown",
    "TaxCalculationResult",
    "AllocationAmount",
    "ScenarioResult",
    "PercentChange",
    "ComparisonRow",
    "ScenarioComparison",
]
