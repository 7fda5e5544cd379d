"""Scenario overlay resolution.

Applies a :class:`ScenarioOverlay` to the real records to get the effective
set of clients, expenses, contractors and employees a scenario sees. The
real records are never mutated; every entity type goes through the same
:func:`apply_diff`.

Also parses the stored (camelCase) scenario configuration document into an
overlay.
"""

from typing import Any, Iterable, Mapping, Sequence, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from .exceptions import ScenarioConfigError
from .models import (
    BankAllocation,
    ClientDiff,
    ClientPatch,
    ClientRecord,
    ContractorDiff,
    ContractorPatch,
    ContractorRecord,
    DeductionRecord,
    EmployeeDiff,
    EmployeePatch,
    EmployeeRecord,
    EntityDiff,
    ExpectedPayment,
    ExpectedPayments,
    ExpenseDiff,
    ExpensePatch,
    ExpenseRecord,
    PayType,
    ScenarioOverlay,
    TripExpenseTotals,
)

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=BaseModel)


# =============================================================================
# RESOLUTION
# =============================================================================

def apply_diff(base: Iterable[RecordT], diff: EntityDiff) -> list[RecordT]:
    """
    Apply one entity diff to a base collection.

    Removed ids are dropped first, so an override on a removed id has no
    effect. Surviving records with an override get the override's set
    fields; virtual additions are appended last.

    Args:
        base: Real records, each with an ``id``
        diff: The scenario's changes for this entity type

    Returns:
        New list of effective records (the base is not modified)
    """
    effective = []
    for record in base:
        if record.id in diff.removed:
            continue
        patch = diff.overridden.get(record.id)
        if patch is not None:
            record = record.model_copy(update=patch.changes())
        effective.append(record)

    effective.extend(diff.added)
    return effective


def diff_warnings(base: Iterable[BaseModel], diff: EntityDiff, entity_name: str) -> list[str]:
    """Describe overrides that cannot take effect.

    Covers overrides on removed ids (the removal wins) and overrides on ids
    that are not in the base collection.
    """
    base_ids = {record.id for record in base}
    warnings = []
    for record_id in sorted(diff.overridden):
        if record_id in diff.removed:
            warnings.append(
                f"{entity_name} {record_id!r} is both removed and overridden; the removal wins"
            )
        elif record_id not in base_ids:
            warnings.append(f"{entity_name} {record_id!r} is overridden but does not exist")

    for warning in warnings:
        logger.warning("overlay_diagnostic", entity=entity_name, warning=warning)
    return warnings


class EffectiveState(BaseModel):
    """The records a scenario sees after its overlay is applied."""
    clients: list[ClientRecord]
    expenses: list[ExpenseRecord]
    contractors: list[ContractorRecord]
    employees: list[EmployeeRecord]
    warnings: list[str] = []


def resolve_overlay(
    overlay: ScenarioOverlay,
    clients: Sequence[ClientRecord],
    expenses: Sequence[ExpenseRecord],
    contractors: Sequence[ContractorRecord],
    employees: Sequence[EmployeeRecord],
) -> EffectiveState:
    """Apply every entity diff of an overlay to the real records."""
    warnings = (
        diff_warnings(clients, overlay.clients, "client")
        + diff_warnings(expenses, overlay.expenses, "expense")
        + diff_warnings(contractors, overlay.contractors, "contractor")
        + diff_warnings(employees, overlay.employees, "employee")
    )
    return EffectiveState(
        clients=apply_diff(clients, overlay.clients),
        expenses=apply_diff(expenses, overlay.expenses),
        contractors=apply_diff(contractors, overlay.contractors),
        employees=apply_diff(employees, overlay.employees),
        warnings=warnings,
    )


# =============================================================================
# STORED CONFIGURATION
# =============================================================================

def _entries(config: Mapping[str, Any], key: str) -> list:
    value = config.get(key) or []
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"expected a list, got {type(value).__name__}")
    return list(value)


def _client_diff(config: Mapping[str, Any]) -> ClientDiff:
    diff = ClientDiff(removed=set(_entries(config, "removedClientIds")))
    for entry in _entries(config, "scenarioClients"):
        if entry.get("isVirtual"):
            diff.added.append(ClientRecord(
                id=entry["id"],
                name=entry.get("name"),
                monthly_retainer=entry.get("monthlyRetainer"),
            ))
        else:
            diff.overridden[entry["id"]] = ClientPatch(monthly_retainer=entry.get("monthlyRetainer"))
    return diff


def _expense_diff(config: Mapping[str, Any]) -> ExpenseDiff:
    diff = ExpenseDiff(removed=set(_entries(config, "removedExpenseIds")))
    for entry in _entries(config, "scenarioExpenses"):
        if entry.get("isVirtual"):
            diff.added.append(ExpenseRecord(
                id=entry["id"],
                description=entry.get("description"),
                amount=entry.get("amount"),
                recurring=bool(entry.get("recurring", False)),
            ))
        else:
            diff.overridden[entry["id"]] = ExpensePatch(
                amount=entry.get("amount"),
                recurring=entry.get("recurring"),
            )
    return diff


def _contractor_diff(config: Mapping[str, Any]) -> ContractorDiff:
    diff = ContractorDiff(removed=set(_entries(config, "removedContractorIds")))
    for entry in _entries(config, "scenarioContractors"):
        # Stored overrides carry a flat monthly amount
        diff.overridden[entry["id"]] = ContractorPatch(
            pay_type=PayType.MONTHLY,
            monthly_pay=entry.get("monthlyPay"),
        )
    for i, entry in enumerate(_entries(config, "additionalContractors")):
        diff.added.append(ContractorRecord(
            id=entry.get("id") or f"additional-contractor-{i}",
            name=entry.get("name"),
            pay_type=entry.get("payType") or PayType.MONTHLY,
            monthly_pay=entry.get("pay"),
            hourly_rate=entry.get("hourlyRate"),
            hours_per_week=entry.get("hoursPerWeek"),
        ))
    return diff


def _employee_diff(config: Mapping[str, Any]) -> EmployeeDiff:
    diff = EmployeeDiff(removed=set(_entries(config, "removedEmployeeIds")))
    for entry in _entries(config, "scenarioEmployees"):
        diff.overridden[entry["id"]] = EmployeePatch(salary=entry.get("salary"))
    for i, entry in enumerate(_entries(config, "additionalEmployees")):
        diff.added.append(EmployeeRecord(
            id=entry.get("id") or f"additional-employee-{i}",
            name=entry.get("name"),
            salary=entry.get("salary"),
        ))
    return diff


def _tax_deductions(config: Mapping[str, Any]) -> dict[str, DeductionRecord]:
    raw = config.get("taxDeductions") or {}
    return {
        key: DeductionRecord(
            enabled=bool(entry.get("enabled", False)),
            amount=entry.get("amount"),
            sqft=entry.get("sqft"),
            is_home_office=bool(entry.get("isHomeOffice", False)),
            is_mileage=bool(entry.get("isMileage", False)),
            is_monthly=bool(entry.get("isMonthly", False)),
            reduces_federal=bool(entry.get("reducesFederal", False)),
            reduces_state=bool(entry.get("reducesState", False)),
            reduces_fica=bool(entry.get("reducesFica", False)),
            label=entry.get("label"),
            description=entry.get("description"),
        )
        for key, entry in raw.items()
    }


def _bank_allocations(config: Mapping[str, Any]) -> list[BankAllocation]:
    return [
        BankAllocation(
            name=entry["name"],
            percentage=entry.get("percentage"),
            color=entry.get("color"),
        )
        for entry in _entries(config, "bankAllocations")
    ]


def _trip_expenses(config: Mapping[str, Any]) -> TripExpenseTotals:
    raw = config.get("tripExpenses")
    if not raw:
        return TripExpenseTotals()
    return TripExpenseTotals(
        enabled=bool(raw.get("enabled", False)),
        flights=raw.get("flights"),
        lodging=raw.get("lodging"),
        ground_transport=raw.get("groundTransport"),
        meals=raw.get("meals"),
        per_diem=raw.get("perDiem"),
        other=raw.get("otherExpenses"),
    )


def _expected_payments(config: Mapping[str, Any]) -> ExpectedPayments:
    raw = config.get("expectedPayments")
    if not raw:
        return ExpectedPayments()
    payments = tuple(
        ExpectedPayment(
            id=entry["id"],
            client_name=entry.get("clientName"),
            amount=entry.get("amount"),
            description=entry.get("description"),
            payment_date=entry.get("date") or None,
        )
        for entry in _entries(raw, "payments")
    )
    return ExpectedPayments(enabled=bool(raw.get("enabled", False)), payments=payments)


_SECTIONS = (
    ("clients", _client_diff),
    ("expenses", _expense_diff),
    ("contractors", _contractor_diff),
    ("employees", _employee_diff),
    ("tax_deductions", _tax_deductions),
    ("bank_allocations", _bank_allocations),
    ("trip_expenses", _trip_expenses),
    ("expected_payments", _expected_payments),
)


def overlay_from_config(config: Mapping[str, Any]) -> ScenarioOverlay:
    """
    Build an overlay from a stored scenario configuration document.

    Args:
        config: The persisted camelCase document

    Returns:
        The equivalent ScenarioOverlay

    Raises:
        ScenarioConfigError: If a section is missing required keys or holds
            values of the wrong shape
    """
    if not isinstance(config, Mapping):
        raise ScenarioConfigError(
            f"Scenario config must be a mapping, got {type(config).__name__}",
        )

    fields = {}
    for section, parse in _SECTIONS:
        try:
            fields[section] = parse(config)
        except KeyError as e:
            raise ScenarioConfigError(
                f"Missing key {e} in scenario section '{section}'",
                section=section,
                details={"missing_key": str(e.args[0])},
            ) from e
        except (AttributeError, TypeError, ValueError) as e:
            # ValidationError is a ValueError
            details = {"error": str(e)}
            if isinstance(e, ValidationError):
                details["error_count"] = e.error_count()
            raise ScenarioConfigError(
                f"Invalid scenario section '{section}'",
                section=section,
                details=details,
            ) from e

    try:
        overlay = ScenarioOverlay(
            salary_adjustment=config.get("salaryAdjustment"),
            **fields,
        )
    except (TypeError, ValueError) as e:
        raise ScenarioConfigError(
            "Invalid scenario salary adjustment",
            section="salary_adjustment",
            details={"error": str(e)},
        ) from e

    logger.debug(
        "scenario_config_parsed",
        removed_clients=len(overlay.clients.removed),
        added_clients=len(overlay.clients.added),
        deductions=len(overlay.tax_deductions),
    )
    return overlay


__all__ = [
    "apply_diff",
    "diff_warnings",
    "EffectiveState",
    "resolve_overlay",
    "overlay_from_config",
]
