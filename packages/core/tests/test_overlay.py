"""Tests for overlay resolution and stored scenario parsing."""

from decimal import Decimal

import pytest

from keel_core.exceptions import ScenarioConfigError
from keel_core.models import (
    ClientDiff,
    ClientPatch,
    ClientRecord,
    ContractorDiff,
    ContractorPatch,
    ContractorRecord,
    EmployeeDiff,
    EmployeePatch,
    EmployeeRecord,
    ExpenseRecord,
    PayType,
    ScenarioOverlay,
)
from keel_core.overlay import apply_diff, diff_warnings, overlay_from_config, resolve_overlay


@pytest.fixture
def clients() -> list[ClientRecord]:
    return [
        ClientRecord(id="acme", name="Acme", monthly_retainer=10000),
        ClientRecord(id="globex", name="Globex", monthly_retainer=6000),
        ClientRecord(id="initech", name="Initech", monthly_retainer=4000),
    ]


class TestApplyDiff:
    """One generic diff applies to every entity type."""

    def test_empty_diff_keeps_records(self, clients: list[ClientRecord]):
        assert apply_diff(clients, ClientDiff()) == clients

    def test_remove_override_and_add(self, clients: list[ClientRecord]):
        diff = ClientDiff(
            removed={"globex"},
            overridden={"acme": ClientPatch(monthly_retainer=12000)},
            added=[ClientRecord(id="virtual-1", monthly_retainer=5000)],
        )

        effective = apply_diff(clients, diff)

        assert [c.id for c in effective] == ["acme", "initech", "virtual-1"]
        assert effective[0].monthly_retainer == Decimal("12000")
        assert effective[0].name == "Acme"

    def test_removal_wins_over_override(self, clients: list[ClientRecord]):
        diff = ClientDiff(
            removed={"acme"},
            overridden={"acme": ClientPatch(monthly_retainer=99999)},
        )

        effective = apply_diff(clients, diff)

        assert "acme" not in {c.id for c in effective}

    def test_base_records_are_not_modified(self, clients: list[ClientRecord]):
        diff = ClientDiff(overridden={"acme": ClientPatch(monthly_retainer=1)})

        apply_diff(clients, diff)

        assert clients[0].monthly_retainer == Decimal("10000")

    def test_monthly_override_on_hourly_contractor(self):
        contractors = [
            ContractorRecord(id="c", pay_type=PayType.HOURLY, hourly_rate=50, hours_per_week=10),
        ]
        diff = ContractorDiff(overridden={"c": ContractorPatch(monthly_pay=3000)})

        effective = apply_diff(contractors, diff)

        assert effective[0].pay_type == PayType.MONTHLY
        assert effective[0].effective_monthly_pay == Decimal("3000")

    def test_unset_patch_fields_leave_base_value(self):
        employees = [EmployeeRecord(id="w", name="Owner", salary=48000)]
        diff = EmployeeDiff(overridden={"w": EmployeePatch()})

        assert apply_diff(employees, diff)[0].salary == Decimal("48000")


class TestDiffWarnings:
    """Overrides that cannot take effect are reported, not raised."""

    def test_override_on_removed_id(self, clients: list[ClientRecord]):
        diff = ClientDiff(removed={"acme"}, overridden={"acme": ClientPatch(monthly_retainer=1)})

        warnings = diff_warnings(clients, diff, "client")

        assert len(warnings) == 1
        assert "removal wins" in warnings[0]

    def test_override_on_unknown_id(self, clients: list[ClientRecord]):
        diff = ClientDiff(overridden={"ghost": ClientPatch(monthly_retainer=1)})

        warnings = diff_warnings(clients, diff, "client")

        assert warnings == ["client 'ghost' is overridden but does not exist"]

    def test_resolve_overlay_collects_warnings(self, clients: list[ClientRecord]):
        overlay = ScenarioOverlay(
            clients=ClientDiff(overridden={"ghost": ClientPatch(monthly_retainer=1)}),
        )

        state = resolve_overlay(overlay, clients, [], [], [])

        assert len(state.clients) == 3
        assert len(state.warnings) == 1


@pytest.fixture
def stored_config() -> dict:
    """A scenario document as persisted by the scenario editor."""
    return {
        "scenarioClients": [
            {"id": "acme", "name": "Acme", "monthlyRetainer": 12000},
            {"id": "virtual-1", "name": "Prospect", "monthlyRetainer": 5000, "isVirtual": True},
        ],
        "removedClientIds": ["globex"],
        "scenarioExpenses": [
            {"id": "v-exp", "description": "New CRM", "amount": 150, "recurring": True, "isVirtual": True},
        ],
        "removedExpenseIds": ["old-tool"],
        "scenarioContractors": [{"id": "dev", "name": "Dev", "monthlyPay": 3000}],
        "removedContractorIds": [],
        "additionalContractors": [
            {"name": "Designer", "pay": 2000},
            {"name": "Editor", "pay": 0, "payType": "hourly", "hourlyRate": 40, "hoursPerWeek": 5},
        ],
        "scenarioEmployees": [{"id": "owner", "name": "Owner", "salary": 60000}],
        "removedEmployeeIds": [],
        "additionalEmployees": [{"name": "Assistant", "salary": 30000}],
        "salaryAdjustment": 0,
        "taxDeductions": {
            "homeOffice": {
                "enabled": True, "amount": 0, "sqft": 250, "isHomeOffice": True,
                "reducesFederal": True, "reducesState": True, "label": "Home office",
                "description": "",
            },
            "healthInsurance": {
                "enabled": True, "amount": 500, "isMonthly": True, "reducesFica": True,
                "label": "Health insurance", "description": "",
            },
        },
        "bankAllocations": [
            {"name": "Operating", "percentage": 60, "color": "#000000"},
            {"name": "Owner Pay", "percentage": 40, "color": "#999999"},
        ],
        "tripExpenses": {
            "enabled": True, "flights": 1000, "lodging": 800, "groundTransport": 200,
            "meals": 300, "perDiem": 0, "otherExpenses": 100,
        },
        "expectedPayments": {
            "enabled": True,
            "payments": [
                {"id": "p1", "clientName": "Acme", "amount": 2500, "description": "Bonus", "date": "2026-03-01"},
            ],
        },
    }


class TestOverlayFromConfig:
    """Parsing the persisted scenario document."""

    def test_clients(self, stored_config: dict):
        overlay = overlay_from_config(stored_config)

        assert overlay.clients.removed == {"globex"}
        assert overlay.clients.overridden["acme"].monthly_retainer == Decimal("12000")
        assert [c.id for c in overlay.clients.added] == ["virtual-1"]

    def test_expenses(self, stored_config: dict):
        overlay = overlay_from_config(stored_config)

        assert overlay.expenses.removed == {"old-tool"}
        assert overlay.expenses.added[0].recurring is True
        assert overlay.expenses.added[0].amount == Decimal("150")

    def test_contractors(self, stored_config: dict):
        overlay = overlay_from_config(stored_config)

        patch = overlay.contractors.overridden["dev"]
        assert patch.pay_type == PayType.MONTHLY
        assert patch.monthly_pay == Decimal("3000")

        designer, editor = overlay.contractors.added
        assert designer.id == "additional-contractor-0"
        assert designer.effective_monthly_pay == Decimal("2000")
        assert editor.pay_type == PayType.HOURLY
        assert editor.effective_monthly_pay == Decimal("866.00")

    def test_employees(self, stored_config: dict):
        overlay = overlay_from_config(stored_config)

        assert overlay.employees.overridden["owner"].salary == Decimal("60000")
        assert overlay.employees.added[0].id == "additional-employee-0"

    def test_deductions_and_settings(self, stored_config: dict):
        overlay = overlay_from_config(stored_config)

        home_office = overlay.tax_deductions["homeOffice"]
        assert home_office.is_home_office is True
        assert home_office.sqft == Decimal("250")
        assert home_office.reduces_federal is True
        assert home_office.reduces_fica is False
        assert overlay.tax_deductions["healthInsurance"].reduces_fica is True

        assert [a.name for a in overlay.bank_allocations] == ["Operating", "Owner Pay"]
        assert overlay.trip_expenses.other == Decimal("100")
        assert overlay.trip_expenses.ground_transport == Decimal("200")
        assert overlay.expected_payments.total == Decimal("2500")

    def test_minimal_document(self):
        """Older documents omit the newer sections."""
        overlay = overlay_from_config({"scenarioClients": [], "removedClientIds": []})

        assert overlay.clients.is_empty
        assert overlay.trip_expenses.enabled is False
        assert overlay.expected_payments.total == Decimal("0")
        assert overlay.salary_adjustment == Decimal("0")

    def test_blank_amounts_are_zero(self):
        """Amounts left empty in the editor count as zero."""
        config = {
            "scenarioClients": [
                {"id": "acme", "monthlyRetainer": ""},
                {"id": "v", "isVirtual": True, "monthlyRetainer": ""},
            ],
            "additionalEmployees": [{"name": "Assistant", "salary": " "}],
            "salaryAdjustment": "",
        }

        overlay = overlay_from_config(config)

        assert overlay.clients.overridden["acme"].monthly_retainer == Decimal("0")
        assert overlay.clients.added[0].monthly_retainer == Decimal("0")
        assert overlay.employees.added[0].salary == Decimal("0")
        assert overlay.salary_adjustment == Decimal("0")

    def test_non_numeric_amount_raises(self):
        config = {"scenarioClients": [{"id": "v", "isVirtual": True, "monthlyRetainer": "lots"}]}

        with pytest.raises(ScenarioConfigError) as exc_info:
            overlay_from_config(config)

        assert exc_info.value.section == "clients"
        assert exc_info.value.details["error_count"] == 1

    def test_missing_id_raises(self):
        config = {"scenarioClients": [{"name": "No id", "monthlyRetainer": 100}]}

        with pytest.raises(ScenarioConfigError) as exc_info:
            overlay_from_config(config)

        assert exc_info.value.section == "clients"
        assert exc_info.value.recoverable is True

    def test_out_of_range_allocation_raises(self):
        config = {"bankAllocations": [{"name": "Operating", "percentage": 150}]}

        with pytest.raises(ScenarioConfigError) as exc_info:
            overlay_from_config(config)

        assert exc_info.value.section == "bank_allocations"
        assert exc_info.value.details["error_count"] == 1

    def test_wrong_shape_raises(self):
        with pytest.raises(ScenarioConfigError):
            overlay_from_config({"removedClientIds": "acme"})

    def test_non_mapping_raises(self):
        with pytest.raises(ScenarioConfigError):
            overlay_from_config(["not", "a", "mapping"])


class TestResolvedStoredScenario:
    """A parsed document resolves against real records."""

    def test_resolve(self, stored_config: dict, clients: list[ClientRecord]):
        overlay = overlay_from_config(stored_config)
        expenses = [ExpenseRecord(id="old-tool", amount=99, recurring=True)]
        contractors = [ContractorRecord(id="dev", monthly_pay=2500)]
        employees = [EmployeeRecord(id="owner", salary=48000)]

        state = resolve_overlay(overlay, clients, expenses, contractors, employees)

        assert [c.id for c in state.clients] == ["acme", "initech", "virtual-1"]
        assert [e.id for e in state.expenses] == ["v-exp"]
        assert state.contractors[0].monthly_pay == Decimal("3000")
        assert [e.salary for e in state.employees] == [Decimal("60000"), Decimal("30000")]
        assert state.warnings == []
