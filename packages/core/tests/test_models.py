"""Tests for keel_core data models."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from keel_core.models import (
    BankAllocation,
    ClientPatch,
    ClientRecord,
    ClientStatus,
    ContractorPatch,
    ContractorRecord,
    ExpectedPayment,
    ExpectedPayments,
    PayType,
    ScenarioOverlay,
    TaxBreakdown,
)


class TestRecords:
    """Input records coerce values and stay immutable."""

    def test_missing_amount_is_zero(self):
        client = ClientRecord(id="a", monthly_retainer=None)

        assert client.monthly_retainer == Decimal("0")
        assert client.is_active

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_blank_amount_is_zero(self, blank: str):
        """Partially filled forms still calculate."""
        client = ClientRecord(id="a", monthly_retainer=blank)
        contractor = ContractorRecord(id="c", monthly_pay=blank, hourly_rate=blank)

        assert client.monthly_retainer == Decimal("0")
        assert contractor.effective_monthly_pay == Decimal("0")

    def test_padded_amount_is_parsed(self):
        assert ClientRecord(id="a", monthly_retainer=" 1500 ").monthly_retainer == Decimal("1500")

    def test_non_numeric_amount_is_validation_error(self):
        with pytest.raises(ValidationError):
            ClientRecord(id="a", monthly_retainer="twelve")

    def test_float_amount_is_exact(self):
        client = ClientRecord(id="a", monthly_retainer=1234.56)
        assert client.monthly_retainer == Decimal("1234.56")

    def test_inactive_client(self):
        client = ClientRecord(id="a", status="inactive")
        assert client.status == ClientStatus.INACTIVE
        assert not client.is_active

    def test_records_are_frozen(self):
        client = ClientRecord(id="a", monthly_retainer=100)

        with pytest.raises(ValidationError):
            client.monthly_retainer = Decimal("200")

    def test_monthly_contractor_ignores_hourly_fields(self):
        contractor = ContractorRecord(
            id="c", monthly_pay=1000, hourly_rate=80, hours_per_week=20
        )
        assert contractor.effective_monthly_pay == Decimal("1000")

    def test_hourly_contractor(self):
        contractor = ContractorRecord(
            id="c", pay_type=PayType.HOURLY, hourly_rate=25, hours_per_week=20
        )
        assert contractor.effective_monthly_pay == Decimal("2165")

    def test_allocation_percentage_bounds(self):
        with pytest.raises(ValidationError):
            BankAllocation(name="Operating", percentage=101)

        with pytest.raises(ValidationError):
            BankAllocation(name="Operating", percentage=-1)


class TestExpectedPayments:
    """One-time payments total only when enabled."""

    @pytest.fixture
    def payments(self) -> tuple:
        return (
            ExpectedPayment(id="p1", amount=1500, payment_date="2026-02-15"),
            ExpectedPayment(id="p2", amount=500),
        )

    def test_total(self, payments: tuple):
        expected = ExpectedPayments(enabled=True, payments=payments)

        assert expected.total == Decimal("2000")
        assert expected.payments[0].payment_date == date(2026, 2, 15)

    def test_disabled_total_is_zero(self, payments: tuple):
        assert ExpectedPayments(enabled=False, payments=payments).total == Decimal("0")


class TestOverlayModels:
    """Overlay defaults and patches."""

    def test_patch_changes_only_set_fields(self):
        patch = ClientPatch(monthly_retainer=7500.5)

        assert patch.changes() == {"monthly_retainer": Decimal("7500.5")}

    def test_blank_patch_amount_is_zero(self):
        assert ClientPatch(monthly_retainer="").changes() == {"monthly_retainer": Decimal("0")}

    def test_non_numeric_patch_amount_is_validation_error(self):
        with pytest.raises(ValidationError):
            ClientPatch(monthly_retainer="n/a")

    def test_contractor_monthly_pay_switches_pay_type(self):
        patch = ContractorPatch(monthly_pay=3000)

        assert patch.changes() == {"monthly_pay": Decimal("3000"), "pay_type": PayType.MONTHLY}

    def test_contractor_explicit_pay_type_is_kept(self):
        patch = ContractorPatch(pay_type=PayType.HOURLY, monthly_pay=3000)

        assert patch.changes()["pay_type"] == PayType.HOURLY

    def test_empty_overlay(self):
        overlay = ScenarioOverlay()

        assert overlay.clients.is_empty
        assert overlay.bank_allocations == []
        assert overlay.salary_adjustment == Decimal("0")
        assert overlay.trip_expenses.enabled is False

    def test_baseline_overlay_allocations(self):
        overlay = ScenarioOverlay.baseline()

        assert [(a.name, a.percentage) for a in overlay.bank_allocations] == [
            ("Operating", Decimal("50")),
            ("Tax Reserve", Decimal("30")),
            ("Owner Pay", Decimal("20")),
        ]

    def test_salary_adjustment_none_is_zero(self):
        assert ScenarioOverlay(salary_adjustment=None).salary_adjustment == Decimal("0")


class TestTaxBreakdown:
    def test_total(self):
        breakdown = TaxBreakdown(
            employer_fica=Decimal("3672"),
            employee_fica=Decimal("3672"),
            federal_income=Decimal("46844"),
            state_income=Decimal("12243"),
        )
        assert breakdown.total == Decimal("66431")
