"""
Integration Test Scenarios for the Commission Engine

These tests cover complete monthly commission runs for a sales rep, built
from the reference compensation policy, and validate end-to-end
functionality through the dict interface.

Run with: python -m pytest tests/test_integration_scenarios.py -v

IMPORTANT: This file has a companion business summary document:
    docs/test_scenarios_business_summary.md

When adding or modifying tests, please update the business summary document
to keep them in sync. The summary provides plain-English explanations of
each test scenario for business stakeholders.
"""


import pytest

from commission_engine import CommissionBatchProcessor
from commission_engine.defaults import default_policy_data


def _invoice(inv_id, customer, amount, line="Ventas", day="2024-01-10", new=False, recovered=False):
    return {
        "id": inv_id,
        "customer_id": customer,
        "date": day,
        "amount": amount,
        "business_line": line,
        "is_new_client": new,
        "is_recovered_client": recovered,
        "sales_rep_id": "r1",
        "territory": "Norte",
    }


def _input(invoices, period_sales=None, active_customers=50, closing_rate=30, policy=None):
    data = {
        "policy": policy or default_policy_data(),
        "active_customers": active_customers,
        "closing_rate": closing_rate,
        "invoices": invoices,
    }
    if period_sales is not None:
        data["period_sales"] = period_sales
    return data


class TestTargetExceeded:
    """Sales above the 700,000 global target earn positive scales."""

    @pytest.fixture
    def processor(self):
        return CommissionBatchProcessor()

    def test_second_positive_bracket(self, processor):
        """760,000 in sales pays at 110%."""
        result = processor.process_from_dict(
            _input([_invoice("1", "Kia Motors", 100000)], period_sales=760000)
        )

        # 100,000 x 1.5% = 1,500 x 1.10
        assert result["factors"]["financial_factor"]["value"] == 1.1
        assert result["records"][0]["final_commission_amount"] == 1650.0

    def test_top_bracket_is_open_ended(self, processor):
        """Any amount above 1,000,000 pays at 120%."""
        result = processor.process_from_dict(
            _input([_invoice("1", "Kia Motors", 100000)], period_sales=3500000)
        )

        assert result["records"][0]["final_commission_amount"] == 1800.0


class TestTargetMissed:
    """Sales at or below the target fall on the negative scales."""

    @pytest.fixture
    def processor(self):
        return CommissionBatchProcessor()

    def test_sales_between_negative_thresholds(self, processor):
        """550,000 pays at 80%."""
        result = processor.process_from_dict(
            _input([_invoice("1", "Metalsa", 50000, line="Renta")], period_sales=550000)
        )

        # 50,000 x 2% = 1,000 x 0.80
        assert result["records"][0]["final_commission_amount"] == 800.0

    def test_period_sales_from_invoices(self, processor):
        """Without an explicit total, the invoices themselves are the period sales."""
        invoices = [_invoice(str(i), "Metalsa", 100000, line="Proyectos") for i in range(3)]
        result = processor.process_from_dict(_input(invoices))

        # 300,000 is below every negative threshold: 50%
        assert result["batch_summary"]["period_sales"] == 300000.0
        assert result["batch_summary"]["target_reached"] is False
        assert result["totals"]["final_commission"] == 4500.0


class TestCoveragePenalties:
    """Portfolio and closing coverage multiply the commission."""

    @pytest.fixture
    def processor(self):
        return CommissionBatchProcessor()

    def test_both_coverages_penalize(self, processor):
        """42 of 50 active customers (84%) and 25% vs 30% closing (83.3%)."""
        result = processor.process_from_dict(
            _input([_invoice("1", "Bimbo S.A.", 100000)], period_sales=760000,
                   active_customers=42, closing_rate=25)
        )

        # 1,500 x 1.10 x 0.9 x 0.9
        assert result["records"][0]["final_commission_amount"] == 1336.5
        assert result["factors"]["combined_factor"]["value"] == 0.891

    def test_disabled_coverage_is_ignored(self, processor):
        policy = default_policy_data()
        policy["enable_portfolio_coverage"] = False
        policy["enable_closing_coverage"] = False
        result = processor.process_from_dict(
            _input([_invoice("1", "Bimbo S.A.", 100000)], period_sales=760000,
                   active_customers=0, closing_rate=0, policy=policy)
        )

        assert result["records"][0]["final_commission_amount"] == 1650.0

    def test_coverage_below_floor_zeroes_commission(self, processor):
        """A 10% floor on the closing scale removes the multiplier entirely."""
        policy = default_policy_data()
        policy["closing_scales"][2]["end_percentage"] = 10
        result = processor.process_from_dict(
            _input([_invoice("1", "Bimbo S.A.", 100000, new=True)], period_sales=760000,
                   closing_rate=2, policy=policy)
        )

        # Only the new client bonus survives
        assert result["records"][0]["final_commission_amount"] == 500.0


class TestBonusStacking:
    """Fixed bonuses are added after the factors."""

    @pytest.fixture
    def processor(self):
        return CommissionBatchProcessor()

    def test_new_and_recovered_on_same_invoice(self, processor):
        result = processor.process_from_dict(
            _input([_invoice("1", "Ternium México", 10000, new=True, recovered=True)], period_sales=550000)
        )

        # 10,000 x 1.5% = 150 x 0.80 = 120 + 500 + 500
        assert result["records"][0]["final_commission_amount"] == 1120.0
        assert result["records"][0]["bonus_amount"] == 1000.0

    def test_small_purchase_gets_no_bonus(self, processor):
        result = processor.process_from_dict(
            _input([_invoice("1", "Ternium México", 4000, new=True)], period_sales=550000)
        )

        # 4,000 x 1.5% = 60 x 0.80
        assert result["records"][0]["final_commission_amount"] == 48.0


class TestVolumeBonus:
    """The volume bonus is paid once per batch on distinct new clients."""

    @pytest.fixture
    def processor(self):
        return CommissionBatchProcessor()

    def test_five_distinct_new_clients(self, processor):
        customers = ["Kia Motors", "Metalsa", "Nemak Global", "Bimbo S.A.", "Ford Planta"]
        invoices = [_invoice(str(i), c, 1000, new=True) for i, c in enumerate(customers)]
        result = processor.process_from_dict(_input(invoices, period_sales=760000))

        assert result["bonuses"]["volume_bonus"]["value"] == 1500.0
        assert result["totals"]["total_payable"] == result["totals"]["final_commission"] + 1500.0

    def test_repeat_customer_counts_once(self, processor):
        customers = ["Kia Motors", "Kia Motors", "Metalsa", "Nemak Global", "Bimbo S.A."]
        invoices = [_invoice(str(i), c, 1000, new=True) for i, c in enumerate(customers)]
        result = processor.process_from_dict(_input(invoices, period_sales=760000))

        assert result["batch_summary"]["distinct_new_clients"] == 4
        assert result["bonuses"]["volume_bonus"]["value"] == 0.0


class TestPaymentCalendar:
    """Payout dates follow the 60-day term and the day-15 cutoff."""

    @pytest.fixture
    def processor(self):
        return CommissionBatchProcessor()

    def test_payout_dates_per_invoice(self, processor):
        invoices = [
            _invoice("1", "Kia Motors", 1000, day="2024-01-01"),
            _invoice("2", "Kia Motors", 1000, day="2024-01-20"),
            _invoice("3", "Kia Motors", 1000, day="2024-10-20"),
        ]
        result = processor.process_from_dict(_input(invoices, period_sales=760000))

        assert [r["payment_date"] for r in result["records"]] == ["2024-03-15", "2024-04-15", "2025-01-15"]
