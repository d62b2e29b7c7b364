"""
Tests for domain model construction and loading
"""

import dataclasses
import pytest
from datetime import date
from decimal import Decimal
from commission_engine.defaults import default_policy, default_policy_data
from commission_engine.models import BatchInput, CompensationPolicy, Invoice


class TestPolicyConstruction:
    """Bracket table shape is enforced when a policy is built."""

    def test_tables_are_frozen_into_tuples(self):
        policy = default_policy()
        assert isinstance(policy.positive_scales, tuple)
        assert isinstance(policy.closing_scales, tuple)

    def test_policy_is_immutable(self):
        policy = default_policy()
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.global_target = Decimal('1')

    def test_rates_are_read_only(self):
        policy = default_policy()
        with pytest.raises(TypeError):
            policy.rates["Ventas"] = Decimal('0.5')

    def test_wrong_positive_arity(self):
        data = default_policy_data()
        data["positive_scales"] = data["positive_scales"][1:]
        with pytest.raises(ValueError, match="exactly 4"):
            CompensationPolicy.from_dict(data)

    def test_wrong_coverage_arity(self):
        data = default_policy_data()
        data["portfolio_scales"].append({"start_percentage": 0, "end_percentage": 0, "payout_factor": 0})
        with pytest.raises(ValueError, match="exactly 3"):
            CompensationPolicy.from_dict(data)

    def test_only_terminal_bracket_may_be_unbounded(self):
        data = default_policy_data()
        data["negative_scales"][1]["end_amount"] = None
        with pytest.raises(ValueError, match="only the last bracket is unbounded"):
            CompensationPolicy.from_dict(data)

    def test_terminal_bracket_must_be_unbounded(self):
        data = default_policy_data()
        data["positive_scales"][3]["end_amount"] = 2000000
        with pytest.raises(ValueError, match="must be unbounded"):
            CompensationPolicy.from_dict(data)

    def test_default_data_copy_is_independent(self):
        data = default_policy_data()
        data["rates"]["Ventas"] = 0.5
        assert default_policy().rates["Ventas"] == Decimal('0.015')


class TestFromDict:
    """Both snake_case and the editor's camelCase payloads load."""

    def test_camel_case_policy(self):
        data = {
            "globalTarget": 700000,
            "positiveScales": [
                {"endAmount": 750000, "commissionPercentage": 105},
                {"endAmount": 850000, "commissionPercentage": 110},
                {"endAmount": 1000000, "commissionPercentage": 115},
                {"commissionPercentage": 120},
            ],
            "negativeScales": [
                {"endAmount": 600000, "commissionPercentage": 90},
                {"endAmount": 500000, "commissionPercentage": 80},
                {"endAmount": 400000, "commissionPercentage": 70},
                {"commissionPercentage": 50},
            ],
            "portfolioScales": [
                {"startPercentage": 100, "endPercentage": 90, "payoutFactor": 1.0},
                {"startPercentage": 89, "endPercentage": 80, "payoutFactor": 0.9},
                {"startPercentage": 79, "endPercentage": 0, "payoutFactor": 0.8},
            ],
            "closingScales": [
                {"startPercentage": 100, "endPercentage": 90, "payoutFactor": 1.0},
                {"startPercentage": 89, "endPercentage": 80, "payoutFactor": 0.9},
                {"startPercentage": 79, "endPercentage": 0, "payoutFactor": 0.8},
            ],
            "enableBonusVolume": True,
            "bonusVolumeClients": {"targetQty": 5, "rewardAmount": 1500},
            "rates": {"Ventas": 0.015},
        }
        policy = CompensationPolicy.from_dict(data)

        assert policy.global_target == Decimal('700000')
        assert policy.positive_scales[3].end_amount is None
        assert policy.closing_scales[1].payout_factor == Decimal('0.9')
        assert policy.bonus_volume_clients.target_qty == 5
        assert policy.enable_bonus_new_client is False

    def test_invoice_from_erp_payload(self):
        invoice = Invoice.from_dict({
            "docNum": 100120,
            "customerName": "Kia Motors",
            "docDate": "2024-01-20",
            "docTotal": 45000,
            "businessLine": "Ventas",
            "isNewClient": True,
            "salesRepId": "r1",
            "territory": "Norte",
        })

        assert invoice.id == '100120'
        assert invoice.customer_id == 'Kia Motors'
        assert invoice.date == date(2024, 1, 20)
        assert invoice.amount == Decimal('45000')
        assert invoice.is_new_client is True
        assert invoice.is_recovered_client is False
        assert invoice.currency == 'MXN'

    def test_batch_period_sales_defaults_to_invoice_sum(self):
        batch = BatchInput.from_dict({
            "policy": default_policy_data(),
            "invoices": [
                {"id": "1", "customer_id": "C1", "date": "2024-01-02", "amount": 100.10, "business_line": "Renta"},
                {"id": "2", "customer_id": "C2", "date": "2024-01-03", "amount": 200.20, "business_line": "Renta"},
            ],
        })

        assert batch.period_sales is None
        assert batch.effective_period_sales == Decimal('300.30')

    def test_explicit_period_sales(self):
        batch = BatchInput.from_dict({"policy": default_policy_data(), "invoices": [], "period_sales": 760000})
        assert batch.effective_period_sales == Decimal('760000')

    def test_batch_is_immutable(self):
        batch = BatchInput.from_dict({"policy": default_policy_data(), "invoices": [], "closing_rate": 27})

        assert isinstance(batch.invoices, tuple)
        with pytest.raises(dataclasses.FrozenInstanceError):
            batch.closing_rate = Decimal('25')

    def test_invoice_list_is_stored_as_tuple(self):
        invoices = [Invoice(id='1', customer_id='C1', date=date(2024, 1, 2), amount=Decimal('10'), business_line='Renta')]
        batch = BatchInput(invoices=invoices, policy=default_policy())
        invoices.clear()

        assert len(batch.invoices) == 1

    def test_missing_invoice_amount_is_a_value_error(self):
        with pytest.raises(ValueError, match="Invalid number"):
            Invoice.from_dict({"id": "1", "customer_id": "C1", "date": "2024-01-02", "business_line": "Renta"})

    def test_non_numeric_amount_is_a_value_error(self):
        with pytest.raises(ValueError, match="Invalid number: 'abc'"):
            Invoice.from_dict({
                "id": "1", "customer_id": "C1", "date": "2024-01-02", "amount": "abc", "business_line": "Renta"
            })
