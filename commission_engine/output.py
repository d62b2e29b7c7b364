"""
Output Builder

Constructs the final API response from a batch result.
"""

from decimal import Decimal

from .calculators.bonus import BonusAggregator
from .calculators.financial import FinancialFactorResolver
from .models import BatchResult, CommissionRecord, CompensationPolicy


def to_money(value: Decimal) -> float:
    """Convert Decimal to float with 2 decimal places."""
    return round(float(value), 2)


def to_factor(value: Decimal) -> float:
    """Convert a multiplier to float with 4 decimal places."""
    return round(float(value), 4)


def _fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return f"${value:,.2f}"


class OutputBuilder:
    """Builds the final output response."""

    def __init__(self):
        self.bonus_aggregator = BonusAggregator()
        self.financial_resolver = FinancialFactorResolver()

    def build(self, result: BatchResult, policy: CompensationPolicy) -> dict:
        """Construct the complete batch response."""
        return {
            "batch_summary": self._build_batch_summary(result, policy),
            "factors": self._build_factors(result, policy),
            "bonuses": self._build_bonuses(result, policy),
            "totals": self._build_totals(result),
            "by_business_line": self._build_line_table(result, policy),
            "records": [self.build_record(r) for r in result.records],
        }

    def build_record(self, record: CommissionRecord) -> dict:
        """Serialize a single commission record, invoice fields included."""
        invoice = record.invoice
        return {
            "id": invoice.id,
            "customer_id": invoice.customer_id,
            "date": invoice.date.isoformat(),
            "amount": to_money(invoice.amount),
            "currency": invoice.currency,
            "business_line": invoice.business_line,
            "is_new_client": invoice.is_new_client,
            "is_recovered_client": invoice.is_recovered_client,
            "is_paid": invoice.is_paid,
            "sales_rep_id": invoice.sales_rep_id,
            "sales_rep_name": invoice.sales_rep_name,
            "manager_name": invoice.manager_name,
            "territory": invoice.territory,
            "base_date": record.base_date.isoformat(),
            "payment_date": record.payment_date.isoformat(),
            "applied_rate": float(record.applied_rate),
            "base_commission_amount": to_money(record.base_commission_amount),
            "bonus_amount": to_money(record.bonus_amount),
            "final_commission_amount": to_money(record.final_commission_amount),
            "financial_factor": to_factor(record.financial_factor),
            "portfolio_factor": to_factor(record.portfolio_factor),
            "closing_factor": to_factor(record.closing_factor),
            "penalty_factor": to_factor(record.penalty_factor),
            "status": record.status,
        }

    def _build_batch_summary(self, result: BatchResult, policy: CompensationPolicy) -> dict:
        period_sales = to_money(result.period_sales)
        target = to_money(policy.global_target)
        return {
            "invoice_count": len(result.records),
            "period_sales": period_sales,
            "global_target": target,
            "target_reached": result.period_sales > policy.global_target,
            "distinct_new_clients": result.distinct_new_clients,
        }

    def _build_factors(self, result: BatchResult, policy: CompensationPolicy) -> dict:
        """Build factors section with value and dynamic description for each factor."""
        factors = result.factors
        # Money effect of each factor, applied in sequence to the batch base commission
        base = result.total_base_commission
        after_financial = base * factors.financial
        after_portfolio = after_financial * factors.portfolio
        after_closing = after_portfolio * factors.closing

        period_sales = to_money(result.period_sales)
        target = to_money(policy.global_target)

        if result.period_sales > policy.global_target:
            financial_desc = (
                f"Period sales ({_fmt(period_sales)}) exceed the global target ({_fmt(target)}): "
                f"positive scale at {float(factors.financial) * 100:.0f}%"
            )
        else:
            financial_desc = (
                f"Period sales ({_fmt(period_sales)}) did not exceed the global target ({_fmt(target)}): "
                f"negative scale at {float(factors.financial) * 100:.0f}%"
            )

        return {
            "financial_factor": {
                "value": to_factor(factors.financial),
                "amount_after": to_money(after_financial),
                "impact": to_money(after_financial - base),
                "description": financial_desc
            },
            "portfolio_factor": {
                "value": to_factor(factors.portfolio),
                "amount_after": to_money(after_portfolio),
                "impact": to_money(after_portfolio - after_financial),
                "description": (
                    f"Portfolio activity coverage vs target of {float(policy.portfolio_activity_target):g}%"
                    if policy.enable_portfolio_coverage else "Portfolio coverage disabled"
                )
            },
            "closing_factor": {
                "value": to_factor(factors.closing),
                "amount_after": to_money(after_closing),
                "impact": to_money(after_closing - after_portfolio),
                "description": (
                    f"Closing rate coverage vs target of {float(policy.closing_percentage_target):g}%"
                    if policy.enable_closing_coverage else "Closing coverage disabled"
                )
            },
            "combined_factor": {
                "value": to_factor(factors.combined),
                "amount_after": to_money(after_closing),
                "impact": to_money(after_closing - base),
                "description": (
                    f"financial ({to_factor(factors.financial)}) × portfolio ({to_factor(factors.portfolio)}) "
                    f"× closing ({to_factor(factors.closing)}) = {to_factor(factors.combined)}"
                )
            },
            "positive_scale_ranges": self._build_positive_ranges(policy),
        }

    def _build_positive_ranges(self, policy: CompensationPolicy) -> list:
        """Lower/upper bounds of each positive bracket as applied by the resolver."""
        bounds = self.financial_resolver.positive_lower_bounds(policy.global_target, policy.positive_scales)
        return [
            {
                "from": to_money(lower),
                "to": to_money(bracket.end_amount) if bracket.end_amount is not None else None,
                "commission_percentage": float(bracket.commission_percentage),
            }
            for bracket, lower in zip(policy.positive_scales, bounds)
        ]

    def _build_bonuses(self, result: BatchResult, policy: CompensationPolicy) -> dict:
        invoices = [r.invoice for r in result.records]
        new_client = sum(
            (self.bonus_aggregator.new_client_bonus(inv, policy) for inv in invoices), Decimal("0")
        )
        recovered = sum(
            (self.bonus_aggregator.recovered_client_bonus(inv, policy) for inv in invoices), Decimal("0")
        )
        target_qty = policy.bonus_volume_clients.target_qty

        return {
            "new_client_total": to_money(new_client),
            "recovered_client_total": to_money(recovered),
            "volume_bonus": {
                "value": to_money(result.volume_bonus),
                "description": (
                    f"{result.distinct_new_clients} distinct new clients vs target of {target_qty}"
                    if policy.enable_bonus_volume else "Volume bonus disabled"
                )
            },
        }

    def _build_totals(self, result: BatchResult) -> dict:
        return {
            "base_commission": to_money(result.total_base_commission),
            "final_commission": to_money(result.total_final_commission),
            "volume_bonus": to_money(result.volume_bonus),
            "total_payable": to_money(result.total_payable),
        }

    def _build_line_table(self, result: BatchResult, policy: CompensationPolicy) -> list:
        """
        Consolidated table per business line.

        Commission includes factors and per-invoice bonuses but not the batch
        volume bonus.
        """
        table = []
        for line, rate in policy.rates.items():
            line_records = [r for r in result.records if r.business_line == line]
            table.append({
                "business_line": line,
                "income": to_money(sum((r.amount for r in line_records), Decimal("0"))),
                "target": to_money(policy.line_targets.get(line, Decimal("0"))),
                "rate": float(rate),
                "commission": to_money(sum((r.final_commission_amount for r in line_records), Decimal("0"))),
                "invoice_count": len(line_records),
            })
        return table
