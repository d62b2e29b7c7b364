"""
Commission Calculator

Handles the per-invoice commission math:
base commission, factor cascade, bonus addition and rounding.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..models import CommissionFactors, CompensationPolicy, Invoice


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half up."""
    return value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


class CommissionCalculator:
    """Calculates the commission owed on a single invoice."""

    def base_commission(self, invoice: Invoice, policy: CompensationPolicy) -> Decimal:
        """Invoice amount times its business line rate, unrounded."""
        return invoice.amount * policy.rate_for(invoice.business_line)

    def final_commission(
        self,
        invoice: Invoice,
        policy: CompensationPolicy,
        factors: CommissionFactors,
        bonus: Decimal
    ) -> Decimal:
        """
        Final = base * financial * portfolio * closing + bonus.

        Only the final sum is rounded so that the factors are applied to the
        exact base amount.
        """
        adjusted = self.base_commission(invoice, policy) * factors.financial * factors.portfolio * factors.closing
        return quantize_money(adjusted + bonus)
