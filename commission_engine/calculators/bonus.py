"""
Bonus Aggregator

Computes additive bonuses. Bonuses are added after the factor cascade and
are never scaled by it.
"""

from decimal import Decimal

from ..models import BonusRule, CompensationPolicy, Invoice


class BonusAggregator:
    """Per-invoice and batch-level bonuses."""

    def invoice_bonus(self, invoice: Invoice, policy: CompensationPolicy) -> Decimal:
        """
        New-client and recovered-client rewards for one invoice.

        Both may apply to the same invoice.
        """
        return self.new_client_bonus(invoice, policy) + self.recovered_client_bonus(invoice, policy)

    def new_client_bonus(self, invoice: Invoice, policy: CompensationPolicy) -> Decimal:
        if policy.enable_bonus_new_client and invoice.is_new_client:
            return self._reward(invoice, policy.bonus_new_client)
        return Decimal("0")

    def recovered_client_bonus(self, invoice: Invoice, policy: CompensationPolicy) -> Decimal:
        if policy.enable_bonus_recovered and invoice.is_recovered_client:
            return self._reward(invoice, policy.bonus_recovered_client)
        return Decimal("0")

    def volume_bonus(self, invoices: list[Invoice], policy: CompensationPolicy) -> Decimal:
        """Flat reward paid once per batch when enough distinct new clients bought."""
        if not policy.enable_bonus_volume:
            return Decimal("0")

        if self.distinct_new_clients(invoices) >= policy.bonus_volume_clients.target_qty:
            return policy.bonus_volume_clients.reward_amount
        return Decimal("0")

    @staticmethod
    def distinct_new_clients(invoices: list[Invoice]) -> int:
        """Count customers (not invoices) flagged as new clients."""
        return len({inv.customer_id for inv in invoices if inv.is_new_client})

    def _reward(self, invoice: Invoice, rule: BonusRule) -> Decimal:
        if invoice.amount >= rule.min_purchase_amount:
            return rule.reward_amount
        return Decimal("0")
