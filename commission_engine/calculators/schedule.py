"""
Payment Scheduler

Maps an invoice date to the date its commission is paid out.
"""

from datetime import date, timedelta

from ..models import parse_date


class PaymentScheduler:
    """Resolves commission payout dates from invoice dates."""

    CREDIT_TERM_DAYS = 60
    CUTOFF_DAY = 15

    def resolve_base_date(self, invoice_date) -> date:
        """Invoice date plus the standard 60-day credit term."""
        return parse_date(invoice_date) + timedelta(days=self.CREDIT_TERM_DAYS)

    def resolve_payment_date(self, invoice_date) -> date:
        """
        Snap the base date onto the twice-monthly cash cutoff.

        Rules:
        - Base date on day 1-15: paid on the 15th of the same month
        - Base date after the 15th: paid on the 15th of the following month
        """
        base = self.resolve_base_date(invoice_date)

        if base.day <= self.CUTOFF_DAY:
            return base.replace(day=self.CUTOFF_DAY)

        if base.month == 12:
            return date(base.year + 1, 1, self.CUTOFF_DAY)
        return date(base.year, base.month + 1, self.CUTOFF_DAY)
