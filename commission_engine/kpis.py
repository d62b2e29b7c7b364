"""
KPI Helpers

Derive the batch inputs that come from collaborating systems (CRM activity,
opportunity pipeline) so callers can build a BatchInput from raw data.
"""

from decimal import Decimal

from .models import ClientActivity, Invoice, Opportunity

HUNDRED = Decimal("100")


def period_sales(invoices: list[Invoice]) -> Decimal:
    """Sum of invoice amounts for the period."""
    return sum((inv.amount for inv in invoices), Decimal("0"))


def distinct_active_customers(activities: list[ClientActivity]) -> int:
    """Clients with at least one logged activity."""
    return len({a.client_id for a in activities if a.total_activities > 0})


def portfolio_coverage_percentage(active_customers: int, portfolio_size: int) -> Decimal:
    """Share of the assigned portfolio with activity, as a percentage."""
    if portfolio_size <= 0:
        return Decimal("0")
    return (Decimal(active_customers) / Decimal(portfolio_size)) * HUNDRED


def closing_rate(opportunities: list[Opportunity]) -> Decimal:
    """Won opportunities over all opportunities, as a percentage."""
    if not opportunities:
        return Decimal("0")
    won = sum(1 for opp in opportunities if opp.is_won)
    return (Decimal(won) / Decimal(len(opportunities))) * HUNDRED


def sales_by_business_line(invoices: list[Invoice]) -> dict[str, Decimal]:
    """Invoice totals grouped by business line, in first-seen order."""
    totals: dict[str, Decimal] = {}
    for inv in invoices:
        totals[inv.business_line] = totals.get(inv.business_line, Decimal("0")) + inv.amount
    return totals
