"""
Financial Factor Resolver

Resolves the period-wide sales attainment multiplier from the positive and
negative scales of a compensation policy.
"""

from decimal import Decimal

from ..models import Bracket, CompensationPolicy

ONE_UNIT = Decimal("1")
HUNDRED = Decimal("100")


class FinancialFactorResolver:
    """Picks the financial bracket for the period's total sales."""

    def resolve(self, period_sales: Decimal, policy: CompensationPolicy) -> Decimal:
        """
        Return the financial factor as a ratio (110% -> 1.10).

        Sales above the global target use the positive scales, everything
        else uses the negative scales. The two sides compare differently:
        positive brackets start one unit above the previous end_amount
        (inclusive), negative brackets require sales strictly above their
        end_amount.
        """
        if period_sales > policy.global_target:
            bracket = self._match_positive(period_sales, policy.global_target, policy.positive_scales)
        else:
            bracket = self._match_negative(period_sales, policy.negative_scales)

        return bracket.commission_percentage / HUNDRED

    def positive_lower_bounds(self, global_target: Decimal, scales: tuple[Bracket, ...]) -> list[Decimal]:
        """
        Lower bound of each positive bracket.

        The first bracket starts at global_target + 1, every following one at
        the previous end_amount + 1.
        """
        bounds = []
        start = global_target + ONE_UNIT
        for bracket in scales:
            bounds.append(start)
            start = (bracket.end_amount if bracket.end_amount is not None else start) + ONE_UNIT
        return bounds

    def _match_positive(
        self,
        period_sales: Decimal,
        global_target: Decimal,
        scales: tuple[Bracket, ...]
    ) -> Bracket:
        bounds = self.positive_lower_bounds(global_target, scales)

        # Highest bracket first; the first bracket is the fallback
        for bracket, lower_bound in reversed(list(zip(scales[1:], bounds[1:]))):
            if period_sales >= lower_bound:
                return bracket
        return scales[0]

    def _match_negative(self, period_sales: Decimal, scales: tuple[Bracket, ...]) -> Bracket:
        for bracket in scales[:-1]:
            end_amount = bracket.end_amount if bracket.end_amount is not None else Decimal("0")
            if period_sales > end_amount:
                return bracket
        # Unbounded downward
        return scales[-1]
