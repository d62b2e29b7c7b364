"""
Coverage Factor Resolver

Resolves a coverage multiplier (portfolio activity or closing rate) from a
3-tier coverage scale.
"""

from decimal import Decimal

from ..models import CoverageBracket

HUNDRED = Decimal("100")


class CoverageFactorResolver:
    """Shared by portfolio-activity coverage and closing-rate coverage."""

    def attainment_percentage(self, actual: Decimal, target: Decimal) -> Decimal:
        """Actual vs target as a percentage. A zero target means zero attainment."""
        if target <= 0:
            return Decimal("0")
        return (Decimal(actual) / target) * HUNDRED

    def resolve(
        self,
        actual: Decimal,
        target: Decimal,
        scales: tuple[CoverageBracket, ...],
        enabled: bool
    ) -> Decimal:
        """
        Return the payout factor for the attainment of `actual` against `target`.

        Order of checks:
        1. Disabled coverage -> 1
        2. Attainment above the first bracket's start -> first bracket (clamp)
        3. First bracket whose [end, start] range contains the attainment
        4. Below the lowest bracket's end -> 0
        5. Between two brackets -> 1
        """
        if not enabled:
            return Decimal("1")

        attainment = self.attainment_percentage(actual, target)

        if attainment > scales[0].start_percentage:
            return scales[0].payout_factor

        for bracket in scales:
            if bracket.contains(attainment):
                return bracket.payout_factor

        if attainment < scales[-1].end_percentage:
            return Decimal("0")
        return Decimal("1")
