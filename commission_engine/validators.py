"""
Input Validation for the Commission Engine

Validates policy and batch data before processing begins.
Raises ValueError with clear messages for any constraint violations.

Table arity and the open-ended terminal bracket are enforced when a
CompensationPolicy is constructed; the checks here cover ordering and ranges.
"""

from .models import BatchInput, Bracket, CompensationPolicy, CoverageBracket


class PolicyValidator:
    """Validates a compensation policy according to business rules."""

    def validate(self, policy: CompensationPolicy) -> None:
        """
        Run all validations. Raises ValueError if any check fails.
        """
        self._validate_targets(policy)
        self._validate_positive_scales(policy)
        self._validate_negative_scales(policy)
        self._validate_coverage_scales("portfolio_scales", policy.portfolio_scales)
        self._validate_coverage_scales("closing_scales", policy.closing_scales)
        self._validate_bonuses(policy)
        self._validate_rates(policy)

    def _validate_targets(self, policy: CompensationPolicy) -> None:
        if policy.global_target < 0:
            raise ValueError(f"global_target cannot be negative, got: {policy.global_target}")

        if policy.portfolio_activity_target < 0:
            raise ValueError(
                f"portfolio_activity_target cannot be negative, got: {policy.portfolio_activity_target}"
            )

        if policy.closing_percentage_target < 0:
            raise ValueError(
                f"closing_percentage_target cannot be negative, got: {policy.closing_percentage_target}"
            )

    def _validate_positive_scales(self, policy: CompensationPolicy) -> None:
        """Positive thresholds ascend from above the global target."""
        previous = policy.global_target
        for i, bracket in enumerate(policy.positive_scales[:-1]):
            if bracket.end_amount <= previous:
                raise ValueError(
                    f"positive_scales[{i}] end_amount must be greater than {previous}, "
                    f"got: {bracket.end_amount}"
                )
            previous = bracket.end_amount
        self._validate_percentages("positive_scales", policy.positive_scales)

    def _validate_negative_scales(self, policy: CompensationPolicy) -> None:
        """Negative thresholds descend from the global target."""
        previous = policy.global_target
        for i, bracket in enumerate(policy.negative_scales[:-1]):
            if bracket.end_amount >= previous:
                raise ValueError(
                    f"negative_scales[{i}] end_amount must be less than {previous}, "
                    f"got: {bracket.end_amount}"
                )
            previous = bracket.end_amount
        self._validate_percentages("negative_scales", policy.negative_scales)

    def _validate_percentages(self, name: str, scales: tuple[Bracket, ...]) -> None:
        for i, bracket in enumerate(scales):
            if bracket.commission_percentage < 0:
                raise ValueError(
                    f"{name}[{i}] commission_percentage cannot be negative, "
                    f"got: {bracket.commission_percentage}"
                )

    def _validate_coverage_scales(self, name: str, scales: tuple[CoverageBracket, ...]) -> None:
        """Coverage ranges are closed and listed in descending order."""
        for i, bracket in enumerate(scales):
            if bracket.end_percentage > bracket.start_percentage:
                raise ValueError(
                    f"{name}[{i}] end_percentage ({bracket.end_percentage}) cannot exceed "
                    f"start_percentage ({bracket.start_percentage})"
                )
            if bracket.payout_factor < 0:
                raise ValueError(f"{name}[{i}] payout_factor cannot be negative, got: {bracket.payout_factor}")

            if i == 0:
                continue

            # Descending; neighbouring brackets may share a boundary
            previous = scales[i - 1]
            if bracket.start_percentage > previous.start_percentage:
                raise ValueError(
                    f"{name}[{i}] start_percentage cannot exceed {name}[{i - 1}] start_percentage "
                    f"({previous.start_percentage}), got: {bracket.start_percentage}"
                )
            if bracket.end_percentage > previous.end_percentage:
                raise ValueError(
                    f"{name}[{i}] end_percentage cannot exceed {name}[{i - 1}] end_percentage "
                    f"({previous.end_percentage}), got: {bracket.end_percentage}"
                )

    def _validate_bonuses(self, policy: CompensationPolicy) -> None:
        rules = {
            "bonus_new_client": policy.bonus_new_client,
            "bonus_recovered_client": policy.bonus_recovered_client,
        }
        for name, rule in rules.items():
            if rule.reward_amount < 0:
                raise ValueError(f"{name} reward_amount cannot be negative, got: {rule.reward_amount}")
            if rule.min_purchase_amount < 0:
                raise ValueError(
                    f"{name} min_purchase_amount cannot be negative, got: {rule.min_purchase_amount}"
                )

        volume = policy.bonus_volume_clients
        if volume.reward_amount < 0:
            raise ValueError(f"bonus_volume_clients reward_amount cannot be negative, got: {volume.reward_amount}")
        if volume.target_qty < 0:
            raise ValueError(f"bonus_volume_clients target_qty cannot be negative, got: {volume.target_qty}")

    def _validate_rates(self, policy: CompensationPolicy) -> None:
        for line, rate in policy.rates.items():
            if not (0 <= rate <= 1):
                raise ValueError(f"Rate for business line '{line}' must be between 0 and 1, got: {rate}")


class BatchValidator:
    """Validates a batch of invoices and the KPIs supplied with it."""

    def __init__(self):
        self.policy_validator = PolicyValidator()

    def validate(self, batch: BatchInput) -> None:
        """
        Run all validations. Raises ValueError if any check fails.
        """
        self.policy_validator.validate(batch.policy)
        self._validate_invoices(batch)
        self._validate_kpis(batch)

    def _validate_invoices(self, batch: BatchInput) -> None:
        seen = set()
        for invoice in batch.invoices:
            if invoice.amount < 0:
                raise ValueError(f"Invoice {invoice.id} amount cannot be negative, got: {invoice.amount}")
            if invoice.id in seen:
                raise ValueError(f"Duplicate invoice id: {invoice.id}")
            seen.add(invoice.id)

    def _validate_kpis(self, batch: BatchInput) -> None:
        if batch.period_sales is not None and batch.period_sales < 0:
            raise ValueError(f"period_sales cannot be negative, got: {batch.period_sales}")

        if batch.active_customers < 0:
            raise ValueError(f"active_customers cannot be negative, got: {batch.active_customers}")

        if not (0 <= batch.closing_rate <= 100):
            raise ValueError(f"closing_rate must be between 0 and 100, got: {batch.closing_rate}")
