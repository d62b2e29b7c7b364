"""
Commission Batch Processor - Main Orchestrator

Coordinates commission processing for a batch of invoices through discrete,
testable steps.
"""

import json
import logging
from decimal import Decimal
from typing import Any, Dict

from .calculators import (
    BonusAggregator,
    CommissionCalculator,
    CoverageFactorResolver,
    FinancialFactorResolver,
    PaymentScheduler,
    quantize_money,
)
from .models import BatchInput, BatchResult, CommissionFactors, CommissionRecord, CompensationPolicy, Invoice
from .output import OutputBuilder
from .validators import BatchValidator

logger = logging.getLogger(__name__)


class CommissionBatchProcessor:
    """
    Main orchestrator for commission batch processing.

    Implements a clear pipeline pattern:
    1. Resolve Financial Factor (period sales vs global target)
    2. Resolve Portfolio Coverage Factor
    3. Resolve Closing Coverage Factor
    4. Build one CommissionRecord per invoice
    5. Compute the batch Volume Bonus

    Factors are resolved once and shared by every invoice in the batch.
    The policy is assumed valid; dict input is validated by process_from_dict.
    """

    def __init__(self):
        self.validator = BatchValidator()
        self.scheduler = PaymentScheduler()
        self.financial_resolver = FinancialFactorResolver()
        self.coverage_resolver = CoverageFactorResolver()
        self.bonus_aggregator = BonusAggregator()
        self.commission_calculator = CommissionCalculator()
        self.output_builder = OutputBuilder()

    def process(self, batch: BatchInput) -> BatchResult:
        """
        Process a batch of invoices through the complete pipeline.

        Args:
            batch: BatchInput with invoices, policy and KPIs

        Returns:
            BatchResult with one record per invoice and the volume bonus
        """
        policy = batch.policy
        period_sales = batch.effective_period_sales

        logger.info(f"Processing commission batch: {len(batch.invoices)} invoices, period sales {period_sales}")

        # Steps 1-3: Resolve batch-wide factors
        factors = self.resolve_factors(batch)
        logger.debug(
            f"Resolved factors: financial={factors.financial} "
            f"portfolio={factors.portfolio} closing={factors.closing}"
        )

        # Step 4: Per-invoice records
        records = [self._build_record(inv, policy, factors) for inv in batch.invoices]

        # Step 5: Batch volume bonus
        volume_bonus = self.bonus_aggregator.volume_bonus(batch.invoices, policy)

        return BatchResult(
            records=records,
            volume_bonus=volume_bonus,
            factors=factors,
            period_sales=period_sales,
            distinct_new_clients=self.bonus_aggregator.distinct_new_clients(batch.invoices),
        )

    def resolve_factors(self, batch: BatchInput) -> CommissionFactors:
        """Resolve the financial, portfolio and closing factors for a batch."""
        policy = batch.policy

        financial = self.financial_resolver.resolve(batch.effective_period_sales, policy)
        portfolio = self.coverage_resolver.resolve(
            batch.active_customers,
            policy.portfolio_activity_target,
            policy.portfolio_scales,
            policy.enable_portfolio_coverage,
        )
        closing = self.coverage_resolver.resolve(
            batch.closing_rate,
            policy.closing_percentage_target,
            policy.closing_scales,
            policy.enable_closing_coverage,
        )

        return CommissionFactors(financial=financial, portfolio=portfolio, closing=closing)

    def process_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process a batch from raw dictionary input.

        Convenience method for API usage. Validates the policy and invoices
        before processing.
        """
        batch = BatchInput.from_dict(data)
        self.validator.validate(batch)
        result = self.process(batch)
        return self.output_builder.build(result, batch.policy)

    def _build_record(
        self,
        invoice: Invoice,
        policy: CompensationPolicy,
        factors: CommissionFactors
    ) -> CommissionRecord:
        """Apply rate, factors and bonuses to one invoice."""
        bonus = self.bonus_aggregator.invoice_bonus(invoice, policy)

        return CommissionRecord(
            invoice=invoice,
            base_date=self.scheduler.resolve_base_date(invoice.date),
            payment_date=self.scheduler.resolve_payment_date(invoice.date),
            applied_rate=policy.rate_for(invoice.business_line),
            base_commission_amount=quantize_money(self.commission_calculator.base_commission(invoice, policy)),
            bonus_amount=bonus,
            final_commission_amount=self.commission_calculator.final_commission(invoice, policy, factors, bonus),
            financial_factor=factors.financial,
            portfolio_factor=factors.portfolio,
            closing_factor=factors.closing,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def process_batch(
    invoices: list[Invoice],
    policy: CompensationPolicy,
    period_sales: Decimal | None = None,
    active_customers: Decimal = Decimal("0"),
    closing_rate: Decimal = Decimal("0"),
) -> tuple[list[CommissionRecord], Decimal]:
    """
    Process invoices and return (records, volume_bonus).

    period_sales defaults to the sum of invoice amounts.
    """
    processor = CommissionBatchProcessor()
    result = processor.process(
        BatchInput(
            invoices=invoices,
            policy=policy,
            period_sales=period_sales,
            active_customers=active_customers,
            closing_rate=closing_rate,
        )
    )
    return result.records, result.volume_bonus


def process_batch_from_dict(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Process a batch from Python dict and return Python dict.
    """
    processor = CommissionBatchProcessor()
    return processor.process_from_dict(input_data)


def process_batch_from_json(json_input: str) -> str:
    """
    Process a batch from JSON string input and return JSON string output.
    """
    try:
        input_data = json.loads(json_input)
        processor = CommissionBatchProcessor()
        result = processor.process_from_dict(input_data)
        return json.dumps(result, indent=2)

    except (ValueError, KeyError, TypeError) as e:
        # json.JSONDecodeError is a ValueError
        logger.error(f"Validation error: {str(e)}")
        error_response = {"error": str(e), "status": "validation_failed"}
        return json.dumps(error_response, indent=2)

    except Exception as e:
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        error_response = {"error": str(e), "status": "failed"}
        return json.dumps(error_response, indent=2)
