"""
Calculators Package

Provides all calculation components for commission batch processing.
"""

from .bonus import BonusAggregator
from .commission import CommissionCalculator, quantize_money
from .coverage import CoverageFactorResolver
from .financial import FinancialFactorResolver
from .schedule import PaymentScheduler

__all__ = [
    "PaymentScheduler",
    "FinancialFactorResolver",
    "CoverageFactorResolver",
    "BonusAggregator",
    "CommissionCalculator",
    "quantize_money",
]
