"""
SALES COMMISSION ENGINE
Version 1.0
"""

from .models import BatchInput, BatchResult, CommissionRecord, CompensationPolicy, Invoice
from .processor import CommissionBatchProcessor, process_batch

__all__ = [
    'CommissionBatchProcessor',
    'process_batch',
    'BatchInput',
    'BatchResult',
    'CommissionRecord',
    'CompensationPolicy',
    'Invoice',
]
