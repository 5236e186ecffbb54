"""
Worker pipelines.
"""

from reelcore.worker.pipelines.reconciliation_pipeline import (
    BatchValidation,
    ReconciliationPipeline,
    SweepReport,
)

__all__ = [
    "BatchValidation",
    "ReconciliationPipeline",
    "SweepReport",
]
