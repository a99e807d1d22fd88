"""Export of classification results."""

from .aligner import (
    ALIGNED_STATUS,
    EXPORT_COLUMNS,
    NO_ORIGINAL_DATA_STATUS,
    ResultAligner,
    row_results_from_classifications,
)
from .statistics import BatchStatistics, compute_statistics

__all__ = [
    "ALIGNED_STATUS",
    "EXPORT_COLUMNS",
    "NO_ORIGINAL_DATA_STATUS",
    "BatchStatistics",
    "ResultAligner",
    "compute_statistics",
    "row_results_from_classifications",
]
