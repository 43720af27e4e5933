"""Domain models for the call-server usage aggregator.

Every model is a frozen dataclass: values are produced once and never mutated
by downstream consumers.
"""

from .aggregated_stats import AggregatedStats
from .comparison_period import ComparisonPeriod
from .file_warning import FileWarning
from .processed_file import ProcessedFile
from .processing_result import BatchResult, FileStat, PeriodResult, RunResult
from .report_document import ReportDocument
from .server_record import Number, ServerRecord
from .trend import MetricDelta, PeriodComparison, TrendInsight, TrendPoint

__all__ = [
    # Row / file models
    "Number",
    "ServerRecord",
    "ProcessedFile",
    # Aggregation models
    "AggregatedStats",
    "ComparisonPeriod",
    "MetricDelta",
    "PeriodComparison",
    "TrendPoint",
    "TrendInsight",
    "ReportDocument",
    # Processing models
    "FileWarning",
    "FileStat",
    "BatchResult",
    "PeriodResult",
    "RunResult",
]
