"""超解像パイプラインの各ステージを提供するサービス."""

from .execution_service import ExecutionService
from .input_binding_service import InputBindingService, write_image_to_buffer
from .output_binding_service import OutputBindingService
from .output_service import OutputService
from .report_service import ReportService, format_perf_counts

__all__ = [
    "ExecutionService",
    "InputBindingService",
    "OutputBindingService",
    "OutputService",
    "ReportService",
    "format_perf_counts",
    "write_image_to_buffer",
]
