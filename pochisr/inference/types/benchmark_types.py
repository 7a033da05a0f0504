"""ベンチマーク結果JSONの型定義とスキーマ定義."""

from dataclasses import dataclass
from typing import Any, Dict, List

from .orchestration_types import SuperResolutionResult

BENCHMARK_RESULT_SCHEMA_VERSION = "1.0.0"
BENCHMARK_RESULT_FILENAME = "benchmark_result.json"


@dataclass(frozen=True)
class BenchmarkResult:
    """超解像推論のベンチ結果."""

    backend: str
    device: str
    model_path: str
    batch_size: int
    iterations: int
    avg_inference_ms: float
    total_inference_ms: float
    iteration_times_ms: List[float]
    output_shape: List[int]
    output_files: List[str]
    perf_counts: List[Dict[str, Any]]
    schema_version: str = BENCHMARK_RESULT_SCHEMA_VERSION

    @classmethod
    def from_run_result(cls, result: SuperResolutionResult) -> "BenchmarkResult":
        """パイプライン実行結果からベンチ結果を生成する.

        Args:
            result: パイプライン実行結果.

        Returns:
            ベンチ結果.
        """
        execution = result.execution
        return cls(
            backend=result.backend,
            device=result.device,
            model_path=str(result.model_path),
            batch_size=result.batch_size,
            iterations=execution.iterations,
            avg_inference_ms=execution.average_time_ms,
            total_inference_ms=execution.total_time_ms,
            iteration_times_ms=list(execution.iteration_times_ms),
            output_shape=list(result.output_shape),
            output_files=[str(path) for path in result.output_paths],
            perf_counts=[counter.to_dict() for counter in result.perf_counts],
        )

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式へ変換する.

        Returns:
            JSON出力可能な辞書.
        """
        return {
            "schema_version": self.schema_version,
            "runtime": {
                "backend": self.backend,
                "device": self.device,
                "model_path": self.model_path,
            },
            "metrics": {
                "batch_size": self.batch_size,
                "iterations": self.iterations,
                "avg_inference_ms": self.avg_inference_ms,
                "total_inference_ms": self.total_inference_ms,
                "iteration_times_ms": self.iteration_times_ms,
            },
            "outputs": {
                "shape": self.output_shape,
                "files": self.output_files,
            },
            "perf_counts": self.perf_counts,
        }
