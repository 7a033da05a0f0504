"""推論実行サービスで共有するデータ型."""

from dataclasses import dataclass, field
from typing import List

from .backend_protocol import PerfCounter


@dataclass(frozen=True)
class ExecutionRequest:
    """推論実行サービスへの入力パラメータ."""

    iterations: int = 1
    collect_perf_counts: bool = False


@dataclass(frozen=True)
class ExecutionResult:
    """推論実行サービスの集計結果."""

    iteration_times_ms: List[float]
    perf_counts: List[PerfCounter] = field(default_factory=list)

    @property
    def iterations(self) -> int:
        """実行回数."""
        return len(self.iteration_times_ms)

    @property
    def total_time_ms(self) -> float:
        """全反復の合計時間 (ms)."""
        return sum(self.iteration_times_ms)

    @property
    def average_time_ms(self) -> float:
        """1回あたりの平均時間 (ms)."""
        if not self.iteration_times_ms:
            return 0.0
        return self.total_time_ms / len(self.iteration_times_ms)
