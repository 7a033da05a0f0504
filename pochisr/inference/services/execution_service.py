"""推論の反復実行と時間計測を提供するサービス."""

import time
from typing import List

from pochisr.inference.types.backend_protocol import IInferRequest
from pochisr.inference.types.execution_types import ExecutionRequest, ExecutionResult


class ExecutionService:
    """同一リクエストで推論を繰り返し, 1回ごとの時間を集計する."""

    def run(self, request: IInferRequest, execution: ExecutionRequest) -> ExecutionResult:
        """推論を指定回数実行する.

        出力は最後の反復の結果だけがリクエストに残る.

        Args:
            request: 入力設定済みの推論リクエスト.
            execution: 実行パラメータ.

        Returns:
            1回ごとの時間 (ms) と性能カウンタ.
        """
        iteration_times_ms: List[float] = []
        for _ in range(execution.iterations):
            start_time = time.perf_counter()
            request.infer()
            iteration_times_ms.append((time.perf_counter() - start_time) * 1000)

        perf_counts = []
        if execution.collect_perf_counts:
            perf_counts = request.get_performance_counts()

        return ExecutionResult(
            iteration_times_ms=iteration_times_ms,
            perf_counts=perf_counts,
        )
