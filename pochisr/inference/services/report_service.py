"""計測結果と性能カウンタの出力を行うサービス."""

import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from pochisr.inference.types.backend_protocol import PerfCounter
from pochisr.inference.types.benchmark_types import (
    BENCHMARK_RESULT_FILENAME,
    BenchmarkResult,
)
from pochisr.inference.types.execution_types import ExecutionResult
from pochisr.inference.types.orchestration_types import SuperResolutionResult
from pochisr.logging import LoggerManager

_LAYER_NAME_WIDTH = 30


def format_perf_counts(counters: Sequence[PerfCounter]) -> List[str]:
    """性能カウンタを表形式の行へ整形する.

    合計時間には EXECUTED のレイヤーのみを含める.

    Args:
        counters: レイヤー別性能カウンタ.

    Returns:
        ログ出力用の行 (最終行は合計).
    """
    lines: List[str] = []
    total_us = 0
    for counter in counters:
        name = counter.layer_name
        if len(name) > _LAYER_NAME_WIDTH:
            name = name[: _LAYER_NAME_WIDTH - 3] + "..."
        lines.append(
            f"{name:<{_LAYER_NAME_WIDTH}} {counter.status:<15} "
            f"layerType: {counter.layer_type:<15} "
            f"realTime: {counter.real_time_us:<10} "
            f"cpu: {counter.cpu_time_us:<10} "
            f"execType: {counter.exec_type}"
        )
        if counter.status == "EXECUTED":
            total_us += counter.real_time_us
    lines.append(f"Total time: {total_us} microseconds")
    return lines


class ReportService:
    """推論時間, 性能カウンタ, ベンチマークJSONを出力する."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        """サービスを初期化する.

        Args:
            logger: ロガー. 未指定時はモジュールロガーを利用する.
        """
        self.logger = logger or LoggerManager().get_logger(__name__)

    def log_execution(self, execution: ExecutionResult) -> None:
        """平均推論時間をログ出力する."""
        self.logger.info(
            f"1回あたりの平均推論時間: {execution.average_time_ms:.3f} ms "
            f"({execution.iterations} 回)"
        )
        self.logger.debug(f"合計推論時間: {execution.total_time_ms:.3f} ms")

    def log_perf_counts(self, counters: Sequence[PerfCounter]) -> None:
        """レイヤー別性能カウンタをログ出力する."""
        if not counters:
            self.logger.warning("性能カウンタが取得できませんでした")
            return
        self.logger.info("レイヤー別性能カウンタ:")
        for line in format_perf_counts(counters):
            self.logger.info(line)

    def export_benchmark_json(
        self,
        result: SuperResolutionResult,
        output_dir: Path,
        filename: str = BENCHMARK_RESULT_FILENAME,
    ) -> Path:
        """ベンチマーク結果JSONを保存する.

        Args:
            result: パイプライン実行結果.
            output_dir: 出力ディレクトリ.
            filename: 出力ファイル名.

        Returns:
            保存したJSONファイルのパス.
        """
        benchmark = BenchmarkResult.from_run_result(result)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / filename
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(benchmark.to_dict(), f, ensure_ascii=False, indent=2)
        self.logger.info(f"ベンチマーク結果を保存しました: {output_path}")
        return output_path
