"""超解像パイプラインのステージ間で受け渡す型定義."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from .backend_protocol import PerfCounter, TensorInfo
from .execution_types import ExecutionResult


@dataclass(frozen=True)
class ImageLoadResult:
    """画像1枚分の読み込み・検証結果.

    Args:
        path: 画像ファイルパス.
        image: 受理された画像. スキップ時は None.
        skip_reason: スキップ理由. 受理時は None.
    """

    path: Path
    image: Optional[np.ndarray] = None
    skip_reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        """受理されたかどうか."""
        return self.image is not None


@dataclass(frozen=True)
class BoundInputs:
    """バッチ順に並んだ受理済み画像と入力テンソル情報.

    Args:
        lr_input: 低解像度入力のテンソル情報.
        images: 受理された低解像度画像 (バッチ順).
        bicubic_input: バイキュービック入力のテンソル情報 (2入力時のみ).
        bicubic_images: images に対応するバイキュービック画像.
        skipped: スキップされた画像の結果.
    """

    lr_input: TensorInfo
    images: List[np.ndarray]
    bicubic_input: Optional[TensorInfo] = None
    bicubic_images: List[np.ndarray] = field(default_factory=list)
    skipped: List[ImageLoadResult] = field(default_factory=list)

    @property
    def batch_size(self) -> int:
        """受理画像数 = バッチサイズ."""
        return len(self.images)

    @property
    def has_bicubic_input(self) -> bool:
        """2入力トポロジかどうか."""
        return self.bicubic_input is not None


@dataclass(frozen=True)
class SuperResolutionResult:
    """パイプライン1回分の実行結果."""

    backend: str
    device: str
    model_path: Path
    batch_size: int
    output_shape: Tuple[int, ...]
    output_paths: List[Path]
    execution: ExecutionResult
    skipped_images: List[Path] = field(default_factory=list)

    @property
    def perf_counts(self) -> List[PerfCounter]:
        """収集されたレイヤー別性能カウンタ."""
        return self.execution.perf_counts
