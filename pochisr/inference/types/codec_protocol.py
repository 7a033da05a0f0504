"""画像コーデックの Protocol 定義."""

from pathlib import Path
from typing import Optional, Protocol, Sequence

import numpy as np


class IImageCodec(Protocol):
    """画像の読み書きと変換を提供するコーデック."""

    def decode(self, path: Path) -> Optional[np.ndarray]:
        """画像ファイルを 8bit, (H, W, 3) で読み込む. 失敗時は None."""
        ...

    def resize(self, image: np.ndarray, width: int, height: int) -> np.ndarray:
        """バイキュービック補間でリサイズする."""
        ...

    def to_uint8(self, plane: np.ndarray, scale: float) -> np.ndarray:
        """浮動小数の単一チャネルを scale 倍して 8bit へ変換する."""
        ...

    def merge(self, planes: Sequence[np.ndarray]) -> np.ndarray:
        """単一チャネル画像を結合してインターリーブ画像を作る."""
        ...

    def encode(self, path: Path, image: np.ndarray) -> bool:
        """画像をファイルへ書き出す. 成功時 True."""
        ...

    def show(self, window_name: str, image: np.ndarray) -> None:
        """画像を表示し, キー入力まで待機する."""
        ...
