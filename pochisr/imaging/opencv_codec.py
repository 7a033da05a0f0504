"""OpenCV による画像コーデック."""

from pathlib import Path
from typing import Optional, Sequence

import cv2
import numpy as np


class OpenCvImageCodec:
    """IImageCodec の OpenCV 実装.

    画像は OpenCV の既定どおり BGR 順の (H, W, 3) uint8 で扱う.
    """

    def decode(self, path: Path) -> Optional[np.ndarray]:
        """画像を読み込む. 読めない場合は None を返す."""
        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None or image.size == 0:
            return None
        return image

    def resize(self, image: np.ndarray, width: int, height: int) -> np.ndarray:
        """バイキュービック補間でリサイズする."""
        return cv2.resize(image, (width, height), interpolation=cv2.INTER_CUBIC)

    def to_uint8(self, plane: np.ndarray, scale: float) -> np.ndarray:
        """scale 倍して最近傍に丸め, 0..255 に飽和させて uint8 へ変換する.

        OpenCV の convertTo(CV_8U, alpha=scale) と同じ飽和変換.
        """
        scaled = np.rint(plane.astype(np.float32) * scale)
        return np.clip(scaled, 0, 255).astype(np.uint8)

    def merge(self, planes: Sequence[np.ndarray]) -> np.ndarray:
        """単一チャネル画像を結合する."""
        return cv2.merge(list(planes))

    def encode(self, path: Path, image: np.ndarray) -> bool:
        """画像を書き出す. 形式は拡張子で決まる."""
        return bool(cv2.imwrite(str(path), image))

    def show(self, window_name: str, image: np.ndarray) -> None:
        """画像を表示し, キー入力まで待機する."""
        cv2.imshow(window_name, image)
        cv2.waitKey(0)
