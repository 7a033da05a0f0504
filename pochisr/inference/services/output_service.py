"""出力テンソルから画像を生成して保存するサービス."""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from pochisr.exceptions import OutputMetadataError
from pochisr.inference.types.codec_protocol import IImageCodec
from pochisr.logging import LoggerManager

OUTPUT_FILENAME_TEMPLATE = "sr_{index}.png"
OUTPUT_CHANNELS = 3
PIXEL_SCALE = 255.0
RESULT_WINDOW_NAME = "result"


class OutputService:
    """(N, C, H, W) の float 出力を画像ファイルへ変換する."""

    def __init__(self, codec: IImageCodec, logger: Optional[logging.Logger] = None) -> None:
        """サービスを初期化する.

        Args:
            codec: 画像コーデック.
            logger: ロガー. 未指定時はモジュールロガーを利用する.
        """
        self.codec = codec
        self.logger = logger or LoggerManager().get_logger(__name__)

    def to_image(self, planes: np.ndarray) -> np.ndarray:
        """1枚分の (C, H, W) 出力をインターリーブした 8bit 画像へ変換する.

        各チャネルは出力バッファのビューのまま変換に渡す.

        Args:
            planes: 1バッチ分の出力.

        Returns:
            (H, W, C) の uint8 画像.
        """
        channels = [
            self.codec.to_uint8(planes[channel], PIXEL_SCALE)
            for channel in range(planes.shape[0])
        ]
        return self.codec.merge(channels)

    def materialize(
        self,
        output: np.ndarray,
        output_dir: Path,
        show: bool = False,
    ) -> List[Path]:
        """出力テンソルの各バッチを sr_<番号>.png として保存する.

        Args:
            output: 推論出力 (N, C, H, W).
            output_dir: 出力ディレクトリ.
            show: 保存前に画像を表示するか.

        Returns:
            書き出したファイルのパス (バッチ順).

        Raises:
            OutputMetadataError: 出力が4次元でない, またはチャネル数が3でない場合.
        """
        if output.ndim != 4:
            raise OutputMetadataError(f"出力は (N, C, H, W) である必要があります: {output.shape}")
        num_images, num_channels, height, width = output.shape
        self.logger.info(
            f"出力サイズ [N,C,H,W]: {num_images}, {num_channels}, {height}, {width}"
        )
        if num_channels != OUTPUT_CHANNELS:
            raise OutputMetadataError(
                f"出力チャネル数は {OUTPUT_CHANNELS} である必要があります: {num_channels}"
            )

        output_dir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []
        for index in range(num_images):
            image = self.to_image(output[index])

            if show:
                self.logger.info(
                    "終了するには CTRL+C を押すか, 出力ウィンドウで任意のキーを押してください"
                )
                self.codec.show(RESULT_WINDOW_NAME, image)

            output_path = output_dir / OUTPUT_FILENAME_TEMPLATE.format(index=index + 1)
            if self.codec.encode(output_path, image):
                written.append(output_path)
                self.logger.debug(f"出力画像を保存しました: {output_path}")
            else:
                self.logger.warning(f"出力画像を保存できませんでした: {output_path}")

        return written
