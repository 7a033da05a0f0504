"""入力画像の検証と入力テンソルへの書き込みを行うサービス."""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from pochisr.exceptions import (
    InputBindingError,
    NoValidImagesError,
    UnsupportedTopologyError,
)
from pochisr.inference.types.backend_protocol import IInferRequest, INetwork, TensorInfo
from pochisr.inference.types.codec_protocol import IImageCodec
from pochisr.inference.types.orchestration_types import BoundInputs, ImageLoadResult
from pochisr.logging import LoggerManager

IMAGE_CHANNELS = 3


def write_image_to_buffer(
    image: np.ndarray, buffer: np.ndarray, batch_index: int
) -> None:
    """(H, W, C) uint8 の画像を (N, C, H, W) バッファの指定位置へ書き込む.

    正規化は行わず, 要素型の変換とレイアウト変換のみを行う.

    Args:
        image: 書き込む画像.
        buffer: 推論リクエストの入力バッファ.
        batch_index: 書き込むバッチ位置.

    Raises:
        InputBindingError: 形状が一致しない場合.
    """
    if buffer.ndim != 4:
        raise InputBindingError(f"入力バッファは4次元である必要があります: {buffer.shape}")
    batch, channels, height, width = buffer.shape
    if not 0 <= batch_index < batch:
        raise InputBindingError(
            f"バッチ位置 {batch_index} はバッチサイズ {batch} の範囲外です"
        )
    if image.shape != (height, width, channels):
        raise InputBindingError(
            f"画像形状 {image.shape} が入力 (H, W, C) = "
            f"({height}, {width}, {channels}) と一致しません"
        )
    buffer[batch_index] = image.transpose(2, 0, 1)


class InputBindingService:
    """入力トポロジの確認, 画像の選別, テンソルへの書き込みを担当する."""

    def __init__(self, codec: IImageCodec, logger: Optional[logging.Logger] = None) -> None:
        """サービスを初期化する.

        Args:
            codec: 画像コーデック.
            logger: ロガー. 未指定時はモジュールロガーを利用する.
        """
        self.codec = codec
        self.logger = logger or LoggerManager().get_logger(__name__)

    def resolve_inputs(
        self, network: INetwork
    ) -> Tuple[TensorInfo, Optional[TensorInfo]]:
        """低解像度入力とバイキュービック入力を特定する.

        宣言順の1つ目を低解像度入力, 2つ目をバイキュービック入力とみなす.

        Args:
            network: 読み込み済みネットワーク.

        Returns:
            (低解像度入力, バイキュービック入力またはNone).

        Raises:
            UnsupportedTopologyError: 入力数が1または2でない, 空間次元が動的,
                またはチャネル数が画像と一致しない場合.
        """
        inputs = network.inputs
        if len(inputs) not in (1, 2):
            raise UnsupportedTopologyError(
                f"入力が1つまたは2つのトポロジのみ対応しています (入力数: {len(inputs)})"
            )
        for info in inputs:
            if not info.has_static_spatial_dims():
                raise UnsupportedTopologyError(
                    f"入力 '{info.name}' は (N, C, H, W) の静的形状である必要があります: "
                    f"{info.shape}"
                )
            if info.channels != IMAGE_CHANNELS:
                raise UnsupportedTopologyError(
                    f"入力 '{info.name}' のチャネル数は {IMAGE_CHANNELS} である必要があります: "
                    f"{info.channels}"
                )
        bicubic_input = inputs[1] if len(inputs) == 2 else None
        return inputs[0], bicubic_input

    def load_image(self, path: Path, lr_input: TensorInfo) -> ImageLoadResult:
        """画像を読み込み, 低解像度入力のサイズと一致するか検証する.

        Args:
            path: 画像ファイルパス.
            lr_input: 低解像度入力のテンソル情報.

        Returns:
            受理またはスキップの結果.
        """
        image = self.codec.decode(path)
        if image is None:
            return ImageLoadResult(path=path, skip_reason=f"画像 {path} を読み込めません")

        height, width = image.shape[:2]
        if width != lr_input.width or height != lr_input.height:
            return ImageLoadResult(
                path=path,
                skip_reason=(
                    f"画像 {path} のサイズ {width}x{height} が "
                    f"WxH = {lr_input.width}x{lr_input.height} と一致しません"
                ),
            )
        return ImageLoadResult(path=path, image=image)

    def bind(self, network: INetwork, image_paths: Sequence[Path]) -> BoundInputs:
        """入力画像を選別し, 必要ならバイキュービック画像を生成する.

        Args:
            network: 読み込み済みネットワーク.
            image_paths: 候補画像のパス (この順がバッチ順になる).

        Returns:
            受理画像とテンソル情報.

        Raises:
            NoValidImagesError: 受理画像が1枚も無い場合.
        """
        lr_input, bicubic_input = self.resolve_inputs(network)

        images: List[np.ndarray] = []
        skipped: List[ImageLoadResult] = []
        for path in image_paths:
            result = self.load_image(path, lr_input)
            if not result.accepted:
                self.logger.warning(result.skip_reason)
                skipped.append(result)
                continue
            assert result.image is not None
            images.append(result.image)

        if not images:
            raise NoValidImagesError("有効な入力画像が見つかりません")

        bicubic_images: List[np.ndarray] = []
        if bicubic_input is not None:
            bicubic_images = [
                self.codec.resize(image, bicubic_input.width, bicubic_input.height)
                for image in images
            ]

        return BoundInputs(
            lr_input=lr_input,
            images=images,
            bicubic_input=bicubic_input,
            bicubic_images=bicubic_images,
            skipped=skipped,
        )

    def fill(self, request: IInferRequest, bound: BoundInputs) -> None:
        """受理画像をバッチ順に推論リクエストの入力バッファへ書き込む.

        Args:
            request: 推論リクエスト.
            bound: bind の結果.
        """
        lr_buffer = request.get_input_buffer(bound.lr_input.name)
        bicubic_buffer = None
        if bound.bicubic_input is not None:
            bicubic_buffer = request.get_input_buffer(bound.bicubic_input.name)

        if lr_buffer.shape[0] != bound.batch_size:
            raise InputBindingError(
                f"入力バッファのバッチサイズ {lr_buffer.shape[0]} が "
                f"受理画像数 {bound.batch_size} と一致しません"
            )

        for batch_index, image in enumerate(bound.images):
            write_image_to_buffer(image, lr_buffer, batch_index)
            if bicubic_buffer is not None:
                write_image_to_buffer(
                    bound.bicubic_images[batch_index], bicubic_buffer, batch_index
                )
