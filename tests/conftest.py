"""テスト共通フィクスチャ."""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def create_image_file(tmp_path: Path):
    """ダミー画像ファイルを作成するファクトリフィクスチャ.

    画像はPNG (可逆) で保存するため, 読み込み結果は書き込んだ画素と一致する.

    Returns:
        画像作成関数. 引数:
            name: ファイル名.
            size: (幅, 高さ).
            seed: 画素値の乱数シード.
            subdir: サブディレクトリ名. Noneならtmp_path直下に作成.

    Example:
        >>> def test_example(create_image_file):
        ...     path = create_image_file("lr.png", size=(128, 128))
    """

    def _create(
        name: str,
        *,
        size: tuple[int, int] = (8, 8),
        seed: int = 0,
        subdir: str | None = None,
    ) -> Path:
        base = tmp_path / subdir if subdir else tmp_path
        base.mkdir(parents=True, exist_ok=True)
        width, height = size
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
        path = base / name
        Image.fromarray(pixels).save(path)
        return path

    return _create


@pytest.fixture
def create_sr_onnx_model(tmp_path: Path):
    """最近傍拡大で超解像を模したONNXモデルを作成するファクトリフィクスチャ.

    1入力: sr = Resize(lr) / 255
    2入力: sr = (Resize(lr) + bicubic) / 510

    出力を255倍すると入力画素を拡大した画像と一致する.

    Returns:
        モデル作成関数. 引数:
            lr_size: 低解像度入力の (幅, 高さ).
            scale: 拡大率.
            two_inputs: バイキュービック入力を持つか.
            filename: 出力ファイル名.
    """
    onnx = pytest.importorskip("onnx")
    from onnx import TensorProto, helper

    def _create(
        *,
        lr_size: tuple[int, int] = (8, 8),
        scale: int = 2,
        two_inputs: bool = False,
        filename: str = "sr_model.onnx",
    ) -> Path:
        width, height = lr_size
        hr_shape = ["batch", 3, height * scale, width * scale]

        inputs = [
            helper.make_tensor_value_info(
                "lr", TensorProto.FLOAT, ["batch", 3, height, width]
            )
        ]
        initializers = [
            helper.make_tensor(
                "scales", TensorProto.FLOAT, [4], [1.0, 1.0, float(scale), float(scale)]
            ),
        ]
        nodes = [
            helper.make_node(
                "Resize",
                inputs=["lr", "", "scales"],
                outputs=["up"],
                name="upsample",
                mode="nearest",
                coordinate_transformation_mode="asymmetric",
                nearest_mode="floor",
            )
        ]

        if two_inputs:
            inputs.append(
                helper.make_tensor_value_info("bicubic", TensorProto.FLOAT, hr_shape)
            )
            initializers.append(
                helper.make_tensor("norm", TensorProto.FLOAT, [], [1.0 / 510.0])
            )
            nodes.append(
                helper.make_node("Add", ["up", "bicubic"], ["merged"], name="merge")
            )
            nodes.append(helper.make_node("Mul", ["merged", "norm"], ["sr"], name="scale"))
        else:
            initializers.append(
                helper.make_tensor("norm", TensorProto.FLOAT, [], [1.0 / 255.0])
            )
            nodes.append(helper.make_node("Mul", ["up", "norm"], ["sr"], name="scale"))

        graph = helper.make_graph(
            nodes,
            "pochisr_test",
            inputs,
            [helper.make_tensor_value_info("sr", TensorProto.FLOAT, hr_shape)],
            initializer=initializers,
        )
        model = helper.make_model(graph, opset_imports=[helper.make_opsetid("", 13)])
        model.ir_version = 8
        onnx.checker.check_model(model)

        output_path = tmp_path / filename
        onnx.save(model, str(output_path))
        return output_path

    return _create
