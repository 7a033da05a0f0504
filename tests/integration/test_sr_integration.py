"""ONNX Runtime を使った超解像デモの統合テスト."""

import json
import tempfile
from pathlib import Path

import numpy as np
import pytest

from pochisr.cli.super_resolution import build_parser, run
from pochisr.imaging import OpenCvImageCodec

pytest.importorskip("onnxruntime")

from pochisr.inference.adapters.onnx_runtime_adapter import PROFILE_DIR_PREFIX  # noqa: E402


class TestSuperResolutionIntegration:
    """CLI の run からファイル出力までの統合テスト."""

    def test_two_input_batch_with_benchmark(
        self, tmp_path, create_image_file, create_sr_onnx_model
    ):
        """2入力モデルでバッチ推論し, 画像とベンチマーク JSON が出力されることを確認."""
        images = [
            create_image_file(f"{i}.png", size=(8, 8), seed=i, subdir="images")
            for i in range(2)
        ]
        create_image_file("large.png", size=(16, 16), subdir="images")
        model_path = create_sr_onnx_model(lr_size=(8, 8), scale=2, two_inputs=True)
        output_dir = tmp_path / "results"
        args = build_parser().parse_args(
            [
                "-i", str(tmp_path / "images"),
                "-m", str(model_path),
                "-o", str(output_dir),
                "-ni", "2",
                "-pc",
                "--benchmark-json",
            ]
        )  # fmt: skip

        assert run(args) == 0

        codec = OpenCvImageCodec()
        for index, image_path in enumerate(images, start=1):
            written = codec.decode(output_dir / f"sr_{index}.png")
            lr = codec.decode(image_path)
            up = lr.repeat(2, axis=0).repeat(2, axis=1).astype(np.float32)
            bicubic = codec.resize(lr, 16, 16).astype(np.float32)
            expected = np.rint((up + bicubic) / 2.0)
            assert written.shape == (16, 16, 3)
            assert np.abs(written.astype(np.float32) - expected).max() <= 1

        assert not (output_dir / "sr_3.png").exists()

        payload = json.loads((output_dir / "benchmark_result.json").read_text("utf-8"))
        assert payload["runtime"]["backend"] == "onnxruntime"
        assert payload["metrics"]["batch_size"] == 2
        assert payload["metrics"]["iterations"] == 2
        assert payload["outputs"]["shape"] == [2, 3, 16, 16]
        assert payload["perf_counts"]

    def test_missing_model_file(self, tmp_path, create_image_file):
        """存在しないモデルファイルは終了コード1になり画像は出力されないことを確認."""
        image_path = create_image_file("lr.png")
        output_dir = tmp_path / "results"
        args = build_parser().parse_args(
            ["-i", str(image_path), "-m", str(tmp_path / "none.onnx"), "-o", str(output_dir)]
        )

        assert run(args) == 1
        assert not output_dir.exists()

    def test_profile_dir_not_left_after_run(
        self, tmp_path, create_image_file, create_sr_onnx_model
    ):
        """-pc 付きの実行後に一時プロファイルディレクトリが残らないことを確認."""
        image_path = create_image_file("lr.png", size=(8, 8))
        model_path = create_sr_onnx_model(lr_size=(8, 8), scale=2)
        before = set(Path(tempfile.gettempdir()).glob(f"{PROFILE_DIR_PREFIX}*"))
        args = build_parser().parse_args(
            ["-i", str(image_path), "-m", str(model_path),
             "-o", str(tmp_path / "results"), "-pc"]
        )  # fmt: skip

        assert run(args) == 0

        after = set(Path(tempfile.gettempdir()).glob(f"{PROFILE_DIR_PREFIX}*"))
        assert after - before == set()
