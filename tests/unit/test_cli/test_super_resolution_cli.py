"""pochi-sr CLI のテスト."""

import pytest

import pochisr.cli.super_resolution as sr_cli
from pochisr.logging import LoggerManager


@pytest.fixture(autouse=True)
def reset_logger_level():
    """main が変更したデフォルトレベルを戻す."""
    yield
    LoggerManager().set_default_level(sr_cli.LogLevel.INFO)


@pytest.fixture
def pipeline_calls(monkeypatch):
    """パイプラインの作成を記録する."""
    calls = []
    monkeypatch.setattr(
        sr_cli, "SuperResolutionPipeline", lambda *args, **kwargs: calls.append(args)
    )
    return calls


def _exit_code(argv):
    with pytest.raises(SystemExit) as exc:
        sr_cli.main(argv)
    return exc.value.code


class TestBuildParser:
    """引数定義のテスト."""

    def test_defaults(self):
        """既定値を確認."""
        args = sr_cli.build_parser().parse_args([])

        assert args.input is None
        assert args.device == "CPU"
        assert args.iterations == 1
        assert args.output == "."
        assert args.backend == "auto"
        assert args.perf_counts is False
        assert args.show is False

    def test_multiple_inputs(self):
        """-i に複数のパスを指定できることを確認."""
        args = sr_cli.build_parser().parse_args(["-i", "a.png", "b.png", "-m", "m.onnx"])

        assert args.input == ["a.png", "b.png"]


class TestMain:
    """終了コードのテスト."""

    def test_help_exits_zero(self, capsys):
        """-h はヘルプを表示して終了コード0になることを確認."""
        assert _exit_code(["-h"]) == 0

        out = capsys.readouterr().out
        assert "--iterations" in out
        assert "-pc" in out

    def test_zero_iterations_exits_one(self, pipeline_calls):
        """-ni 0 はパイプラインを作らずに終了コード1になることを確認."""
        assert _exit_code(["-i", "a.png", "-m", "m.onnx", "-ni", "0"]) == 1
        assert pipeline_calls == []

    def test_missing_input_exits_one(self, pipeline_calls):
        """-i が無ければ終了コード1になることを確認."""
        assert _exit_code(["-m", "m.onnx"]) == 1
        assert pipeline_calls == []

    def test_missing_model_exits_one(self, pipeline_calls):
        """-m が無ければ終了コード1になることを確認."""
        assert _exit_code(["-i", "a.png"]) == 1
        assert pipeline_calls == []

    def test_unexpected_error_exits_one(self, monkeypatch):
        """想定外の例外も終了コード1になることを確認."""

        def _boom(self, config):
            raise RuntimeError("boom")

        monkeypatch.setattr(sr_cli.SuperResolutionPipeline, "run", _boom)

        assert _exit_code(["-i", "a.png", "-m", "m.onnx"]) == 1

    def test_onnx_end_to_end(self, tmp_path, create_image_file, create_sr_onnx_model):
        """ONNX モデルで推論し sr_1.png が出力され終了コード0になることを確認."""
        pytest.importorskip("onnxruntime")
        from pochisr.imaging import OpenCvImageCodec

        image_path = create_image_file("lr.png", size=(16, 16), seed=5)
        model_path = create_sr_onnx_model(lr_size=(16, 16), scale=4)
        output_dir = tmp_path / "out"

        code = _exit_code(
            ["-i", str(image_path), "-m", str(model_path), "-o", str(output_dir), "-ni", "3"]
        )

        assert code == 0
        codec = OpenCvImageCodec()
        written = codec.decode(output_dir / "sr_1.png")
        expected = codec.decode(image_path).repeat(4, axis=0).repeat(4, axis=1)
        assert written.shape == (64, 64, 3)
        assert (abs(written.astype(int) - expected.astype(int)) <= 1).all()
