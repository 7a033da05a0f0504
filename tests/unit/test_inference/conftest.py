"""test_inference パッケージ共通フィクスチャ.

推論ランタイムを使わずにパイプラインを検証するための Fake を提供する.
"""

from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional

import numpy as np
import pytest

from pochisr.inference.types.backend_protocol import PerfCounter, TensorInfo

OutputFn = Callable[[Dict[str, np.ndarray], int], np.ndarray]


def nearest_upscale_output(scale: int) -> OutputFn:
    """低解像度入力を最近傍拡大して /255 した出力を返す関数を作る."""

    def _output(buffers: Dict[str, np.ndarray], call_count: int) -> np.ndarray:
        lr = next(iter(buffers.values()))
        up = lr.repeat(scale, axis=2).repeat(scale, axis=3)
        return (up / 255.0).astype(np.float32)

    return _output


class FakeInferRequest:
    """呼び出し回数を記録する推論リクエスト."""

    def __init__(
        self,
        inputs: List[TensorInfo],
        output_name: str,
        output_fn: OutputFn,
        perf_counts: List[PerfCounter],
    ) -> None:
        self.buffers = {
            info.name: np.zeros(info.shape, dtype=np.float32) for info in inputs
        }
        self.output_name = output_name
        self.output_fn = output_fn
        self.perf_counts = perf_counts
        self.infer_calls = 0
        self.perf_count_calls = 0
        self._output: Optional[np.ndarray] = None

    def get_input_buffer(self, name: str) -> np.ndarray:
        return self.buffers[name]

    def infer(self) -> None:
        self.infer_calls += 1
        self._output = self.output_fn(self.buffers, self.infer_calls)

    def get_output(self, name: str) -> np.ndarray:
        assert name == self.output_name
        assert self._output is not None, "推論前に出力を取得した"
        return self._output

    def get_performance_counts(self) -> List[PerfCounter]:
        self.perf_count_calls += 1
        return list(self.perf_counts)


class FakeNetwork:
    """バッチサイズと出力精度の設定を記録するネットワーク."""

    def __init__(self, inputs: List[TensorInfo], outputs: List[TensorInfo]) -> None:
        self._inputs = inputs
        self._outputs = outputs
        self._batch_size = 1
        self.output_precisions: Dict[str, str] = {}

    def _with_batch(self, infos: List[TensorInfo]) -> List[TensorInfo]:
        return [
            replace(info, shape=(self._batch_size, *info.shape[1:])) for info in infos
        ]

    @property
    def inputs(self) -> List[TensorInfo]:
        return self._with_batch(self._inputs)

    @property
    def outputs(self) -> List[TensorInfo]:
        return self._with_batch(self._outputs)

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def set_batch_size(self, batch_size: int) -> None:
        self._batch_size = batch_size

    def set_output_precision(self, name: str, precision: str) -> None:
        self.output_precisions[name] = precision


class FakeCompiledNetwork:
    """作成したリクエストを保持するコンパイル済みネットワーク."""

    def __init__(self, backend: "FakeBackend", network: FakeNetwork) -> None:
        self.backend = backend
        self.network = network

    def create_infer_request(self) -> FakeInferRequest:
        request = FakeInferRequest(
            self.network.inputs,
            self.network.outputs[0].name,
            self.backend.output_fn,
            self.backend.perf_counts,
        )
        self.backend.requests.append(request)
        return request


class FakeBackend:
    """各ステージの呼び出しを記録するバックエンド."""

    name = "fake"

    def __init__(
        self,
        network: FakeNetwork,
        output_fn: OutputFn,
        device: str = "CPU",
        perf_counts: Optional[List[PerfCounter]] = None,
    ) -> None:
        self.network = network
        self.output_fn = output_fn
        self._device = device
        self.perf_counts = perf_counts or []
        self.extensions: List[Path] = []
        self.config_files: List[Path] = []
        self.loaded_paths: List[Path] = []
        self.compile_calls: List[bool] = []
        self.requests: List[FakeInferRequest] = []

    @property
    def device(self) -> str:
        return self._device

    def get_version_info(self) -> Dict[str, str]:
        return {"fake": "1.0"}

    def add_extension(self, library_path: Path) -> None:
        self.extensions.append(library_path)

    def set_device_config_file(self, config_path: Path) -> None:
        self.config_files.append(config_path)

    def load_network(self, model_path: Path) -> FakeNetwork:
        self.loaded_paths.append(model_path)
        return self.network

    def compile(self, network: FakeNetwork, perf_counts: bool = False) -> FakeCompiledNetwork:
        self.compile_calls.append(perf_counts)
        return FakeCompiledNetwork(self, network)


@pytest.fixture
def make_fake_network():
    """FakeNetwork を作成するファクトリフィクスチャ.

    Returns:
        作成関数. 引数:
            input_sizes: 各入力の (幅, 高さ).
            output_size: 出力の (幅, 高さ).
            output_channels: 出力チャネル数.
    """

    def _create(
        input_sizes: List[tuple[int, int]],
        output_size: tuple[int, int],
        output_channels: int = 3,
    ) -> FakeNetwork:
        inputs = [
            TensorInfo(name=str(i), shape=(1, 3, h, w))
            for i, (w, h) in enumerate(input_sizes)
        ]
        out_w, out_h = output_size
        outputs = [TensorInfo(name="sr", shape=(1, output_channels, out_h, out_w))]
        return FakeNetwork(inputs, outputs)

    return _create


@pytest.fixture
def make_fake_backend(make_fake_network):
    """FakeBackend を作成するファクトリフィクスチャ.

    Returns:
        作成関数. 引数:
            lr_size: 低解像度入力の (幅, 高さ).
            scale: 拡大率.
            input_count: 入力数.
            output_fn: 出力生成関数. 省略時は最近傍拡大.
            perf_counts: get_performance_counts が返すカウンタ.
    """

    def _create(
        lr_size: tuple[int, int] = (8, 8),
        scale: int = 4,
        input_count: int = 1,
        output_fn: Optional[OutputFn] = None,
        perf_counts: Optional[List[PerfCounter]] = None,
    ) -> FakeBackend:
        width, height = lr_size
        hr_size = (width * scale, height * scale)
        input_sizes = [lr_size, hr_size, hr_size][:input_count]
        network = make_fake_network(input_sizes, hr_size)
        return FakeBackend(
            network,
            output_fn or nearest_upscale_output(scale),
            perf_counts=perf_counts,
        )

    return _create
