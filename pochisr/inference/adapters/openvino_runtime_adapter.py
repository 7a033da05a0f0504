"""OpenVINO を推論バックエンドとして扱うアダプタ.

モデルは IR 形式 (.xml のネットワーク記述と同名の .bin の重み) を読み込む.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import openvino as ov
from openvino.preprocess import PrePostProcessor

from pochisr.exceptions import BackendError, ModelLoadError, OutputMetadataError
from pochisr.inference.types.backend_protocol import (
    DYNAMIC_DIM,
    PerfCounter,
    TensorInfo,
)
from pochisr.logging import LoggerManager

logger: logging.Logger = LoggerManager().get_logger(__name__)

WEIGHTS_SUFFIX = ".bin"
PLUGINS_XML = "plugins.xml"
# 物理デバイスではなく他デバイスへ振り分ける仮想デバイス
_VIRTUAL_DEVICES = {"AUTO", "HETERO", "MULTI", "BATCH"}


def _port_name(port: Any, index: int) -> str:
    """ポート名を返す. 名前が無いポートは宣言順の番号を名前とする."""
    if port.get_names():
        return str(port.get_any_name())
    return str(index)


def _port_to_tensor_info(port: Any, index: int) -> TensorInfo:
    """OpenVINO のポートを TensorInfo へ変換する."""
    shape = tuple(
        dim.get_length() if dim.is_static else DYNAMIC_DIM
        for dim in port.get_partial_shape()
    )
    precision = np.dtype(port.get_element_type().to_dtype()).name
    return TensorInfo(name=_port_name(port, index), shape=shape, precision=precision)


def _perf_time_us(value: Any) -> int:
    """ProfilingInfo の時間 (timedelta) をマイクロ秒へ変換する."""
    return int(value.total_seconds() * 1_000_000)


class OpenVinoNetwork:
    """コンパイル前の ov.Model."""

    def __init__(self, model: ov.Model, model_path: Path) -> None:
        """モデルを保持する.

        Args:
            model: 読み込み済みのモデル.
            model_path: ネットワーク記述ファイルのパス.
        """
        self.model = model
        self.model_path = model_path

    @property
    def inputs(self) -> List[TensorInfo]:
        """宣言された入力の一覧."""
        return [_port_to_tensor_info(p, i) for i, p in enumerate(self.model.inputs)]

    @property
    def outputs(self) -> List[TensorInfo]:
        """宣言された出力の一覧."""
        return [_port_to_tensor_info(p, i) for i, p in enumerate(self.model.outputs)]

    @property
    def batch_size(self) -> int:
        """現在のバッチサイズ. 動的な場合は1とみなす."""
        inputs = self.inputs
        if not inputs or not inputs[0].shape or inputs[0].shape[0] <= 0:
            return 1
        return inputs[0].shape[0]

    def set_batch_size(self, batch_size: int) -> None:
        """全入力の先頭次元を書き換えてモデルを再形状化する.

        Args:
            batch_size: 新しいバッチサイズ.
        """
        new_shapes = {}
        for port in self.model.inputs:
            dims = list(port.get_partial_shape())
            new_shapes[port] = ov.PartialShape([ov.Dimension(batch_size), *dims[1:]])
        self.model.reshape(new_shapes)

    def set_output_precision(self, name: str, precision: str) -> None:
        """出力テンソルの要素型を設定する.

        Args:
            name: 出力テンソル名.
            precision: 精度名.
        """
        if precision.upper() != "FP32":
            raise OutputMetadataError(f"未対応の出力精度です: {precision}")
        names = [output.name for output in self.outputs]
        if name not in names:
            raise OutputMetadataError(f"出力 '{name}' はモデルに存在しません")

        ppp = PrePostProcessor(self.model)
        ppp.output(names.index(name)).tensor().set_element_type(ov.Type.f32)
        self.model = ppp.build()


class OpenVinoInferRequest:
    """ov.InferRequest のラッパー."""

    def __init__(self, request: ov.InferRequest, network: OpenVinoNetwork) -> None:
        self.request = request
        self._input_index = {info.name: i for i, info in enumerate(network.inputs)}
        self._output_index = {info.name: i for i, info in enumerate(network.outputs)}

    def get_input_buffer(self, name: str) -> np.ndarray:
        """入力テンソルのメモリを指す配列を返す."""
        if name not in self._input_index:
            raise BackendError(f"入力 '{name}' はモデルに存在しません")
        return self.request.get_input_tensor(self._input_index[name]).data

    def infer(self) -> None:
        """同期推論を1回実行する."""
        self.request.infer()

    def get_output(self, name: str) -> np.ndarray:
        """出力テンソルのメモリを指す配列を返す."""
        if name not in self._output_index:
            raise BackendError(f"出力 '{name}' はモデルに存在しません")
        data = self.request.get_output_tensor(self._output_index[name]).data
        return np.asarray(data, dtype=np.float32)

    def get_performance_counts(self) -> List[PerfCounter]:
        """直近の推論のレイヤー別カウンタを返す."""
        return [
            PerfCounter(
                layer_name=info.node_name,
                status=info.status.name,
                layer_type=info.node_type,
                exec_type=info.exec_type,
                real_time_us=_perf_time_us(info.real_time),
                cpu_time_us=_perf_time_us(info.cpu_time),
            )
            for info in self.request.profiling_info
        ]


class OpenVinoCompiledNetwork:
    """ov.CompiledModel のラッパー."""

    def __init__(self, compiled: ov.CompiledModel, network: OpenVinoNetwork) -> None:
        self.compiled = compiled
        self.network = network

    def create_infer_request(self) -> OpenVinoInferRequest:
        """推論リクエストを作成する."""
        return OpenVinoInferRequest(self.compiled.create_infer_request(), self.network)


class OpenVinoBackend:
    """OpenVINO Runtime をIInferenceBackendとして扱うためのバックエンド."""

    name = "openvino"

    def __init__(self, device: str = "CPU", plugin_dir: Optional[Path] = None) -> None:
        """Core を作成し, デバイスの存在を確認する.

        Args:
            device: デバイス文字列 ("CPU", "GPU", "HETERO:GPU,CPU" など).
            plugin_dir: plugins.xml を含むディレクトリ, または plugins.xml そのもの.
        """
        self._device = device
        if plugin_dir is not None:
            plugins_xml = plugin_dir if plugin_dir.suffix == ".xml" else plugin_dir / PLUGINS_XML
            if not plugins_xml.is_file():
                raise BackendError(f"プラグイン設定が見つかりません: {plugins_xml}")
            self.core = ov.Core(str(plugins_xml))
        else:
            self.core = ov.Core()
        self._check_device()

    def _check_device(self) -> None:
        base = self._device.strip().upper().split(":")[0].split(".")[0]
        if base in _VIRTUAL_DEVICES:
            return
        available = list(self.core.available_devices)
        if not any(d.upper().split(".")[0] == base for d in available):
            raise BackendError(
                f"デバイス '{self._device}' が見つかりません (利用可能: {', '.join(available)})"
            )

    @property
    def device(self) -> str:
        """対象デバイス文字列."""
        return self._device

    def get_version_info(self) -> Dict[str, str]:
        """ランタイムとデバイスプラグインのバージョンを返す."""
        info = {"openvino": ov.get_version()}
        try:
            versions = self.core.get_versions(self._device)
        except RuntimeError:
            return info
        for device_name, version in versions.items():
            info[device_name] = f"{version.description} {version.build_number}"
        return info

    def add_extension(self, library_path: Path) -> None:
        """拡張ライブラリを Core へ登録する."""
        if not library_path.is_file():
            raise BackendError(f"拡張ライブラリが見つかりません: {library_path}")
        try:
            self.core.add_extension(str(library_path))
        except RuntimeError as e:
            raise BackendError(f"拡張ライブラリを読み込めません: {library_path}: {e}") from e

    def set_device_config_file(self, config_path: Path) -> None:
        """GPU カスタムレイヤーの記述ファイルを登録する."""
        if not config_path.is_file():
            raise BackendError(f"拡張設定ファイルが見つかりません: {config_path}")
        try:
            self.core.set_property("GPU", {"CONFIG_FILE": str(config_path)})
        except RuntimeError as e:
            raise BackendError(f"拡張設定ファイルを登録できません: {config_path}: {e}") from e

    def load_network(self, model_path: Path) -> OpenVinoNetwork:
        """IR を読み込む. 重みはモデルと同名の .bin を使用する.

        Args:
            model_path: .xml ファイルパス.

        Returns:
            読み込んだネットワーク.
        """
        weights_path = model_path.with_suffix(WEIGHTS_SUFFIX)
        for path in (model_path, weights_path):
            if not path.is_file():
                raise ModelLoadError(f"モデルファイルが見つかりません: {path}")
        try:
            model = self.core.read_model(model=str(model_path), weights=str(weights_path))
        except RuntimeError as e:
            raise ModelLoadError(f"モデルを読み込めません: {model_path}: {e}") from e
        return OpenVinoNetwork(model, model_path)

    def compile(
        self, network: OpenVinoNetwork, perf_counts: bool = False
    ) -> OpenVinoCompiledNetwork:
        """モデルをデバイス向けにコンパイルする.

        Args:
            network: load_network で得たネットワーク.
            perf_counts: PERF_COUNT を有効にするか.

        Returns:
            コンパイル済みネットワーク.
        """
        config = {"PERF_COUNT": "YES"} if perf_counts else {}
        try:
            compiled = self.core.compile_model(network.model, self._device, config)
        except RuntimeError as e:
            raise BackendError(f"モデルのコンパイルに失敗しました: {e}") from e
        return OpenVinoCompiledNetwork(compiled, network)
