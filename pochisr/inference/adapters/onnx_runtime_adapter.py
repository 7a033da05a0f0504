"""ONNX Runtime を推論バックエンドとして扱うアダプタ."""

import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import onnx
import onnxruntime as ort
from onnx import helper

from pochisr.exceptions import BackendError, ModelLoadError, OutputMetadataError
from pochisr.inference.types.backend_protocol import (
    DYNAMIC_DIM,
    PerfCounter,
    TensorInfo,
)
from pochisr.logging import LoggerManager

logger: logging.Logger = LoggerManager().get_logger(__name__)

CPU_PROVIDER = "CPUExecutionProvider"
PROFILE_DIR_PREFIX = "pochisr_"

_DEVICE_PROVIDERS: Dict[str, str] = {
    "CPU": CPU_PROVIDER,
    "GPU": "CUDAExecutionProvider",
    "CUDA": "CUDAExecutionProvider",
    "TENSORRT": "TensorrtExecutionProvider",
    "DML": "DmlExecutionProvider",
    "OPENVINO": "OpenVINOExecutionProvider",
    "COREML": "CoreMLExecutionProvider",
}


def resolve_provider(device: str) -> str:
    """デバイス文字列を実行プロバイダー名へ変換する.

    "GPU.1" や "CUDA:0" のような番号付き指定は先頭部分で判定する.

    Args:
        device: デバイス文字列.

    Returns:
        実行プロバイダー名.

    Raises:
        BackendError: 未対応デバイス, またはプロバイダーが利用できない場合.
    """
    key = device.strip().upper().split(":")[0].split(".")[0]
    if key not in _DEVICE_PROVIDERS:
        supported = ", ".join(sorted(_DEVICE_PROVIDERS))
        raise BackendError(f"未対応のデバイスです: '{device}' (対応: {supported})")

    provider = _DEVICE_PROVIDERS[key]
    available = ort.get_available_providers()
    if provider not in available:
        raise BackendError(
            f"{provider} が利用できません (利用可能: {', '.join(available)})"
        )
    return provider


def _value_info_to_tensor_info(value_info: onnx.ValueInfoProto) -> TensorInfo:
    """ONNXのValueInfoをTensorInfoへ変換する."""
    tensor_type = value_info.type.tensor_type
    shape = tuple(
        dim.dim_value if dim.HasField("dim_value") else DYNAMIC_DIM
        for dim in tensor_type.shape.dim
    )
    precision = np.dtype(helper.tensor_dtype_to_np_dtype(tensor_type.elem_type)).name
    return TensorInfo(name=value_info.name, shape=shape, precision=precision)


def parse_profile(profile_path: Path) -> List[PerfCounter]:
    """ONNX Runtime のプロファイルJSONからノード別カウンタを抽出する.

    プロファイルは全実行分のイベントを含むため, ノードごとに最後の実行を採用する.

    Args:
        profile_path: end_profiling() が返したファイルパス.

    Returns:
        ノード別の性能カウンタ (初回出現順).
    """
    with open(profile_path, "r", encoding="utf-8") as f:
        events = json.load(f)

    suffix = "_kernel_time"
    latest: Dict[str, PerfCounter] = {}
    for event in events:
        name = event.get("name", "")
        if event.get("cat") != "Node" or not name.endswith(suffix):
            continue
        node_name = name[: -len(suffix)]
        args = event.get("args", {})
        duration = int(event.get("dur", 0))
        latest[node_name] = PerfCounter(
            layer_name=node_name,
            status="EXECUTED",
            layer_type=str(args.get("op_name", "")),
            exec_type=str(args.get("provider", "")),
            real_time_us=duration,
            cpu_time_us=duration,
        )
    return list(latest.values())


class OnnxNetwork:
    """コンパイル前のONNXモデル.

    バッチサイズの変更はグラフ入出力の先頭次元を書き換えて反映する.
    """

    def __init__(self, model: onnx.ModelProto, model_path: Path) -> None:
        """ONNXモデルを保持する.

        Args:
            model: 読み込み済みのModelProto.
            model_path: 読み込み元のパス.
        """
        self.model = model
        self.model_path = model_path
        self.output_precisions: Dict[str, str] = {}

    def _graph_inputs(self) -> List[onnx.ValueInfoProto]:
        initializer_names = {init.name for init in self.model.graph.initializer}
        return [
            value_info
            for value_info in self.model.graph.input
            if value_info.name not in initializer_names
        ]

    @property
    def inputs(self) -> List[TensorInfo]:
        """宣言された入力の一覧."""
        return [_value_info_to_tensor_info(vi) for vi in self._graph_inputs()]

    @property
    def outputs(self) -> List[TensorInfo]:
        """宣言された出力の一覧."""
        return [_value_info_to_tensor_info(vi) for vi in self.model.graph.output]

    @property
    def batch_size(self) -> int:
        """現在のバッチサイズ. 動的な場合は1とみなす."""
        inputs = self.inputs
        if not inputs or not inputs[0].shape or inputs[0].shape[0] <= 0:
            return 1
        return inputs[0].shape[0]

    def set_batch_size(self, batch_size: int) -> None:
        """全入出力の先頭次元を固定値に書き換える.

        Args:
            batch_size: 新しいバッチサイズ.
        """
        for value_info in [*self._graph_inputs(), *self.model.graph.output]:
            dims = value_info.type.tensor_type.shape.dim
            if len(dims) > 0:
                dims[0].dim_value = batch_size

    def set_output_precision(self, name: str, precision: str) -> None:
        """出力精度を記録する. FP32 への変換は結果取得時に行う.

        Args:
            name: 出力テンソル名.
            precision: 精度名.
        """
        if precision.upper() != "FP32":
            raise OutputMetadataError(f"未対応の出力精度です: {precision}")
        if name not in {output.name for output in self.model.graph.output}:
            raise OutputMetadataError(f"出力 '{name}' はモデルに存在しません")
        self.output_precisions[name] = precision.upper()


class OnnxInferRequest:
    """InferenceSession と入力バッファを束ねた推論リクエスト."""

    def __init__(
        self,
        session: ort.InferenceSession,
        inputs: List[TensorInfo],
        output_precisions: Dict[str, str],
        profile_dir: Optional[tempfile.TemporaryDirectory] = None,
    ) -> None:
        """入力バッファを確保する.

        Args:
            session: ONNXランタイムセッション.
            inputs: バッチサイズ反映済みの入力情報.
            output_precisions: 出力名ごとの精度指定.
            profile_dir: プロファイル出力先. None ならプロファイリング無効.
        """
        self.session = session
        self._output_precisions = output_precisions
        self._profile_dir = profile_dir
        self._buffers: Dict[str, np.ndarray] = {}
        for info in inputs:
            if any(dim <= 0 for dim in info.shape):
                raise BackendError(
                    f"入力 '{info.name}' の形状が確定していません: {info.shape}"
                )
            self._buffers[info.name] = np.zeros(info.shape, dtype=np.dtype(info.precision))
        self._output_names = [output.name for output in session.get_outputs()]
        self._outputs: Dict[str, Any] = {}
        self._perf_counts: Optional[List[PerfCounter]] = None

    def get_input_buffer(self, name: str) -> np.ndarray:
        """入力バッファを返す."""
        if name not in self._buffers:
            raise BackendError(f"入力 '{name}' はモデルに存在しません")
        return self._buffers[name]

    def infer(self) -> None:
        """同期推論を1回実行する."""
        results = self.session.run(self._output_names, self._buffers)
        self._outputs = dict(zip(self._output_names, results))

    def get_output(self, name: str) -> np.ndarray:
        """直近の推論結果を返す."""
        if name not in self._outputs:
            raise BackendError(f"出力 '{name}' がありません. 推論が未実行です")
        output = self._outputs[name]
        if self._output_precisions.get(name) == "FP32":
            return np.asarray(output, dtype=np.float32)
        return np.asarray(output)

    def get_performance_counts(self) -> List[PerfCounter]:
        """プロファイル結果からノード別カウンタを返す.

        プロファイルはセッションごとに一度しか終了できないため結果をキャッシュする.
        読み込み後にプロファイル出力先のディレクトリごと削除する.
        """
        if self._profile_dir is None:
            return []
        if self._perf_counts is None:
            profile_path = Path(self.session.end_profiling())
            try:
                self._perf_counts = parse_profile(profile_path)
            finally:
                self._profile_dir.cleanup()
        return self._perf_counts


class OnnxCompiledNetwork:
    """コンパイル済み (セッション作成済み) のONNXモデル."""

    def __init__(
        self,
        session: ort.InferenceSession,
        network: OnnxNetwork,
        profile_dir: Optional[tempfile.TemporaryDirectory] = None,
    ) -> None:
        self.session = session
        self.network = network
        self.profile_dir = profile_dir

    def create_infer_request(self) -> OnnxInferRequest:
        """推論リクエストを作成する."""
        return OnnxInferRequest(
            self.session,
            self.network.inputs,
            dict(self.network.output_precisions),
            profile_dir=self.profile_dir,
        )


class OnnxRuntimeBackend:
    """ONNX Runtime をIInferenceBackendとして扱うためのバックエンド.

    Attributes:
        provider: デバイスに対応する実行プロバイダー名.
        custom_op_libraries: 登録済みのカスタムOPライブラリ.
        provider_options: 実行プロバイダーへ渡すオプション.
    """

    name = "onnxruntime"

    def __init__(self, device: str = "CPU", plugin_dir: Optional[Path] = None) -> None:
        """バックエンドを初期化する.

        Args:
            device: デバイス文字列.
            plugin_dir: プラグイン検索パス. ONNX Runtime では使用しない.
        """
        self._device = device
        self.provider = resolve_provider(device)
        self.custom_op_libraries: List[Path] = []
        self.provider_options: Dict[str, Any] = {}
        if plugin_dir is not None:
            logger.warning(
                f"ONNX Runtime はプラグイン検索パスを使用しないため無視します: {plugin_dir}"
            )

    @property
    def device(self) -> str:
        """対象デバイス文字列."""
        return self._device

    def get_version_info(self) -> Dict[str, str]:
        """ランタイムと実行プロバイダーの情報を返す."""
        return {"onnxruntime": ort.__version__, "provider": self.provider}

    def add_extension(self, library_path: Path) -> None:
        """カスタムOPライブラリを登録する.

        Args:
            library_path: 共有ライブラリのパス.
        """
        if not library_path.is_file():
            raise BackendError(f"拡張ライブラリが見つかりません: {library_path}")
        self.custom_op_libraries.append(library_path)

    def set_device_config_file(self, config_path: Path) -> None:
        """実行プロバイダーオプションをJSONファイルから読み込む.

        Args:
            config_path: プロバイダーオプションを記述したJSONファイル.
        """
        if not config_path.is_file():
            raise BackendError(f"拡張設定ファイルが見つかりません: {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                options = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise BackendError(f"拡張設定ファイルを読み込めません: {config_path}: {e}") from e
        if not isinstance(options, dict):
            raise BackendError(
                f"拡張設定ファイルはJSONオブジェクトである必要があります: {config_path}"
            )
        self.provider_options.update(options)

    def load_network(self, model_path: Path) -> OnnxNetwork:
        """ONNXモデルを読み込む.

        外部データ形式の重みはモデルと同じディレクトリから読み込まれる.

        Args:
            model_path: .onnx ファイルパス.

        Returns:
            読み込んだネットワーク.
        """
        if not model_path.is_file():
            raise ModelLoadError(f"モデルファイルが見つかりません: {model_path}")
        try:
            model = onnx.load(str(model_path))
        except Exception as e:
            raise ModelLoadError(f"モデルを読み込めません: {model_path}: {e}") from e
        return OnnxNetwork(model, model_path)

    def compile(self, network: OnnxNetwork, perf_counts: bool = False) -> OnnxCompiledNetwork:
        """InferenceSession を作成する.

        Args:
            network: load_network で得たネットワーク.
            perf_counts: ノード別プロファイルを有効にするか.

        Returns:
            コンパイル済みネットワーク.
        """
        options = ort.SessionOptions()
        for library in self.custom_op_libraries:
            try:
                options.register_custom_ops_library(str(library))
            except Exception as e:
                raise BackendError(f"拡張ライブラリを登録できません: {library}: {e}") from e
            logger.debug(f"カスタムOPライブラリを登録: {library}")
        # 未回収のまま破棄された場合も TemporaryDirectory の終了処理で削除される
        profile_dir: Optional[tempfile.TemporaryDirectory] = None
        if perf_counts:
            options.enable_profiling = True
            profile_dir = tempfile.TemporaryDirectory(prefix=PROFILE_DIR_PREFIX)
            options.profile_file_prefix = str(Path(profile_dir.name) / "ort_profile")

        providers: List[Any] = [(self.provider, self.provider_options)]
        if self.provider != CPU_PROVIDER:
            providers.append(CPU_PROVIDER)

        try:
            session = ort.InferenceSession(
                network.model.SerializeToString(),
                sess_options=options,
                providers=providers,
            )
        except Exception as e:
            if profile_dir is not None:
                profile_dir.cleanup()
            raise BackendError(f"セッションの作成に失敗しました: {e}") from e
        logger.debug(f"実行プロバイダー: {session.get_providers()}")
        return OnnxCompiledNetwork(session, network, profile_dir=profile_dir)
