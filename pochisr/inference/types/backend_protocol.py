"""推論バックエンドの Protocol 定義.

IInferenceBackend とその周辺は `typing.Protocol` を採用する.
主な理由は次のとおり.

- ONNX Runtime / OpenVINO の実装を明示的な継承なしで差し替えられる.
- テストで Fake を差し込む際に, 必要メソッドを満たすだけでよい.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Protocol, Tuple

import numpy as np

DYNAMIC_DIM = -1


@dataclass(frozen=True)
class TensorInfo:
    """ネットワーク入出力テンソルのメタデータ.

    Args:
        name: テンソル名.
        shape: 形状 (N, C, H, W). 動的な次元は -1.
        precision: NumPy の要素型名 ("float32", "uint8" など).
    """

    name: str
    shape: Tuple[int, ...]
    precision: str = "float32"

    @property
    def channels(self) -> int:
        """チャネル数."""
        return self.shape[1]

    @property
    def height(self) -> int:
        """高さ."""
        return self.shape[2]

    @property
    def width(self) -> int:
        """幅."""
        return self.shape[3]

    def has_static_spatial_dims(self) -> bool:
        """C, H, W がすべて静的か返す."""
        return len(self.shape) == 4 and all(d > 0 for d in self.shape[1:])


@dataclass(frozen=True)
class PerfCounter:
    """レイヤー単位の性能カウンタ."""

    layer_name: str
    status: str
    layer_type: str
    exec_type: str
    real_time_us: int
    cpu_time_us: int

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式へ変換する."""
        return {
            "layer_name": self.layer_name,
            "status": self.status,
            "layer_type": self.layer_type,
            "exec_type": self.exec_type,
            "real_time_us": self.real_time_us,
            "cpu_time_us": self.cpu_time_us,
        }


class IInferRequest(Protocol):
    """入出力バッファを保持し, 繰り返し実行される推論リクエスト."""

    def get_input_buffer(self, name: str) -> np.ndarray:
        """書き込み可能な入力バッファ (N, C, H, W) を返す.

        Args:
            name: 入力テンソル名.

        Returns:
            リクエストが保持する入力配列そのもの.
        """
        ...

    def infer(self) -> None:
        """同期推論を1回実行する."""
        ...

    def get_output(self, name: str) -> np.ndarray:
        """直近の推論結果を float32 で返す.

        Args:
            name: 出力テンソル名.

        Returns:
            出力配列 (N, C, H, W).
        """
        ...

    def get_performance_counts(self) -> List[PerfCounter]:
        """直近の推論のレイヤー別性能カウンタを返す."""
        ...


class ICompiledNetwork(Protocol):
    """デバイス向けにコンパイル済みのネットワーク."""

    def create_infer_request(self) -> IInferRequest:
        """推論リクエストを作成する."""
        ...


class INetwork(Protocol):
    """コンパイル前のネットワーク表現."""

    @property
    def inputs(self) -> List[TensorInfo]:
        """宣言された入力の一覧 (宣言順)."""
        ...

    @property
    def outputs(self) -> List[TensorInfo]:
        """宣言された出力の一覧 (宣言順)."""
        ...

    @property
    def batch_size(self) -> int:
        """現在のバッチサイズ."""
        ...

    def set_batch_size(self, batch_size: int) -> None:
        """全入出力の先頭次元をバッチサイズに設定する."""
        ...

    def set_output_precision(self, name: str, precision: str) -> None:
        """出力の数値精度を設定する.

        Args:
            name: 出力テンソル名.
            precision: 精度名. 現在は "FP32" のみ.
        """
        ...


class IInferenceBackend(Protocol):
    """推論ランタイムとデバイスへのハンドル."""

    @property
    def name(self) -> str:
        """バックエンド名."""
        ...

    @property
    def device(self) -> str:
        """対象デバイス文字列."""
        ...

    def get_version_info(self) -> Dict[str, str]:
        """ランタイムとデバイスプラグインのバージョンを返す."""
        ...

    def add_extension(self, library_path: Path) -> None:
        """拡張ライブラリを登録する."""
        ...

    def set_device_config_file(self, config_path: Path) -> None:
        """デバイス拡張の設定ファイルを登録する."""
        ...

    def load_network(self, model_path: Path) -> INetwork:
        """モデルファイルを読み込む."""
        ...

    def compile(self, network: INetwork, perf_counts: bool = False) -> ICompiledNetwork:
        """ネットワークを対象デバイス向けにコンパイルする.

        Args:
            network: load_network で得たネットワーク.
            perf_counts: レイヤー別性能カウンタを収集するか.

        Returns:
            コンパイル済みネットワーク.
        """
        ...
