"""推論バックエンドアダプタ.

各ランタイムは必要になった時点で読み込む. ONNX Runtime のみの環境でも
OpenVINO 未導入で失敗しないようにするため.
"""

from pathlib import Path
from pochisr.config import SuperResolutionConfig
from pochisr.exceptions import ParameterError
from pochisr.inference.types.backend_protocol import IInferenceBackend

_SUFFIX_BACKENDS = {
    ".onnx": "onnxruntime",
    ".xml": "openvino",
}


def resolve_backend_name(model_path: Path, requested: str = "auto") -> str:
    """モデル拡張子と指定からバックエンド名を決定する.

    Args:
        model_path: モデルファイルパス.
        requested: "auto", "onnxruntime", "openvino".

    Returns:
        バックエンド名.

    Raises:
        ParameterError: auto 指定で拡張子から判定できない場合.
    """
    if requested != "auto":
        return requested
    suffix = model_path.suffix.lower()
    if suffix not in _SUFFIX_BACKENDS:
        raise ParameterError(
            f"モデル拡張子からバックエンドを判定できません: {model_path} "
            f"(対応: {', '.join(_SUFFIX_BACKENDS)})"
        )
    return _SUFFIX_BACKENDS[suffix]


def create_backend(config: SuperResolutionConfig) -> IInferenceBackend:
    """設定に応じた推論バックエンドを作成する.

    Args:
        config: 検証済みの設定. バックエンドは config.backend とモデル拡張子で決まる.

    Returns:
        デバイスを取得済みのバックエンド.
    """
    assert config.model_path is not None
    name = resolve_backend_name(config.model_path, config.backend)

    if name == "openvino":
        from .openvino_runtime_adapter import OpenVinoBackend

        return OpenVinoBackend(config.device, plugin_dir=config.plugin_dir)

    from .onnx_runtime_adapter import OnnxRuntimeBackend

    return OnnxRuntimeBackend(config.device, plugin_dir=config.plugin_dir)


__all__ = ["create_backend", "resolve_backend_name"]
