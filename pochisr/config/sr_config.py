"""pochisr.config.sr_config: 超解像デモの型付き設定."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    field_validator,
    model_validator,
)

from pochisr.exceptions import ParameterError

BackendName = Literal["auto", "onnxruntime", "openvino"]


class SuperResolutionConfig(BaseModel):
    """CLIから解決した超解像デモの実行パラメータ.

    起動時に一度だけ検証され, 以降は不変のまま各ステージへ渡される.
    """

    model_config = ConfigDict(frozen=True)

    inputs: List[str] = []
    model_path: Optional[Path] = None
    device: str = "CPU"
    iterations: int = 1
    plugin_dir: Optional[Path] = None
    cpu_extension: Optional[Path] = None
    gpu_extension_config: Optional[Path] = None
    perf_counts: bool = False
    show: bool = False
    output_dir: Path = Path(".")
    backend: BackendName = "auto"
    benchmark_json: bool = False

    @field_validator("inputs", mode="before")
    @classmethod
    def drop_empty_inputs(cls, v: Any) -> Any:
        """空文字の入力パスを取り除く."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [item for item in v if str(item).strip() != ""]

    @field_validator(
        "model_path", "plugin_dir", "cpu_extension", "gpu_extension_config", mode="before"
    )
    @classmethod
    def empty_path_to_none(cls, v: Any) -> Any:
        """空文字のパスは未指定として扱う."""
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @model_validator(mode="after")
    def check_required_parameters(self) -> "SuperResolutionConfig":
        """必須パラメータを -ni, -i, -m の順で検証する."""
        if self.iterations < 1:
            raise ValueError("パラメータ -ni は1以上を指定してください (default 1)")
        if not self.inputs:
            raise ValueError("パラメータ -i が指定されていません")
        if self.model_path is None:
            raise ValueError("パラメータ -m が指定されていません")
        return self

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "SuperResolutionConfig":
        """argparseの解析結果から設定を作成する.

        Args:
            args: CLI引数の解析結果.

        Returns:
            検証済みの設定.

        Raises:
            ParameterError: 検証に失敗した場合. 最初のエラーメッセージを保持する.
        """
        try:
            return cls(
                inputs=args.input,
                model_path=args.model,
                device=args.device,
                iterations=args.iterations,
                plugin_dir=args.plugin_dir,
                cpu_extension=args.cpu_extension,
                gpu_extension_config=args.gpu_extension_config,
                perf_counts=args.perf_counts,
                show=args.show,
                output_dir=args.output,
                backend=args.backend,
                benchmark_json=args.benchmark_json,
            )
        except ValidationError as e:
            raise ParameterError(_first_error_message(e)) from e


def _first_error_message(error: ValidationError) -> str:
    """ValidationErrorから利用者向けの最初のメッセージを取り出す."""
    first = error.errors()[0]
    ctx = first.get("ctx") or {}
    if "error" in ctx:
        return str(ctx["error"])
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"{location}: {first['msg']}"
    return str(first["msg"])
