"""
pochisr: A tiny super-resolution demo, as friendly as Pochi!

推論ランタイムで学習済み超解像モデルを実行し, 高解像度画像を保存するデモ

Example:
    >>> from pochisr import SuperResolutionConfig, SuperResolutionPipeline
    >>> config = SuperResolutionConfig(inputs=["data/lr.png"], model_path="models/sr.onnx")
    >>> result = SuperResolutionPipeline().run(config)
    >>> result.output_paths
    [PosixPath('sr_1.png')]
"""

from .config import SuperResolutionConfig
from .inference import SuperResolutionPipeline
from .logging import LoggerManager

__version__ = "0.1.0"
__author__ = "Pochi Team"
__email__ = "pochi@example.com"

__all__ = [
    "LoggerManager",
    "SuperResolutionConfig",
    "SuperResolutionPipeline",
]
