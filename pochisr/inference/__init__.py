"""
pochisr.inference: 超解像推論モジュール.

バックエンドアダプタ, ステージごとのサービス, パイプラインを提供
"""

from .pipeline import SuperResolutionPipeline

__all__ = ["SuperResolutionPipeline"]
