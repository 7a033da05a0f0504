"""pochisr.config: 型付き設定モジュール."""

from .sr_config import SuperResolutionConfig

__all__ = ["SuperResolutionConfig"]
