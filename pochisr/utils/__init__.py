"""
pochisr.utils: ユーティリティモジュール.

入力ファイル引数の展開などの汎用機能を提供
"""

from .input_files import collect_image_paths

__all__ = ["collect_image_paths"]
