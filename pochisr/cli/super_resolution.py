#!/usr/bin/env python3
"""超解像デモCLI.

使用例:
    pochi-sr -i data/lr_128x128.png -m models/single-image-super-resolution.onnx
    pochi-sr -i data/ -m models/single-image-super-resolution.xml -d GPU -ni 10 -pc
"""

import argparse
import logging
import sys
from typing import List, Optional

from pochisr.config import SuperResolutionConfig
from pochisr.exceptions import SuperResolutionError
from pochisr.inference import SuperResolutionPipeline
from pochisr.logging import LoggerManager, LogLevel

logger: logging.Logger = LoggerManager().get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """CLI引数パーサーを作成する."""
    parser = argparse.ArgumentParser(
        prog="pochi-sr",
        description="pochisr - 超解像推論デモ",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用例:
  # ONNXモデル (CPU)
  pochi-sr -i data/lr.png -m models/sr.onnx

  # OpenVINO IR (.xml と同名の .bin) をGPUで10回計測し, 性能カウンタを表示
  pochi-sr -i data/ -m models/sr.xml -d GPU -ni 10 -pc

  # 結果を表示してから保存
  pochi-sr -i data/lr.png -m models/sr.onnx -show -o results/
        """,
    )

    parser.add_argument(
        "-i",
        "--input",
        nargs="+",
        help="入力画像のパス. ファイルまたはディレクトリを複数指定可能",
    )
    parser.add_argument(
        "-m",
        "--model",
        help="モデルファイルパス (.onnx, または .bin を伴う .xml)",
    )
    parser.add_argument(
        "-d",
        "--device",
        default="CPU",
        help="推論デバイス (CPU, GPU など. default: CPU)",
    )
    parser.add_argument(
        "-ni",
        "--iterations",
        type=int,
        default=1,
        help="計測のための推論回数 (default: 1, 1以上)",
    )
    parser.add_argument("-pp", "--plugin-dir", help="プラグイン検索パス")
    parser.add_argument(
        "-l",
        "--cpu-extension",
        help="CPU向け拡張ライブラリの絶対パス",
    )
    parser.add_argument(
        "-c",
        "--gpu-extension-config",
        help="GPU向け拡張の記述ファイルパス (ONNX Runtimeではプロバイダーオプションの JSON)",
    )
    parser.add_argument(
        "-pc",
        "--perf-counts",
        action="store_true",
        help="レイヤー別の性能カウンタを表示する",
    )
    parser.add_argument(
        "-show",
        "--show",
        action="store_true",
        help="保存前に結果画像を表示する",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=".",
        help="結果画像の出力ディレクトリ (default: カレントディレクトリ)",
    )
    parser.add_argument(
        "--backend",
        choices=("auto", "onnxruntime", "openvino"),
        default="auto",
        help="推論バックエンド (default: auto = モデル拡張子から判定)",
    )
    parser.add_argument(
        "--benchmark-json",
        action="store_true",
        help="計測結果を benchmark_result.json として出力する",
    )
    parser.add_argument("--debug", action="store_true", help="DEBUGログを有効化")
    return parser


def run(args: argparse.Namespace) -> int:
    """解析済み引数で超解像デモを実行する.

    Args:
        args: CLI引数の解析結果.

    Returns:
        終了コード. 成功時0, エラー時1.
    """
    try:
        logger.info("入力パラメータを解析しています")
        config = SuperResolutionConfig.from_args(args)
        SuperResolutionPipeline().run(config)
    except SuperResolutionError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.error(f"予期しない内部エラーが発生しました: {e}")
        return 1

    logger.info("正常に終了しました")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """メイン関数."""
    parser = build_parser()
    args = parser.parse_args(argv)

    manager = LoggerManager()
    manager.set_default_level(LogLevel.DEBUG if args.debug else LogLevel.INFO)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
