"""入力ファイル引数の展開."""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from pochisr.logging import LoggerManager

logger: logging.Logger = LoggerManager().get_logger(__name__)


def collect_image_paths(
    inputs: Sequence[str], log: Optional[logging.Logger] = None
) -> List[Path]:
    """-i に指定されたパスを画像ファイルの一覧へ展開する.

    ディレクトリは直下のファイルを名前順で展開する (再帰しない).
    存在しないパスは警告を出して無視する.

    Args:
        inputs: ファイルまたはディレクトリのパス.
        log: ロガー. 未指定時はモジュールロガーを利用する.

    Returns:
        指定順に並んだファイルパス.
    """
    log = log or logger
    paths: List[Path] = []
    for raw in inputs:
        path = Path(raw)
        if path.is_dir():
            paths.extend(sorted(p for p in path.iterdir() if p.is_file()))
        elif path.is_file():
            paths.append(path)
        else:
            log.warning(f"ファイル {path} を開けません")

    log.info(f"追加されたファイル数: {len(paths)}")
    for path in paths:
        log.debug(f"    {path}")
    return paths
