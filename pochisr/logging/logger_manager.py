"""
pochisr.logging.logger_manager: デモ共通のログ出力.

通常は ``時刻|レベル| メッセージ``, DEBUG 時はファイル名と行番号を加えた
書式で colorlog のストリームハンドラーへ出力する.
"""

import logging
from enum import Enum
from typing import Dict, Optional

import colorlog

INFO_FORMAT = "%(asctime)s|%(log_color)s%(levelname)-5.5s%(reset)s| %(message)s"
DEBUG_FORMAT = (
    "%(asctime)s|%(log_color)s%(levelname)-5.5s%(reset)s|"
    "%(filename)-28s|%(lineno)03d| %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARN": "yellow",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class LevelBasedFormatter(logging.Formatter):
    """WARNING を WARN と表示し, DEBUG 有効時は詳細書式へ切り替える."""

    def __init__(
        self,
        info_format: str,
        debug_format: str,
        datefmt: str,
        log_colors: dict | None = None,
        force_debug_format: bool = False,
    ) -> None:
        super().__init__(datefmt=datefmt)
        colors = log_colors or {}
        self._force_debug_format = force_debug_format
        self._info_formatter = colorlog.ColoredFormatter(
            info_format, datefmt=datefmt, log_colors=colors
        )
        self._debug_formatter = colorlog.ColoredFormatter(
            debug_format, datefmt=datefmt, log_colors=colors
        )

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = {"WARNING": "WARN"}.get(record.levelname, record.levelname)
        if self._force_debug_format:
            return str(self._debug_formatter.format(record))
        return str(self._info_formatter.format(record))


class LogLevel(Enum):
    """CLI から指定できるログレベル."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def value_int(self) -> int:
        """logging モジュールの数値レベル."""
        return int(getattr(logging, self.value))


class LoggerManager:
    """名前付きロガーを同じ書式で払い出すシングルトン.

    CLI, パイプライン, 各ランタイムアダプタはモジュール読み込み時に
    ``LoggerManager().get_logger(__name__)`` でロガーを取得する.
    ``--debug`` は後から ``set_default_level`` で反映されるため,
    取得済みのロガーにもレベルと書式を適用する.
    """

    _instance: Optional["LoggerManager"] = None
    _loggers: Dict[str, logging.Logger] = {}

    def __new__(cls) -> "LoggerManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_initialized"):
            return
        self._default_level = LogLevel.INFO
        self._use_debug_format = False
        self._initialized = True

    def get_logger(self, name: str, level: Optional[LogLevel] = None) -> logging.Logger:
        """
        ロガーを取得する. 未作成なら現在のデフォルトレベルで作成する.

        Examples:
            >>> logger = LoggerManager().get_logger("pochisr")
            >>> logger.info("ネットワークファイルを読み込んでいます")
            2026-10-19 12:00:00|INFO | ネットワークファイルを読み込んでいます
        """
        if name not in self._loggers:
            self._loggers[name] = self._create_logger(name, level or self._default_level)
        return self._loggers[name]

    def _create_logger(self, name: str, level: LogLevel) -> logging.Logger:
        logger = logging.getLogger(name)
        if logger.handlers:
            return logger

        logger.setLevel(level.value_int)
        logger.addHandler(self._create_handler())
        # ルートロガー側の設定で二重出力しない
        logger.propagate = False
        return logger

    def _create_handler(self) -> logging.Handler:
        handler = colorlog.StreamHandler()
        handler.setFormatter(
            LevelBasedFormatter(
                INFO_FORMAT,
                DEBUG_FORMAT,
                datefmt=DATE_FORMAT,
                log_colors=LOG_COLORS,
                force_debug_format=self._use_debug_format,
            )
        )
        return handler

    def set_default_level(self, level: LogLevel) -> None:
        """デフォルトレベルを変更し, 取得済みロガーのレベルと書式にも反映する."""
        self._default_level = level
        self._use_debug_format = level == LogLevel.DEBUG
        for name, logger in self._loggers.items():
            self.set_logger_level(name, level)
            for handler in logger.handlers:
                if isinstance(handler.formatter, LevelBasedFormatter):
                    handler.formatter._force_debug_format = self._use_debug_format

    def set_logger_level(self, name: str, level: LogLevel) -> None:
        """管理下のロガー1つのレベルを変更する. 未知の名前は無視する."""
        if name in self._loggers:
            self._loggers[name].setLevel(level.value_int)

    def get_available_loggers(self) -> list[str]:
        return list(self._loggers.keys())

    @classmethod
    def reset(cls) -> None:
        """シングルトンと管理中のロガーを破棄する (テスト用)."""
        cls._instance = None
        cls._loggers.clear()
