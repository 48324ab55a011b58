"""ログ出力のインターフェース定義

このモジュールは、scivoのCLIにおけるログ出力を定義する。
VerboseLevel (詳細ログレベル)に応じた出力制御を行い、
ライブラリ側の logging 出力もこのロガーに中継する。
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import TextIO


class VerboseLevel(IntEnum):
    """詳細ログレベル

    ログ出力の詳細度を制御するための列挙型。
    QUIET: エラーのみ出力
    NORMAL: 結果とサマリ出力
    VERBOSE: 読み込んだリソースごとの情報も出力（-vオプション）
    DEBUG: ライブラリのデバッグログも出力（-vvオプション）
    """

    QUIET = -1
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2

    @classmethod
    def from_count(cls, count: int, quiet: bool = False) -> VerboseLevel:
        """-v の指定回数から詳細ログレベルを求める"""
        if quiet:
            return cls.QUIET
        return cls(min(count, cls.DEBUG))


@dataclass
class LogConfig:
    """ログ設定

    Attributes:
        verbose_level: ログの詳細度レベル
        log_file: ログ出力先ファイルパス（Noneの場合はファイル出力なし）
    """

    verbose_level: VerboseLevel = VerboseLevel.NORMAL
    log_file: Path | None = None


class ConsoleLogger:
    """コンソールログ出力クラス

    VerboseLevelに応じてメッセージのフィルタリングを行い、
    指定があればタイムスタンプ付きでファイルにも書き出す。

    使用例:
        >>> with ConsoleLogger(LogConfig(verbose_level=VerboseLevel.VERBOSE)) as logger:
        ...     logger.info("リソースを列挙します")
        ...     logger.verbose("SCRIPT:42 を読み込み中")
    """

    _ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

    def __init__(self, config: LogConfig) -> None:
        """ロガーを初期化する

        Args:
            config: ログ設定
        """
        self._config = config
        self._log_file: TextIO | None = None
        self._handler: _ForwardingHandler | None = None
        self._previous_level: int | None = None
        if config.log_file:
            # クラス自体がコンテキストマネージャとして動作し、__exit__でファイルを閉じる
            self._log_file = open(config.log_file, "w", encoding="utf-8")  # noqa: SIM115

    def __enter__(self) -> ConsoleLogger:
        """コンテキストマネージャのエントリポイント"""
        return self

    def __exit__(self, *args: object) -> None:
        """コンテキストマネージャの終了処理"""
        self.detach_library_logging()
        if self._log_file:
            self._log_file.close()
            self._log_file = None

    @property
    def config(self) -> LogConfig:
        return self._config

    def _print(self, message: str, file: TextIO | None = None) -> None:
        if file is None:
            file = sys.stdout
        print(message, file=file)

    def _log_to_file(self, level: str, message: str) -> None:
        if self._log_file:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            clean_message = self._strip_ansi(message)
            self._log_file.write(f"[{timestamp}] {level}: {clean_message}\n")
            self._log_file.flush()

    def _strip_ansi(self, text: str) -> str:
        """ANSIエスケープシーケンスを除去する"""
        return self._ANSI_ESCAPE_PATTERN.sub("", text)

    def info(self, message: str) -> None:
        """情報メッセージを出力する（NORMAL以上）"""
        if self._config.verbose_level >= VerboseLevel.NORMAL:
            self._print(message)
        self._log_to_file("INFO", message)

    def verbose(self, message: str) -> None:
        """詳細メッセージを出力する（VERBOSE以上）"""
        if self._config.verbose_level >= VerboseLevel.VERBOSE:
            self._print(message)
        self._log_to_file("VERBOSE", message)

    def debug(self, message: str) -> None:
        """デバッグメッセージを出力する（DEBUG以上）"""
        if self._config.verbose_level >= VerboseLevel.DEBUG:
            self._print(message)
        self._log_to_file("DEBUG", message)

    def error(self, message: str) -> None:
        """エラーメッセージを出力する（常に出力）"""
        self._print(f"エラー: {message}", file=sys.stderr)
        self._log_to_file("ERROR", message)

    def warning(self, message: str) -> None:
        """警告メッセージを出力する（QUIET以上）"""
        if self._config.verbose_level > VerboseLevel.QUIET:
            self._print(f"警告: {message}", file=sys.stderr)
        self._log_to_file("WARNING", message)

    def log_summary(self, succeeded: int, failed: int) -> None:
        """列挙結果のサマリを出力する（NORMAL以上）

        Args:
            succeeded: 成功した件数
            failed: 失敗した件数
        """
        self.info(f"合計 {succeeded + failed} 件 (成功 {succeeded} 件, 失敗 {failed} 件)")

    def attach_library_logging(self, name: str = "scivo") -> None:
        """ライブラリの logging 出力をこのロガーに中継する

        Args:
            name: 中継対象のロガー名
        """
        if self._handler is not None:
            return
        self._handler = _ForwardingHandler(self)
        library_logger = logging.getLogger(name)
        self._previous_level = library_logger.level
        library_logger.addHandler(self._handler)
        library_logger.setLevel(logging.DEBUG)

    def detach_library_logging(self, name: str = "scivo") -> None:
        """ライブラリの logging 中継を解除する"""
        if self._handler is None:
            return
        library_logger = logging.getLogger(name)
        library_logger.removeHandler(self._handler)
        if self._previous_level is not None:
            library_logger.setLevel(self._previous_level)
            self._previous_level = None
        self._handler = None


class _ForwardingHandler(logging.Handler):
    """logging のレコードを ConsoleLogger の各レベルに振り分けるハンドラ"""

    def __init__(self, target: ConsoleLogger) -> None:
        super().__init__(level=logging.DEBUG)
        self._target = target

    def emit(self, record: logging.LogRecord) -> None:
        message = record.getMessage()
        if record.levelno >= logging.ERROR:
            self._target.error(message)
        elif record.levelno >= logging.WARNING:
            self._target.warning(message)
        elif record.levelno >= logging.INFO:
            self._target.verbose(message)
        else:
            self._target.debug(message)
