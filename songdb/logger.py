"""
ログ出力ユーティリティ。

コンソールには簡潔なメッセージのみを出し、
log_file 指定時はトレースバックを含む詳細ログをファイルへ残す。
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = "%(asctime)s %(message)s"
CONSOLE_DATEFMT = "%Y/%m/%d %H:%M:%S"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _ConsoleFormatter(logging.Formatter):
    """トレースバックを付けずに1行で整形するフォーマッタ。"""

    def format(self, record: logging.LogRecord) -> str:
        saved = record.exc_info, record.exc_text
        record.exc_info, record.exc_text = None, None
        try:
            return super().format(record)
        finally:
            record.exc_info, record.exc_text = saved


def setup_logger(
    name: str = "songdb",
    level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    コンソール(stderr)ハンドラと任意のファイルハンドラを持つロガーを構成する。

    既にハンドラが設定済みのロガーはそのまま返す。

    Args:
        name: ロガー名。
        level: コンソールに出すログレベル名（例: "INFO"）。
        log_file: 詳細ログの出力先。None の場合はファイルへ出力しない。

    Returns:
        構成済みのロガー。

    Raises:
        ValueError: level が不明なレベル名の場合。
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(_ConsoleFormatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    return logger


def log_exception(logger: logging.Logger, message: str, exc: BaseException) -> None:
    """
    例外を記録する。

    コンソールには1行の診断メッセージ、ファイルにはトレースバック付きで出力する。
    """
    logger.error("%s: %s", message, exc, exc_info=exc)
