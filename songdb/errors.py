"""
アプリケーション固有の例外定義モジュール。

songs.db のデコード、ファイル入出力、設定読み込みで発生する例外を
分類して扱うために、基底例外および派生例外を定義する。
"""

from __future__ import annotations


class SongDbError(Exception):
    """songs.db ダンプ処理全体の基底例外。"""


class DecodeError(SongDbError):
    """バイナリのデコードに起因する例外。"""


class TruncatedError(DecodeError):
    """
    プリミティブ値の読み込みに必要なバイト数が残っていない場合の例外。

    Attributes:
        offset: 読み込み失敗時点のカーソル位置（読めた分は消費済み）。
        needed: 要求したバイト数。
        available: 実際に読めたバイト数。
    """

    def __init__(self, offset: int, needed: int, available: int):
        super().__init__(
            f"unexpected end of data at offset {offset}: "
            f"needed {needed} bytes, got {available}"
        )
        self.offset = offset
        self.needed = needed
        self.available = available


class CorruptDataError(DecodeError):
    """レコード途中での切断や構造的に不正な値を検出した場合の例外。"""


class IOFailureError(SongDbError):
    """入出力ファイルの open/read/write に失敗した場合の例外。"""


class ConfigError(SongDbError):
    """settings.yaml の読み込みや解釈に失敗した場合の例外。"""
