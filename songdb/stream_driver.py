"""
songs.db 全体を先頭から読み進め、Score を1件ずつ出力側へ渡すドライバ。

songs.db にはレコード件数も終端マーカーも無いため、
「レコード先頭で1バイトも読めずに入力が尽きた」ことを唯一の正常終了とみなす。
レコード途中で入力が尽きた場合は破損データとして処理全体を中断する。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Protocol

from songdb.binary_reader import ByteCursor, read_string
from songdb.errors import CorruptDataError, TruncatedError
from songdb.models import Score
from songdb.schema_reader import read_score

logger = logging.getLogger("songdb.stream_driver")


class DriverState(Enum):
    READING = "reading"
    DONE = "done"


class ScoreSink(Protocol):
    def emit(self, score: Score) -> None: ...


@dataclass(frozen=True)
class DumpResult:
    """
    1回のダンプ結果。

    Attributes:
        version: songs.db 先頭のバージョン文字列。
        record_count: 出力した Score の件数。
        state: 終了時のドライバ状態（正常終了時は DONE）。
    """

    version: str
    record_count: int
    state: DriverState


def read_version(cursor: ByteCursor) -> str:
    """
    songs.db 先頭のバージョン文字列を読み込む。

    Raises:
        CorruptDataError: バージョン文字列すら読めない場合。
    """
    try:
        return read_string(cursor)
    except TruncatedError as exc:
        raise CorruptDataError("songs.db is too short to contain a version header") from exc


def iter_scores(cursor: ByteCursor) -> Iterator[Score]:
    """
    バージョン文字列の直後から Score を順に読み込んで返す。

    Args:
        cursor: バージョン文字列を読み終えた位置にあるカーソル。

    Yields:
        完全に読み込めた Score。途中までしか読めなかったレコードは返さない。

    Raises:
        CorruptDataError: レコードの途中で入力が尽きた場合。
    """
    while True:
        start = cursor.offset
        try:
            score = read_score(cursor)
        except TruncatedError as exc:
            if cursor.offset == start:
                return
            raise CorruptDataError(
                f"record starting at offset {start} is truncated "
                f"({cursor.offset - start} bytes read)"
            ) from exc
        yield score


def dump_songs(cursor: ByteCursor, sink: ScoreSink) -> DumpResult:
    """
    songs.db を最後まで読み込み、各 Score を sink へ渡す。

    処理順:
    1. バージョン文字列を読み込みログ出力する（レコードには含めない）
    2. レコード境界で入力が尽きるまで Score を読み込み、都度 sink.emit する

    Args:
        cursor: ファイル先頭にあるカーソル。
        sink: Score の出力先（XmlSongEmitter 等）。

    Returns:
        DumpResult。

    Raises:
        CorruptDataError: バージョン欠落またはレコード途中で入力が尽きた場合。
        IOFailureError: 入出力に失敗した場合。
    """
    version = read_version(cursor)
    logger.info("SongDB version: %s", version)

    state = DriverState.READING
    count = 0
    for score in iter_scores(cursor):
        sink.emit(score)
        count += 1
    state = DriverState.DONE

    return DumpResult(version=version, record_count=count, state=state)
