"""
songs.db → XML 変換の実行処理。

入出力ファイルを開き、ストリームドライバとエミッタを接続して1回分の変換を行う。
どの経路で失敗しても入出力ファイルは with により必ず閉じられる。
"""

from __future__ import annotations

import logging
import os

from songdb.binary_reader import ByteCursor
from songdb.errors import IOFailureError
from songdb.stream_driver import DumpResult, dump_songs
from songdb.xml_emitter import XmlSongEmitter

logger = logging.getLogger("songdb.converter")

TEMP_SUFFIX = ".tmp"


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def convert_songs_db(
    input_path: str,
    output_path: str,
    atomic_output: bool = False,
) -> DumpResult:
    """
    songs.db を読み込み、XML ファイルへ書き出す。

    atomic_output が False の場合は出力先へ直接書き込むため、
    途中で失敗すると閉じタグの無い不完全な XML が残る。
    True の場合は "<output_path>.tmp" へ書き出し、正常終了時のみ置き換える。

    Args:
        input_path: 入力 songs.db のパス。
        output_path: 出力 XML のパス（既存ファイルは上書き）。
        atomic_output: 一時ファイル経由で書き出すかどうか。

    Returns:
        DumpResult。

    Raises:
        IOFailureError: ファイルの open/read/write/置き換えに失敗した場合。
        CorruptDataError: songs.db が破損している場合。
    """
    target_path = output_path + TEMP_SUFFIX if atomic_output else output_path

    try:
        in_file = open(input_path, "rb")
    except OSError as exc:
        raise IOFailureError(f"cannot open {input_path}: {exc}") from exc

    with in_file:
        try:
            out_file = open(target_path, "w", encoding="utf-8", newline="\n")
        except OSError as exc:
            raise IOFailureError(f"cannot create {target_path}: {exc}") from exc

        try:
            with out_file:
                emitter = XmlSongEmitter(out_file)
                emitter.open()
                result = dump_songs(ByteCursor(in_file), emitter)
                emitter.close()
        except BaseException:
            if atomic_output:
                _remove_quietly(target_path)
            raise

    if atomic_output:
        try:
            os.replace(target_path, output_path)
        except OSError as exc:
            _remove_quietly(target_path)
            raise IOFailureError(f"cannot replace {output_path}: {exc}") from exc

    logger.info("done")
    return result
