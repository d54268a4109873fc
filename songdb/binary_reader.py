"""
songs.db のプリミティブ値デコーダ。

前方にのみ進むバイトカーソル(ByteCursor)と、その上で動作する
型付き読み込み関数群を提供する。

想定仕様:
- 整数・浮動小数点はリトルエンディアン
- 文字列は varuint 長さプレフィックス付きの UTF-8 バイト列
- 日付は .NET DateTime の tick (100ns 単位、西暦1年1月1日起点) の int64
- 必要なバイト数が残っていない場合は TruncatedError を送出する
"""

from __future__ import annotations

import io
import struct
from datetime import datetime, timedelta, timezone
from typing import BinaryIO

from songdb.errors import CorruptDataError, IOFailureError, TruncatedError

TICK_FACTOR = 10_000_000
MAX_VARINT_LEN64 = 10
READ_CHUNK_SIZE = 1 << 16

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_TICK_EPOCH_UNIX_SECONDS = -62135596800  # 0001-01-01T00:00:00Z

_INT32 = struct.Struct("<i")
_INT64 = struct.Struct("<q")
_DOUBLE = struct.Struct("<d")


class ByteCursor:
    """
    入力ストリームを先頭から順に読み進めるカーソル。

    offset は実際に消費したバイト数を表す。
    読み込みが途中で尽きた場合も、読めた分は消費済みとして offset に反映される。
    """

    __slots__ = ("_stream", "_offset")

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._offset = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "ByteCursor":
        """メモリ上のバイト列からカーソルを生成する。"""
        return cls(io.BytesIO(data))

    @property
    def offset(self) -> int:
        return self._offset

    def read_exact(self, size: int) -> bytes:
        """
        ちょうど size バイトを読み込んで返す。

        破損した長さプレフィックスで巨大な size が渡されても、
        READ_CHUNK_SIZE ずつ読むため入力が尽きた時点で TruncatedError となる。

        Args:
            size: 読み込むバイト数。

        Returns:
            読み込んだバイト列。

        Raises:
            TruncatedError: size バイトに満たないまま入力が尽きた場合。
            IOFailureError: 下位ストリームの読み込みに失敗した場合。
        """
        if size == 0:
            return b""

        chunks: list[bytes] = []
        got = 0
        while got < size:
            try:
                chunk = self._stream.read(min(size - got, READ_CHUNK_SIZE))
            except OSError as exc:
                raise IOFailureError(f"read failed at offset {self._offset + got}: {exc}") from exc
            if not chunk:
                break
            chunks.append(chunk)
            got += len(chunk)

        start = self._offset
        self._offset += got
        if got < size:
            raise TruncatedError(start, size, got)
        return b"".join(chunks)


def read_varuint(cursor: ByteCursor) -> int:
    """
    base-128 可変長の符号なし整数を読み込む。

    各バイトの下位7ビットが値、最上位ビットが「続きあり」を表す。
    64ビットに収まらない表現は CorruptDataError とする。
    """
    value = 0
    shift = 0
    for index in range(MAX_VARINT_LEN64):
        b = cursor.read_exact(1)[0]
        if b < 0x80:
            if index == MAX_VARINT_LEN64 - 1 and b > 1:
                break
            return value | (b << shift)
        value |= (b & 0x7F) << shift
        shift += 7
    raise CorruptDataError(f"varint overflows a 64-bit integer at offset {cursor.offset}")


def read_string(cursor: ByteCursor) -> str:
    """
    varuint 長さプレフィックス付きの文字列を読み込む。

    不正な UTF-8 シーケンスは U+FFFD に置換する。
    """
    length = read_varuint(cursor)
    return cursor.read_exact(length).decode("utf-8", errors="replace")


def read_int32(cursor: ByteCursor) -> int:
    return _INT32.unpack(cursor.read_exact(4))[0]


def read_int64(cursor: ByteCursor) -> int:
    return _INT64.unpack(cursor.read_exact(8))[0]


def read_double(cursor: ByteCursor) -> float:
    return _DOUBLE.unpack(cursor.read_exact(8))[0]


def read_bool(cursor: ByteCursor) -> bool:
    return cursor.read_exact(1)[0] != 0


def ticks_to_rfc3339(ticks: int) -> str:
    """
    .NET tick 値を RFC 3339 形式(UTC、秒精度)の文字列へ変換する。

    秒は tick を 10,000,000 で 0 方向へ切り捨て除算した値、
    余りは 100ns 単位のままナノ秒として扱い、負の場合のみ1秒繰り下げる。
    出力は秒精度のため、余りは繰り下げ以外では結果に現れない。

    Args:
        ticks: 西暦1年1月1日 00:00:00 UTC からの tick 数。

    Returns:
        "YYYY-MM-DDTHH:MM:SSZ" 形式の文字列。

    Raises:
        CorruptDataError: 西暦1年〜9999年の範囲外となる場合。
    """
    seconds = abs(ticks) // TICK_FACTOR
    nanos = abs(ticks) % TICK_FACTOR
    if ticks < 0:
        seconds, nanos = -seconds, -nanos
    if nanos < 0:
        seconds -= 1

    try:
        moment = _UNIX_EPOCH + timedelta(seconds=seconds + _TICK_EPOCH_UNIX_SECONDS)
    except OverflowError as exc:
        raise CorruptDataError(f"date ticks out of range: {ticks}") from exc

    return moment.isoformat().replace("+00:00", "Z")


def read_date(cursor: ByteCursor) -> str:
    """int64 の tick 値を読み込み、RFC 3339 文字列として返す。"""
    return ticks_to_rfc3339(read_int64(cursor))
