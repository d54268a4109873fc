"""
Score を XML 要素へ変換し、出力ストリームへ逐次書き出すモジュール。

出力フォーマット:
- ルート要素 <songs> は実行全体で1回だけ開き、1回だけ閉じる
- Score 1件につき <song> 要素を1つ、読み込み完了ごとに書き出す
- <song> 配下の各行は先頭2スペース + 階層ごとに4スペースでインデントする
- 楽器別の値は drums/guitar/bass、演奏履歴は first..fifth の子要素とする
"""

from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import TextIO, Union

from songdb.errors import IOFailureError
from songdb.models import (
    InstrumentBool,
    InstrumentDouble,
    InstrumentInt32,
    PerformanceHistory,
    Score,
)

ROOT_TAG = "songs"
LINE_PREFIX = "  "
INDENT = "    "

_INVALID_XML_CHARS = re.compile(
    r"[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)
_TEXT_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&#34;",
        "'": "&#39;",
        "\t": "&#x9;",
        "\n": "&#xA;",
        "\r": "&#xD;",
    }
)

Scalar = Union[str, int, float, bool]


def escape_text(text: str) -> str:
    """
    XML テキストとして安全な文字列へエスケープする。

    XML 1.0 で使用できない文字は U+FFFD に置換する。
    """
    return _INVALID_XML_CHARS.sub("\ufffd", text).translate(_TEXT_ESCAPES)


def format_double(value: float) -> str:
    """
    double を往復可能な最短桁数の文字列へ変換する。

    10進指数が -4 未満または 6 以上の場合のみ指数表記(例: 1e+06)を使う。
    145.0 は "145" となる。
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped

    # 小数点の位置(先頭桁の左からの桁数)
    point = len(digits) + exponent
    neg = "-" if sign else ""
    exp10 = point - 1

    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exp10 < 0 else "+"
        return f"{neg}{mantissa}e{exp_sign}{abs(exp10):02d}"

    if point <= 0:
        return f"{neg}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{neg}{digits}{'0' * (point - len(digits))}"
    return f"{neg}{digits[:point]}.{digits[point:]}"


def _scalar_text(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_double(value)
    return str(value)


def _leaf(parent: ET.Element, tag: str, value: Scalar) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = _scalar_text(value)
    return element


def _instrument(
    parent: ET.Element,
    tag: str,
    triple: Union[InstrumentInt32, InstrumentDouble, InstrumentBool],
) -> ET.Element:
    element = ET.SubElement(parent, tag)
    _leaf(element, "drums", triple.drums)
    _leaf(element, "guitar", triple.guitar)
    _leaf(element, "bass", triple.bass)
    return element


def _history(parent: ET.Element, history: PerformanceHistory) -> ET.Element:
    element = ET.SubElement(parent, "performance-history")
    _leaf(element, "first", history.first)
    _leaf(element, "second", history.second)
    _leaf(element, "third", history.third)
    _leaf(element, "fourth", history.fourth)
    _leaf(element, "fifth", history.fifth)
    return element


def score_to_element(score: Score) -> ET.Element:
    """
    Score を <song> 要素へ変換する。

    子要素はモデルの宣言順どおりに並べる。
    song-type は形式名、未知の序数の場合は数値をそのまま出力する。

    Args:
        score: 変換対象の Score。

    Returns:
        <song> 要素。
    """
    song = ET.Element("song")

    file_info = ET.SubElement(song, "file-info")
    _leaf(file_info, "absolute-file-path", score.file_info.absolute_file_path)
    _leaf(file_info, "absolute-folder-path", score.file_info.absolute_folder_path)
    _leaf(file_info, "last-modified", score.file_info.last_modified)
    _leaf(file_info, "file-size", score.file_info.file_size)

    ini_info = ET.SubElement(song, "song-ini-info")
    _leaf(ini_info, "last-modified", score.song_ini_info.last_modified)
    _leaf(ini_info, "file-size", score.song_ini_info.file_size)

    info = score.song_info
    song_info = ET.SubElement(song, "song-info")
    _leaf(song_info, "title", info.title)
    _leaf(song_info, "artist", info.artist)
    _leaf(song_info, "comment", info.comment)
    _leaf(song_info, "genre", info.genre)
    _leaf(song_info, "pre-image", info.pre_image)
    _leaf(song_info, "pre-movie", info.pre_movie)
    _leaf(song_info, "pre-sound", info.pre_sound)
    _leaf(song_info, "background", info.background)
    _instrument(song_info, "level", info.level)
    _instrument(song_info, "level-dec", info.level_dec)
    _instrument(song_info, "best-rank", info.best_rank)
    _instrument(song_info, "high-skill", info.high_skill)
    _instrument(song_info, "full-combo", info.full_combo)
    _instrument(song_info, "nb-performance", info.nb_performance)
    _history(song_info, info.performance_history)
    _leaf(song_info, "hidden-level", info.hidden_level)
    _instrument(song_info, "classic", info.classic)
    _instrument(song_info, "score-exists", info.score_exists)
    label = info.song_type_label
    _leaf(song_info, "song-type", label if label is not None else info.song_type)
    _leaf(song_info, "bpm", info.bpm)
    _leaf(song_info, "duration", info.duration)

    return song


def serialize_element(element: ET.Element, depth: int = 0) -> str:
    """
    要素をインデント付きの文字列へ直列化する。

    先頭行のインデントは含めない（呼び出し側で付与する）。
    子要素を持たない要素は <tag>text</tag> の1行で出力する。
    """
    tag = element.tag
    children = list(element)
    if not children:
        return f"<{tag}>{escape_text(element.text or '')}</{tag}>"

    parts = [f"<{tag}>"]
    child_indent = "\n" + LINE_PREFIX + INDENT * (depth + 1)
    for child in children:
        parts.append(child_indent)
        parts.append(serialize_element(child, depth + 1))
    parts.append("\n" + LINE_PREFIX + INDENT * depth)
    parts.append(f"</{tag}>")
    return "".join(parts)


class XmlSongEmitter:
    """
    <songs> ルート要素の中へ <song> 要素を逐次書き出すエミッタ。

    各 Score は完全な文字列へ直列化してから1回の write で書き出すため、
    途中までの要素が出力されることはない。
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._opened = False
        self._closed = False
        self.count = 0

    def _write(self, text: str) -> None:
        try:
            self._stream.write(text)
        except OSError as exc:
            raise IOFailureError(f"write failed: {exc}") from exc

    def open(self) -> None:
        if self._opened:
            raise RuntimeError("emitter is already open")
        self._write(f"<{ROOT_TAG}>\n")
        self._opened = True

    def emit(self, score: Score) -> None:
        if not self._opened or self._closed:
            raise RuntimeError("emitter is not open")
        chunk = LINE_PREFIX + serialize_element(score_to_element(score))
        if self.count:
            chunk = "\n" + chunk
        self._write(chunk)
        self.count += 1

    def close(self) -> None:
        if not self._opened or self._closed:
            raise RuntimeError("emitter is not open")
        self._write(f"\n</{ROOT_TAG}>")
        try:
            self._stream.flush()
        except OSError as exc:
            raise IOFailureError(f"flush failed: {exc}") from exc
        self._closed = True
