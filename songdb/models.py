"""
データモデル定義モジュール。

songs.db の1レコード(Score)を構成する各構造体を定義する。
フィールドの並びはバイナリ上の格納順と一致させている。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class SongType(IntEnum):
    """譜面ファイル形式。値はバイナリ上の序数。"""

    DTX = 0
    GDA = 1
    G2D = 2
    BMS = 3
    BME = 4
    SMF = 5


def song_type_label(value: int) -> Optional[str]:
    """
    序数に対応する譜面形式名を返す。

    未知の序数はデコードエラーとせず、None を返す。
    """
    try:
        return SongType(value).name
    except ValueError:
        return None


@dataclass(frozen=True)
class FileInformation:
    """譜面ファイル自体の情報。"""

    absolute_file_path: str
    absolute_folder_path: str
    last_modified: str
    file_size: int


@dataclass(frozen=True)
class SongIniInformation:
    """譜面に付随する ini 設定ファイルの情報。"""

    last_modified: str
    file_size: int


@dataclass(frozen=True)
class InstrumentInt32:
    drums: int
    guitar: int
    bass: int


@dataclass(frozen=True)
class InstrumentDouble:
    drums: float
    guitar: float
    bass: float


@dataclass(frozen=True)
class InstrumentBool:
    drums: bool
    guitar: bool
    bass: bool


@dataclass(frozen=True)
class PerformanceHistory:
    """直近5回分の演奏履歴テキスト。"""

    first: str
    second: str
    third: str
    fourth: str
    fifth: str


@dataclass(frozen=True)
class SongInformation:
    """
    曲のメタ情報と楽器別(ドラム/ギター/ベース)の成績情報。

    - level/level_dec/best_rank/nb_performance は楽器別の int32
    - high_skill は楽器別の double
    - song_type はバイナリ上の序数をそのまま保持する（未知の値も保持）
    """

    title: str
    artist: str
    comment: str
    genre: str
    pre_image: str
    pre_movie: str
    pre_sound: str
    background: str

    level: InstrumentInt32
    level_dec: InstrumentInt32
    best_rank: InstrumentInt32
    high_skill: InstrumentDouble
    full_combo: InstrumentBool
    nb_performance: InstrumentInt32
    performance_history: PerformanceHistory
    hidden_level: bool
    classic: InstrumentBool
    score_exists: InstrumentBool

    song_type: int
    bpm: float
    duration: int

    @property
    def song_type_label(self) -> Optional[str]:
        return song_type_label(self.song_type)


@dataclass(frozen=True)
class Score:
    """songs.db の1レコード。1譜面(1曲)に対応する。"""

    file_info: FileInformation
    song_ini_info: SongIniInformation
    song_info: SongInformation
