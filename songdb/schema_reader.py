"""
Score レコードの読み込み処理。

songs.db にはフィールドタグや存在ビットマップが無いため、
バイナリ上の格納順どおりにプリミティブ値を読み込んで構造体を組み立てる。
読み込み順を1つでも誤ると、以降の全データがずれて解釈される。

格納順:
1. FileInformation: string(path), string(folder), date, int64(size)
2. SongIniInformation: date, int64(size)
3. SongInformation: string×8, int32×3組(level/level-dec/best-rank),
   double×3(high-skill), bool×3(full-combo), int32×3(nb-performance),
   string×5(performance history), bool(hidden-level),
   bool×3(classic), bool×3(score-exists), int32(song-type), double(bpm),
   int32(duration)

楽器別の3つ組は常に drums, guitar, bass の順に格納される。
"""

from __future__ import annotations

from songdb.binary_reader import (
    ByteCursor,
    read_bool,
    read_date,
    read_double,
    read_int32,
    read_int64,
    read_string,
)
from songdb.models import (
    FileInformation,
    InstrumentBool,
    InstrumentDouble,
    InstrumentInt32,
    PerformanceHistory,
    Score,
    SongIniInformation,
    SongInformation,
)


def read_file_information(cursor: ByteCursor) -> FileInformation:
    absolute_file_path = read_string(cursor)
    absolute_folder_path = read_string(cursor)
    last_modified = read_date(cursor)
    file_size = read_int64(cursor)
    return FileInformation(
        absolute_file_path=absolute_file_path,
        absolute_folder_path=absolute_folder_path,
        last_modified=last_modified,
        file_size=file_size,
    )


def read_song_ini_information(cursor: ByteCursor) -> SongIniInformation:
    last_modified = read_date(cursor)
    file_size = read_int64(cursor)
    return SongIniInformation(last_modified=last_modified, file_size=file_size)


def read_int32_triple(cursor: ByteCursor) -> InstrumentInt32:
    drums = read_int32(cursor)
    guitar = read_int32(cursor)
    bass = read_int32(cursor)
    return InstrumentInt32(drums=drums, guitar=guitar, bass=bass)


def read_double_triple(cursor: ByteCursor) -> InstrumentDouble:
    drums = read_double(cursor)
    guitar = read_double(cursor)
    bass = read_double(cursor)
    return InstrumentDouble(drums=drums, guitar=guitar, bass=bass)


def read_bool_triple(cursor: ByteCursor) -> InstrumentBool:
    drums = read_bool(cursor)
    guitar = read_bool(cursor)
    bass = read_bool(cursor)
    return InstrumentBool(drums=drums, guitar=guitar, bass=bass)


def read_performance_history(cursor: ByteCursor) -> PerformanceHistory:
    entries = [read_string(cursor) for _ in range(5)]
    return PerformanceHistory(*entries)


def read_song_information(cursor: ByteCursor) -> SongInformation:
    """
    SongInformation を格納順どおりに読み込む。

    song_type は序数のまま保持し、未知の値でもエラーにしない。

    Args:
        cursor: 読み込み位置が SongInformation 先頭にあるカーソル。

    Returns:
        SongInformation。

    Raises:
        TruncatedError: 途中で入力が尽きた場合。
        CorruptDataError: 値が構造的に不正な場合。
    """
    title = read_string(cursor)
    artist = read_string(cursor)
    comment = read_string(cursor)
    genre = read_string(cursor)
    pre_image = read_string(cursor)
    pre_movie = read_string(cursor)
    pre_sound = read_string(cursor)
    background = read_string(cursor)

    level = read_int32_triple(cursor)
    level_dec = read_int32_triple(cursor)
    best_rank = read_int32_triple(cursor)
    high_skill = read_double_triple(cursor)
    full_combo = read_bool_triple(cursor)
    nb_performance = read_int32_triple(cursor)
    performance_history = read_performance_history(cursor)
    hidden_level = read_bool(cursor)
    classic = read_bool_triple(cursor)
    score_exists = read_bool_triple(cursor)

    song_type = read_int32(cursor)
    bpm = read_double(cursor)
    duration = read_int32(cursor)

    return SongInformation(
        title=title,
        artist=artist,
        comment=comment,
        genre=genre,
        pre_image=pre_image,
        pre_movie=pre_movie,
        pre_sound=pre_sound,
        background=background,
        level=level,
        level_dec=level_dec,
        best_rank=best_rank,
        high_skill=high_skill,
        full_combo=full_combo,
        nb_performance=nb_performance,
        performance_history=performance_history,
        hidden_level=hidden_level,
        classic=classic,
        score_exists=score_exists,
        song_type=song_type,
        bpm=bpm,
        duration=duration,
    )


def read_score(cursor: ByteCursor) -> Score:
    """1レコード分の Score を読み込む。"""
    file_info = read_file_information(cursor)
    song_ini_info = read_song_ini_information(cursor)
    song_info = read_song_information(cursor)
    return Score(file_info=file_info, song_ini_info=song_ini_info, song_info=song_info)
