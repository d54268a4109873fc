"""Score レコードの読み込み順テスト。"""

from __future__ import annotations

import pytest

from songdb.binary_reader import ByteCursor
from songdb.errors import TruncatedError
from songdb.models import SongType, song_type_label
from songdb.schema_reader import read_bool_triple, read_score
from songdb_builder import encode_record

TICKS_PER_DAY = 864_000_000_000


def _distinct_record() -> bytes:
    """全フィールドに異なる値を入れ、読み込み順のずれを検出できるレコード。"""
    return encode_record(
        path="/songs/a/a.dtx",
        folder="/songs/a/",
        file_ticks=TICKS_PER_DAY,
        file_size=4096,
        ini_ticks=TICKS_PER_DAY * 2,
        ini_size=128,
        title="Title",
        artist="Artist",
        comment="Comment",
        genre="Genre",
        pre_image="pre.png",
        pre_movie="pre.avi",
        pre_sound="pre.ogg",
        background="bg.png",
        level=(1, 2, 3),
        level_dec=(4, 5, 6),
        best_rank=(7, 8, 9),
        high_skill=(1.5, 2.5, 3.5),
        full_combo=(True, False, True),
        nb_performance=(10, 11, 12),
        history=("h1", "h2", "h3", "h4", "h5"),
        hidden_level=True,
        classic=(False, True, False),
        score_exists=(True, True, False),
        song_type=5,
        bpm=145.0,
        duration=180,
    )


@pytest.mark.light
def test_read_score_follows_storage_order():
    data = _distinct_record()
    cursor = ByteCursor.from_bytes(data)
    score = read_score(cursor)

    assert cursor.offset == len(data)

    assert score.file_info.absolute_file_path == "/songs/a/a.dtx"
    assert score.file_info.absolute_folder_path == "/songs/a/"
    assert score.file_info.last_modified == "0001-01-02T00:00:00Z"
    assert score.file_info.file_size == 4096
    assert score.song_ini_info.last_modified == "0001-01-03T00:00:00Z"
    assert score.song_ini_info.file_size == 128

    info = score.song_info
    assert (info.title, info.artist, info.comment, info.genre) == ("Title", "Artist", "Comment", "Genre")
    assert (info.pre_image, info.pre_movie, info.pre_sound, info.background) == (
        "pre.png",
        "pre.avi",
        "pre.ogg",
        "bg.png",
    )
    assert (info.level.drums, info.level.guitar, info.level.bass) == (1, 2, 3)
    assert (info.level_dec.drums, info.level_dec.guitar, info.level_dec.bass) == (4, 5, 6)
    assert (info.best_rank.drums, info.best_rank.guitar, info.best_rank.bass) == (7, 8, 9)
    assert (info.high_skill.drums, info.high_skill.guitar, info.high_skill.bass) == (1.5, 2.5, 3.5)
    assert (info.full_combo.drums, info.full_combo.guitar, info.full_combo.bass) == (True, False, True)
    assert (info.nb_performance.drums, info.nb_performance.guitar, info.nb_performance.bass) == (10, 11, 12)
    history = info.performance_history
    assert (history.first, history.second, history.third, history.fourth, history.fifth) == (
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
    )
    assert info.hidden_level is True
    assert (info.classic.drums, info.classic.guitar, info.classic.bass) == (False, True, False)
    assert (info.score_exists.drums, info.score_exists.guitar, info.score_exists.bass) == (True, True, False)
    assert info.song_type == 5
    assert info.song_type_label == "SMF"
    assert info.bpm == 145.0
    assert info.duration == 180


@pytest.mark.light
def test_unknown_song_type_keeps_raw_value():
    score = read_score(ByteCursor.from_bytes(encode_record(song_type=99)))
    assert score.song_info.song_type == 99
    assert score.song_info.song_type_label is None


@pytest.mark.light
def test_song_type_labels_follow_ordinal_order():
    assert [song_type_label(i) for i in range(6)] == ["DTX", "GDA", "G2D", "BMS", "BME", "SMF"]
    assert song_type_label(-1) is None
    assert SongType(2).name == "G2D"


@pytest.mark.light
def test_bool_triple_reads_drums_guitar_bass():
    triple = read_bool_triple(ByteCursor.from_bytes(b"\x00\x02\x00"))
    assert (triple.drums, triple.guitar, triple.bass) == (False, True, False)


@pytest.mark.light
def test_read_score_truncated_in_last_field():
    data = encode_record()
    with pytest.raises(TruncatedError):
        read_score(ByteCursor.from_bytes(data[:-1]))
