"""XML エミッタのテスト。"""

from __future__ import annotations

import io
import xml.etree.ElementTree as ET

import pytest

from songdb.binary_reader import ByteCursor
from songdb.schema_reader import read_score
from songdb.stream_driver import dump_songs
from songdb.xml_emitter import XmlSongEmitter, escape_text, format_double, score_to_element
from songdb_builder import build_songs_db, encode_record


def _dump(data: bytes) -> str:
    out = io.StringIO()
    emitter = XmlSongEmitter(out)
    emitter.open()
    dump_songs(ByteCursor.from_bytes(data), emitter)
    emitter.close()
    return out.getvalue()


@pytest.mark.light
@pytest.mark.parametrize(
    "value, expected",
    [
        (145.0, "145"),
        (0.5, "0.5"),
        (-2.25, "-2.25"),
        (100.0, "100"),
        (123456.0, "123456"),
        (1e6, "1e+06"),
        (1234567.0, "1.234567e+06"),
        (0.0001, "0.0001"),
        (1.5e-7, "1.5e-07"),
        (0.1, "0.1"),
        (0.0, "0"),
        (-0.0, "-0"),
        (float("inf"), "+Inf"),
        (float("-inf"), "-Inf"),
        (float("nan"), "NaN"),
    ],
)
def test_format_double(value, expected):
    assert format_double(value) == expected


@pytest.mark.light
def test_escape_text():
    assert escape_text("Rock & <Roll>") == "Rock &amp; &lt;Roll&gt;"
    assert escape_text("it's \"x\"") == "it&#39;s &#34;x&#34;"
    assert escape_text("a\tb\nc") == "a&#x9;b&#xA;c"
    assert escape_text("bad\x01char") == "bad\ufffdchar"


@pytest.mark.light
def test_test_song_scenario():
    data = build_songs_db(
        "071",
        [encode_record(title="Test Song", duration=180, bpm=145.0, song_type=2)],
    )
    xml_text = _dump(data)

    assert xml_text.count("<song>") == 1
    assert "<title>Test Song</title>" in xml_text
    assert "<bpm>145</bpm>" in xml_text
    assert "<duration>180</duration>" in xml_text
    assert "<song-type>G2D</song-type>" in xml_text
    assert xml_text.index("<bpm>145</bpm>") < xml_text.index("<duration>180</duration>")


@pytest.mark.light
def test_layout_and_indentation():
    xml_text = _dump(build_songs_db("071", [encode_record(), encode_record()]))

    assert xml_text.startswith("<songs>\n  <song>\n      <file-info>\n          <absolute-file-path>")
    assert "\n          <level>\n              <drums>10</drums>" in xml_text
    assert "  </song>\n  <song>\n" in xml_text
    assert xml_text.endswith("      </song-info>\n  </song>\n</songs>")


@pytest.mark.light
def test_output_is_well_formed_with_declared_field_order():
    xml_text = _dump(build_songs_db("071", [encode_record(title="A & B"), encode_record()]))
    root = ET.fromstring(xml_text)

    assert root.tag == "songs"
    songs = list(root)
    assert len(songs) == 2
    assert [child.tag for child in songs[0]] == ["file-info", "song-ini-info", "song-info"]
    song_info = songs[0].find("song-info")
    assert [child.tag for child in song_info] == [
        "title",
        "artist",
        "comment",
        "genre",
        "pre-image",
        "pre-movie",
        "pre-sound",
        "background",
        "level",
        "level-dec",
        "best-rank",
        "high-skill",
        "full-combo",
        "nb-performance",
        "performance-history",
        "hidden-level",
        "classic",
        "score-exists",
        "song-type",
        "bpm",
        "duration",
    ]
    assert song_info.findtext("title") == "A & B"
    assert [c.tag for c in song_info.find("performance-history")] == [
        "first",
        "second",
        "third",
        "fourth",
        "fifth",
    ]
    assert [c.tag for c in song_info.find("full-combo")] == ["drums", "guitar", "bass"]
    assert song_info.findtext("full-combo/drums") == "false"


@pytest.mark.light
def test_empty_database_has_empty_root():
    xml_text = _dump(build_songs_db("071"))
    root = ET.fromstring(xml_text)
    assert root.tag == "songs"
    assert list(root) == []


@pytest.mark.light
def test_unknown_song_type_is_written_as_number():
    score = read_score(ByteCursor.from_bytes(encode_record(song_type=99)))
    assert score_to_element(score).findtext("song-info/song-type") == "99"


@pytest.mark.light
def test_each_record_is_written_in_one_call():
    writes = []

    class RecordingStream(io.StringIO):
        def write(self, text):
            writes.append(text)
            return super().write(text)

    emitter = XmlSongEmitter(RecordingStream())
    emitter.open()
    dump_songs(ByteCursor.from_bytes(build_songs_db("071", [encode_record(), encode_record()])), emitter)
    emitter.close()

    assert writes[0] == "<songs>\n"
    assert len(writes) == 4
    assert writes[1].startswith("  <song>") and writes[1].endswith("</song>")
    assert writes[2].startswith("\n  <song>") and writes[2].endswith("</song>")
    assert writes[3] == "\n</songs>"


@pytest.mark.light
def test_emit_requires_open():
    score = read_score(ByteCursor.from_bytes(encode_record()))
    emitter = XmlSongEmitter(io.StringIO())
    with pytest.raises(RuntimeError):
        emitter.emit(score)
