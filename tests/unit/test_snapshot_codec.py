"""
Unit tests for the snapshot codec.

Covers:
    - document shape (destination first, then count) and readability
    - decode validation (bad JSON, wrong shapes, negative/bool counts)
    - load_table on missing, blank and corrupt files
    - atomic write leaves the previous snapshot intact on failure
"""

import json
import os

import pytest

from alias_platform.errors import CorruptSnapshot, SnapshotIOError
from alias_platform.storage.base import AliasRecord
from alias_platform.storage.snapshot import decode_table, encode_table, load_table, write_snapshot


def test_encode_destination_then_count():
    table = {"test": AliasRecord("test", "https://google.com", 4)}
    assert json.loads(encode_table(table)) == {"test": ["https://google.com", 4]}


def test_encode_is_multiline_and_keeps_unicode():
    table = {
        "a": AliasRecord("a", "https://example.com/äöü", 1),
        "b": AliasRecord("b", "https://b.example", 0),
    }
    text = encode_table(table)
    assert "äöü" in text
    assert len(text.splitlines()) > 2


def test_decode_restores_records():
    table = decode_table('{"docs": ["https://example.com/docs", 12]}')
    assert table == {"docs": AliasRecord("docs", "https://example.com/docs", 12)}


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        "[]",
        '{"a": "https://x"}',
        '{"a": ["https://x"]}',
        '{"a": ["https://x", 1, 2]}',
        '{"a": [1, 1]}',
        '{"a": ["https://x", -1]}',
        '{"a": ["https://x", 1.5]}',
        '{"a": ["https://x", true]}',
        '{"": ["https://x", 1]}',
    ],
)
def test_decode_rejects_bad_documents(text):
    with pytest.raises(CorruptSnapshot):
        decode_table(text, path="db.json")


def test_load_missing_file_is_empty(tmp_path):
    assert load_table(str(tmp_path / "nope.json")) == {}


@pytest.mark.parametrize("blank", ["", "   \n\t  "])
def test_load_blank_file_raises(tmp_path, blank):
    path = tmp_path / "db.json"
    path.write_text(blank)
    with pytest.raises(CorruptSnapshot):
        load_table(str(path))
    # Left on disk for inspection
    assert path.read_text() == blank


def test_load_corrupt_file_raises(tmp_path):
    path = tmp_path / "db.json"
    path.write_text('{"a": ["https://x", ')
    with pytest.raises(CorruptSnapshot) as exc_info:
        load_table(str(path))
    assert exc_info.value.path == str(path)


def test_load_non_utf8_file_raises(tmp_path):
    path = tmp_path / "db.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(CorruptSnapshot):
        load_table(str(path))


def test_write_replaces_content(tmp_path):
    path = str(tmp_path / "db.json")
    write_snapshot(path, "first")
    write_snapshot(path, "second")
    with open(path, encoding="utf-8") as fh:
        assert fh.read() == "second"
    assert os.listdir(tmp_path) == ["db.json"]


def test_write_into_missing_directory_raises(tmp_path):
    with pytest.raises(SnapshotIOError):
        write_snapshot(str(tmp_path / "missing" / "db.json"), "{}")


def test_failed_write_keeps_previous_snapshot(tmp_path, monkeypatch):
    path = str(tmp_path / "db.json")
    write_snapshot(path, '{"a": ["https://x", 1]}')

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", boom)
    with pytest.raises(SnapshotIOError, match="disk full"):
        write_snapshot(path, '{"a": ["https://x", 2]}')
    monkeypatch.undo()

    assert load_table(path)["a"].visit_count == 1
    assert os.listdir(tmp_path) == ["db.json"]
