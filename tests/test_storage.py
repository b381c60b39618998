import json
from pathlib import Path

import pytest

from variantgen.errors import FatalInputError, SkippableGroupError
from variantgen.storage import (
    copy_asset,
    list_files,
    list_group_directories,
    read_descriptor,
    write_json,
)


def test_listings_are_sorted_and_typed(tmp_path: Path):
    (tmp_path / "b").mkdir()
    (tmp_path / "a").mkdir()
    (tmp_path / "z.txt").write_text("z")
    (tmp_path / "c.txt").write_text("c")
    assert list_group_directories(tmp_path) == ["a", "b"]
    assert list_files(tmp_path) == ["c.txt", "z.txt"]


def test_listing_missing_directory_is_fatal(tmp_path: Path):
    with pytest.raises(FatalInputError):
        list_files(tmp_path / "missing")
    with pytest.raises(FatalInputError):
        list_group_directories(tmp_path / "missing")


def test_read_descriptor(tmp_path: Path):
    path = tmp_path / "meta.json"
    assert read_descriptor(path) is None
    path.write_text(json.dumps({"item": "stone"}))
    assert read_descriptor(path) == {"item": "stone"}
    path.write_text("[]")
    with pytest.raises(SkippableGroupError):
        read_descriptor(path)


def test_write_json_replaces_atomically(tmp_path: Path):
    path = tmp_path / "deep" / "out.json"
    write_json(path, {"a": 1})
    write_json(path, {"a": 2})
    assert json.loads(path.read_text()) == {"a": 2}
    assert [p.name for p in path.parent.iterdir()] == ["out.json"]


def test_copy_asset(tmp_path: Path):
    src = tmp_path / "src.png"
    dst = tmp_path / "out" / "dst.png"
    assert copy_asset(src, dst) is False
    src.write_bytes(b"one")
    assert copy_asset(src, dst) is True
    src.write_bytes(b"two")
    copy_asset(src, dst)
    assert dst.read_bytes() == b"two"
