from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

import pytest

from variantgen.config import PackConfig
from variantgen.reporting import SilentReporter, set_reporter, set_verbosity

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8


@pytest.fixture(autouse=True)
def _silent_reporter():
    set_reporter(SilentReporter())
    set_verbosity(0)
    yield


@pytest.fixture
def pack(tmp_path: Path) -> PackConfig:
    root = tmp_path / "pack"
    root.mkdir()
    source = tmp_path / "images"
    source.mkdir()
    return PackConfig(
        pack_root=root,
        namespace="rpimages",
        source_dir=source,
        summary_path=tmp_path / "key_info.json",
    )


def add_group(
    config: PackConfig,
    name: str,
    item: str | None,
    images: Iterable[str] = (),
    vanilla: list[str] | None = None,
    meta: bool = True,
) -> Path:
    folder = config.source_dir / name
    folder.mkdir(parents=True, exist_ok=True)
    if meta:
        data: dict = {}
        if item is not None:
            data["item"] = item
        if vanilla is not None:
            data["vanilla"] = vanilla
        (folder / "meta.json").write_text(json.dumps(data), encoding="utf-8")
    for image in images:
        (folder / f"{image}.png").write_bytes(PNG_BYTES)
    return folder


def read_table(config: PackConfig, identity: str) -> dict:
    return json.loads(config.table_path(identity).read_text(encoding="utf-8"))
