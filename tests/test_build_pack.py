import json
from dataclasses import replace

import pytest

from conftest import add_group, read_table
from variantgen.api import build_pack, plan_dry_run, validate_tables
from variantgen.errors import FatalInputError, PersistedStateCorruptError


def test_build_writes_tables_assets_models_and_summary(pack):
    add_group(pack, "ores", "stone", ["gold", "amber"], vanilla=["item/coal"])
    result = build_pack(pack)

    data = read_table(pack, "stone")
    assert data["rpimages"] == {
        "item/coal": 1,
        "rpimages:custom/items/ores/amber": 2,
        "rpimages:custom/items/ores/gold": 3,
    }
    texture = pack.textures_dir / "ores" / "gold.png"
    assert texture.read_bytes() == (pack.source_dir / "ores" / "gold.png").read_bytes()
    model = json.loads((pack.models_dir / "ores" / "amber.json").read_text())
    assert model["textures"]["layer0"] == "rpimages:custom/items/ores/amber"
    assert not (pack.models_dir / "ores" / "coal.json").exists()

    summary = json.loads(pack.summary_path.read_text())
    assert summary == {"ores": {"item": "stone", "coal": 1, "amber": 2, "gold": 3}}
    assert result.summary_path == pack.summary_path
    assert result.allocated == 3
    assert result.tables_written == [pack.table_path("stone")]
    (g,) = result.groups
    assert (g.copied, g.models) == (2, 2)


def test_second_run_is_idempotent(pack):
    add_group(pack, "a", "stone_item", ["x", "y"])
    add_group(pack, "b", "wood_item", ["z"])
    build_pack(pack)
    before = {i: read_table(pack, i) for i in ("stone_item", "wood_item")}

    again = build_pack(pack)
    assert again.allocated == 0
    assert again.tables_written == []
    assert {i: read_table(pack, i) for i in before} == before


def test_new_images_extend_without_renumbering(pack):
    folder = add_group(pack, "g", "stone", ["b", "d"])
    build_pack(pack)
    (folder / "a.png").write_bytes(b"png")
    (folder / "c.png").write_bytes(b"png")
    result = build_pack(pack)
    data = read_table(pack, "stone")
    ns = "rpimages:custom/items/g/"
    assert data["rpimages"] == {ns + "b": 1, ns + "d": 2, ns + "a": 3, ns + "c": 4}
    assert len(data["overrides"]) == 4
    assert result.groups[0].allocated == {ns + "a": 3, ns + "c": 4}


def test_summary_covers_groups_without_new_slots(pack):
    add_group(pack, "g", "stone", ["a"])
    build_pack(pack)
    pack.summary_path.unlink()
    build_pack(pack)
    assert json.loads(pack.summary_path.read_text()) == {
        "g": {"item": "stone", "a": 1}
    }


def test_group_without_identity_is_excluded(pack):
    add_group(pack, "broken", None, ["a"])
    add_group(pack, "good", "stone", ["a"])
    result = build_pack(pack)
    assert [g.group for g in result.groups] == ["good"]
    assert list(json.loads(pack.summary_path.read_text())) == ["good"]
    assert [p.name for p in pack.item_models_dir.iterdir()] == ["stone.json"]


def test_escaping_identity_does_not_stop_other_groups(pack):
    add_group(pack, "bad", "../../../escape", ["a"])
    add_group(pack, "good", "stone", ["a"])
    result = build_pack(pack)
    assert [g.group for g in result.groups] == ["good"]
    assert not (pack.pack_root / "assets" / "escape.json").exists()


def test_undecodable_descriptor_does_not_stop_other_groups(pack):
    folder = add_group(pack, "bad", "stone", ["a"])
    (folder / "meta.json").write_bytes(b'{"item": "st\xff\xfeone"}')
    add_group(pack, "good", "stone", ["a"])
    result = build_pack(pack)
    assert [g.group for g in result.groups] == ["good"]


def test_missing_texture_is_reported_not_fatal(pack):
    folder = add_group(pack, "g", "stone", ["a"])
    (folder / "b.jpg").write_bytes(b"jpg")
    result = build_pack(pack)
    (g,) = result.groups
    assert len(g.allocated) == 2
    assert g.copied == 1
    assert g.models == 2
    assert [w.source for w in g.missing_assets] == [
        str(pack.source_dir / "g" / "b.png")
    ]


def test_missing_pack_root_is_fatal(pack, tmp_path):
    config = replace(pack, pack_root=tmp_path / "absent")
    add_group(config, "g", "stone", ["a"])
    with pytest.raises(FatalInputError) as ei:
        build_pack(config)
    assert ei.value.code == "E_ROOT_MISSING"
    assert not config.summary_path.exists()


def test_missing_source_dir_is_fatal(pack):
    pack.source_dir.rmdir()
    with pytest.raises(FatalInputError):
        build_pack(pack)


def test_corrupt_table_halts_run_after_earlier_groups(pack):
    add_group(pack, "a", "apple", ["x"])
    add_group(pack, "b", "stone", ["y"])
    add_group(pack, "c", "wood", ["z"])
    bad = pack.table_path("stone")
    bad.parent.mkdir(parents=True, exist_ok=True)
    bad.write_text("{broken", encoding="utf-8")

    with pytest.raises(PersistedStateCorruptError):
        build_pack(pack)
    assert read_table(pack, "apple")["rpimages"] == {
        "rpimages:custom/items/a/x": 1
    }
    assert bad.read_text(encoding="utf-8") == "{broken"
    assert not pack.table_path("wood").exists()
    assert not pack.summary_path.exists()


def test_force_rebuilds_tables(pack):
    add_group(pack, "g", "stone", ["a"])
    path = pack.table_path("stone")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"parent": "item/handheld", "rpimages": {"old": 1}}),
        encoding="utf-8",
    )
    build_pack(replace(pack, force=True))
    data = read_table(pack, "stone")
    assert data["parent"] == "item/generated"
    assert data["rpimages"] == {"rpimages:custom/items/g/a": 1}


def test_plan_dry_run_reports_without_writing(pack):
    add_group(pack, "g", "stone", ["a", "b"])
    results, plan = plan_dry_run(pack)
    assert not pack.item_models_dir.exists()
    assert not pack.summary_path.exists()
    assert plan["groups"] == [
        {
            "name": "g",
            "identity": "stone",
            "table": str(pack.table_path("stone")),
            "existing": 0,
            "new": {
                "rpimages:custom/items/g/a": 1,
                "rpimages:custom/items/g/b": 2,
            },
        }
    ]
    assert plan["summary"] == {"g": {"item": "stone", "a": 1, "b": 2}}
    json.dumps(plan)


def test_validate_tables(pack):
    add_group(pack, "a", "apple", ["x"])
    add_group(pack, "b", "stone", ["y"])
    add_group(pack, "c", "wood", ["z"])
    build_pack(pack)
    assert validate_tables(pack) == {"apple": [], "stone": [], "wood": []}

    stone = read_table(pack, "stone")
    stone["overrides"] = []
    pack.table_path("stone").write_text(json.dumps(stone), encoding="utf-8")
    pack.table_path("wood").write_text("nope", encoding="utf-8")
    issues = validate_tables(pack)
    assert issues["apple"] == []
    assert issues["stone"] == ["No override record for rpimages:custom/items/b/y"]
    assert len(issues["wood"]) == 1 and "Cannot parse" in issues["wood"][0]
