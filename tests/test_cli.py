import json

import yaml

from conftest import add_group, read_table
from variantgen import cli


def _pack_args(pack) -> list[str]:
    return [
        "--pack-root",
        str(pack.pack_root),
        "--source",
        str(pack.source_dir),
        "--summary",
        str(pack.summary_path),
    ]


def test_build_command(pack, capsys):
    add_group(pack, "g", "stone", ["a"])
    rc = cli.main(["build", *_pack_args(pack)])
    assert rc == 0
    assert read_table(pack, "stone")["rpimages"] == {"rpimages:custom/items/g/a": 1}
    err = capsys.readouterr().err
    assert "Build summary: groups=1 allocated=1 tables_written=1" in err


def test_build_from_config_file(pack, tmp_path):
    add_group(pack, "g", "stone", ["a"])
    conf = tmp_path / "variantgen.yaml"
    conf.write_text(
        yaml.safe_dump(
            {
                "pack_root": str(pack.pack_root),
                "source_dir": str(pack.source_dir),
                "summary_path": str(pack.summary_path),
                "namespace": "gems",
            }
        )
    )
    assert cli.main(["-r", "silent", "build", "-c", str(conf)]) == 0
    summary = json.loads(pack.summary_path.read_text())
    assert summary == {"g": {"item": "stone", "a": 1}}
    assert "gems:custom/items/g/a" in read_table(pack, "stone")["gems"]


def test_missing_pack_root_exits_with_error(pack, tmp_path, capsys):
    args = _pack_args(pack)
    args[1] = str(tmp_path / "absent")
    rc = cli.main(["build", *args])
    assert rc == 2
    assert "E_ROOT_MISSING" in capsys.readouterr().err


def test_warning_for_skipped_group(pack, capsys):
    add_group(pack, "g", None, ["a"])
    assert cli.main(["build", *_pack_args(pack)]) == 0
    assert "WARN: Skipping group g" in capsys.readouterr().err


def test_plan_json(pack, capsys):
    add_group(pack, "g", "stone", ["a"])
    rc = cli.main(["-r", "silent", "plan", "--json", *_pack_args(pack)])
    assert rc == 0
    plan = json.loads(capsys.readouterr().out)
    assert plan["groups"][0]["new"] == {"rpimages:custom/items/g/a": 1}
    assert not pack.item_models_dir.exists()


def test_validate_exit_codes(pack, capsys):
    add_group(pack, "g", "stone", ["a"])
    cli.main(["-r", "silent", "build", *_pack_args(pack)])
    assert cli.main(["validate", *_pack_args(pack)]) == 0

    data = read_table(pack, "stone")
    data["overrides"] = []
    pack.table_path("stone").write_text(json.dumps(data))
    capsys.readouterr()
    assert cli.main(["validate", *_pack_args(pack)]) == 1
    assert "No override record" in capsys.readouterr().err


def test_json_reporter_emits_summary_events(pack, capsys):
    add_group(pack, "g", "stone", ["a"])
    assert cli.main(["-r", "json", "build", *_pack_args(pack)]) == 0
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    summaries = {e["summary_type"]: e for e in events if e["event"] == "summary"}
    assert summaries["build"]["allocated"] == "1"
    assert summaries["group"]["identity"] == "stone"
    ends = [e for e in events if e["event"] == "task_end"]
    assert ends[0]["id"] == "group.g"
    assert ends[0]["allocated"] == 1
    assert ends[0]["copied"] == 1


def test_json_reporter_carries_error_code(pack, tmp_path, capsys):
    args = _pack_args(pack)
    args[1] = str(tmp_path / "absent")
    assert cli.main(["-r", "json", "build", *args]) == 2
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    (err,) = [e for e in events if e.get("level") == "error"]
    assert err["error"]["code"] == "E_ROOT_MISSING"
    assert err["error"]["context"] == {"path": args[1]}


def test_undecodable_config_exits_with_error(tmp_path, capsys):
    conf = tmp_path / "variantgen.yaml"
    conf.write_bytes(b"namespace: g\xffems\n")
    assert cli.main(["build", "-c", str(conf)]) == 2
    assert "E_CONFIG" in capsys.readouterr().err


def test_json_plan_stays_on_event_stream(pack, capsys):
    add_group(pack, "g", "stone", ["a"])
    assert cli.main(["-r", "json", "plan", "--json", *_pack_args(pack)]) == 0
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    (doc,) = [e for e in events if e["event"] == "document"]
    assert doc["kind"] == "plan"
    assert doc["data"]["groups"][0]["new"] == {"rpimages:custom/items/g/a": 1}


def test_build_reports_per_file_progress(pack, capsys):
    add_group(pack, "g", "stone", ["a", "b"])
    assert cli.main(["-r", "json", "build", *_pack_args(pack)]) == 0
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    (start,) = [e for e in events if e["event"] == "task_start"]
    assert start["total"] == 4
    progress = [e for e in events if e["event"] == "task_progress"]
    assert [e["current_item"] for e in progress] == [
        "a.png",
        "b.png",
        "models/a.json",
        "models/b.json",
    ]
    assert progress[-1]["completed"] == 4
