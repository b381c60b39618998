"""Typed model of a persisted item model override table.

On disk a table is a regular item model JSON with two managed keys::

    {
        "parent": "item/generated",
        "textures": {"layer0": "minecraft:item/stone"},
        "overrides": [
            {"predicate": {"custom_model_data": 1}, "model": "rpimages:..."}
        ],
        "rpimages": {"rpimages:...": 1}
    }

Everything except ``overrides`` and the allocation key is carried through
untouched as ``base_content``. Slot assignments are append-only: the table
exposes :meth:`OverrideTable.assign` but nothing that removes or renumbers.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import corrupt_table
from .storage import read_json, write_json

__all__ = [
    "OverrideRecord",
    "OverrideTable",
    "default_base_content",
    "load_table",
    "save_table",
]

OVERRIDES_KEY = "overrides"


@dataclass(slots=True)
class OverrideRecord:
    slot_value: Optional[int]
    resource_name: Optional[str]
    # Original JSON entry for records read from disk, written back verbatim.
    raw: Optional[Dict[str, Any]] = None

    @classmethod
    def from_entry(cls, entry: Any) -> "OverrideRecord":
        slot = None
        model = None
        if isinstance(entry, dict):
            pred = entry.get("predicate")
            if isinstance(pred, dict):
                value = pred.get("custom_model_data")
                if isinstance(value, int) and not isinstance(value, bool):
                    slot = value
            if isinstance(entry.get("model"), str):
                model = entry["model"]
        return cls(slot, model, raw=entry)

    def to_entry(self) -> Any:
        if self.raw is not None:
            return self.raw
        return {
            "predicate": {"custom_model_data": self.slot_value},
            "model": self.resource_name,
        }


def default_base_content(identity: str) -> Dict[str, Any]:
    return {
        "parent": "item/generated",
        "textures": {"layer0": f"minecraft:item/{identity}"},
    }


@dataclass(slots=True)
class OverrideTable:
    table_key: str
    base_content: Dict[str, Any] = field(default_factory=dict)
    slot_map: Dict[str, int] = field(default_factory=dict)
    overrides: List[OverrideRecord] = field(default_factory=list)
    dirty: bool = False

    @classmethod
    def fresh(cls, identity: str, table_key: str) -> "OverrideTable":
        return cls(table_key, default_base_content(identity))

    @classmethod
    def from_dict(
        cls, data: Any, table_key: str, source: str = "<memory>"
    ) -> "OverrideTable":
        ctx = {"path": source}
        if not isinstance(data, dict):
            raise corrupt_table(f"Table root must be an object: {source}", ctx)
        base = {
            k: v for k, v in data.items() if k not in (OVERRIDES_KEY, table_key)
        }
        raw_overrides = data.get(OVERRIDES_KEY, [])
        if not isinstance(raw_overrides, list):
            raise corrupt_table(f"'overrides' must be a list: {source}", ctx)
        raw_map = data.get(table_key, {})
        if not isinstance(raw_map, dict):
            raise corrupt_table(f"'{table_key}' must be an object: {source}", ctx)
        slot_map: Dict[str, int] = {}
        owners: Dict[int, str] = {}
        for name, value in raw_map.items():
            if (
                not isinstance(value, int)
                or isinstance(value, bool)
                or value < 1
            ):
                raise corrupt_table(
                    f"Slot for {name!r} is not a positive integer: {value!r}",
                    ctx,
                )
            if value in owners:
                raise corrupt_table(
                    f"Slot {value} assigned to both {owners[value]!r} and {name!r}",
                    ctx,
                )
            owners[value] = name
            slot_map[name] = value
        return cls(
            table_key,
            base,
            slot_map,
            [OverrideRecord.from_entry(e) for e in raw_overrides],
        )

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.base_content)
        out[OVERRIDES_KEY] = [r.to_entry() for r in self.overrides]
        out[self.table_key] = dict(self.slot_map)
        return out

    def assign(self, name: str, slot_value: int) -> None:
        if name in self.slot_map:
            raise ValueError(f"{name!r} already holds slot {self.slot_map[name]}")
        self.slot_map[name] = slot_value
        self.overrides.append(OverrideRecord(slot_value, name))
        self.dirty = True

    def check_invariants(self) -> List[str]:
        issues: List[str] = []
        seen: Dict[int, str] = {}
        for name, value in self.slot_map.items():
            if value < 1:
                issues.append(f"Slot for {name} is not positive: {value}")
            if value in seen:
                issues.append(f"Slot {value} shared by {seen[value]} and {name}")
            seen[value] = name
        managed: Dict[str, List[int]] = {}
        for rec in self.overrides:
            if rec.resource_name in self.slot_map:
                managed.setdefault(rec.resource_name, []).append(
                    rec.slot_value  # type: ignore[arg-type]
                )
        for name, value in self.slot_map.items():
            slots = managed.get(name, [])
            if not slots:
                issues.append(f"No override record for {name}")
            elif len(slots) > 1:
                issues.append(f"{len(slots)} override records for {name}")
            elif slots[0] != value:
                issues.append(
                    f"Override record for {name} uses slot {slots[0]}, table says {value}"
                )
        return issues


def load_table(path: Path, table_key: str) -> Optional[OverrideTable]:
    """Load a persisted table, or None when no file exists.

    Unparseable content raises PersistedStateCorruptError; an existing table
    is never silently reset.
    """
    if not path.exists():
        return None
    try:
        data = read_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise corrupt_table(
            f"Cannot parse table {path}: {e}", {"path": str(path)}
        ) from e
    return OverrideTable.from_dict(data, table_key, str(path))


def save_table(path: Path, table: OverrideTable) -> bool:
    """Persist ``table`` if it has unsaved assignments. Returns True if written."""
    if not table.dirty:
        return False
    write_json(path, table.to_dict())
    table.dirty = False
    return True
