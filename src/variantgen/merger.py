"""Merge discovered groups into their persisted override tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .allocator import SlotAllocator, new_resource_names
from .collector import Group, short_name
from .config import PackConfig
from .errors import MissingAssetWarning
from .logging import get_logger
from .storage import copy_asset, write_json
from .table import OverrideTable, load_table, save_table

__all__ = [
    "TableStore",
    "GroupResult",
    "merge_group",
    "summarize_group",
    "export_assets",
]


class TableStore:
    """Per-run cache of override tables keyed by identity.

    Groups sharing an identity share one table (and one slot space). In force
    mode a table is recreated the first time its identity is seen in the run
    and reused afterwards. With ``dry_run`` nothing is written.
    """

    def __init__(
        self, config: PackConfig, *, force: bool = False, dry_run: bool = False
    ) -> None:
        self.config = config
        self.force = force
        self.dry_run = dry_run
        self._tables: Dict[str, OverrideTable] = {}
        self.writes: List[Path] = []

    def path_for(self, identity: str) -> Path:
        return self.config.table_path(identity)

    def get(self, identity: str) -> OverrideTable:
        table = self._tables.get(identity)
        if table is not None:
            return table
        loaded = None
        if not self.force:
            loaded = load_table(self.path_for(identity), self.config.table_key)
        if loaded is None:
            table = OverrideTable.fresh(identity, self.config.table_key)
        else:
            table = loaded
        self._tables[identity] = table
        return table

    def commit(self, identity: str) -> bool:
        table = self._tables[identity]
        if self.dry_run:
            return False
        path = self.path_for(identity)
        if save_table(path, table):
            self.writes.append(path)
            return True
        return False


@dataclass(slots=True)
class GroupResult:
    group: str
    identity: str
    table_path: Path
    allocated: Dict[str, int] = field(default_factory=dict)
    reused: int = 0
    table_written: bool = False
    summary: Dict[str, Any] = field(default_factory=dict)
    copied: int = 0
    models: int = 0
    missing_assets: List[MissingAssetWarning] = field(default_factory=list)


def summarize_group(group: Group, table: OverrideTable) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"item": group.identity}
    for name in group.resource_names:
        entry[short_name(name)] = table.slot_map.get(name)
    return entry


def merge_group(group: Group, store: TableStore) -> GroupResult:
    table = store.get(group.identity)
    result = GroupResult(
        group=group.name,
        identity=group.identity,
        table_path=store.path_for(group.identity),
    )
    new_names = new_resource_names(group.resource_names, table.slot_map)
    result.reused = len(set(group.resource_names)) - len(new_names)
    if new_names:
        allocator = SlotAllocator(table.slot_map.values())
        for name in new_names:
            slot = allocator.allocate()
            table.assign(name, slot)
            result.allocated[name] = slot
        result.table_written = store.commit(group.identity)
    result.summary = summarize_group(group, table)
    return result


def export_assets(
    config: PackConfig,
    group: Group,
    result: GroupResult,
    on_item: Optional[Callable[[str], None]] = None,
) -> None:
    """Copy textures and write generated item models for discovered files.

    Both are overwritten on every run, independent of slot allocation.
    ``on_item`` is called with the file name after each texture and model,
    missing textures included.
    """
    logger = get_logger()
    texture_folder = config.textures_dir / group.name
    for key in group.textures:
        source = config.source_dir / group.name / f"{key}.png"
        dest = texture_folder / f"{key}.png"
        if copy_asset(source, dest):
            result.copied += 1
            logger.debug("Copied texture: %s", dest)
        else:
            warning = MissingAssetWarning(group.name, str(source))
            result.missing_assets.append(warning)
            logger.warning("%s", warning)
        if on_item is not None:
            on_item(dest.name)
    model_folder = config.models_dir / group.name
    for key, payload in group.derived_payloads.items():
        model_path = model_folder / f"{key}.json"
        write_json(model_path, payload)
        result.models += 1
        logger.debug("Saved model: %s", model_path)
        if on_item is not None:
            on_item(f"models/{model_path.name}")
