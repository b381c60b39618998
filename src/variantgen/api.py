"""High-level API for variantgen.

``build_pack`` runs the whole pipeline: discover groups, merge each into its
override table, export textures and generated models, then write the summary.
Groups are processed one at a time, in folder order; a fatal error stops the
run but leaves tables already written in place, so a build can simply be
re-run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .collector import Group, collect_groups
from .config import PackConfig
from .errors import E_ROOT_MISSING, PersistedStateCorruptError, fatal_input
from .logging import get_logger
from .merger import GroupResult, TableStore, export_assets, merge_group
from .reporting import get_reporter, task
from .summary import summary_dict, write_summary
from .table import load_table

__all__ = [
    "BuildResult",
    "build_pack",
    "plan_dry_run",
    "validate_tables",
]


@dataclass(slots=True)
class BuildResult:
    groups: List[GroupResult] = field(default_factory=list)
    tables_written: List[Path] = field(default_factory=list)
    summary_path: Path | None = None

    @property
    def allocated(self) -> int:
        return sum(len(g.allocated) for g in self.groups)


def _require_pack_root(config: PackConfig) -> None:
    if not config.pack_root.is_dir():
        raise fatal_input(
            E_ROOT_MISSING,
            f"Pack root directory does not exist: {config.pack_root}",
            {"path": str(config.pack_root)},
        )


def _process_group(group: Group, store: TableStore) -> GroupResult:
    logger = get_logger()
    rep = get_reporter()
    task_id = f"group.{group.name}"
    # One step per copied texture and per written model.
    total = len(group.textures) + len(group.derived_payloads)
    with task(task_id, f"Group {group.name}", total=total) as stats:
        logger.info(
            "Item: %s -> %s", group.identity, store.path_for(group.identity)
        )
        result = merge_group(group, store)
        for name, slot in result.allocated.items():
            rep.verbose(f"{name} -> {slot}")
        if result.table_written:
            logger.info("Updated item model: %s", result.table_path)
        export_assets(
            store.config,
            group,
            result,
            on_item=lambda item: rep.advance(task_id, current_item=item),
        )
        stats.update(
            allocated=len(result.allocated),
            reused=result.reused,
            copied=result.copied,
            models=result.models,
        )
    rep.status(
        "Group summary: "
        + f"group={group.name} identity={group.identity} "
        + f"allocated={len(result.allocated)} reused={result.reused}"
    )
    return result


def build_pack(config: PackConfig) -> BuildResult:
    logger = get_logger()
    rep = get_reporter()
    if config.force:
        logger.warning(
            "Force mode enabled. Previous slot assignments will not be kept."
        )
    _require_pack_root(config)
    logger.info("Pack root found: %s", config.pack_root)
    groups = collect_groups(config)
    store = TableStore(config, force=config.force)
    result = BuildResult()
    for group in groups:
        result.groups.append(_process_group(group, store))
    result.tables_written = list(store.writes)
    rep.section("Summary")
    result.summary_path = write_summary(result.groups, config.summary_path)
    logger.info("Key info saved to: %s", config.summary_path)
    rep.status(
        "Build summary: "
        + f"groups={len(result.groups)} allocated={result.allocated} "
        + f"tables_written={len(result.tables_written)}"
    )
    return result


def plan_dry_run(config: PackConfig) -> tuple[List[GroupResult], dict]:
    """Compute the allocations a build would make, writing nothing.

    Returns (group results, plan_dict) where plan_dict is JSON-serialisable.
    """
    _require_pack_root(config)
    groups = collect_groups(config)
    store = TableStore(config, force=config.force, dry_run=True)
    results = [merge_group(g, store) for g in groups]
    plan: Dict[str, Any] = {
        "force": config.force,
        "groups": [
            {
                "name": r.group,
                "identity": r.identity,
                "table": str(r.table_path),
                "existing": r.reused,
                "new": dict(r.allocated),
            }
            for r in results
        ],
        "summary": summary_dict(results),
    }
    get_reporter().status(
        "Plan summary: "
        + f"groups={len(results)} "
        + f"allocated={sum(len(r.allocated) for r in results)}"
    )
    return results, plan


def validate_tables(config: PackConfig) -> Dict[str, List[str]]:
    """Check persisted tables of all current groups; identity -> issues.

    Identities without a persisted table are not reported.
    """
    _require_pack_root(config)
    issues: Dict[str, List[str]] = {}
    for identity in dict.fromkeys(g.identity for g in collect_groups(config)):
        path = config.table_path(identity)
        try:
            table = load_table(path, config.table_key)
        except PersistedStateCorruptError as e:
            issues[identity] = [e.message]
            continue
        if table is not None:
            issues[identity] = table.check_invariants()
    bad = sum(1 for v in issues.values() if v)
    get_reporter().status(
        f"Validate summary: tables={len(issues)} invalid={bad}"
    )
    return issues
