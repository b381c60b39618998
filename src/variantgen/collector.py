"""Group discovery from the source image folder.

Every sub-folder of the source directory is one group. A group needs a
``meta.json`` descriptor naming the item it decorates::

    {"item": "stone", "vanilla": ["item/coal"]}

``vanilla`` entries are taken verbatim as resource names and placed before
the images discovered in the folder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .config import CATEGORY, DESCRIPTOR_NAME, PackConfig
from .errors import (
    E_DESCRIPTOR,
    E_IDENTITY_MISSING,
    E_PATH_ESCAPE,
    SkippableGroupError,
    VariantGenError,
    skip_group,
)
from .logging import get_logger
from .storage import list_files, list_group_directories, read_descriptor

__all__ = [
    "Descriptor",
    "Group",
    "collect_groups",
    "load_group",
    "parse_descriptor",
    "resource_name",
    "short_name",
    "item_model_payload",
]


@dataclass(slots=True)
class Descriptor:
    identity: str
    extra_resources: List[str] = field(default_factory=list)


@dataclass(slots=True)
class Group:
    name: str
    identity: str
    resource_names: List[str] = field(default_factory=list)
    # local key -> "<group>/<key>" texture path (discovered files only)
    textures: Dict[str, str] = field(default_factory=dict)
    # local key -> generated item model payload (discovered files only)
    derived_payloads: Dict[str, Dict[str, Any]] = field(default_factory=dict)


def resource_name(namespace: str, group: str, key: str) -> str:
    return f"{namespace}:{CATEGORY}/{group}/{key}"


def short_name(name: str) -> str:
    return name.rsplit("/", 1)[-1]


def item_model_payload(texture: str) -> Dict[str, Any]:
    return {
        "parent": "minecraft:item/generated",
        "textures": {"layer0": texture},
    }


def parse_descriptor(data: Dict[str, Any] | None, path: Path) -> Descriptor:
    if data is None:
        raise skip_group(E_DESCRIPTOR, f"Meta file not found: {path}")
    identity = data.get("item")
    if not isinstance(identity, str) or not identity:
        raise skip_group(E_IDENTITY_MISSING, f"No item defined in meta: {path}")
    extra = data.get("vanilla") or []
    if not isinstance(extra, list) or not all(
        isinstance(v, str) for v in extra
    ):
        raise skip_group(
            E_DESCRIPTOR, f"'vanilla' must be a list of strings: {path}"
        )
    return Descriptor(identity=identity, extra_resources=list(extra))


def load_group(
    config: PackConfig, folder: str, files: List[str]
) -> Group:
    folder_path = config.source_dir / folder
    meta_path = folder_path / DESCRIPTOR_NAME
    desc = parse_descriptor(read_descriptor(meta_path), meta_path)
    try:
        config.table_path(desc.identity)
    except VariantGenError as e:
        if e.code != E_PATH_ESCAPE:
            raise
        raise skip_group(
            E_DESCRIPTOR,
            f"Item {desc.identity!r} is not a valid model name: {meta_path}",
        ) from e
    group = Group(
        name=folder,
        identity=desc.identity,
        resource_names=list(desc.extra_resources),
    )
    for file in files:
        key = Path(file).stem
        if key == "meta":
            continue
        name = resource_name(config.namespace, folder, key)
        group.textures[key] = f"{folder}/{key}"
        group.derived_payloads[key] = item_model_payload(name)
        group.resource_names.append(name)
    return group


def collect_groups(config: PackConfig) -> List[Group]:
    """Discover groups under ``config.source_dir`` in folder name order.

    A missing source directory raises FatalInputError. Folders without files
    are ignored; folders with a missing or invalid descriptor are skipped
    with a warning.
    """
    logger = get_logger()
    groups: List[Group] = []
    for folder in list_group_directories(config.source_dir):
        files = list_files(config.source_dir / folder)
        if not files:
            continue
        try:
            groups.append(load_group(config, folder, files))
        except SkippableGroupError as e:
            logger.warning("Skipping group %s: %s", folder, e.message)
    return groups
