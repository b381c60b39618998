"""Pack configuration (JSON/YAML) for variantgen."""

from __future__ import annotations
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any
import json

import yaml

from .errors import ConfigError, E_CONFIG
from .storage import safe_file_path

__all__ = ["PackConfig", "load_config", "DESCRIPTOR_NAME", "CATEGORY"]

DESCRIPTOR_NAME = "meta.json"
CATEGORY = "custom/items"

_PATH_FIELDS = ("pack_root", "source_dir", "summary_path")


@dataclass(slots=True, frozen=True)
class PackConfig:
    pack_root: Path = Path("../..")
    namespace: str = "rpimages"
    source_dir: Path = Path("./images")
    summary_path: Path = Path("./key_info.json")
    # Discards previously persisted slot assignments; debug use only.
    force: bool = False

    @property
    def textures_dir(self) -> Path:
        return self.pack_root / "assets" / self.namespace / "textures" / CATEGORY

    @property
    def item_models_dir(self) -> Path:
        return self.pack_root / "assets" / "minecraft" / "models" / "item"

    @property
    def models_dir(self) -> Path:
        return self.pack_root / "assets" / self.namespace / "models" / CATEGORY

    @property
    def table_key(self) -> str:
        return self.namespace

    def table_path(self, identity: str) -> Path:
        return safe_file_path(self.item_models_dir, f"{identity}.json")

    def with_overrides(self, **overrides: Any) -> "PackConfig":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        for key in _PATH_FIELDS:
            if key in values:
                values[key] = Path(values[key])
        return replace(self, **values)


def load_config(path: str | Path) -> PackConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(E_CONFIG, f"Config file not found: {p}")
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(E_CONFIG, f"Cannot read config file {p}: {e}") from e
    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(E_CONFIG, f"Invalid config file {p}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(E_CONFIG, "Root of config must be an object")
    return _parse_config_dict(data, p.parent)


def _parse_config_dict(data: dict[str, Any], base_dir: Path) -> PackConfig:
    known = {f.name for f in fields(PackConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(
            E_CONFIG,
            f"Unknown config keys: {', '.join(unknown)}",
            {"keys": unknown},
        )
    values: dict[str, Any] = {}
    for key in _PATH_FIELDS:
        if key in data:
            if not isinstance(data[key], str):
                raise ConfigError(E_CONFIG, f"'{key}' must be a string")
            values[key] = base_dir / data[key]
    if "namespace" in data:
        ns = data["namespace"]
        if not isinstance(ns, str) or not ns:
            raise ConfigError(E_CONFIG, "'namespace' must be a non-empty string")
        values["namespace"] = ns
    if "force" in data:
        if not isinstance(data["force"], bool):
            raise ConfigError(E_CONFIG, "'force' must be a boolean")
        values["force"] = data["force"]
    return PackConfig(**values)
