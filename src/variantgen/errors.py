"""Error definitions for variantgen."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_ROOT_MISSING = "E_ROOT_MISSING"
E_DIR_MISSING = "E_DIR_MISSING"
E_DESCRIPTOR = "E_DESCRIPTOR"
E_IDENTITY_MISSING = "E_IDENTITY_MISSING"
E_TABLE_CORRUPT = "E_TABLE_CORRUPT"
E_ASSET_MISSING = "E_ASSET_MISSING"
E_CONFIG = "E_CONFIG"
E_PATH_ESCAPE = "E_PATH_ESCAPE"


@dataclass
class VariantGenError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class FatalInputError(VariantGenError):
    """Missing pack root or source directory; aborts the whole run."""


class SkippableGroupError(VariantGenError):
    """Group descriptor is absent or unusable; the group is skipped."""


class PersistedStateCorruptError(VariantGenError):
    """A persisted override table exists but cannot be trusted."""


class ConfigError(VariantGenError):
    pass


@dataclass(slots=True)
class MissingAssetWarning:
    """Reported (never raised) when a texture to copy cannot be found."""

    group: str
    source: str
    code: str = E_ASSET_MISSING

    def __str__(self) -> str:
        return f"Texture not found: {self.source}"


def fatal_input(
    code: str, message: str, context: Optional[Dict[str, Any]] = None
) -> FatalInputError:
    return FatalInputError(code=code, message=message, context=context)


def corrupt_table(
    message: str, context: Optional[Dict[str, Any]] = None
) -> PersistedStateCorruptError:
    return PersistedStateCorruptError(
        code=E_TABLE_CORRUPT, message=message, context=context
    )


def skip_group(
    code: str, message: str, context: Optional[Dict[str, Any]] = None
) -> SkippableGroupError:
    return SkippableGroupError(code=code, message=message, context=context)


__all__ = [
    "VariantGenError",
    "FatalInputError",
    "SkippableGroupError",
    "PersistedStateCorruptError",
    "ConfigError",
    "MissingAssetWarning",
    "fatal_input",
    "corrupt_table",
    "skip_group",
    "E_ROOT_MISSING",
    "E_DIR_MISSING",
    "E_DESCRIPTOR",
    "E_IDENTITY_MISSING",
    "E_TABLE_CORRUPT",
    "E_ASSET_MISSING",
    "E_CONFIG",
    "E_PATH_ESCAPE",
]
