"""Custom model data slot allocation for resource pack item variants."""

from .api import BuildResult, build_pack, plan_dry_run, validate_tables
from .config import PackConfig, load_config

__version__ = "0.1.0"

__all__ = [
    "BuildResult",
    "PackConfig",
    "build_pack",
    "load_config",
    "plan_dry_run",
    "validate_tables",
    "__version__",
]
