"""Summary (key info) table written at the end of a build.

Shape::

    {
        "<group>": {"item": "<identity>", "<short name>": <slot>, ...},
        ...
    }

Short names are the last path segment of each resource name, so a group's
pre-existing entries such as ``item/coal`` appear as ``coal``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable

from .merger import GroupResult
from .storage import write_json

__all__ = ["summary_dict", "write_summary"]


def summary_dict(results: Iterable[GroupResult]) -> Dict[str, Dict[str, Any]]:
    return {r.group: dict(r.summary) for r in results}


def write_summary(
    results: Iterable[GroupResult], output_path: Path
) -> Path:
    return write_json(output_path, summary_dict(results))
