from .base import (
    Reporter,
    TaskStatus,
    get_reporter,
    set_reporter,
    task,
)
from .base import (
    set_verbosity,
    get_verbosity,
)
from .plain import PlainReporter
from .jsonl import JsonLinesReporter
from .silent import SilentReporter
from .rich_reporter import RichReporter

__all__ = [
    "Reporter",
    "TaskStatus",
    "get_reporter",
    "set_reporter",
    "task",
    "set_verbosity",
    "get_verbosity",
    "PlainReporter",
    "JsonLinesReporter",
    "SilentReporter",
    "RichReporter",
    "make_reporter",
]


def make_reporter(kind: str, *, interactive: bool = False) -> Reporter:
    """Build a reporter by CLI name: plain, rich, json or silent."""
    if kind == "json":
        return JsonLinesReporter()
    if kind == "silent":
        return SilentReporter()
    if kind == "rich" and interactive:
        return RichReporter()
    return PlainReporter()
