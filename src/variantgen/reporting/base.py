from __future__ import annotations

import json
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "Reporter",
    "STAT_KEYS",
    "completion_line",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "task",
]

# Per-group counters shown when a group task ends.
STAT_KEYS = ("allocated", "reused", "copied", "models")


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()


STATUS_ICONS = {
    TaskStatus.SUCCESS: "✔",
    TaskStatus.FAILED: "✖",
    TaskStatus.SKIPPED: "→",
}


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time) if self.end_time else 0.0


def completion_line(rec: TaskRecord) -> str:
    icon = STATUS_ICONS.get(rec.status, "?")
    total_part = (
        f" {rec.completed}/{rec.total}" if rec.total is not None else ""
    )
    stats = [f"{k}={rec.meta[k]}" for k in STAT_KEYS if k in rec.meta]
    stats_part = f" [{' '.join(stats)}]" if stats else ""
    return f"{icon} {rec.name}{total_part} ({rec.duration:.2f}s){stats_part}"


_VERBOSITY: int = 0  # global verbosity level set by CLI (-v repeats)


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:  # noqa: D401
        raise NotImplementedError

    def advance(
        self, task_id: str, step: int = 1, **meta: Any
    ) -> None:  # noqa: D401
        raise NotImplementedError

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:  # noqa: D401
        raise NotImplementedError

    def status(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        # Gated by global verbosity; ignored unless overridden.
        pass

    def error(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def section(self, title: str) -> None:  # noqa: D401
        raise NotImplementedError

    def document(self, kind: str, data: Any) -> None:
        """Write a result document (e.g. the plan) for the caller to consume.

        Goes to stdout, apart from the reporter's own messages.
        """
        sys.stdout.write(json.dumps(data, indent=2, sort_keys=True) + "\n")

    def flush(self) -> None:  # noqa: D401
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        from .plain import PlainReporter  # local import to avoid cycle

        _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
    return _ACTIVE_REPORTER


@contextmanager
def task(task_id: str, name: str, total: int | None = None, **meta: Any):
    """Run a block as a reporter task.

    Yields a dict; whatever the block stores in it is attached to the task's
    completion record (e.g. ``allocated`` or ``copied`` counters).
    """
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    stats: Dict[str, Any] = {}
    try:
        yield stats
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED, **stats)
        raise
    else:
        rep.end_task(task_id, TaskStatus.SUCCESS, **stats)
