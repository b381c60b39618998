from __future__ import annotations

import os
import time
from typing import Any, Dict, List
from .base import (
    Reporter,
    TaskStatus,
    TaskRecord,
    completion_line,
    get_verbosity,
)

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TimeElapsedColumn,
)


class RichReporter(Reporter):
    """Console reporter built on rich.

    Group tasks carry a total (textures plus models) and get a progress bar
    whose description follows the file being written; tasks without a total
    are shown as a rule followed by a completion line.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console(
            stderr=True, highlight=False, soft_wrap=False
        )
        self._transient = os.getenv(
            "VARIANTGEN_PROGRESS_TRANSIENT", "0"
        ).lower() in ("1", "true", "yes")
        self.progress: Progress | None = None
        self._tasks: Dict[str, TaskRecord] = {}
        self._task_ids: Dict[str, Any] = {}
        self._transient_completions: List[str] = []

    def _ensure_progress(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(spinner_name="dots"),
                TextColumn("{task.description}", justify="left"),
                BarColumn(bar_width=None),
                TextColumn("{task.completed}/{task.total}"),
                TimeElapsedColumn(),
                transient=self._transient,
                console=self.console,
                expand=True,
            )
            self.progress.start()
        return self.progress

    # Tasks --------------------------------------------------------------------
    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._tasks[task_id] = TaskRecord(task_id, name, total, meta=meta)
        if total is None:
            self.console.rule(name)
            return
        progress = self._ensure_progress()
        self._task_ids[task_id] = progress.add_task(name, total=total)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._tasks.get(task_id)
        if not rec:
            return
        rec.completed += step
        rec.meta.update(meta)
        rid = self._task_ids.get(task_id)
        if rid is not None and self.progress:
            item = meta.get("current_item")
            description = f"{rec.name} ↳ {item}" if item else rec.name
            self.progress.update(
                rid, completed=rec.completed, description=description
            )

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._tasks.pop(task_id, None)
        if not rec:
            return
        rec.status = status
        rec.end_time = time.time()
        rec.meta.update(final_meta)
        rid = self._task_ids.pop(task_id, None)
        if rid is not None and self.progress:
            self.progress.update(rid, completed=rec.total, description=rec.name)
        line = completion_line(rec)
        if self._transient and self.progress:
            self._transient_completions.append(escape(line))
        else:
            self.console.print(escape(line))
        if not self._task_ids:
            self.flush()

    # Messaging / sections ------------------------------------------------------
    def status(self, message: str, **fields: Any) -> None:
        self.console.print(f"[green]INFO[/]: {escape(message)}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() < level:
            return
        self.console.print(f"[cyan]VERB{level}[/]: {escape(message)}")

    def error(self, message: str, **fields: Any) -> None:
        self.console.print(f"[bold red]ERROR[/]: {escape(message)}")

    def warning(self, message: str, **fields: Any) -> None:
        self.console.print(f"[yellow]WARN[/]: {escape(message)}")

    def section(self, title: str) -> None:
        self.console.rule(title)

    def flush(self) -> None:
        if self.progress is None:
            return
        try:
            self.progress.stop()
        finally:
            self.progress = None
            if self._transient_completions:
                self.console.print("\n".join(self._transient_completions))
                self._transient_completions.clear()
