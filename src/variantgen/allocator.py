"""Lowest-free slot allocation."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Set

__all__ = ["SlotAllocator", "new_resource_names"]


class SlotAllocator:
    """Hands out the smallest positive integer not yet in use.

    The used set is owned by the allocator; every value returned by
    :meth:`allocate` is recorded before returning, so consecutive calls
    never collide.
    """

    def __init__(self, used: Iterable[int] = ()) -> None:
        self._used: Set[int] = set(used)
        self._candidate = 1

    def allocate(self) -> int:
        # Nothing below _candidate is ever freed, so the scan resumes there.
        value = self._candidate
        while value in self._used:
            value += 1
        self._used.add(value)
        self._candidate = value + 1
        return value


def new_resource_names(
    resource_names: Iterable[str], slot_map: Mapping[str, int]
) -> List[str]:
    """Names absent from ``slot_map``, in input order, each listed once."""
    seen: Set[str] = set()
    out: List[str] = []
    for name in resource_names:
        if name in slot_map or name in seen:
            continue
        seen.add(name)
        out.append(name)
    return out
