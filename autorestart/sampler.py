"""Memory snapshot of the current process, read through psutil."""

from __future__ import annotations

import os
from dataclasses import dataclass

import psutil


_TABLE_COLUMNS = (("PID", 6), ("VIRT", 12), ("RES", 12), ("COMMAND", 15))


@dataclass(frozen=True)
class MemorySample:
    pid: int
    virtual_bytes: int
    resident_bytes: int
    command_line: str

    def as_table(self) -> str:
        """Render the sample as a small boxed PID/VIRT/RES/COMMAND table."""

        values = (str(self.pid), str(self.virtual_bytes), str(self.resident_bytes), self.command_line)
        border = "+" + "+".join("-" * (width + 2) for _, width in _TABLE_COLUMNS) + "+"

        def _row(cells: tuple[str, ...]) -> str:
            parts = []
            for cell, (_, width) in zip(cells, _TABLE_COLUMNS):
                if len(cell) > width:
                    cell = cell[: width - 1] + "-"
                parts.append(f" {cell.ljust(width)} ")
            return "|" + "|".join(parts) + "|"

        header = _row(tuple(name for name, _ in _TABLE_COLUMNS))
        return "\n".join([border, header, border, _row(values), border])


def sample_current_process_memory() -> MemorySample | None:
    """Return the memory snapshot for this process, or None if it can't be read."""

    pid = os.getpid()
    try:
        proc = psutil.Process(pid)
        with proc.oneshot():
            mem = proc.memory_info()
            try:
                cmdline = " ".join(proc.cmdline())
            except psutil.AccessDenied:
                cmdline = proc.name()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return None

    return MemorySample(
        pid=pid,
        virtual_bytes=int(mem.vms),
        resident_bytes=int(mem.rss),
        command_line=cmdline,
    )
