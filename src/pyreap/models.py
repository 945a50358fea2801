"""Data models for pyreap."""

from dataclasses import dataclass
from enum import Enum

import psutil


class ColumnLayout(Enum):
    """Column set requested from ``ps``, depending on what the platform reports."""

    STANDARD = "standard"  # per-process thread counts available
    REDUCED = "reduced"  # no nlwp column (macOS)

    @classmethod
    def detect(cls) -> "ColumnLayout":
        """Pick the layout supported by the running platform."""
        return cls.REDUCED if psutil.MACOS else cls.STANDARD

    @property
    def threads_known(self) -> bool:
        return self is ColumnLayout.STANDARD

    @property
    def columns(self) -> tuple[str, ...]:
        """Columns in the order ``ps`` prints them; command is always last."""
        head = ("user", "ppid", "pid", "vsz", "rss", "pcpu")
        tail = ("state", "etime", "time", "command")
        if self.threads_known:
            return head + ("nlwp",) + tail
        return head + tail

    @property
    def ps_format(self) -> str:
        """Column list suitable for ``ps -o``."""
        return ",".join(self.columns)

    @property
    def min_fields(self) -> int:
        """Number of fields a line needs, with a single-word command."""
        return len(self.columns)

    @property
    def command_index(self) -> int:
        return len(self.columns) - 1


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable record of one process as listed by ``ps``."""

    command: str
    owner: str
    parent_id: str  # kept as text, compared textually
    process_id: str
    virtual_size_kb: int
    resident_size_kb: int
    cpu_percent: float
    thread_count: int  # 1 when the layout has no nlwp column
    state: str  # 'R', 'S', 'Z', 'Ss+', etc.
    elapsed_seconds: int
    cpu_time_seconds: int
