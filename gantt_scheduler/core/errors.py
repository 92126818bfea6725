from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional


Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class GanttError(Exception):
    """Base error envelope. Stages that collect problems return these; stages that
    cannot continue raise them, and the pipeline turns them back into lists."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None
    severity: Severity = "error"

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<graph>"
        return f"{loc}: {self.code}: {self.message}"


class GraphLoadError(GanttError):
    pass


class GraphStructureError(GanttError):
    pass


class GraphValidationError(GanttError):
    pass


class ScheduleError(GanttError):
    pass


def sort_errors(errors: list[GanttError]) -> list[GanttError]:
    return sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
