from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal, Optional

from gantt_scheduler.core.errors import GanttError


TimeUnit = Literal["Days", "Weeks", "Months"]
TaskState = Literal["Open", "In Progress", "Completed"]

TIME_UNITS: tuple[str, ...] = ("Days", "Weeks", "Months")
TASK_STATES: tuple[str, ...] = ("Open", "In Progress", "Completed")

# Reserved node names and port roles of the editor document.
ANCHOR_NODE = "Start"
OPTIONS_NODE = "Options"
AFTER_PORT = "After"
BEFORE_PORT = "Before"


@dataclass(frozen=True)
class ScheduleOptions:
    title: str = "Gantt Chart"
    axis_date_format: str = "%d-%m-%Y"
    tick_interval_value: int = 1
    tick_interval_unit: str = "week"
    weekday: str = "Monday"
    show_today_line: bool = False
    show_critical_path: bool = False


@dataclass(frozen=True)
class AnchorRecord:
    """A `Start` node: injects a fixed date into its direct successors."""

    id: str
    start_date: date
    after_ports: list[str]
    before_ports: list[str]


@dataclass(frozen=True)
class TaskRecord:
    id: str
    name: str
    properties: dict[str, Any]
    task_name: str
    duration: int
    time_units: TimeUnit
    state: TaskState
    critical: bool
    after_ports: list[str]
    before_ports: list[str]


@dataclass(frozen=True)
class ConnectionRecord:
    from_port: str  # an "After" port of the predecessor
    to_port: str  # a "Before" port of the successor


@dataclass(frozen=True)
class GraphDocument:
    anchors: list[AnchorRecord]
    tasks: list[TaskRecord]
    connections: list[ConnectionRecord]
    options: ScheduleOptions
    file: Optional[str] = None


@dataclass
class Task:
    """Arena entry. Neighbours are indices into TaskGraph.tasks."""

    index: int
    record: TaskRecord
    predecessors: list[int] = field(default_factory=list)
    successors: list[int] = field(default_factory=list)

    start_date: Optional[date] = None
    last_predecessor: Optional[int] = None

    # Critical path annotations
    earliest_start: Optional[date] = None
    earliest_finish: Optional[date] = None
    latest_start: Optional[date] = None
    latest_finish: Optional[date] = None
    slack: Optional[int] = None  # calendar days, signed
    is_critical: bool = False

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def task_name(self) -> str:
        return self.record.task_name

    @property
    def duration(self) -> int:
        return self.record.duration

    @property
    def time_units(self) -> TimeUnit:
        return self.record.time_units


@dataclass
class TaskGraph:
    tasks: list[Task]
    file: Optional[str] = None

    def roots(self) -> list[int]:
        return [t.index for t in self.tasks if not t.predecessors]

    def by_id(self, task_id: str) -> Task:
        for t in self.tasks:
            if t.id == task_id:
                return t
        raise KeyError(task_id)


@dataclass(frozen=True)
class Schedule:
    options: ScheduleOptions
    tasks: list[Task]  # topological order
    warnings: list[GanttError]
    project_start: Optional[date]
    project_end: Optional[date]
