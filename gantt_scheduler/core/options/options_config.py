from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from gantt_scheduler.core.errors import GanttError, GraphValidationError
from gantt_scheduler.core.model import ScheduleOptions

logger = logging.getLogger(__name__)


DEFAULT_OPTIONS = ScheduleOptions()

TICK_UNITS: tuple[str, ...] = ("millisecond", "second", "minute", "hour", "day", "week", "month")
WEEKDAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# Options node property name -> ScheduleOptions field
OPTION_FIELDS: dict[str, str] = {
    "Title": "title",
    "Date Format on Axis": "axis_date_format",
    "Tick Interval Value": "tick_interval_value",
    "Tick Interval Unit": "tick_interval_unit",
    "Weekday": "weekday",
    "Show Today Line": "show_today_line",
    "Show Critical Path": "show_critical_path",
}


class OptionsConfigError(ValueError):
    pass


def as_flag(value: Any) -> bool:
    """Booleans pass through; strings count as true only when they spell `true`."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def load_options_file(path: str | Path) -> dict[str, Any]:
    """Load option overrides from a YAML file.

    Format (keys are the Options node property names):
      Title: "Release plan"
      Tick Interval Unit: day
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise OptionsConfigError("options file must be a mapping of option name -> value")
    for k in raw.keys():
        if not isinstance(k, str) or not k.strip():
            raise OptionsConfigError("option names must be non-empty strings")
    return {k.strip(): v for k, v in raw.items()}


def parse_options(
    properties: Iterable[tuple[str, Any]],
    *,
    base: ScheduleOptions = DEFAULT_OPTIONS,
    file: Optional[str] = None,
    path: str = "options",
) -> tuple[ScheduleOptions, list[GanttError], list[GanttError]]:
    """Fold option properties over `base`.

    Returns (options, errors, warnings). Unknown properties are warnings and keep
    the base value; malformed values are errors.
    """
    changes: dict[str, Any] = {}
    errors: list[GanttError] = []
    warnings: list[GanttError] = []

    for name, value in properties:
        field_name = OPTION_FIELDS.get(name)
        if field_name is None:
            logger.warning("Unknown option property: %s", name)
            warnings.append(
                GanttError(
                    code="W_UNKNOWN_OPTION",
                    message=f"unknown option property: {name} (ignored)",
                    file=file,
                    path=f"{path}.{name}",
                    severity="warning",
                )
            )
            continue

        try:
            changes[field_name] = _coerce(name, value)
        except OptionsConfigError as e:
            errors.append(
                GraphValidationError(
                    code="E_INVALID_OPTION",
                    message=str(e),
                    file=file,
                    path=f"{path}.{name}",
                )
            )

    return replace(base, **changes), errors, warnings


def load_and_merge(options_file: str | None) -> ScheduleOptions:
    """Defaults overlaid with an optional options file."""
    if not options_file:
        return DEFAULT_OPTIONS
    overrides = load_options_file(options_file)
    options, errors, _ = parse_options(overrides.items(), file=options_file)
    if errors:
        raise OptionsConfigError("; ".join(e.message for e in errors))
    return options


def _coerce(name: str, value: Any) -> Any:
    if name in ("Title", "Date Format on Axis"):
        if not isinstance(value, str):
            raise OptionsConfigError(f"'{name}' must be a string")
        return value
    if name == "Tick Interval Value":
        if isinstance(value, bool):
            raise OptionsConfigError(f"'{name}' must be a positive integer")
        try:
            n = int(value)
        except (TypeError, ValueError):
            raise OptionsConfigError(f"'{name}' must be a positive integer") from None
        if n <= 0:
            raise OptionsConfigError(f"'{name}' must be a positive integer")
        return n
    if name == "Tick Interval Unit":
        if value not in TICK_UNITS:
            raise OptionsConfigError(f"'{name}' must be one of {list(TICK_UNITS)}")
        return value
    if name == "Weekday":
        day = value.strip().capitalize() if isinstance(value, str) else None
        if day not in WEEKDAYS:
            raise OptionsConfigError(f"'{name}' must be one of {list(WEEKDAYS)}")
        return day
    return as_flag(value)
