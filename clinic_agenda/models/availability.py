# clinic_agenda/models/availability.py
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional


DAY_KEYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class SlotAvailability(str, Enum):
    AVAILABLE = "available"
    BREAK = "break"
    OFF_HOURS = "off_hours"


def _parse_hhmm(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    return datetime.strptime(value, "%H:%M").time()


@dataclass(frozen=True)
class AvailabilityWindow:
    weekday: int  # 0 = Monday, as datetime.weekday()
    active: bool
    work_start: Optional[time] = None
    work_end: Optional[time] = None
    break_start: Optional[time] = None
    break_end: Optional[time] = None

    def status_at(self, moment: time) -> SlotAvailability:
        if not self.active or self.work_start is None or self.work_end is None:
            return SlotAvailability.OFF_HOURS
        if not (self.work_start <= moment < self.work_end):
            return SlotAvailability.OFF_HOURS
        if self.break_start and self.break_end and self.break_start <= moment < self.break_end:
            return SlotAvailability.BREAK
        return SlotAvailability.AVAILABLE


class WeeklyAvailability:
    """Read-only weekly working hours of one professional.

    Weekdays without a configured window are treated as off hours.
    """

    def __init__(self, windows: Iterable[AvailabilityWindow] = ()):
        self._windows: Dict[int, AvailabilityWindow] = {w.weekday: w for w in windows}

    @classmethod
    def from_schedule(cls, schedule: Iterable[Mapping[str, object]]) -> "WeeklyAvailability":
        """Build from the profile editor shape: dayKey/active/start/end/lunchStart/lunchEnd."""
        windows = []
        for day in schedule:
            key = str(day.get("dayKey", "")).lower()
            if key not in DAY_KEYS:
                raise ValueError(f"Unknown dayKey: {key!r}")
            windows.append(
                AvailabilityWindow(
                    weekday=DAY_KEYS.index(key),
                    active=bool(day.get("active", False)),
                    work_start=_parse_hhmm(day.get("start")),
                    work_end=_parse_hhmm(day.get("end")),
                    break_start=_parse_hhmm(day.get("lunchStart")),
                    break_end=_parse_hhmm(day.get("lunchEnd")),
                )
            )
        return cls(windows)

    def window_for(self, weekday: int) -> Optional[AvailabilityWindow]:
        return self._windows.get(weekday)

    def status_at(self, moment: datetime) -> SlotAvailability:
        window = self._windows.get(moment.weekday())
        if window is None:
            return SlotAvailability.OFF_HOURS
        return window.status_at(moment.time())

    def covers(self, start: datetime, end: datetime) -> bool:
        """True when [start, end) sits inside one working window and clear of its break."""
        if end <= start or end.date() != start.date():
            return False
        window = self._windows.get(start.weekday())
        if window is None or window.status_at(start.time()) != SlotAvailability.AVAILABLE:
            return False
        end_time = end.time()
        if end_time > window.work_end:
            return False
        if window.break_start and window.break_end:
            if start.time() < window.break_end and end_time > window.break_start:
                return False
        return True

    def windows(self) -> List[AvailabilityWindow]:
        return [self._windows[k] for k in sorted(self._windows)]
