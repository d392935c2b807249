import math
from dataclasses import dataclass
from datetime import datetime

from ...exceptions import TimeOutOfRangeError


def fractional_hour(moment: datetime) -> float:
    return moment.hour + moment.minute / 60 + moment.second / 3600


@dataclass(frozen=True)
class TimeAxis:
    """Maps hours of the day onto the vertical pixel grid of day/week views.

    Hours outside [day_start, day_end] are rejected with TimeOutOfRangeError
    instead of clamped, so an event can never render above the header.
    """

    day_start: int = 8
    day_end: int = 19
    row_height: float = 64
    header_height: float = 48
    granularity_minutes: int = 60

    def __post_init__(self):
        if not 0 <= self.day_start < self.day_end <= 24:
            raise ValueError("day_start must be before day_end, both within 0..24")
        if self.row_height <= 0:
            raise ValueError("row_height must be positive")

    @property
    def grid_top(self) -> float:
        return self.header_height

    @property
    def grid_bottom(self) -> float:
        return self.header_height + (self.day_end - self.day_start) * self.row_height

    @property
    def hours(self) -> range:
        return range(self.day_start, self.day_end)

    def contains(self, hour: float) -> bool:
        return self.day_start <= hour <= self.day_end

    def time_to_offset(self, hour: float) -> float:
        if not self.contains(hour):
            raise TimeOutOfRangeError(hour, self.day_start, self.day_end)
        return self.header_height + (hour - self.day_start) * self.row_height

    def offset_to_hour(self, pixels: float) -> float:
        if not self.grid_top <= pixels <= self.grid_bottom:
            raise TimeOutOfRangeError(pixels, self.grid_top, self.grid_bottom, unit="offset")
        raw_minutes = (pixels - self.header_height) / self.row_height * 60
        # tolerate float noise right below a step boundary
        steps = math.floor(raw_minutes / self.granularity_minutes + 1e-9)
        return self.day_start + steps * self.granularity_minutes / 60

    def span_to_height(self, start_hour: float, end_hour: float) -> float:
        return self.time_to_offset(end_hour) - self.time_to_offset(start_hour)

    def datetime_to_offset(self, moment: datetime) -> float:
        return self.time_to_offset(fractional_hour(moment))
