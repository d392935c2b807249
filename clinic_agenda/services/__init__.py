# Services package (re-export engine components for stable imports)
from .calendar.time_axis import TimeAxis
from .calendar.period_calculator import PeriodCalculator, ViewMode
from .calendar.view_model import CalendarViewModel
from .appointments.appointment_index import AppointmentIndex
from .appointments.appointment_factory import AppointmentFactory
from .appointments.slot_controller import SlotInteractionController

__all__ = [
    "TimeAxis",
    "PeriodCalculator",
    "ViewMode",
    "CalendarViewModel",
    "AppointmentIndex",
    "AppointmentFactory",
    "SlotInteractionController",
]
