from typing import Dict, List, Optional, Protocol

from ...models.appointment import Appointment
from ...models.availability import WeeklyAvailability


class AgendaSource(Protocol):
    def load_appointments(self) -> List[Appointment]:
        ...

    def load_professionals(self) -> Dict[str, str]:
        ...

    def load_availability(self) -> Optional[WeeklyAvailability]:
        ...
