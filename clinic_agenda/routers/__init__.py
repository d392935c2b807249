# Routers package
from . import agenda_router

__all__ = [
    "agenda_router",
]
