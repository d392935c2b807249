from contextlib import asynccontextmanager
from typing import Optional
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

# Load environment variables as early as possible
load_dotenv()

from .application.services.agenda_service import AgendaService
from .config import settings
from .exceptions import SchedulingError, http_exception_handler, scheduling_exception_handler
from .infrastructure.identity.random_generators import RandomTokenGenerator, UuidIdGenerator
from .infrastructure.seed.json_agenda_source import JsonAgendaSource, StaticAgendaSource
from .routers import agenda_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def build_agenda_service() -> AgendaService:
    source = JsonAgendaSource(settings.AGENDA_SEED_FILE) if settings.AGENDA_SEED_FILE else StaticAgendaSource()
    return AgendaService.build(
        appointments=source.load_appointments(),
        professionals=source.load_professionals(),
        availability=source.load_availability(),
        id_generator=UuidIdGenerator(),
        token_generator=RandomTokenGenerator(),
        settings=settings,
    )


def create_app(agenda: Optional[AgendaService] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME}...")
        if getattr(app.state, "agenda", None) is None:
            app.state.agenda = build_agenda_service()
        yield
        logger.info(f"Shutting down {settings.APP_NAME}...")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.agenda = agenda
    app.add_exception_handler(SchedulingError, scheduling_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.include_router(agenda_router.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": settings.APP_VERSION}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clinic_agenda.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,  # session state lives in process memory
        log_level=settings.LOG_LEVEL.lower()
    )
