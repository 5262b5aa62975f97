# barbershop/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .db import init_db
from .errors import BookingError
from .routers import auth_routes, barbers_routes, calendar_routes, reservations_routes, users_routes

logger = logging.getLogger(__name__)


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("reservation_id", "barber", "date", "start_time", "status", "kind"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


configure_logging()

app = FastAPI(title="Barbershop Reservations", version="1.0.0", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    log = logger.warning if exc.status_code in (401, 403) else logger.info
    log("%s %s rejected: %s", request.method, request.url.path, exc.message, extra={"kind": exc.kind})

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(barbers_routes.router)
app.include_router(reservations_routes.router)
app.include_router(calendar_routes.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
