# rinkroster/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rinkroster.api import routes_games, routes_leagues, routes_players, routes_teams
from rinkroster.core.config import settings
from rinkroster.core.errors import RosterError
from rinkroster.db.engine import engine
from rinkroster.db.models import Base
from rinkroster.middleware.request_log import RequestLogMiddleware

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("rinkroster")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings.validate_at_startup()
    # No migrations yet; create missing tables on boot
    Base.metadata.create_all(engine)
    logger.info("%s started env=%s", settings.APP_NAME, settings.APP_ENV)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.add_middleware(RequestLogMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)


@app.exception_handler(RosterError)
async def _roster_error(request: Request, exc: RosterError):
    # Business-rule rejections, never retried
    logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Routers
app.include_router(routes_leagues.router)
app.include_router(routes_teams.router)
app.include_router(routes_players.router)
app.include_router(routes_games.router)


@app.get("/health")
def health():
    return {"ok": True, "env": settings.APP_ENV}
