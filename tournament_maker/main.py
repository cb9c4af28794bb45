import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tournament_maker.api.endpoints import player_groups as player_group_endpoints
from tournament_maker.api.endpoints import players as player_endpoints
from tournament_maker.api.endpoints import stats as stats_endpoints
from tournament_maker.api.endpoints import tournaments as tournament_endpoints
from tournament_maker.core.config import settings
from tournament_maker.core.errors import NotFoundError, PersistenceError, ValidationFailure
from tournament_maker.models import create_all

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_all()
    yield


app = FastAPI(title="Tournament Maker API", lifespan=lifespan)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error("Persistence failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": "Storage unavailable"})


# Include routers
app.include_router(player_endpoints.router, prefix="/api/players", tags=["Players"])
app.include_router(player_group_endpoints.router, prefix="/api/player-groups", tags=["Player Groups"])
app.include_router(tournament_endpoints.router, prefix="/api/tournaments", tags=["Tournaments"])
app.include_router(stats_endpoints.router, prefix="/api/stats", tags=["Statistics"])


@app.get("/")
def read_root():
    return {"message": "Tournament Maker API"}


if __name__ == "__main__":
    uvicorn.run("tournament_maker.main:app", host="0.0.0.0", port=8000, reload=True)
