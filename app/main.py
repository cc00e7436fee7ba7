"""Entry point for the FastAPI artwork resolution service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Mapping

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .database import Database
from .models import ArtworkRecord
from .services.artwork import ArtworkService
from .services.cache import CacheStore, DatabaseCacheStore, MemoryCacheStore
from .services.fanart import FanartClient
from .services.rate_limiter import RateLimiter

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI

# Single-URL slots a caller may seed through query parameters.
PREVIOUS_FIELDS: tuple[str, ...] = (
    "thumb",
    "poster",
    "tvshowposter",
    "banner",
    "fanart",
    "clearart",
    "clearlogo",
    "landscape",
    "icon",
    "discart",
    "keyart",
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    exit_stack = AsyncExitStack()
    fanart_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=settings.fanart_base_url,
            timeout=httpx.Timeout(15.0, connect=5.0),
        )
    )
    rate_limiter = RateLimiter(settings.rate_limiter_config())

    database: Database | None = None
    cache: CacheStore
    if settings.cache_backend == "database":
        database = Database(settings.database_url)
        await database.create_all()
        database_cache = DatabaseCacheStore(database.session_factory)
        purged = await database_cache.purge_expired()
        if purged:
            logger.info("Purged %s expired cache entries", purged)
        cache = database_cache
    else:
        cache = MemoryCacheStore()

    client: FanartClient | None = None
    if settings.fanart_api_key:
        client = FanartClient(settings, fanart_http_client, cache, rate_limiter)
    else:
        logger.warning("FANART_API_KEY is not set; artwork will not be resolved")

    app.state.artwork_service = ArtworkService(settings, client)
    app.state.database = database

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        rate_limiter.close()
        if database is not None:
            await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Language- and season-aware artwork picked from fanart.tv",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_artwork_service(app: FastAPI) -> ArtworkService:
    service = getattr(app.state, "artwork_service", None)
    if not isinstance(service, ArtworkService):
        raise RuntimeError("Artwork service not initialised")
    return service


def previous_from_query(params: Mapping[str, str]) -> ArtworkRecord:
    """Build the fallback record from query parameters named after slots."""

    values = {
        field: params[field].strip()
        for field in PREVIOUS_FIELDS
        if params.get(field) and params[field].strip()
    }
    return ArtworkRecord(**values)


def register_routes(fastapi_app: FastAPI) -> None:
    def _require_positive(name: str, value: int) -> None:
        if value <= 0:
            raise HTTPException(status_code=404, detail=f"Unknown {name}")

    def _require_season(season: int) -> None:
        if season < 0:
            raise HTTPException(status_code=400, detail="Season must not be negative")

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/artwork/movie/{tmdb_id}")
    async def movie_artwork_endpoint(request: Request, tmdb_id: int) -> JSONResponse:
        _require_positive("movie", tmdb_id)
        service = get_artwork_service(fastapi_app)
        record = await service.resolve_movie(
            tmdb_id, previous_from_query(request.query_params)
        )
        return JSONResponse(record.to_payload())

    @fastapi_app.get("/artwork/show/{tvdb_id}")
    async def show_artwork_endpoint(request: Request, tvdb_id: int) -> JSONResponse:
        _require_positive("show", tvdb_id)
        service = get_artwork_service(fastapi_app)
        record = await service.resolve_show(
            tvdb_id, previous_from_query(request.query_params)
        )
        return JSONResponse(record.to_payload())

    @fastapi_app.get("/artwork/show/{tvdb_id}/season/{season}")
    async def season_artwork_endpoint(
        request: Request, tvdb_id: int, season: int
    ) -> JSONResponse:
        _require_positive("show", tvdb_id)
        _require_season(season)
        service = get_artwork_service(fastapi_app)
        record = await service.resolve_season(
            tvdb_id, season, previous_from_query(request.query_params)
        )
        return JSONResponse(record.to_payload())

    @fastapi_app.get("/artwork/show/{tvdb_id}/season/{season}/episode/{episode}")
    async def episode_artwork_endpoint(
        request: Request, tvdb_id: int, season: int, episode: int
    ) -> JSONResponse:
        _require_positive("show", tvdb_id)
        _require_season(season)
        service = get_artwork_service(fastapi_app)
        record = await service.resolve_episode(
            tvdb_id, season, episode, previous_from_query(request.query_params)
        )
        return JSONResponse(record.to_payload())


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
