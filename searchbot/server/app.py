"""HTTP routes for search, summary and digest requests."""

from __future__ import annotations

import time
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from searchbot import __version__
from searchbot.config.schema import Config
from searchbot.search.client import SearchClient
from searchbot.search.errors import SearchConfigError, UnknownProviderError, ValidationError
from searchbot.server.params import adapt_parse_body, query_terms, show_url_flag

_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]

_DEPRECATED_ROUTES = {
    "/googlethis": "/google-search",
    "/googleresult": "/google-search-summary",
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def create_app(config: Config | None = None, client: SearchClient | None = None) -> FastAPI:
    """Build the FastAPI application around one SearchClient."""
    config = config or Config()
    client = client or SearchClient(config.search)
    started_ms = _now_ms()

    app = FastAPI(title="searchbot", version=__version__)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info("{} {} {}", request.method, response.status_code, request.url.path)
        return response

    @app.exception_handler(ValidationError)
    async def _invalid_body(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse({"error": "Invalid body"}, status_code=400)

    @app.exception_handler(UnknownProviderError)
    async def _unknown_provider(request: Request, exc: UnknownProviderError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=404)

    @app.exception_handler(SearchConfigError)
    async def _misconfigured(request: Request, exc: SearchConfigError) -> JSONResponse:
        logger.error("Search provider misconfigured: {}", exc)
        return JSONResponse({"error": str(exc)}, status_code=503)

    @app.get("/")
    async def index() -> dict[str, int]:
        return {"t": _now_ms()}

    @app.get("/started")
    async def started() -> dict[str, int]:
        return {"t": started_ms}

    @app.post("/wakeup")
    async def wakeup() -> PlainTextResponse:
        return PlainTextResponse("OK")

    for path, replacement in _DEPRECATED_ROUTES.items():
        _register_deprecated(app, path, replacement)

    for provider in SearchClient.providers():
        _register_provider_routes(app, client, provider)

    async def google_digest(request: Request) -> PlainTextResponse:
        params = await adapt_parse_body(request)
        terms = query_terms(params)
        text = await client.search_digest(show_url_flag(params), *terms, provider="google")
        return PlainTextResponse(text)

    app.add_api_route("/google-search-digest", google_digest, methods=_METHODS)

    static_dir = Path(config.server.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir), name="static")

    return app


def _register_provider_routes(app: FastAPI, client: SearchClient, provider: str) -> None:
    async def search(request: Request) -> JSONResponse:
        params = await adapt_parse_body(request)
        terms = query_terms(params)
        items = await client.search(provider, *terms)
        return JSONResponse([item.to_dict() for item in items])

    async def search_summary(request: Request) -> PlainTextResponse:
        params = await adapt_parse_body(request)
        terms = query_terms(params)
        text = await client.search_summary(provider, show_url_flag(params), *terms)
        return PlainTextResponse(text)

    app.add_api_route(f"/{provider}-search", search, methods=_METHODS)
    app.add_api_route(f"/{provider}-search-summary", search_summary, methods=_METHODS)


def _register_deprecated(app: FastAPI, path: str, replacement: str) -> None:
    async def deprecated() -> JSONResponse:
        return JSONResponse(
            {"error": f"This path has been deprecated. Please use: '{replacement}'"},
            status_code=404,
        )

    app.add_api_route(path, deprecated, methods=_METHODS)
