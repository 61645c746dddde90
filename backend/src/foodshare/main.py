from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import inspect

from foodshare.core import database
from foodshare.core.config import get_settings
from foodshare.core.errors import FoodShareError
from foodshare.routers import (
    ai,
    claims,
    health,
    listings,
    live,
    recipes,
    restaurants,
    users,
)

logger = logging.getLogger(__name__)


CORE_ROUTERS = (
    (health.router, {"tags": ["health"]}),
    (users.router, {}),
    (restaurants.router, {}),
    (listings.router, {}),
    (claims.router, {}),
    (ai.router, {}),
    (recipes.router, {}),
    (live.router, {}),
)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url,
    )

    @application.exception_handler(FoodShareError)
    async def foodshare_error(request: Request, exc: FoodShareError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "detail": exc.detail},
        )

    @application.middleware("http")
    async def enforce_utf8_json(request: Request, call_next):
        response = await call_next(request)
        if response.headers.get("content-type", "").startswith("application/json"):
            response.headers["content-type"] = "application/json; charset=utf-8"
        return response

    @application.get("/favicon.ico", include_in_schema=False)
    def favicon():
        return Response(status_code=204)

    for router, include_kwargs in CORE_ROUTERS:
        application.include_router(router, **include_kwargs)

    @application.get("/", include_in_schema=False)
    def root():
        return RedirectResponse(settings.docs_url or "/docs")

    @application.get("/__routes", include_in_schema=False)
    def routes_snapshot():
        return sorted(
            f"{route.path}  [{','.join(sorted(getattr(route, 'methods', None) or ['WS']))}]"
            for route in application.router.routes
            if getattr(route, "path", None)
        )

    @application.get("/__dbcheck", include_in_schema=False)
    def dbcheck():
        return {"tables": inspect(database.engine).get_table_names()}

    @application.on_event("startup")
    def _startup():
        database.init_db()

    return application


app = create_app()
