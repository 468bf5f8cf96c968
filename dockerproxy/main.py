from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from dockerproxy.factories import http_client_factory, proxy_config_factory
from dockerproxy.packages.registry_proxy import ChallengeParseError, RouteNotFound
from dockerproxy.routes import proxy
from dockerproxy.settings import settings
from dockerproxy.utils.logging import setup_logger
from dockerproxy.utils.sentry import init_sentry

logger = structlog.stdlib.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = proxy_config_factory()
    logger.info(
        "Starting registry proxy",
        routes=config.routes.hostnames,
        debug=config.debug,
        fallback_upstream=config.routes.fallback_upstream,
    )

    async with http_client_factory() as client:
        app.state.http_client = client
        yield


init_sentry()
# Every path belongs to the proxied registries, so no docs routes
app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
setup_logger(app)


@app.exception_handler(RouteNotFound)
async def route_not_found_handler(request: Request, exc: RouteNotFound):
    logger.info("No route for hostname", hostname=exc.hostname)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "message": "Route not found for this hostname. Please check your configuration.",
            "routes": exc.routes,
        },
    )


@app.exception_handler(ChallengeParseError)
async def challenge_parse_error_handler(request: Request, exc: ChallengeParseError):
    logger.error("Upstream sent an invalid auth challenge", header=exc.header)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "message": "Upstream registry sent an invalid authentication challenge",
            "header": exc.header,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"title": "Internal Server Error", "description": str(exc)},
    )


app.include_router(proxy.router)


if __name__ == "__main__":
    uvicorn.run(
        "dockerproxy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        proxy_headers=True,
        log_config=None,
    )
