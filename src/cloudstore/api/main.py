"""
cloudstore API - FastAPI app exposing the object write path over REST
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .deps import UnauthorizedError
from .responses import error_response
from .routes import classes, system
from cloudstore.config.cache import AppCache
from cloudstore.config.log_setup import configure_logging
from cloudstore.config.models import AppOptions
from cloudstore.core.di import Container, bootstrap_dependencies, register_app
from cloudstore.core.errors import CloudStoreError

logger = logging.getLogger(__name__)

app = FastAPI(
    title="cloudstore API",
    description="Create and update objects with users, sessions, installations and triggers",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CloudStoreError)
async def _cloudstore_error(request: Request, exc: CloudStoreError):
    return error_response(exc)


@app.exception_handler(UnauthorizedError)
async def _unauthorized(request: Request, exc: UnauthorizedError):
    return JSONResponse(status_code=403, content={"error": "unauthorized"})


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": "0.1.0"}


app.include_router(classes.router, tags=["Classes"])
app.include_router(system.router, tags=["System Classes"])


@app.on_event("startup")
async def _startup():
    configure_logging()
    bootstrap_dependencies()
    # CLOUDSTORE_CONFIG points at a YAML file with one app's options
    config_path = os.getenv("CLOUDSTORE_CONFIG")
    if config_path:
        register_app(AppOptions.from_yaml(config_path))


@app.on_event("shutdown")
async def _shutdown():
    cache = Container.instance().resolve(AppCache)
    for entry in cache.entries():
        await entry.background.drain()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
