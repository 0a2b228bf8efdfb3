from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stargallery.api.endpoints import get_endpoints_router
from stargallery.permissions.consent import ConsentPermissionService
from stargallery.saver.channel import ImageSaverChannel


def create_app(
    *,
    channel: ImageSaverChannel,
    permissions: ConsentPermissionService,
) -> FastAPI:
    """Create FastAPI app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        channel.close()

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router=get_endpoints_router(channel=channel, permissions=permissions))

    return app
