from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mychangex import __version__
from mychangex.core.config import get_settings
from mychangex.core.container import get_container
from mychangex.core.logging import configure_logging
from mychangex.infrastructure.database.session import dispose_engine, init_db
from mychangex.interfaces.http.errors import register_error_handlers
from mychangex.interfaces.http.routers import create_api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_db()
    container = get_container()
    yield
    await container.shutdown()
    await dispose_engine()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.project_name,
        description="Peer-to-peer digital change and coupon wallet",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))
    return app


app = create_app()
