import asyncio
from contextlib import asynccontextmanager, suppress
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketchat.config import get_settings
from marketchat.infrastructure.database import engine, initialize_database
from marketchat.infrastructure.realtime import ChannelConnectionManager, ChannelPublisher
from marketchat.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


async def _sweep_presence(manager: ChannelConnectionManager, max_idle: float) -> None:
    """Periodically drop presence members whose clients stopped pinging."""

    while True:
        await asyncio.sleep(max_idle / 3)
        try:
            evicted = await manager.evict_stale_presence(max_idle)
        except Exception:
            logger.warning("Presence sweep failed", exc_info=True)
            continue
        if evicted:
            logger.debug("Evicted stale presence members: %s", evicted)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the database and realtime transport, release them on shutdown."""

    settings = get_settings()
    initialize_database()
    manager = ChannelConnectionManager()
    app.state.channel_manager = manager
    app.state.channel_publisher = ChannelPublisher(manager)
    sweeper = asyncio.create_task(_sweep_presence(manager, settings.presence_idle_seconds))
    try:
        yield
    finally:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
        client = getattr(app.state, "bkash_client", None)
        if client is not None:
            client.close()
        engine.dispose()


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title="MarketChat API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
