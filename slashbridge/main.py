"""slashbridge application entry point.

Quick Start:
    $ slashbridge-server           # Start the server
    $ slashbridge serve            # Same, via the CLI

Environment:
    SLASHBRIDGE_ENV                # development/production (default: development)
    SLASHBRIDGE_LOG_LEVEL          # DEBUG/INFO/WARNING/ERROR (default: INFO)
    ACTION_SERVER_URL              # where /list-actions and /perform-action live
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI

from slashbridge import __version__
from slashbridge.api.routes import router, set_services
from slashbridge.config import get_settings
from slashbridge.logging_config import get_logger, setup_logging
from slashbridge.modules.actions.dispatch import DispatchGateway
from slashbridge.modules.actions.sync import ActionSync

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Activation hook: start the command sync once, stop it on shutdown."""
    settings = get_settings()
    logger.info("slashbridge_starting", version=__version__, action_server=settings.action_server_url)

    action_sync = ActionSync(settings=settings)
    gateway = DispatchGateway(settings=settings)
    set_services(action_sync, gateway)
    app.state.action_sync = action_sync
    app.state.gateway = gateway

    await action_sync.start()
    logger.info("slashbridge_ready", env=settings.slashbridge_env)

    try:
        yield
    finally:
        await action_sync.stop()
        set_services(None, None)
        logger.info("slashbridge_stopped")


app = FastAPI(
    title="slashbridge",
    description="Slash commands defined by a remote action server",
    version=__version__,
    lifespan=lifespan,
)

# Include API routes
app.include_router(router, prefix="/api")


def main() -> None:
    """Run the API server with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "slashbridge.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.slashbridge_env == "development",
        log_level=settings.slashbridge_log_level.lower(),
    )


if __name__ == "__main__":
    main()
