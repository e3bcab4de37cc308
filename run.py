"""Entry point for the Address Book API.

Launches the FastAPI application under Uvicorn.  Host and port are
read from the ``HOST`` and ``PORT`` environment variables (defaults
``0.0.0.0`` and ``8000``); see ``address_book_api/app/core/config.py``
for the remaining settings.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from address_book_api.app.core.config import settings
from address_book_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


def main() -> None:
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Address Book API stopped")


if __name__ == "__main__":
    main()
