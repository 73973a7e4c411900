"""Entry point for serving the Meetup API.

Starts uvicorn with the application from ``meetup_api.app.main``.  Host
and port are read from the ``HOST`` and ``PORT`` environment variables
(defaults ``0.0.0.0`` and ``8000``); the rest of the configuration is
described in ``meetup_api/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from meetup_api.app.main import app


async def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Server stopped")
