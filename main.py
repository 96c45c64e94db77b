"""
Main entrypoint: FastAPI health server with the rewards worker in its lifespan.

Startup verifies the signing wallet's ACL role and the achievement catalog
before the worker consumes any job; a failed check exits the process.

Env: AO_CHEESE_MINT_PROCESS_ID, AO_WALLET_JWK_PATH, AO_STATE_CACHE_TTL_MS,
CU_URL, MU_URL, REDIS_*, WORKER_CONCURRENCY, API_HOST, PORT, LOG_LEVEL.
"""

import os
import sys

# Configure structured JSON logging before other imports that may log
from rewards_goblin.rewards_logging import get_logger

logger = get_logger("main")


def main() -> int:
    """Load settings, then run the ASGI app (and its worker) until shutdown."""
    from rewards_goblin.config import get_settings
    from rewards_goblin.core.exceptions import ConfigError

    try:
        settings = get_settings()
    except ConfigError as e:
        logger.error("main_config_error", error=str(e))
        return 1

    import uvicorn

    from rewards_goblin.api_server.app import app

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
