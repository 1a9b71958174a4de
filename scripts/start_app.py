#!/usr/bin/env python3
"""Start the idlink API with Logfire error tracking for startup errors."""

import sys
import logfire
import uvicorn

from idlink.config import Settings
from idlink.util.logging import setup_logging
from idlink.util.observability import configure_logfire


def main() -> int:
    """Start the application and log any startup errors to Logfire."""
    settings = Settings()

    # Route loggers first, then Logfire, so startup errors are captured
    setup_logging(settings)
    configure_logfire(settings)

    try:
        logfire.info(
            "Starting idlink API",
            environment=settings.environment,
            git_sha=settings.git_sha,
        )

        # The app module builds its own container on import
        uvicorn.run(
            "idlink.interface.api.app:app",
            host="0.0.0.0",
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )

        return 0

    except Exception as e:
        logfire.error(
            "Application startup failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the container fails properly
        raise


if __name__ == "__main__":
    sys.exit(main())
