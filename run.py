#!/usr/bin/env python3
"""
SpeakCoach Proxy server runner
"""
import os
import sys
import logging
import uvicorn
from dotenv import load_dotenv

load_dotenv()

from speakcoach_proxy.main import app

logger = logging.getLogger("SpeakCoachProxy.Runner")


def main():
    try:
        host = os.getenv("HOST", "0.0.0.0")
        port = int(os.getenv("PORT", "7860"))
        log_level = os.getenv("LOG_LEVEL", "info").lower()

        logger.info(f"Starting SpeakCoach Proxy on {host}:{port} (log level {log_level.upper()})")

        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level=log_level,
            access_log=False,
            loop="asyncio"
        )

    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user (Ctrl+C)")
    except Exception as e:
        logger.error(f"Failed to start server: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
