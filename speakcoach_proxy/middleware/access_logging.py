import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

logger = logging.getLogger("SpeakCoachProxy.AccessLog")

EXCLUDED_PATHS = {"/health", "/favicon.ico"}


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000

        if request.url.path not in EXCLUDED_PATHS:
            # behind a proxy the first X-Forwarded-For entry is the client
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                real_ip = forwarded.split(",")[0].strip()
            else:
                real_ip = request.client.host if request.client else "-"

            logger.info(
                f"{real_ip} {request.method} {request.url.path} -> {response.status_code} "
                f"({process_time:.1f}ms)"
            )

        return response
