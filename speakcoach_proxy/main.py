import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import APP_VERSION, LOG_LEVEL_FROM_ENV, CORS_ALLOW_ORIGINS
from .core.http_client import get_http_client, close_http_client
from .api import analyze as analyze_router
from .api import pronounce as pronounce_router
from .middleware import AccessLogMiddleware
from .utils.helpers import error_response

numeric_log_level = getattr(logging, LOG_LEVEL_FROM_ENV.upper(), logging.INFO)

root_logger = logging.getLogger()
root_logger.setLevel(numeric_log_level)

console_handler = logging.StreamHandler()
console_handler.setFormatter(logging.Formatter(
    '%(asctime)s %(levelname)-8s [%(name)s:%(module)s:%(lineno)d] - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
))
root_logger.addHandler(console_handler)

logger = logging.getLogger("SpeakCoachProxy.Main")

for lib_logger_name in ["httpx", "httpcore", "uvicorn.access"]:
    logging.getLogger(lib_logger_name).setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    logger.info("Lifespan: starting up")
    try:
        app_instance.state.http_client = get_http_client()
    except Exception as e:
        logger.error(f"Lifespan: HTTP client initialization failed: {e}", exc_info=True)
        app_instance.state.http_client = None

    yield

    logger.info("Lifespan: shutting down, closing HTTP client")
    try:
        await close_http_client()
    except Exception as e:
        logger.error(f"Lifespan: error while closing HTTP client: {e}", exc_info=True)

    if hasattr(app_instance.state, "http_client"):
        delattr(app_instance.state, "http_client")
    logger.info("Lifespan: shutdown complete")


app = FastAPI(
    title="SpeakCoach Proxy",
    description=f"Speaking practice proxy, version: {APP_VERSION}",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(AccessLogMiddleware)

# added last so it runs first
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)
logger.info(f"FastAPI SpeakCoach Proxy v{APP_VERSION} initialized, CORS origins: {CORS_ALLOW_ORIGINS}")

app.include_router(analyze_router.router)
logger.info("Analyze route loaded at /api/analyze")

app.include_router(pronounce_router.router)
logger.info("Pronounce route loaded at /api/pronounce")


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    # API routes answer a wrong method with the same error shape as other failures
    if exc.status_code == 405:
        return error_response(405, "Method not allowed", headers=exc.headers)
    return await http_exception_handler(request, exc)


@app.get("/", status_code=200, include_in_schema=False, tags=["Utilities"])
async def root():
    return {
        "message": "SpeakCoach Proxy API is running",
        "version": APP_VERSION,
        "status": "ok",
        "endpoints": {
            "analyze": "/api/analyze",
            "pronounce": "/api/pronounce",
            "health": "/health",
            "docs": "/docs"
        }
    }


@app.get("/health", status_code=200, include_in_schema=False, tags=["Utilities"])
async def health_check(request: Request):
    client_from_state = getattr(request.app.state, "http_client", None)
    client_status = "ok"
    detail_message = "HTTP client initialized and seems operational."

    if client_from_state is None:
        client_status = "error"
        detail_message = "HTTP client not initialized in app.state."
    elif not isinstance(client_from_state, httpx.AsyncClient):
        client_status = "error"
        detail_message = f"Unexpected object type in app.state.http_client: {type(client_from_state)}"
    elif client_from_state.is_closed:
        client_status = "warning"
        detail_message = "HTTP client in app.state is closed."

    return {"status": client_status, "detail": detail_message, "app_version": APP_VERSION}
