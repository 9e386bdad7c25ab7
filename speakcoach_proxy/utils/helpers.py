import orjson
import logging
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

logger = logging.getLogger("SpeakCoachProxy.Utils")


class ORJSONBodyResponse(JSONResponse):
    """JSONResponse rendered with orjson (keeps non-str keys from upstream payloads)."""

    def render(self, content: Any) -> bytes:
        return orjson.dumps(content, option=orjson.OPT_NON_STR_KEYS)


def json_response(content: Any, status_code: int = 200) -> JSONResponse:
    return ORJSONBodyResponse(status_code=status_code, content=content)


def error_response(code: int, msg: Any, extra: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    logger.warning(f"Error {code}: {msg}")
    content: Dict[str, Any] = {"error": msg}
    if extra:
        content.update(extra)
    return ORJSONBodyResponse(status_code=code, content=content, headers=headers)


def parse_json_or_empty(raw: bytes) -> Any:
    """Decode an upstream body, falling back to an empty dict when it is not JSON."""
    if not raw:
        return {}
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.debug(f"Upstream body is not JSON (first 200 bytes): {raw[:200]!r}")
        return {}
