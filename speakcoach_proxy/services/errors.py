from typing import Any


class UpstreamError(Exception):
    """Raised when an upstream API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: Any, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload if payload is not None else {}
