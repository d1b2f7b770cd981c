import logging
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from .errors import OriginRejected

logger = logging.getLogger(__name__)


class OriginFilterMiddleware(BaseHTTPMiddleware):
    """Refuse browser requests whose Origin is not on the allow-list.

    Requests without an Origin header (same-origin, curl, server to server) pass.
    Rejected requests never reach a handler.
    """

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    def is_allowed(self, origin: str) -> bool:
        return not origin or origin in self.allowed_origins

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        origin = request.headers.get("origin")
        if self.is_allowed(origin):
            return await call_next(request)

        logger.warning(f"CORS blocked request from: {origin}")
        error = OriginRejected()
        return JSONResponse(status_code=error.status_code, content={"message": error.message})
