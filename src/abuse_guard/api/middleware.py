import hmac
import logging
from collections.abc import Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from abuse_guard.api.modules.inspection.schema import (
    BanDeniedResponse,
    InspectionResult,
    ScoreDeniedResponse,
)
from abuse_guard.api.modules.inspection.service import DecisionEngine

logger = logging.getLogger(__name__)

_BAN_MESSAGES = {
    "denied_network_ban": "IP banned due to suspicious activity",
    "denied_device_ban": "Device banned due to suspicious activity",
}
_SCORE_MESSAGE = "Blocked: high risk behavior"


def matches_prefix(path: str, prefix: str) -> bool:
    """Prefix match on whole path segments: ``/health`` covers ``/health/db``, not ``/healthz``."""
    prefix = prefix.rstrip("/")
    if not prefix:
        return True
    return path == prefix or path.startswith(prefix + "/")


def is_exempt(path: str, exempt_prefixes: Sequence[str]) -> bool:
    return any(matches_prefix(path, prefix) for prefix in exempt_prefixes)


def deny_response(result: InspectionResult) -> JSONResponse:
    if result.verdict == "denied_newly_scored":
        body = ScoreDeniedResponse(
            message=_SCORE_MESSAGE,
            risk_score=result.risk_score,
        ).model_dump(by_alias=True)
    else:
        body = BanDeniedResponse(message=_BAN_MESSAGES[result.verdict]).model_dump()
    return JSONResponse(body, status_code=result.status_code)


class InspectionMiddleware(BaseHTTPMiddleware):
    """Runs every non-exempt request through the decision engine.

    Any unexpected failure admits the request.
    """

    def __init__(self, app, exempt_paths: Sequence[str]) -> None:  # noqa: ANN001
        super().__init__(app)
        self._exempt_paths = tuple(exempt_paths)

    async def dispatch(self, request: Request, call_next) -> Response:  # noqa: ANN001
        if is_exempt(request.url.path, self._exempt_paths):
            return await call_next(request)

        try:
            engine = await request.app.state.dishka_container.get(DecisionEngine)
            result = await engine.inspect_request(request)
        except Exception:
            logger.exception("Request inspection failed, admitting request")
            return await call_next(request)

        if result.allowed:
            return await call_next(request)
        return deny_response(result)


class ApiKeyMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, api_key: str, protected_prefix: str) -> None:  # noqa: ANN001
        super().__init__(app)
        self._api_key = api_key
        self._protected_prefix = protected_prefix

    async def dispatch(self, request: Request, call_next) -> Response:  # noqa: ANN001
        if not matches_prefix(request.url.path, self._protected_prefix):
            return await call_next(request)

        provided = request.headers.get("X-API-Key", "")
        if not hmac.compare_digest(provided, self._api_key):
            return JSONResponse(
                {"detail": "Invalid or missing API key"},
                status_code=401,
            )

        return await call_next(request)
