"""Shared-secret authentication gate and middleware."""

import hmac
import logging
from enum import Enum
from typing import Callable, Sequence

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from readwise_mcp.config.loader import ServerConfig
from readwise_mcp.mcp.errors import FORBIDDEN, UNAUTHORIZED, make_error_data

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"
API_KEY_QUERY_PARAM = "apiKey"


class AuthDecision(str, Enum):
    ALLOW = "allow"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"


class AuthGate:
    """
    Check caller credentials against the configured shared secret.

    With no secret configured every request is allowed. This fail-open
    posture is part of the server's contract: deployments that want
    authentication set MCP_API_KEY.
    """

    def __init__(self, config: ServerConfig):
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.auth_enabled

    def authorize(self, candidates: Sequence[str | None]) -> AuthDecision:
        """
        Decide on an ordered list of credential candidates.

        The first non-empty candidate is the provided credential.
        """
        if not self.enabled:
            return AuthDecision.ALLOW

        provided = next((c for c in candidates if c), None)
        if provided is None:
            return AuthDecision.UNAUTHORIZED

        expected = self.config.api_key or ""
        if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
            return AuthDecision.FORBIDDEN

        return AuthDecision.ALLOW


def extract_bearer_token(authorization: str | None) -> str | None:
    """Strip a "Bearer " prefix; other Authorization values are used as-is."""
    if authorization is None:
        return None
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer "):]
    return authorization


def credential_candidates(request: Request) -> list[str | None]:
    """Credentials in precedence order: bearer token, X-API-Key header, apiKey query."""
    return [
        extract_bearer_token(request.headers.get("Authorization")),
        request.headers.get(API_KEY_HEADER),
        request.query_params.get(API_KEY_QUERY_PARAM),
    ]


_DENIALS = {
    AuthDecision.UNAUTHORIZED: (401, UNAUTHORIZED),
    AuthDecision.FORBIDDEN: (403, FORBIDDEN),
}


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce authentication on protected endpoints."""

    # Paths that require authentication (when enabled)
    PROTECTED_PATHS = ("/mcp", "/sse")

    def __init__(self, app: ASGIApp, gate: AuthGate):
        super().__init__(app)
        self.gate = gate

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        path = request.url.path

        if path not in self.PROTECTED_PATHS:
            return await call_next(request)

        decision = self.gate.authorize(credential_candidates(request))
        if decision is AuthDecision.ALLOW:
            return await call_next(request)

        status_code, code = _DENIALS[decision]
        logger.warning(f"Rejected request to {path}: {decision.value}")
        return JSONResponse(
            status_code=status_code,
            content={
                "jsonrpc": "2.0",
                "id": None,
                "error": make_error_data(code),
            },
        )
