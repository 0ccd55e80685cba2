"""Security modules: shared-secret authentication and CORS."""

from readwise_mcp.security.auth import AuthDecision, AuthGate, AuthMiddleware
from readwise_mcp.security.cors import CORSHeadersMiddleware

__all__ = ["AuthDecision", "AuthGate", "AuthMiddleware", "CORSHeadersMiddleware"]
