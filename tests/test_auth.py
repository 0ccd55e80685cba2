"""Tests for the shared-secret auth gate and CORS handling."""

import pytest
from fastapi.testclient import TestClient

from readwise_mcp.config.loader import ServerConfig
from readwise_mcp.mcp.errors import FORBIDDEN, UNAUTHORIZED
from readwise_mcp.security.auth import AuthDecision, AuthGate, extract_bearer_token
from readwise_mcp.security.cors import CORS_HEADERS

API_KEY = "test-secret"


def make_gate(api_key: str | None) -> AuthGate:
    return AuthGate(ServerConfig(server_name="test", server_version="0.0.0", api_key=api_key))


class TestAuthGate:
    """Tests for AuthGate.authorize."""

    @pytest.mark.parametrize(
        "candidates", [[], [None, None, None], ["anything", None, None], ["", "", ""]]
    )
    def test_disabled_gate_allows_everything(self, candidates):
        """Test that without a secret every request passes."""
        assert make_gate(None).authorize(candidates) is AuthDecision.ALLOW

    @pytest.mark.parametrize("candidates", [[], [None, None, None], ["", None, ""]])
    def test_missing_credential_is_unauthorized(self, candidates):
        """Test that no non-empty candidate means unauthorized."""
        assert make_gate(API_KEY).authorize(candidates) is AuthDecision.UNAUTHORIZED

    def test_wrong_credential_is_forbidden(self):
        """Test that a mismatching credential is forbidden."""
        assert make_gate(API_KEY).authorize(["wrong", None, None]) is AuthDecision.FORBIDDEN

    def test_matching_credential_is_allowed(self):
        """Test that an exact match is allowed."""
        assert make_gate(API_KEY).authorize([API_KEY, None, None]) is AuthDecision.ALLOW

    def test_comparison_is_exact(self):
        """Test that case and whitespace differences are not accepted."""
        gate = make_gate(API_KEY)
        assert gate.authorize([API_KEY.upper()]) is AuthDecision.FORBIDDEN
        assert gate.authorize([f" {API_KEY}"]) is AuthDecision.FORBIDDEN

    def test_first_non_empty_candidate_wins(self):
        """Test candidate precedence: earlier sources shadow later ones."""
        gate = make_gate(API_KEY)
        assert gate.authorize(["wrong", API_KEY, None]) is AuthDecision.FORBIDDEN
        assert gate.authorize([None, "", API_KEY]) is AuthDecision.ALLOW
        assert gate.authorize(["", API_KEY, "wrong"]) is AuthDecision.ALLOW


class TestExtractBearerToken:
    """Tests for Authorization header parsing."""

    def test_bearer_prefix_is_stripped(self):
        assert extract_bearer_token("Bearer abc") == "abc"

    def test_other_values_are_used_verbatim(self):
        assert extract_bearer_token("abc") == "abc"
        assert extract_bearer_token("Token abc") == "Token abc"

    def test_missing_header(self):
        assert extract_bearer_token(None) is None


class TestAuthMiddleware:
    """Tests for authentication on the HTTP surface."""

    def test_missing_credential_returns_401(self, auth_client: TestClient, sample_jsonrpc_request):
        """Test that no credential in any location yields -32001."""
        response = auth_client.post("/mcp", json=sample_jsonrpc_request("initialize"))
        assert response.status_code == 401

        data = response.json()
        assert data == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": UNAUTHORIZED, "message": "Unauthorized: API key required"},
        }

    def test_wrong_credential_returns_403(self, auth_client: TestClient, sample_jsonrpc_request):
        """Test that an unequal credential yields -32003."""
        response = auth_client.post(
            "/mcp",
            json=sample_jsonrpc_request("initialize"),
            headers={"Authorization": "Bearer wrong"},
        )
        assert response.status_code == 403

        data = response.json()
        assert data["error"]["code"] == FORBIDDEN
        assert data["error"]["message"] == "Forbidden: Invalid API key"
        assert data["id"] is None

    @pytest.mark.parametrize(
        "headers, params",
        [
            ({"Authorization": f"Bearer {API_KEY}"}, {}),
            ({"Authorization": API_KEY}, {}),
            ({"X-API-Key": API_KEY}, {}),
            ({}, {"apiKey": API_KEY}),
        ],
    )
    def test_valid_credential_reaches_router(
        self, auth_client: TestClient, sample_jsonrpc_request, headers, params
    ):
        """Test each credential location."""
        response = auth_client.post(
            "/mcp",
            json=sample_jsonrpc_request("tools/list"),
            headers=headers,
            params=params,
        )
        assert response.status_code == 200
        assert "result" in response.json()

    def test_authorization_header_shadows_api_key_header(
        self, auth_client: TestClient, sample_jsonrpc_request
    ):
        """Test that a wrong bearer token is not rescued by a correct X-API-Key."""
        response = auth_client.post(
            "/mcp",
            json=sample_jsonrpc_request("tools/list"),
            headers={"Authorization": "Bearer wrong", "X-API-Key": API_KEY},
        )
        assert response.status_code == 403

    def test_auth_runs_before_envelope_validation(self, auth_client: TestClient):
        """Test that unauthenticated garbage gets 401, not 400."""
        response = auth_client.post("/mcp", content="not json")
        assert response.status_code == 401

    def test_sse_requires_credential(self, auth_client: TestClient):
        """Test that the stream endpoint is gated."""
        assert auth_client.get("/sse").status_code == 401
        response = auth_client.get("/sse", headers={"X-API-Key": "wrong"})
        assert response.status_code == 403
        assert response.json()["error"]["code"] == FORBIDDEN

    def test_health_is_public(self, auth_client: TestClient):
        """Test that the health check needs no credential."""
        assert auth_client.get("/health").status_code == 200

    @pytest.mark.parametrize("path", ["/mcpfoo", "/sse-x", "/ssex/stream"])
    def test_only_exact_endpoints_are_gated(self, auth_client: TestClient, path):
        """Test that lookalike paths fall through to routing instead of auth."""
        response = auth_client.get(path)
        assert response.status_code == 404

    def test_disabled_auth_allows_requests_without_credential(
        self, client: TestClient, sample_jsonrpc_request
    ):
        """Test the fail-open posture when no secret is configured."""
        response = client.post("/mcp", json=sample_jsonrpc_request("tools/list"))
        assert response.status_code == 200

    def test_disabled_auth_ignores_supplied_credential(
        self, client: TestClient, sample_jsonrpc_request
    ):
        """Test that any credential is fine when auth is disabled."""
        response = client.post(
            "/mcp",
            json=sample_jsonrpc_request("tools/list"),
            headers={"Authorization": "Bearer whatever"},
        )
        assert response.status_code == 200


class TestCors:
    """Tests for CORS headers and OPTIONS handling."""

    @pytest.mark.parametrize("path", ["/mcp", "/sse", "/health", "/does-not-exist"])
    def test_options_short_circuits(self, auth_client: TestClient, path):
        """Test that OPTIONS returns 200 with no body, even on protected paths."""
        response = auth_client.options(path)
        assert response.status_code == 200
        assert response.content == b""
        for header, value in CORS_HEADERS.items():
            assert response.headers[header] == value

    def test_cors_headers_on_success(self, client: TestClient):
        response = client.get("/health")
        for header, value in CORS_HEADERS.items():
            assert response.headers[header] == value

    def test_cors_headers_on_auth_failure(self, auth_client: TestClient):
        response = auth_client.post("/mcp", json={})
        assert response.status_code == 401
        assert response.headers["Access-Control-Allow-Origin"] == "*"
