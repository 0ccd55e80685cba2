"""JSON-RPC 2.0 message processing."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from readwise_mcp.mcp.models import JsonRpcRequest, JsonRpcResponse, JsonRpcError
from readwise_mcp.mcp.handlers import MCPHandlers
from readwise_mcp.mcp.errors import (
    PARSE_ERROR,
    INVALID_REQUEST,
    INTERNAL_ERROR,
    describe_exception,
    make_error_data,
)

logger = logging.getLogger(__name__)

# Errors raised before routing are transport-level failures
_BAD_REQUEST_CODES = {PARSE_ERROR, INVALID_REQUEST}


def validate_envelope(data: Any) -> tuple[JsonRpcRequest | None, JsonRpcResponse | None]:
    """
    Check that a decoded payload is a JSON-RPC 2.0 request.

    Returns (request, rejection) tuple. One will be None. The rejection
    echoes the inbound id when there is one.
    """
    if not isinstance(data, dict):
        return None, JsonRpcResponse(
            id=None, error=JsonRpcError(**make_error_data(INVALID_REQUEST))
        )

    try:
        return JsonRpcRequest.model_validate(data), None
    except ValidationError as e:
        logger.info(f"Rejected JSON-RPC envelope: {e.error_count()} error(s)")
        return None, JsonRpcResponse(
            id=data.get("id"),
            error=JsonRpcError(**make_error_data(INVALID_REQUEST)),
        )


def encode_response(response: JsonRpcResponse) -> str:
    """Render a response as strict JSON, the way it is sent on the wire."""
    return json.dumps(
        response.model_dump(),
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
    )


def http_status_for(response: JsonRpcResponse) -> int:
    """HTTP status for a response produced without an unexpected failure."""
    if response.error is not None and response.error.code in _BAD_REQUEST_CODES:
        return 400
    return 200


class JsonRpcProcessor:
    """Process JSON-RPC 2.0 messages."""

    def __init__(self, handlers: MCPHandlers):
        self.handlers = handlers

    def parse_request(
        self, raw_data: str | bytes
    ) -> tuple[JsonRpcRequest | None, JsonRpcResponse | None]:
        """
        Parse a JSON-RPC request from raw data.

        Returns (request, rejection) tuple. One will be None.
        """
        try:
            if isinstance(raw_data, bytes):
                raw_data = raw_data.decode("utf-8")
            data = json.loads(raw_data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            return None, JsonRpcResponse(
                id=None,
                error=JsonRpcError(**make_error_data(PARSE_ERROR, data=str(e))),
            )

        return validate_envelope(data)

    async def process_request(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Route a validated request and wrap the outcome in a response."""
        result, error = await self.handlers.dispatch(request.method, request.params)

        if error is not None:
            return JsonRpcResponse(
                id=request.id,
                error=JsonRpcError(**error),
            )
        return JsonRpcResponse(
            id=request.id,
            result=result,
        )

    async def handle_message(self, raw_data: str | bytes) -> tuple[JsonRpcResponse, int]:
        """
        Handle a raw JSON-RPC message end-to-end.

        Returns the response together with the HTTP status to send it with:
        400 for unparseable or invalid envelopes, 500 when routing failed
        unexpectedly or the result cannot be encoded as JSON, 200 otherwise
        (protocol errors included).
        """
        request, rejection = self.parse_request(raw_data)

        if rejection is not None:
            return rejection, http_status_for(rejection)

        try:
            response = await self.process_request(request)  # type: ignore[arg-type]
            # Tool results are opaque; catch the ones JSON cannot carry here
            encode_response(response)
        except Exception as e:
            logger.exception("Error handling MCP request")
            return JsonRpcResponse(
                id=request.id,  # type: ignore[union-attr]
                error=JsonRpcError(
                    **make_error_data(INTERNAL_ERROR, data=describe_exception(e))
                ),
            ), 500

        return response, http_status_for(response)
