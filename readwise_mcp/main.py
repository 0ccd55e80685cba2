"""FastAPI MCP Server - Main application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from readwise_mcp.config.loader import (
    Settings,
    build_server_config,
    get_enabled_providers,
    get_provider_config,
    load_api_config,
    load_settings,
)
from readwise_mcp.mcp.bridge import ToolBridge
from readwise_mcp.mcp.handlers import MCPHandlers
from readwise_mcp.mcp.jsonrpc import JsonRpcProcessor
from readwise_mcp.mcp.registry import ToolRegistry
from readwise_mcp.mcp.transport_sse import StreamManager
from readwise_mcp.security.auth import AuthGate, AuthMiddleware
from readwise_mcp.security.cors import CORSHeadersMiddleware
from readwise_mcp.utils.logging import setup_logging, set_request_id, get_logger


def build_registry(settings: Settings) -> ToolRegistry:
    """Create the tool registry and load the configured providers."""
    log = get_logger("startup")
    config = load_api_config()
    enabled_providers = get_enabled_providers(config)
    log.info("Loading providers", providers=enabled_providers)

    registry = ToolRegistry()
    for provider in enabled_providers:
        if registry.load_provider(provider, settings, get_provider_config(provider, config)):
            log.info("Loaded provider", provider=provider)
        else:
            log.warning("Failed to load provider", provider=provider)

    log.info(
        "Tool registry ready",
        provider_count=registry.provider_count,
        tool_count=registry.tool_count,
    )

    return registry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    log = get_logger("startup")

    port = settings.port
    log.info(
        "Readwise MCP Enhanced server running",
        port=port,
        mcp_endpoint=f"http://localhost:{port}/mcp",
        sse_endpoint=f"http://localhost:{port}/sse",
        health_check=f"http://localhost:{port}/health",
        tool_count=len(app.state.server_config.tools),
    )
    log.info(
        "Configuration",
        api_key_authentication="Enabled" if settings.auth_enabled else "Disabled",
        readwise_token="Configured" if settings.readwise_token else "Missing",
    )

    yield

    log.info("Shutting down MCP server")
    await app.state.streams.close_all()


def create_app(
    settings: Settings | None = None,
    registry: ToolRegistry | None = None,
) -> FastAPI:
    """
    Build the application.

    With no arguments, settings come from the environment (a missing
    READWISE_TOKEN exits the process) and tools from the enabled providers.
    """
    if settings is None:
        settings = load_settings()
    setup_logging(settings)

    if not settings.auth_enabled:
        log = get_logger("startup")
        log.warning("MCP_API_KEY not set. Server will run without API key authentication.")
        log.warning("For production use, please set MCP_API_KEY in your environment variables.")

    if registry is None:
        registry = build_registry(settings)

    server_config = build_server_config(settings, registry.list_tools())
    handlers = MCPHandlers(server_config, ToolBridge(registry))

    app = FastAPI(
        title="Readwise MCP Enhanced",
        description="MCP server exposing Readwise highlights and Reader documents over JSON-RPC",
        version=settings.server_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.server_config = server_config
    app.state.processor = JsonRpcProcessor(handlers)
    app.state.streams = StreamManager(settings.sse_keepalive_seconds)

    # Last added runs first: CORS answers OPTIONS before auth sees it
    app.add_middleware(AuthMiddleware, gate=AuthGate(server_config))
    app.add_middleware(CORSHeadersMiddleware)

    @app.middleware("http")
    async def add_request_id_middleware(request: Request, call_next):
        """Add request ID to all requests."""
        request_id = request.headers.get("X-Request-ID") or set_request_id()
        set_request_id(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    register_routes(app)
    return app


def register_routes(app: FastAPI) -> None:
    """Attach the HTTP endpoints."""

    @app.get("/health")
    async def health(request: Request) -> dict:
        """Health check endpoint."""
        return {"status": "ok", "service": request.app.state.settings.server_name}

    @app.get("/")
    async def root(request: Request) -> dict:
        """Root endpoint with server info."""
        config = request.app.state.server_config
        return {
            "name": config.server_name,
            "version": config.server_version,
            "endpoints": {
                "health": "/health",
                "mcp": "/mcp",
                "sse": "/sse",
            },
            "tools_available": len(config.tools),
            "mcp_protocol_version": config.protocol_version,
            "auth_enabled": config.auth_enabled,
            "open_streams": request.app.state.streams.connection_count,
        }

    @app.post("/mcp")
    async def mcp_endpoint(request: Request) -> JSONResponse:
        """
        JSON-RPC 2.0 endpoint.

        Protocol errors (unknown method, missing tool name, failing tool)
        are returned with HTTP 200; malformed envelopes get 400.
        """
        body = await request.body()
        processor: JsonRpcProcessor = request.app.state.processor
        response, status_code = await processor.handle_message(body)
        return JSONResponse(status_code=status_code, content=response.model_dump())

    @app.get("/sse")
    async def sse_endpoint(request: Request):
        """
        Long-lived event stream.

        Sends one connection event, then comment keep-alives until the
        client goes away. Tool results are never delivered here.
        """
        streams: StreamManager = request.app.state.streams
        connection = streams.open()
        return streams.create_response(connection)


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
