# The module provides the FastAPI application that serves as the main entry point for the MCP chat server.
# Date: 2025-07-06
# Version: 0.2.0

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mcp_chat.api.api import api_router
from mcp_chat.core.config import Settings, get_settings
from mcp_chat.core.dispatcher import ToolDispatcher
from mcp_chat.core.errors import MCPChatError, ProviderError, ToolExecutionError
from mcp_chat.core.orchestrator import ChatOrchestrator
from mcp_chat.services.connection_store import ConnectionStore
from mcp_chat.services.discovery import ToolDiscoveryClient
from mcp_chat.services.llm_connector import ChatProvider, create_chat_provider
from mcp_chat.utils.logger import console


def _error_body(error: MCPChatError) -> dict:
    body = {"success": False, "error": error.message}
    if isinstance(error, ToolExecutionError) and error.body:
        body["details"] = error.body
    if isinstance(error, ProviderError) and error.details:
        body["details"] = error.details
    return body


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(MCPChatError)
    async def handle_mcp_chat_error(request: Request, exc: MCPChatError):
        console.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        console.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request body"})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        console.exception(f"Unexpected error while handling {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


def create_app(settings: Optional[Settings] = None,
               transport: Optional[httpx.AsyncBaseTransport] = None,
               provider: Optional[ChatProvider] = None) -> FastAPI:
    """
    Builds the application. The connection store and the MCP clients are
    created when the app starts and live on `app.state`.

    Args:
        settings: Configuration, `get_settings()` when omitted.
        transport: httpx transport used for tool discovery and invocation.
        provider: Chat provider adapter, built from settings when omitted.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        console.rule("MCP Chat Server")
        console.display_data_as_table(settings.summary(), "Server Configuration")
        missing = settings.validate_config()
        if missing:
            console.display_error_panel("Configuration Warning", "\n".join(f"- {m}" for m in missing))

        store = ConnectionStore(settings.MCP_STORAGE_FILE, settings.MCP_BACKUP_DIR or None)
        discovery = ToolDiscoveryClient(timeout=settings.DISCOVERY_TIMEOUT, transport=transport)
        dispatcher = ToolDispatcher(store, discovery, timeout=settings.TOOL_TIMEOUT, transport=transport)
        chat_provider = provider or create_chat_provider(settings)

        app.state.settings = settings
        app.state.connection_store = store
        app.state.discovery = discovery
        app.state.dispatcher = dispatcher
        app.state.provider = chat_provider
        app.state.orchestrator = ChatOrchestrator(
            store, discovery, dispatcher, chat_provider, tools_enabled=settings.ENABLE_MCP_TOOLS
        )
        console.success(f"MCP Chat Server ready with {len(store.list())} stored connection(s).")
        yield
        console.info("MCP Chat Server shutting down.")

    app = FastAPI(
        title="MCP Chat Server",
        version="0.2.0",
        description="Chat with a configurable AI provider that can call tools on registered MCP servers.",
        lifespan=lifespan,
    )
    register_exception_handlers(app)

    @app.get("/health", summary="Health Check", tags=["Status"])
    def health_check():
        """Root endpoint to check if the service is alive."""
        return {
            "success": True,
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "config": {
                "aiProvider": settings.AI_PROVIDER,
                "aiConfigured": bool(settings.provider_options()["api_key"]),
                "port": settings.PORT,
                "features": settings.summary()["features"],
            },
        }

    # Include the API router with a global '/api' prefix
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


def run():
    settings = get_settings()
    uvicorn.run("mcp_chat.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
