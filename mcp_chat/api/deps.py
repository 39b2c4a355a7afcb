# Request-scoped accessors for the services created at application startup.
# Date: 2025-07-05
# Version: 0.1.0

from fastapi import Request

from mcp_chat.core.config import Settings
from mcp_chat.core.dispatcher import ToolDispatcher
from mcp_chat.core.orchestrator import ChatOrchestrator
from mcp_chat.services.connection_store import ConnectionStore
from mcp_chat.services.discovery import ToolDiscoveryClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ConnectionStore:
    return request.app.state.connection_store


def get_discovery(request: Request) -> ToolDiscoveryClient:
    return request.app.state.discovery


def get_dispatcher(request: Request) -> ToolDispatcher:
    return request.app.state.dispatcher


def get_orchestrator(request: Request) -> ChatOrchestrator:
    return request.app.state.orchestrator
