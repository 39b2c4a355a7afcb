# The module is to define the API router for the application.
# Date: 2025-07-05
# Version: 0.2.0

from fastapi import APIRouter
from mcp_chat.api.endpoints import chat, connections, storage, tools

api_router = APIRouter()

# Include the chat router with a '/chat' prefix
api_router.include_router(chat.router, prefix="/chat", tags=["Conversation"])

# Include the connection management router with a '/mcp/connections' prefix
api_router.include_router(connections.router, prefix="/mcp/connections", tags=["MCP Connections"])

# Include the storage maintenance router with a '/mcp/storage' prefix
api_router.include_router(storage.router, prefix="/mcp/storage", tags=["MCP Storage"])

# Include the tool execution router with a '/mcp' prefix
api_router.include_router(tools.router, prefix="/mcp", tags=["MCP Tools"])
