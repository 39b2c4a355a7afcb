# The module defines the error taxonomy shared by the store, the MCP client code and the API layer.
# Date: 2025-07-02
# Version: 0.1.0

from typing import Optional


class MCPChatError(Exception):
    """
    Base class for every error the service turns into a structured response.
    Attributes:
        message (str): Human readable description, returned as `error`.
        status_code (int): HTTP status used by the API layer.
    """
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class DuplicateURLError(MCPChatError):
    status_code = 400

    def __init__(self, url: str, existing_name: str):
        super().__init__(f"A connection with the same URL already exists: {existing_name}")
        self.url = url
        self.existing_name = existing_name


class NotFoundError(MCPChatError):
    status_code = 404


class ConnectionNotFoundError(NotFoundError):
    def __init__(self, connection_id: str):
        super().__init__(f"Connection not found: {connection_id}")
        self.connection_id = connection_id


class ToolNotFoundError(NotFoundError):
    def __init__(self, tool_name: str):
        super().__init__(f"Tool not found: {tool_name}")
        self.tool_name = tool_name


class InputValidationError(MCPChatError):
    """A missing required field, a malformed URL or an argument of the wrong type."""
    status_code = 400


class UpstreamUnavailableError(MCPChatError):
    """A tool server or provider could not be reached or answered garbage."""
    status_code = 502


class ToolExecutionError(MCPChatError):
    """A tool endpoint answered with a non-2xx status."""
    status_code = 500

    def __init__(self, tool_name: str, upstream_status: int, body: str = ""):
        super().__init__(f"MCP tool execution failed: {upstream_status}")
        self.tool_name = tool_name
        self.upstream_status = upstream_status
        self.body = body


class ProviderError(MCPChatError):
    """The AI provider failed or returned a malformed body."""
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details


class StorageError(MCPChatError):
    status_code = 500
