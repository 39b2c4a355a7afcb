# Resolves a tool name to the connection that serves it and invokes it there.
# Date: 2025-07-04
# Version: 0.1.0

import json
import httpx
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from mcp_chat.core.errors import (
    InputValidationError,
    ToolExecutionError,
    ToolNotFoundError,
    UpstreamUnavailableError,
)
from mcp_chat.models.mcp import Connection, ParameterType, Tool
from mcp_chat.services.connection_store import ConnectionStore
from mcp_chat.services.discovery import ToolDiscoveryClient
from mcp_chat.utils.logger import console

DEFAULT_TOOL_RESULT = "tool executed successfully"

_TYPE_CHECKS = {
    ParameterType.STRING: lambda v: isinstance(v, str),
    ParameterType.NUMBER: lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    ParameterType.BOOLEAN: lambda v: isinstance(v, bool),
    ParameterType.ARRAY: lambda v: isinstance(v, list),
    ParameterType.OBJECT: lambda v: isinstance(v, dict),
}


@dataclass
class ToolExecution:
    """The outcome of a successful tool invocation."""
    connection: Connection
    tool: Tool
    payload: Any
    output: Any


def validate_arguments(tool: Tool, arguments: Dict[str, Any]):
    """
    Checks the supplied arguments against the tool's declared parameter types.
    Required parameters without a default must be present. Unknown names are ignored.
    """
    for name, param in tool.parameters.items():
        if name not in arguments:
            if param.required and not param.has_default():
                raise InputValidationError(f"Missing required argument '{name}' for tool '{tool.name}'")
            continue
        value = arguments[name]
        if value is None and not param.required:
            continue
        if not _TYPE_CHECKS[param.type](value):
            raise InputValidationError(
                f"Argument '{name}' for tool '{tool.name}' must be of type {param.type.value}, "
                f"got {type(value).__name__}"
            )


def extract_result(payload: Any) -> Any:
    """
    Picks the useful part of a tool response `{"result": {"data": ...}}`:
    data.message, then data.balance, then data itself, then a fixed success string.
    """
    result = payload.get("result") if isinstance(payload, dict) else None
    data = result.get("data") if isinstance(result, dict) else None
    if isinstance(data, dict):
        return data.get("message") or data.get("balance") or data or DEFAULT_TOOL_RESULT
    return data or DEFAULT_TOOL_RESULT


def stringify_result(value: Any) -> str:
    """Tool-role messages must carry string content."""
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (bool, dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


class ToolDispatcher:
    """
    Finds which connection serves a tool and runs it there.

    Connections are searched in the store's list order and the first catalog
    that contains the name wins. A tool name exposed by several connections is
    therefore only reachable on the earliest registered one.
    """

    def __init__(self, store: ConnectionStore, discovery: ToolDiscoveryClient,
                 timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._store = store
        self._discovery = discovery
        self._timeout = timeout
        self._transport = transport

    async def resolve(self, tool_name: str) -> Tuple[Connection, Tool]:
        for connection in self._store.list():
            tools = await self._discovery.discover(connection.url)
            for tool in tools:
                if tool.name == tool_name:
                    console.info(f"Found tool '{tool_name}' on connection '{connection.name}'.")
                    return connection, tool
        console.error(f"Attempted to execute unknown tool: {tool_name}")
        raise ToolNotFoundError(tool_name)

    async def _invoke(self, connection: Connection, tool_name: str) -> Any:
        tool_url = f"{connection.url}/{tool_name}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.get(tool_url, headers={"Accept": "application/json"})
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(f"Timed out calling tool '{tool_name}' at {tool_url}") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise UpstreamUnavailableError(f"Could not reach tool '{tool_name}' at {tool_url}: {e}") from e

        if not response.is_success:
            console.error(f"MCP tool '{tool_name}' failed: {response.status_code} {response.text}")
            raise ToolExecutionError(tool_name, response.status_code, response.text)

        try:
            return response.json()
        except ValueError:
            return None

    async def execute(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolExecution:
        arguments = arguments or {}
        connection, tool = await self.resolve(tool_name)
        validate_arguments(tool, arguments)

        # Tool servers are invoked with a plain GET; the arguments are not sent.
        if arguments:
            console.debug(f"Arguments for '{tool_name}' are not forwarded to the tool server: {arguments}")

        payload = await self._invoke(connection, tool_name)
        console.success(f"Tool '{tool_name}' executed on '{connection.name}'.")
        return ToolExecution(
            connection=connection,
            tool=tool,
            payload=payload,
            output=extract_result(payload),
        )

    async def dispatch(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        execution = await self.execute(tool_name, arguments)
        return stringify_result(execution.output)
