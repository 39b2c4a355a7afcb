# The module fetches tool catalogs from MCP connections via their /list_tools endpoint.
# Date: 2025-07-03
# Version: 0.1.0

import asyncio
import httpx
from typing import Any, List, Optional, Sequence
from pydantic import ValidationError

from mcp_chat.core.errors import UpstreamUnavailableError
from mcp_chat.models.mcp import Tool
from mcp_chat.utils.logger import console

LIST_TOOLS_PATH = "list_tools"
USER_AGENT = "MCPChat/0.1"


def extract_tool_entries(payload: Any) -> List[Any]:
    """
    Finds the raw tool list in a /list_tools response.
    The flat `{"tools": [...]}` shape is tried first, then `{"result": {"data": {"tools": [...]}}}`.
    Anything else is an empty catalog.
    """
    if not isinstance(payload, dict):
        return []
    tools = payload.get("tools")
    if isinstance(tools, list):
        return tools
    result = payload.get("result")
    data = result.get("data") if isinstance(result, dict) else None
    tools = data.get("tools") if isinstance(data, dict) else None
    if isinstance(tools, list):
        return tools
    return []


def parse_tools(entries: List[Any], source: str = "") -> List[Tool]:
    tools = []
    for entry in entries:
        try:
            tools.append(Tool.model_validate(entry))
        except ValidationError as e:
            console.warning(f"Skipping malformed tool definition from '{source}': {e.error_count()} validation error(s)")
    return tools


class ToolDiscoveryClient:
    """
    Stateless client that asks a connection for its current tool catalog.
    Every call is a fresh request; nothing is cached between calls.
    """

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    async def fetch_tools(self, base_url: str) -> List[Tool]:
        """
        Fetches and normalizes the catalog of one connection.
        Raises:
            UpstreamUnavailableError: On network failure, timeout, non-2xx status or a non-JSON body.
        """
        list_tools_url = f"{base_url.rstrip('/')}/{LIST_TOOLS_PATH}"
        console.info(f"Discovering tools: {list_tools_url}")
        try:
            async with self._client() as client:
                response = await client.get(
                    list_tools_url,
                    headers={"Accept": "application/json", "User-Agent": USER_AGENT},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(f"Timed out fetching {list_tools_url}") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailableError(
                f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
            ) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise UpstreamUnavailableError(f"Could not reach {list_tools_url}: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailableError(f"Invalid JSON from {list_tools_url}") from e

        return parse_tools(extract_tool_entries(payload), source=base_url)

    async def try_fetch(self, base_url: str) -> Optional[List[Tool]]:
        """Like fetch_tools, but a failure is logged and returned as None."""
        try:
            tools = await self.fetch_tools(base_url)
        except UpstreamUnavailableError as e:
            console.warning(f"Tool discovery failed for '{base_url}': {e}")
            return None
        console.info(f"Discovered {len(tools)} tool(s) at '{base_url}'.")
        return tools

    async def discover(self, base_url: str) -> List[Tool]:
        """Like fetch_tools, but any failure degrades to an empty catalog."""
        tools = await self.try_fetch(base_url)
        return tools if tools is not None else []

    async def try_fetch_many(self, base_urls: Sequence[str]) -> List[Optional[List[Tool]]]:
        """Concurrent try_fetch. Failed connections are None, in the order of `base_urls`."""
        return list(await asyncio.gather(*(self.try_fetch(url) for url in base_urls)))

    async def discover_many(self, base_urls: Sequence[str]) -> List[List[Tool]]:
        """Runs discovery concurrently. Results keep the order of `base_urls`."""
        return [tools if tools is not None else [] for tools in await self.try_fetch_many(base_urls)]
