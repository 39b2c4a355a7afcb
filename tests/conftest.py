"""
Shared fixtures: a fake MCP tool server behind httpx.MockTransport, a scripted
chat provider, and a temporary connection store.
"""

from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from mcp_chat.core.config import Settings
from mcp_chat.core.dispatcher import ToolDispatcher
from mcp_chat.core.errors import ProviderError
from mcp_chat.main import create_app
from mcp_chat.models.common import FunctionCall, Message, ToolCall
from mcp_chat.services.connection_store import ConnectionStore
from mcp_chat.services.discovery import ToolDiscoveryClient
from mcp_chat.services.llm_connector import Completion


class FakeToolServers:
    """Serves /list_tools and /{tool} for any number of registered base URLs."""

    def __init__(self):
        self.servers: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, base_url: str, tools: List[dict], nested: bool = True,
            results: Optional[Dict[str, Any]] = None, list_status: int = 200):
        self.servers[base_url] = {
            "tools": tools,
            "nested": nested,
            "results": results or {},
            "list_status": list_status,
        }

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        for base_url, server in self.servers.items():
            if not url.startswith(base_url + "/"):
                continue
            path = url[len(base_url) + 1:]
            if path == "list_tools":
                if server["list_status"] != 200:
                    return httpx.Response(server["list_status"], text="boom")
                if server["nested"]:
                    body = {
                        "success": True,
                        "result": {"success": True, "data": {"tools": server["tools"], "count": len(server["tools"])}},
                    }
                else:
                    body = {"tools": server["tools"]}
                return httpx.Response(200, json=body)
            if path in server["results"]:
                status, body = server["results"][path]
                if isinstance(body, str):
                    return httpx.Response(status, text=body)
                return httpx.Response(status, json=body)
            return httpx.Response(404, json={"success": False, "error": "not found"})
        raise httpx.ConnectError("connection refused", request=request)

    def calls_to(self, url: str) -> int:
        return sum(1 for r in self.requests if str(r.url) == url)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


class ScriptedProvider:
    """Returns queued completions in order and records every request."""

    name = "fake"
    configured = True

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, messages, model=None, temperature=0.7, max_tokens=1000,
                       tools=None, tool_choice=None):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "tools": tools,
            "tool_choice": tool_choice,
        })
        if not self.replies:
            raise ProviderError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def text_reply(content: str, usage: Optional[dict] = None) -> Completion:
    return Completion(message=Message(role="assistant", content=content), usage=usage)


def tool_call_reply(*calls, content: str = "") -> Completion:
    """calls: (id, name, arguments_json) tuples."""
    tool_calls = [
        ToolCall(id=call_id, function=FunctionCall(name=name, arguments=arguments))
        for call_id, name, arguments in calls
    ]
    return Completion(message=Message(role="assistant", content=content, tool_calls=tool_calls))


PING_TOOL = {"name": "ping", "description": "Replies with pong", "parameters": {}}

WEATHER_TOOL = {
    "name": "get_weather",
    "description": "Current weather for a city",
    "parameters": {
        "city": {"type": "string", "description": "City name", "required": True},
        "units": {"type": "string", "description": "Unit system", "required": False, "default": "metric"},
    },
}


@pytest.fixture
def tool_servers():
    return FakeToolServers()


@pytest.fixture
def storage_file(tmp_path):
    return tmp_path / "mcp-connections.json"


@pytest.fixture
def store(storage_file):
    return ConnectionStore(str(storage_file))


@pytest.fixture
def discovery(tool_servers):
    return ToolDiscoveryClient(timeout=1.0, transport=tool_servers.transport)


@pytest.fixture
def dispatcher(store, discovery, tool_servers):
    return ToolDispatcher(store, discovery, timeout=1.0, transport=tool_servers.transport)


@pytest.fixture
def settings(storage_file):
    return Settings(
        _env_file=None,
        AI_PROVIDER="deepseek",
        DEEPSEEK_API_KEY="test-key",
        MCP_STORAGE_FILE=str(storage_file),
    )


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def client(settings, tool_servers, provider):
    app = create_app(settings, transport=tool_servers.transport, provider=provider)
    with TestClient(app) as test_client:
        yield test_client
