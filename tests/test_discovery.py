"""
Tests for tool discovery against fake /list_tools endpoints.
"""

import httpx
import pytest

from mcp_chat.core.errors import UpstreamUnavailableError
from mcp_chat.models.mcp import ParameterType
from mcp_chat.services.discovery import ToolDiscoveryClient, extract_tool_entries

from conftest import PING_TOOL, WEATHER_TOOL


class TestExtractToolEntries:

    def test_flat_shape(self):
        assert extract_tool_entries({"tools": [PING_TOOL]}) == [PING_TOOL]

    def test_nested_shape(self):
        payload = {"success": True, "result": {"success": True, "data": {"tools": [PING_TOOL], "count": 1}}}
        assert extract_tool_entries(payload) == [PING_TOOL]

    def test_flat_shape_wins(self):
        payload = {"tools": [PING_TOOL], "result": {"data": {"tools": [WEATHER_TOOL]}}}
        assert extract_tool_entries(payload) == [PING_TOOL]

    @pytest.mark.parametrize("payload", [
        None,
        [],
        {},
        {"tools": "ping"},
        {"result": {"data": None}},
        {"result": "ok"},
    ])
    def test_unknown_shapes_are_empty(self, payload):
        assert extract_tool_entries(payload) == []


class TestToolDiscoveryClient:

    @pytest.mark.asyncio
    async def test_nested_and_flat_shapes_are_equivalent(self, tool_servers, discovery):
        tool_servers.add("http://nested:9000", [PING_TOOL, WEATHER_TOOL], nested=True)
        tool_servers.add("http://flat:9000", [PING_TOOL, WEATHER_TOOL], nested=False)

        nested = await discovery.discover("http://nested:9000")
        flat = await discovery.discover("http://flat:9000")

        assert [t.name for t in nested] == ["ping", "get_weather"]
        assert nested == flat
        assert nested[1].parameters["city"].type is ParameterType.STRING
        assert nested[1].parameters["units"].has_default()

    @pytest.mark.asyncio
    async def test_sends_json_accept_header(self, tool_servers, discovery):
        tool_servers.add("http://svc:9000", [PING_TOOL])

        await discovery.discover("http://svc:9000/")

        request = tool_servers.requests[-1]
        assert str(request.url) == "http://svc:9000/list_tools"
        assert request.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_unreachable_url_returns_empty(self, discovery):
        assert await discovery.discover("http://nowhere:1") == []

    @pytest.mark.asyncio
    async def test_non_2xx_returns_empty(self, tool_servers, discovery):
        tool_servers.add("http://svc:9000", [PING_TOOL], list_status=500)
        assert await discovery.discover("http://svc:9000") == []

    @pytest.mark.asyncio
    async def test_timeout_returns_empty(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        client = ToolDiscoveryClient(timeout=0.1, transport=httpx.MockTransport(handler))
        assert await client.discover("http://slow:9000") == []

    @pytest.mark.asyncio
    async def test_non_json_body_returns_empty(self):
        client = ToolDiscoveryClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, text="<html>")))
        assert await client.discover("http://svc:9000") == []

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self, tool_servers, discovery):
        broken = {"description": "no name"}
        bad_type = {"name": "bad", "parameters": {"x": {"type": "integer", "description": ""}}}
        tool_servers.add("http://svc:9000", [broken, PING_TOOL, bad_type])

        tools = await discovery.discover("http://svc:9000")

        assert [t.name for t in tools] == ["ping"]

    @pytest.mark.asyncio
    async def test_null_description_and_parameters_are_accepted(self, tool_servers, discovery):
        nodesc = {"name": "nodesc", "description": None, "parameters": None}
        null_param = {"name": "lookup", "parameters": {"q": {"type": "string", "description": None}}}
        tool_servers.add("http://svc:9000", [nodesc, null_param, PING_TOOL], nested=False)

        tools = await discovery.discover("http://svc:9000")

        assert [t.name for t in tools] == ["nodesc", "lookup", "ping"]
        assert tools[0].description == ""
        assert tools[0].parameters == {}
        assert tools[1].parameters["q"].description == ""

    @pytest.mark.asyncio
    async def test_try_fetch_separates_failure_from_empty_catalog(self, tool_servers, discovery):
        tool_servers.add("http://empty:9000", [], nested=False)

        assert await discovery.try_fetch("http://empty:9000") == []
        assert await discovery.try_fetch("http://nowhere:1") is None
        assert await discovery.try_fetch_many(["http://nowhere:1", "http://empty:9000"]) == [None, []]

    @pytest.mark.asyncio
    async def test_fetch_tools_raises_on_failure(self, discovery):
        with pytest.raises(UpstreamUnavailableError):
            await discovery.fetch_tools("http://nowhere:1")

    @pytest.mark.asyncio
    async def test_discover_many_keeps_order(self, tool_servers, discovery):
        tool_servers.add("http://a:9000", [PING_TOOL])
        tool_servers.add("http://b:9000", [WEATHER_TOOL])

        catalogs = await discovery.discover_many(["http://b:9000", "http://nowhere:1", "http://a:9000"])

        assert [[t.name for t in c] for c in catalogs] == [["get_weather"], [], ["ping"]]
