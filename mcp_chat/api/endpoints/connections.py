# The module is to define the API endpoints for managing MCP connections.
# Date: 2025-07-05
# Version: 0.1.0

from typing import List, Optional

from fastapi import APIRouter, Depends
from mcp_chat.api.deps import get_discovery, get_store
from mcp_chat.core.errors import (
    ConnectionNotFoundError,
    DuplicateURLError,
    InputValidationError,
    UpstreamUnavailableError,
)
from mcp_chat.models.api_models import ConnectionCreate, ConnectionUpdate, StatusResponse
from mcp_chat.models.mcp import Connection, ConnectionView, Tool
from mcp_chat.services.connection_store import ConnectionStore, validate_url
from mcp_chat.services.discovery import ToolDiscoveryClient
from mcp_chat.utils.logger import console

router = APIRouter()


def view_payload(view: ConnectionView) -> dict:
    data = view.model_dump(mode="json", by_alias=True, exclude={"tools"})
    data["tools"] = [tool.model_dump(mode="json", exclude_none=True) for tool in view.tools]
    return data


def build_view(connection: Connection, tools: Optional[List[Tool]]) -> ConnectionView:
    """`tools` is None when discovery failed; only a successful discovery sets lastSync."""
    return ConnectionView.from_discovery(connection, tools or [], synced=tools is not None)


async def _with_tools(connection: Connection, discovery: ToolDiscoveryClient) -> ConnectionView:
    return build_view(connection, await discovery.try_fetch(connection.url))


@router.get("",
            response_model=StatusResponse,
            response_model_exclude_none=True)
async def list_connections(store: ConnectionStore = Depends(get_store),
                           discovery: ToolDiscoveryClient = Depends(get_discovery)):
    """
    Returns every stored connection with its tools discovered just now.
    """
    connections = store.list()
    catalogs = await discovery.try_fetch_many([c.url for c in connections])
    views = [
        view_payload(build_view(conn, tools))
        for conn, tools in zip(connections, catalogs)
    ]
    return StatusResponse(data=views, count=len(views))


@router.post("",
             response_model=StatusResponse,
             response_model_exclude_none=True)
async def create_connection(request: ConnectionCreate,
                            store: ConnectionStore = Depends(get_store),
                            discovery: ToolDiscoveryClient = Depends(get_discovery)):
    """
    Registers a new connection after a best-effort probe of its tool catalog.
    The probe never blocks registration.
    """
    if not request.name or not request.url:
        raise InputValidationError("Name and URL are required")
    url = validate_url(request.url)

    existing = store.find_by_url(url)
    if existing:
        raise DuplicateURLError(url, existing.name)

    tools = await discovery.discover(url)
    connection = store.add(request.name, request.description or "", url)
    view = ConnectionView.from_discovery(connection, tools, synced=True)

    return StatusResponse(
        message=f"Connected to MCP server, discovered {len(tools)} tool(s)",
        data=view_payload(view),
    )


@router.get("/{connection_id}",
            response_model=StatusResponse,
            response_model_exclude_none=True)
async def get_connection(connection_id: str,
                         store: ConnectionStore = Depends(get_store),
                         discovery: ToolDiscoveryClient = Depends(get_discovery)):
    connection = store.get(connection_id)
    if connection is None:
        raise ConnectionNotFoundError(connection_id)
    return StatusResponse(data=view_payload(await _with_tools(connection, discovery)))


@router.put("/{connection_id}",
            response_model=StatusResponse,
            response_model_exclude_none=True)
async def update_connection(connection_id: str, request: ConnectionUpdate,
                            store: ConnectionStore = Depends(get_store)):
    """Updates name, description and/or url. Other fields are ignored."""
    updated = store.update(connection_id, **request.model_dump())
    return StatusResponse(
        message="Connection updated",
        data=updated.to_record(),
    )


@router.delete("/{connection_id}",
               response_model=StatusResponse,
               response_model_exclude_none=True)
async def delete_connection(connection_id: str,
                            store: ConnectionStore = Depends(get_store)):
    if not store.remove(connection_id):
        raise ConnectionNotFoundError(connection_id)
    return StatusResponse(message="Connection deleted")


@router.post("/{connection_id}/sync",
             response_model=StatusResponse,
             response_model_exclude_none=True)
async def sync_connection(connection_id: str,
                          store: ConnectionStore = Depends(get_store),
                          discovery: ToolDiscoveryClient = Depends(get_discovery)):
    """
    Re-discovers the tools of one connection. The result is returned, not stored.
    Unlike the listing endpoints, a failed discovery is reported as an error.
    """
    connection = store.get(connection_id)
    if connection is None:
        raise ConnectionNotFoundError(connection_id)

    try:
        tools = await discovery.fetch_tools(connection.url)
    except UpstreamUnavailableError as e:
        console.error(f"Re-sync of '{connection.name}' failed: {e}")
        raise UpstreamUnavailableError(f"Re-sync failed: {e.message}", status_code=400) from e
    console.success(f"Re-synced '{connection.name}', found {len(tools)} tool(s).")

    view = ConnectionView.from_discovery(connection, tools, synced=True)
    return StatusResponse(message="Tools synced", data=view_payload(view))
