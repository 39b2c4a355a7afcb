# The module is to define the API endpoint that runs a single MCP tool directly.
# Date: 2025-07-05
# Version: 0.1.0

from fastapi import APIRouter, Depends
from mcp_chat.api.deps import get_dispatcher
from mcp_chat.core.dispatcher import DEFAULT_TOOL_RESULT, ToolDispatcher
from mcp_chat.core.errors import InputValidationError
from mcp_chat.models.api_models import ExecuteRequest, ExecuteResponse
from mcp_chat.utils.logger import console

router = APIRouter()


def _has_value(value) -> bool:
    """Empty objects and lists count as a result; None, False, 0 and "" do not."""
    return isinstance(value, (dict, list)) or bool(value)


@router.post("/execute",
             response_model=ExecuteResponse)
async def execute_tool(request: ExecuteRequest,
                       dispatcher: ToolDispatcher = Depends(get_dispatcher)):
    """
    Finds the connection serving `tool_name` and executes the tool there.
    """
    if not request.tool_name:
        raise InputValidationError("Tool name is required")

    console.info(f"Direct execution requested for tool '{request.tool_name}'.")
    execution = await dispatcher.execute(request.tool_name, request.arguments or {})

    payload = execution.payload if isinstance(execution.payload, dict) else {}
    result = next(
        (value for value in (payload.get("result"), payload.get("content")) if _has_value(value)),
        DEFAULT_TOOL_RESULT,
    )

    return ExecuteResponse(
        result=result,
        tool_name=request.tool_name,
        connection=execution.connection.name,
    )
