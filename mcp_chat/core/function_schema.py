# Converts discovered MCP tools into OpenAI-style function-calling definitions.
# Date: 2025-07-03
# Version: 0.1.0

from typing import Any, Dict, List, Sequence
from mcp_chat.models.mcp import Tool


def to_function_definition(tool: Tool) -> Dict[str, Any]:
    """
    Returns the tool's definition in a format compliant with OpenAI's
    function-calling specification.

    The `parameters` key is only emitted when the tool declares at least one
    parameter, since some providers reject an empty parameters object.
    """
    function: Dict[str, Any] = {
        "name": tool.name,
        "description": tool.description,
    }

    if tool.parameters:
        properties = {}
        for name, param in tool.parameters.items():
            prop: Dict[str, Any] = {
                "type": param.type.value,
                "description": param.description,
            }
            if param.has_default():
                prop["default"] = param.default
            properties[name] = prop

        function["parameters"] = {
            "type": "object",
            "properties": properties,
            "required": [name for name, param in tool.parameters.items() if param.required],
        }

    return {"type": "function", "function": function}


def to_function_schema(tools: Sequence[Tool]) -> List[Dict[str, Any]]:
    return [to_function_definition(tool) for tool in tools]
