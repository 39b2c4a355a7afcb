# mcp_chat/core/orchestrator.py
# Two-round function-calling flow: decide with the model, run the requested tools, resolve with the model.
# Date: 2025-07-05
# Version: 0.1.0

import json
from typing import Any, Dict, List, Optional, Sequence
from pydantic import BaseModel

from mcp_chat.core.dispatcher import ToolDispatcher
from mcp_chat.core.errors import ProviderError
from mcp_chat.core.function_schema import to_function_schema
from mcp_chat.models.common import Message, ToolCall, ToolCallResult
from mcp_chat.models.mcp import Tool
from mcp_chat.services.connection_store import ConnectionStore
from mcp_chat.services.discovery import ToolDiscoveryClient
from mcp_chat.services.llm_connector import ChatProvider
from mcp_chat.utils.logger import console

FORWARDED_ROLES = ("user", "assistant", "system")
TOOL_FAILURE_PREFIX = "Tool execution failed"
EMPTY_FINAL_ANSWER = "Tool execution completed"


class ChatResult(BaseModel):
    """What one chat turn produced."""
    content: str = ""
    tool_calls: Optional[List[ToolCall]] = None
    tool_results: Optional[List[ToolCallResult]] = None
    usage: Optional[Dict[str, Any]] = None
    final_response: bool = False


def clean_messages(messages: Sequence[Any]) -> List[Dict[str, Any]]:
    """Keeps only user/assistant/system turns and only their role and content."""
    cleaned = []
    for msg in messages:
        if isinstance(msg, BaseModel):
            msg = msg.model_dump()
        if not isinstance(msg, dict) or msg.get("role") not in FORWARDED_ROLES:
            continue
        cleaned.append({"role": msg["role"], "content": msg.get("content") or ""})
    return cleaned


def parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
    """Model-produced JSON arguments; anything unparsable counts as no arguments."""
    if not raw:
        return {}
    try:
        arguments = json.loads(raw)
    except (TypeError, ValueError):
        console.warning(f"Could not parse tool arguments, using none: {raw!r}")
        return {}
    return arguments if isinstance(arguments, dict) else {}


class ChatOrchestrator:
    """
    Drives one chat turn.

    Round 1 sends the conversation and the discovered tool schema. If the
    model asks for tools, each call is dispatched in order, the results are
    appended as tool messages, and Round 2 asks the model for the final
    answer. There is never a third round.
    """

    def __init__(self, store: ConnectionStore, discovery: ToolDiscoveryClient,
                 dispatcher: ToolDispatcher, provider: ChatProvider, tools_enabled: bool = True):
        self._store = store
        self._discovery = discovery
        self._dispatcher = dispatcher
        self._provider = provider
        self._tools_enabled = tools_enabled

    async def collect_tools(self) -> List[Tool]:
        """Current tools of every connection, first definition per name wins."""
        if not self._tools_enabled:
            return []
        connections = self._store.list()
        catalogs = await self._discovery.discover_many([c.url for c in connections])

        tools: List[Tool] = []
        seen = set()
        for connection, catalog in zip(connections, catalogs):
            for tool in catalog:
                if tool.name in seen:
                    console.warning(
                        f"Tool '{tool.name}' from '{connection.name}' is shadowed by an earlier connection."
                    )
                    continue
                seen.add(tool.name)
                tools.append(tool)
            if catalog:
                console.info(f"Got {len(catalog)} tool(s) from connection '{connection.name}'.")
        return tools

    async def _run_tool_call(self, tool_call: ToolCall) -> ToolCallResult:
        tool_name = tool_call.function.name
        arguments = parse_arguments(tool_call.function.arguments)
        try:
            console.info(f"Executing tool '{tool_name}'.")
            content = await self._dispatcher.dispatch(tool_name, arguments)
        except Exception as e:
            console.exception(f"Error executing tool '{tool_name}'")
            content = f"{TOOL_FAILURE_PREFIX}: {e}"
        return ToolCallResult(tool_call_id=tool_call.id, content=content)

    async def run(self, messages: Sequence[Any], model: Optional[str] = None,
                  temperature: float = 0.7, max_tokens: int = 1000) -> ChatResult:
        history = clean_messages(messages)
        tool_schema = to_function_schema(await self.collect_tools())

        console.rule("Round 1")
        first = await self._provider.complete(
            history,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            tools=tool_schema or None,
            tool_choice="auto" if tool_schema else None,
        )
        reply = first.message
        result = ChatResult(content=reply.content or "", usage=first.usage)

        if not reply.tool_calls:
            console.success("Model answered without tool calls.")
            return result

        result.tool_calls = reply.tool_calls
        result.tool_results = [await self._run_tool_call(call) for call in reply.tool_calls]

        history.append(
            Message(role="assistant", content=reply.content or "", tool_calls=reply.tool_calls)
            .model_dump(exclude_none=True)
        )
        history.extend(r.to_message().model_dump(exclude_none=True) for r in result.tool_results)

        console.rule("Round 2")
        try:
            second = await self._provider.complete(
                history,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                tools=tool_schema or None,
            )
        except ProviderError as e:
            console.error(f"Follow-up call after tool execution failed: {e}")
            return result
        except Exception:
            console.exception("Unexpected error in the follow-up call after tool execution.")
            return result

        result.content = second.message.content or EMPTY_FINAL_ANSWER
        result.final_response = True
        console.success("Model produced the final answer from tool results.")
        return result
