# The module is to define the API endpoints for chat interactions.
# Date: 2025-07-05
# Version: 0.2.0

from fastapi import APIRouter, Depends
from mcp_chat.api.deps import get_app_settings, get_orchestrator
from mcp_chat.core.config import Settings
from mcp_chat.core.errors import InputValidationError, MCPChatError
from mcp_chat.core.orchestrator import ChatOrchestrator
from mcp_chat.utils.logger import console
from mcp_chat.models.api_models import ChatRequest, ChatResponse

router = APIRouter()


@router.post("",
             response_model=ChatResponse,
             response_model_exclude_none=True)
async def chat(request: ChatRequest,
               orchestrator: ChatOrchestrator = Depends(get_orchestrator),
               settings: Settings = Depends(get_app_settings)):
    """
    Handles a single chat turn, including at most one round of tool calls.
    """
    if not settings.ENABLE_AI_CHAT:
        raise MCPChatError("AI chat is disabled", status_code=503)
    if not request.messages:
        raise InputValidationError("Messages must not be empty")
    if request.settings is None:
        raise InputValidationError("Settings must not be empty")

    chat_settings = request.settings
    temperature = chat_settings.temperature if chat_settings.temperature is not None else settings.DEFAULT_TEMPERATURE
    max_tokens = chat_settings.max_tokens or settings.DEFAULT_MAX_TOKENS
    console.info(
        f"Received chat request: {len(request.messages)} message(s), model={chat_settings.model}, "
        f"temperature={temperature}, max_tokens={max_tokens}"
    )

    result = await orchestrator.run(
        [m.model_dump() for m in request.messages],
        model=chat_settings.model,
        temperature=temperature,
        max_tokens=max_tokens,
    )

    console.success("Sending chat response.")
    return ChatResponse(
        content=result.content,
        tool_calls=result.tool_calls,
        tool_results=result.tool_results,
        usage=result.usage,
        final_response=True if result.final_response else None,
    )
