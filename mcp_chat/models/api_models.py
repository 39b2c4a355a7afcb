# The module is to define the API models for the application.
# Date: 2025-07-05
# Version: 0.2.0

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from mcp_chat.models.common import ToolCall, ToolCallResult


class ChatMessageIn(BaseModel):
    """
    A message as sent by the chat UI. Extra keys (ids, timestamps, tool fields)
    are accepted and dropped before anything reaches the provider.
    """
    role: str
    content: Optional[str] = ""


class ChatSettings(BaseModel):
    """
    Completion settings chosen in the UI.
    Attributes:
        model (Optional[str]): Model name, the provider's default when missing.
        temperature (Optional[float]): Sampling temperature.
        max_tokens (Optional[int]): Completion token limit.
    """
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)


class ChatRequest(BaseModel):
    """
    Defines the request body for the /api/chat endpoint.
    """
    messages: List[ChatMessageIn] = Field(default_factory=list, description="The conversation so far.")
    settings: Optional[ChatSettings] = Field(default=None, description="Model, temperature and max_tokens.")


class ChatResponse(BaseModel):
    """
    Defines the response body for the /api/chat endpoint.
    Attributes:
        content (str): The assistant's answer; the follow-up answer when tools ran.
        tool_calls: The tool calls requested in the first round.
        tool_results: One result per tool call, in the same order.
        final_response (bool): True when `content` comes from the follow-up call.
    """
    success: bool = True
    content: str
    tool_calls: Optional[List[ToolCall]] = None
    tool_results: Optional[List[ToolCallResult]] = None
    usage: Optional[Dict[str, Any]] = None
    final_response: Optional[bool] = None


class ExecuteRequest(BaseModel):
    """Defines the request body for the /api/mcp/execute endpoint."""
    tool_name: Optional[str] = None
    arguments: Optional[Dict[str, Any]] = None


class ExecuteResponse(BaseModel):
    success: bool = True
    result: Any
    tool_name: str
    connection: str


class ConnectionCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = ""
    url: Optional[str] = None


class ConnectionUpdate(BaseModel):
    """Only the basic fields of a connection can be changed."""
    name: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None


class RestoreRequest(BaseModel):
    path: str


class StatusResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None
    count: Optional[int] = None
