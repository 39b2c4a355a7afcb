# The module is to define the common chat models for the application.
# Date: 2025-07-02
# Version: 0.2.0


from pydantic import BaseModel, Field
from typing import List, Optional, Literal

# The Role literal type remains unchanged.
Role = Literal["system", "user",
               "assistant", "tool"]


class FunctionCall(BaseModel):
    """
    The function part of a tool call.
    Attributes:
        name (str): The name of the tool the model wants to run.
        arguments (str): The arguments as JSON text, exactly as the model produced them.
    """
    name: str = Field(..., description="The name of the requested tool.")
    arguments: str = Field(default="{}", description="The arguments as JSON text.")


class ToolCall(BaseModel):
    """
    Represents a tool call made by the assistant, including the function name and arguments.
    Attributes:
        id (str): The unique ID for the tool call.
        function (FunctionCall): The function name and arguments.
        type (str): The type of the tool call, e.g., 'function'.
    """
    id: str = Field(..., description="The unique ID for the tool call.")
    function: FunctionCall = Field(..., description="The function name and arguments.")
    type: str = Field(default="function", description="The type of the tool call, e.g., 'function'.")


class Message(BaseModel):
    """
    Represents a message in the conversation, which can be from the system, user, assistant, or tool.
    Attributes:
        role (Role): The role of the message sender (system, user, assistant, or tool).
        content (Optional[str]): The content of the message.
        tool_calls (Optional[List[ToolCall]]): A list of tool calls requested by the assistant.
        tool_call_id (Optional[str]): The ID of the tool call this message is a result of.
    """
    role: Role = Field(..., description="The role of the message sender.")
    content: Optional[str] = Field(default=None, description="The content of the message.")
    tool_calls: Optional[List[ToolCall]] = Field(default=None, description="A list of tool calls requested by the assistant.")
    tool_call_id: Optional[str] = Field(default=None, description="The ID of the tool call this message is a result of.")


class ToolCallResult(BaseModel):
    """The outcome of one tool call, ready to be sent back as a `tool` message."""
    tool_call_id: str
    role: Literal["tool"] = "tool"
    content: str

    def to_message(self) -> Message:
        return Message(role="tool", content=self.content, tool_call_id=self.tool_call_id)
