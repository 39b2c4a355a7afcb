# The module defines the models of MCP connections and the tools they expose.
# Date: 2025-07-02
# Version: 0.1.0

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ParameterType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class ParameterSpec(BaseModel):
    """
    Describes one parameter of a discovered tool.
    Attributes:
        type (ParameterType): The declared runtime type.
        description (str): What the parameter means.
        required (bool): Whether the tool needs it.
        default (Any): Optional default value, only present when the server declares one.
    """
    type: ParameterType
    description: str = ""
    required: bool = False
    default: Optional[Any] = None

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value):
        return "" if value is None else value

    @field_validator("required", mode="before")
    @classmethod
    def _null_required(cls, value):
        return False if value is None else value

    def has_default(self) -> bool:
        return "default" in self.model_fields_set


class Tool(BaseModel):
    """
    A tool advertised by a connection's `/list_tools` endpoint. Never persisted.
    """
    name: str = Field(..., description="Tool name, unique within one connection's catalog.")
    description: str = Field(default="", description="What the tool does.")
    parameters: Dict[str, ParameterSpec] = Field(default_factory=dict)
    examples: Optional[List[str]] = None

    # Tool servers send explicit nulls for empty fields.
    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value):
        return "" if value is None else value

    @field_validator("parameters", mode="before")
    @classmethod
    def _null_parameters(cls, value):
        return {} if value is None else value


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class Connection(BaseModel):
    """
    A registered external tool-provider endpoint, as persisted in the storage file.
    Attributes:
        id (str): Opaque unique identifier.
        name (str): Display name.
        description (str): Free text.
        url (str): Base endpoint without a trailing slash.
        created_at (str): ISO-8601 creation time, serialized as `createdAt`.
    """
    id: str
    name: str
    description: str = ""
    url: str
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ConnectionView(Connection):
    """A connection together with the tools discovered for it just now."""
    tools: List[Tool] = Field(default_factory=list)
    last_sync: Optional[str] = Field(default=None, alias="lastSync")

    @classmethod
    def from_discovery(cls, connection: Connection, tools: List[Tool], synced: bool) -> "ConnectionView":
        return cls(
            **connection.model_dump(),
            tools=tools,
            last_sync=utc_now_iso() if synced else None,
        )
