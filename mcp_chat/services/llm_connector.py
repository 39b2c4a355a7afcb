# mcp_chat/services/llm_connector.py
# Date: 2025-07-04
# Version: 0.2.0

import httpx
from dataclasses import dataclass
from openai import AsyncOpenAI, APIError
from typing import List, Optional, Dict, Any
from mcp_chat.core.config import Settings
from mcp_chat.core.errors import ProviderError
from mcp_chat.models.common import Message
from mcp_chat.utils.logger import console


@dataclass
class Completion:
    """One assistant turn returned by the provider, plus token usage if reported."""
    message: Message
    usage: Optional[Dict[str, Any]] = None


class ChatProvider:
    """
    Adapter for one OpenAI-compatible chat-completions endpoint.

    Each supported provider (cursor, deepseek, openai, anthropic) is served by
    exactly one fixed base URL and request shape, chosen by configuration.
    """

    def __init__(self, name: str, api_key: str, base_url: str, default_model: str,
                 timeout: float = 60.0, max_retries: int = 0,
                 http_client: Optional[httpx.AsyncClient] = None):
        self.name = name
        self.default_model = default_model
        self._client: Optional[AsyncOpenAI] = None
        if api_key:
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=max_retries,
                http_client=http_client,
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def complete(self, messages: List[Dict[str, Any]], model: Optional[str] = None,
                       temperature: float = 0.7, max_tokens: int = 1000,
                       tools: Optional[List[Dict[str, Any]]] = None,
                       tool_choice: Optional[str] = None) -> Completion:
        """
        Sends one chat-completions request.

        Raises:
            ProviderError: If the provider is not configured, the request fails,
                or the response carries no choices.
        """
        if self._client is None:
            raise ProviderError(f"{self.name} API key is not configured")

        request_params: Dict[str, Any] = {
            "model": model or self.default_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if tools:
            request_params["tools"] = tools
            if tool_choice:
                request_params["tool_choice"] = tool_choice

        try:
            response = await self._client.chat.completions.create(**request_params)
        except APIError as e:
            message = str(e.body) if e.body is not None else str(e)
            if isinstance(e.body, dict):
                message = e.body.get('message', message)
            status = getattr(e, "status_code", None)
            console.error(f"An API error occurred with {self.name}: {message}")
            summary = f"{self.name} API call failed: {status}" if status else f"{self.name} API call failed"
            raise ProviderError(summary, details=message) from e

        if not response.choices:
            raise ProviderError(f"{self.name} API returned an invalid response")

        response_message = response.choices[0].message
        usage = response.usage.model_dump() if response.usage else None
        return Completion(message=Message.model_validate(response_message.model_dump()), usage=usage)


def create_chat_provider(settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> ChatProvider:
    """
    Acts as a factory for the provider adapter selected by AI_PROVIDER.
    """
    options = settings.provider_options()
    provider = ChatProvider(
        name=settings.AI_PROVIDER,
        api_key=options["api_key"],
        base_url=options["base_url"],
        default_model=options["model"],
        timeout=settings.PROVIDER_TIMEOUT,
        max_retries=settings.PROVIDER_MAX_RETRIES,
        http_client=http_client,
    )
    if not provider.configured:
        console.warning(f"Provider '{settings.AI_PROVIDER}' has no API key; chat requests will fail.")
    return provider
