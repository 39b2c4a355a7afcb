# The module is to define the configuration settings for the application.
# Date: 2025-07-02
# Version: 0.2.0

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Dict, List, Literal, Optional

ProviderName = Literal["cursor", "deepseek", "openai", "anthropic"]


class Settings(BaseSettings):
    """
    The Settings class is used to define the configuration settings for the application.
    It inherits from BaseSettings, which allows it to load environment variables
    (and the optional `.env` / `server.env` files) with type validation.
    Attributes:
        AI_PROVIDER (str): The provider adapter used for chat completions.
        <PROVIDER>_API_KEY (str): API key of each provider.
        <PROVIDER>_API_URL (str): OpenAI-compatible base URL of each provider.
        <PROVIDER>_MODEL (str): Model used when a chat request names none.
        HOST / PORT: Where the HTTP server listens.
        ENABLE_MCP_TOOLS (bool): Whether discovered tools are offered to the model.
        ENABLE_AI_CHAT (bool): Whether /api/chat is served at all.
        ENABLE_SYSTEM_PROMPTS (bool): Reported by the health endpoint.
        MCP_STORAGE_FILE (str): JSON file holding the registered connections.
        MCP_BACKUP_DIR (str): Directory for backups, defaults to the storage file's directory.
        DISCOVERY_TIMEOUT / TOOL_TIMEOUT / PROVIDER_TIMEOUT (float): Seconds.
        PROVIDER_MAX_RETRIES (int): Retries performed by the provider client.
        DEFAULT_TEMPERATURE / DEFAULT_MAX_TOKENS: Fallback completion settings.
    """
    # AI Provider Switch
    AI_PROVIDER: ProviderName = "cursor"

    # CURSOR
    CURSOR_API_KEY: str = ""
    CURSOR_API_URL: str = "https://api.cursor.com/v1"
    CURSOR_MODEL: str = "claude-3.5-sonnet"

    # DEEPSEEK
    DEEPSEEK_API_KEY: str = ""
    DEEPSEEK_API_URL: str = "https://api.deepseek.com/v1"
    DEEPSEEK_MODEL: str = "deepseek-chat"

    # OPENAI
    OPENAI_API_KEY: str = ""
    OPENAI_API_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-3.5-turbo"

    # ANTHROPIC (OpenAI-compatible endpoint)
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_API_URL: str = "https://api.anthropic.com/v1"
    ANTHROPIC_MODEL: str = "claude-3-sonnet-20240229"

    # SERVER
    HOST: str = "localhost"
    PORT: int = 8787

    # FEATURES
    ENABLE_MCP_TOOLS: bool = True
    ENABLE_AI_CHAT: bool = True
    ENABLE_SYSTEM_PROMPTS: bool = True

    # MCP STORAGE
    MCP_STORAGE_FILE: str = "server/mcp-connections.json"
    MCP_BACKUP_DIR: str = ""

    # NETWORK
    DISCOVERY_TIMEOUT: float = 10.0
    TOOL_TIMEOUT: float = 10.0
    PROVIDER_TIMEOUT: float = 60.0
    PROVIDER_MAX_RETRIES: int = 0

    # COMPLETION DEFAULTS
    DEFAULT_TEMPERATURE: float = 0.7
    DEFAULT_MAX_TOKENS: int = 1000

    class Config:
        # server.env overrides .env
        env_file = (".env", "server.env")
        env_file_encoding = 'utf-8'
        extra = "ignore"

    def provider_options(self, provider: Optional[str] = None) -> Dict[str, str]:
        """Returns the api key, base url and default model of a provider."""
        name = (provider or self.AI_PROVIDER).upper()
        return {
            "api_key": getattr(self, f"{name}_API_KEY"),
            "base_url": getattr(self, f"{name}_API_URL"),
            "model": getattr(self, f"{name}_MODEL"),
        }

    def validate_config(self) -> List[str]:
        """Lists the settings the active provider still needs."""
        errors = []
        if not self.provider_options()["api_key"]:
            errors.append(f"{self.AI_PROVIDER.upper()}_API_KEY is not set")
        return errors

    def summary(self) -> dict:
        """A printable view of the active configuration, without secrets."""
        return {
            "AI provider": self.AI_PROVIDER,
            "Model": self.provider_options()["model"],
            "Host": self.HOST,
            "Port": self.PORT,
            "Storage file": self.MCP_STORAGE_FILE,
            "features": {
                "enableMCP": self.ENABLE_MCP_TOOLS,
                "enableAIChat": self.ENABLE_AI_CHAT,
                "enableSystemPrompts": self.ENABLE_SYSTEM_PROMPTS,
            },
        }


# lru_cache to cache the settings instance.
@lru_cache
def get_settings():
    return Settings()


if __name__ == "__main__":
    settings = get_settings()
    print(settings.model_dump_json(indent=4))
