"""
Base configuration for the relationship tools.

Uses Pydantic Settings for environment-based configuration.
Each component extends BaseAgentSettings with its own prefix.
"""

from pydantic_settings import BaseSettings


class BaseAgentSettings(BaseSettings):
    """Base settings shared by all components."""

    agent_name: str = "base"

    # OpenAI
    openai_api_key: str = ""

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
