"""Relationship Manager configuration."""

import os

from src.shared.config import BaseAgentSettings
from src.shared.knowledge_graph.cypher_sanitizer import DEFAULT_MAX_LIMIT


class RelationshipManagerSettings(BaseAgentSettings):
    """Settings specific to the Relationship Manager."""

    agent_name: str = "relationship_manager"
    use_llm_parser: bool = True
    parser_model: str = os.getenv("DEFAULT_MODEL", "gpt-5.2-2025-12-11")
    max_limit: int = DEFAULT_MAX_LIMIT
    max_instruction_length: int = 2000
    entity_label: str = "Entity"
    name_property: str = "name"

    class Config(BaseAgentSettings.Config):
        env_prefix = "RELATIONSHIP_MANAGER_"
