"""
Logging setup and correlation IDs for the relationship tools.

Levels come from ``BaseAgentSettings.log_level`` (env ``LOG_LEVEL``)
unless a caller passes one explicitly, so a single setting controls
the fallback-rule traces and the parser's strategy logs.
"""

import logging
import uuid

from src.shared.config import BaseAgentSettings

LOG_FORMAT = "%(asctime)s  %(name)-40s  %(levelname)-7s  %(message)s"


def resolve_log_level(level: str | None = None) -> int:
    """Map a level name to a ``logging`` constant, defaulting to settings."""
    name = level or BaseAgentSettings().log_level
    return getattr(logging, name.upper(), logging.INFO)


def setup_logging(agent_name: str, level: str | None = None) -> logging.Logger:
    """
    Return the logger for a component, configured at the resolved level.

    Args:
        agent_name: Dotted logger name, e.g. 'relationship_manager.query_builder'.
        level: Explicit level name; falls back to ``LOG_LEVEL``.
    """
    resolved = resolve_log_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logger = logging.getLogger(agent_name)
    logger.setLevel(resolved)
    return logger


def generate_correlation_id() -> str:
    """Short id tying one instruction's parse and build log lines together."""
    return uuid.uuid4().hex[:12]
