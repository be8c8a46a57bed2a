"""
Knowledge graph package — Cypher safety helpers.
"""

from .cypher_sanitizer import (
    escape_cypher_identifier,
    is_valid_cypher_identifier,
    sanitize_cypher_identifier,
    sanitize_cypher_limit,
)

__all__ = [
    "escape_cypher_identifier",
    "is_valid_cypher_identifier",
    "sanitize_cypher_identifier",
    "sanitize_cypher_limit",
]
