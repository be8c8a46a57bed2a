"""Relationship Manager — instruction parsing and safe Cypher construction for graph edits."""

from src.agents.relationship_manager.fallback_patterns import FALLBACK_PATTERNS, extract
from src.agents.relationship_manager.instruction_parser import InstructionParser
from src.agents.relationship_manager.query_builder import CypherQuery, OperationQueryBuilder

__all__ = [
    "FALLBACK_PATTERNS",
    "extract",
    "InstructionParser",
    "CypherQuery",
    "OperationQueryBuilder",
]
