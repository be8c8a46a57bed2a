"""
Custom exception hierarchy for the knowledge-graph relationship tools.

All errors inherit from AgentError so they can be caught
uniformly by whatever caller drives the relationship manager.
"""


class AgentError(Exception):
    """Base exception for all agent errors."""

    def __init__(self, message: str, agent_name: str = "unknown"):
        self.agent_name = agent_name
        self.message = message
        super().__init__(f"[{agent_name}] {message}")


class RelationshipManagerError(AgentError):
    """Errors raised by the Relationship Manager."""

    def __init__(self, message: str):
        super().__init__(message, agent_name="relationship_manager")


class InstructionParseError(RelationshipManagerError):
    """Neither the LLM nor the fallback patterns understood the instruction."""

    def __init__(self, instruction: str):
        self.instruction = instruction
        super().__init__(f"Could not understand instruction: {instruction!r}")


class OperationBuildError(RelationshipManagerError):
    """An extracted operation lacks the fields its kind requires."""
    pass


class CypherSanitizationError(AgentError):
    """Base class for rejected Cypher identifiers and limits."""

    def __init__(self, message: str):
        super().__init__(message, agent_name="cypher_sanitizer")


class InvalidIdentifierError(CypherSanitizationError):
    """Identifier contains brackets, comments, keywords or terminators."""

    def __init__(self, identifier_kind: str, value):
        self.identifier_kind = identifier_kind
        self.value = value
        super().__init__(
            f'Invalid Cypher {identifier_kind}: "{value}". '
            "Cannot contain special characters, keywords, or comments."
        )


class InvalidLimitError(CypherSanitizationError):
    """LIMIT value is not an integer."""

    def __init__(self, value, reason: str = "Must be an integer."):
        self.value = value
        super().__init__(f"Invalid LIMIT: {value}. {reason}")


class NegativeLimitError(InvalidLimitError):
    """LIMIT value is an integer below zero."""

    def __init__(self, value):
        super().__init__(value, reason="Must be non-negative.")
