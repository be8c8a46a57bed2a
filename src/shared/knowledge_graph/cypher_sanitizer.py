"""
Cypher Sanitizer — identifier and LIMIT guards.

Every label, property key or relationship type that gets interpolated
into Cypher text (rather than bound as a ``$param``) must go through
``sanitize_cypher_identifier`` first.  The validator is a conservative
denylist: it rejects any identifier containing a reserved keyword as a
substring, so ``offset`` or ``without`` are refused along with real
injection attempts.
"""

import math
import re
from typing import Any, Literal

from src.shared.exceptions import (
    InvalidIdentifierError,
    InvalidLimitError,
    NegativeLimitError,
)

IdentifierKind = Literal["label", "property", "relationship"]

IDENTIFIER_KINDS: frozenset[str] = frozenset({"label", "property", "relationship"})

# ── Security guards (these MUST stay) ─────────────────────

_DANGEROUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"[()\[\]{}]"),  # brackets / parens
    re.compile(r"--"),  # line comment
    re.compile(r"/\*"),  # block comment start
    re.compile(
        r"MATCH|DELETE|CREATE|MERGE|SET|REMOVE|DETACH|RETURN|WHERE|WITH|CALL|YIELD",
        re.IGNORECASE,
    ),
    re.compile(r"[\r\n]"),
    re.compile(r";"),  # statement terminator
)

_SAFE_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_INTEGER_STRING = re.compile(r"[+-]?[0-9]+")

# Neo4j caps identifiers at 65534 characters.
MAX_IDENTIFIER_LENGTH = 65534

DEFAULT_MAX_LIMIT = 10000


def is_valid_cypher_identifier(identifier: Any) -> bool:
    """Return True if ``identifier`` is safe to interpolate into Cypher.

    >>> is_valid_cypher_identifier("firstName")
    True
    >>> is_valid_cypher_identifier(") DELETE n //")
    False
    """
    if not isinstance(identifier, str):
        return False
    if not identifier.strip():
        return False
    if len(identifier) > MAX_IDENTIFIER_LENGTH:
        return False
    return not any(p.search(identifier) for p in _DANGEROUS_PATTERNS)


def escape_cypher_identifier(identifier: str) -> str:
    """Backtick-quote ``identifier`` unless it is already a bare token.

    Backticks inside the identifier are doubled.  Performs no
    validation and is a single-pass operation: escaping an escaped
    value quotes it again.

    >>> escape_cypher_identifier("first name")
    '`first name`'
    >>> escape_cypher_identifier("has`tick")
    '`has``tick`'
    """
    if _SAFE_IDENTIFIER.fullmatch(identifier):
        return identifier
    escaped = identifier.replace("`", "``")
    return f"`{escaped}`"


def sanitize_cypher_identifier(
    identifier: Any,
    kind: IdentifierKind = "property",
) -> str:
    """Validate and escape an identifier in one call.

    Args:
        identifier: Candidate label, property key or relationship type.
        kind: Which of the three the identifier is; only affects the
            error message.

    Returns:
        The identifier, backtick-quoted if it is not a bare token.

    Raises:
        InvalidIdentifierError: If the identifier fails validation.
    """
    if kind not in IDENTIFIER_KINDS:
        raise ValueError(f"Unknown identifier kind: {kind!r}")
    if not is_valid_cypher_identifier(identifier):
        raise InvalidIdentifierError(kind, identifier)
    return escape_cypher_identifier(identifier)


def sanitize_cypher_limit(limit: Any, max_allowed: int = DEFAULT_MAX_LIMIT) -> int:
    """Coerce ``limit`` to a non-negative int capped at ``max_allowed``.

    ``None`` means "no explicit limit" and yields ``max_allowed``.
    Strings must be plain base-10 integers; ``"12.5"`` and
    ``"10 MATCH"`` are rejected rather than truncated.

    Raises:
        InvalidLimitError: If the value is not an integer.
        NegativeLimitError: If the value is below zero.
    """
    if limit is None:
        return max_allowed

    if isinstance(limit, bool):
        raise InvalidLimitError(limit)
    if isinstance(limit, int):
        num = limit
    elif isinstance(limit, float):
        if not math.isfinite(limit) or not limit.is_integer():
            raise InvalidLimitError(limit)
        num = int(limit)
    elif isinstance(limit, str):
        if not _INTEGER_STRING.fullmatch(limit.strip()):
            raise InvalidLimitError(limit)
        num = int(limit.strip())
    else:
        raise InvalidLimitError(limit)

    if num < 0:
        raise NegativeLimitError(limit)
    return min(num, max_allowed)
