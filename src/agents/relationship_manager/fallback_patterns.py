"""
Fallback Patterns — regex cascade used when the LLM parser fails.

Recovers an ``ExtractedOperation`` from free text with an ordered
table of rules.  The first rule whose pattern matches wins; there is
no scoring and no backtracking across rules.

Priority:
    1) Quoted entities (explicit boundaries)
    2) Multi-word unquoted (non-greedy, ends at punctuation or end of text)
    3) Single-word fallback (backwards compatibility), arrows last

Multi-word spans end at a terminator, not at a keyword, so
``not A but B but C`` yields target ``B but C`` while
``not A but B, and then C`` yields target ``B``.

``multi_instead_of`` and ``arrow`` start with an unanchored ``(.+?)``,
so a non-matching instruction costs time quadratic in its length.
``extract`` itself accepts any length; ``InstructionParser`` skips the
cascade above ``max_instruction_length``.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable

from src.shared.logging import setup_logging
from src.shared.models.operations import ExtractedOperation, OperationKind

logger = setup_logging("relationship_manager.fallback_patterns")

_Q = r"""["']"""
_QUOTED = rf"{_Q}([^\"']+){_Q}"
_END = r"(?:\s*[,.;!?:]|\Z)"
_DELETE_VERB = r"delete\s+(?:relationship|connection|link).*between\s+"

Fragment = dict[str, Any]


@dataclass(frozen=True)
class PatternRule:
    """One entry of the fallback table."""

    name: str
    pattern: re.Pattern[str]
    kind: OperationKind
    extract: Callable[[re.Match[str]], Fragment]


def _pair(match: re.Match[str]) -> Fragment:
    return {
        "entities": {
            "source": match.group(1).strip(),
            "target": match.group(2).strip(),
        }
    }


def _reversed_pair(match: re.Match[str]) -> Fragment:
    # "X instead of Y": Y is being replaced by X
    return {
        "entities": {
            "source": match.group(2).strip(),
            "target": match.group(1).strip(),
        }
    }


def _token_pair(match: re.Match[str]) -> Fragment:
    return {"entities": {"source": match.group(1), "target": match.group(2)}}


def _possessive_update(match: re.Match[str]) -> Fragment:
    return {
        "entities": {"source": match.group(1)},
        "relationship": {"property": match.group(2), "value": match.group(3)},
    }


def _rule(name: str, pattern: str, kind: OperationKind, extract) -> PatternRule:
    return PatternRule(name, re.compile(pattern, re.IGNORECASE), kind, extract)


_REPLACE = OperationKind.REPLACE_ENTITY
_MERGE = OperationKind.MERGE_ENTITIES
_DELETE = OperationKind.DELETE_RELATIONSHIPS

FALLBACK_PATTERNS: tuple[PatternRule, ...] = (
    # === Priority 1: Quoted entities ===
    _rule("quoted_not_but", rf"not\s+{_QUOTED}\s+but\s+{_QUOTED}", _REPLACE, _pair),
    _rule("quoted_replace_with", rf"replace\s+{_QUOTED}\s+with\s+{_QUOTED}", _REPLACE, _pair),
    _rule("quoted_instead_of", rf"{_QUOTED}\s+instead\s+of\s+{_QUOTED}", _REPLACE, _reversed_pair),
    _rule(
        "quoted_merge",
        rf"(?:merge|combine)\s+{_QUOTED}\s+(?:and|with)\s+{_QUOTED}",
        _MERGE,
        _pair,
    ),
    _rule("quoted_delete_between", rf"{_DELETE_VERB}{_QUOTED}\s+and\s+{_QUOTED}", _DELETE, _pair),

    # === Priority 2: Multi-word, punctuation-terminated ===
    _rule("multi_not_but", rf"not\s+(.+?)\s+but\s+(.+?){_END}", _REPLACE, _pair),
    _rule("multi_replace_with", rf"replace\s+(.+?)\s+with\s+(.+?){_END}", _REPLACE, _pair),
    _rule(
        "multi_merge",
        rf"(?:merge|combine)\s+(.+?)\s+(?:and|with)\s+(.+?){_END}",
        _MERGE,
        _pair,
    ),
    _rule("multi_delete_between", rf"{_DELETE_VERB}(.+?)\s+and\s+(.+?){_END}", _DELETE, _pair),
    _rule("multi_instead_of", rf"(.+?)\s+instead\s+of\s+(.+?){_END}", _REPLACE, _reversed_pair),
    _rule("multi_change_to", rf"change\s+(.+?)\s+to\s+(.+?){_END}", _REPLACE, _pair),
    _rule("multi_rename_to", rf"rename\s+(.+?)\s+to\s+(.+?){_END}", _REPLACE, _pair),

    # === Priority 3: Single-word fallback ===
    _rule("word_replace_with", r"replace\s+(\S+)\s+with\s+(\S+)", _REPLACE, _token_pair),
    _rule("word_not_but", r"not\s+(\S+)\s+but\s+(\S+)", _REPLACE, _token_pair),
    _rule("word_merge", r"(?:merge|combine)\s+(\S+)\s+(?:and|with)\s+(\S+)", _MERGE, _token_pair),
    _rule("word_delete_between", rf"{_DELETE_VERB}(\S+)\s+and\s+(\S+)", _DELETE, _token_pair),
    _rule(
        "word_possessive_update",
        r"update\s+(\S+)(?:'s|’s)\s+(\S+)\s+to\s+(\S+)",
        OperationKind.UPDATE_RELATIONSHIP,
        _possessive_update,
    ),
    _rule("arrow", rf"(.+?)\s*(?:->|=>)\s*(.+?){_END}", _REPLACE, _pair),
)


def match_rule(instruction: str) -> tuple[PatternRule, ExtractedOperation] | None:
    """Return the winning rule and its operation, or None if nothing matches."""
    if not isinstance(instruction, str) or not instruction:
        return None

    for rule in FALLBACK_PATTERNS:
        match = rule.pattern.search(instruction)
        if match:
            operation = ExtractedOperation(kind=rule.kind, **rule.extract(match))
            logger.debug("Fallback rule %s matched -> %s", rule.name, rule.kind.value)
            return rule, operation

    logger.debug("No fallback rule matched")
    return None


def extract(instruction: str) -> ExtractedOperation | None:
    """Extract a structured operation from ``instruction``.

    Never raises; ``None`` means no rule in the table matched.
    """
    result = match_rule(instruction)
    return result[1] if result else None
