"""
Unit tests for the Cypher identifier and LIMIT sanitizer.
"""

import math

import pytest

from src.shared.exceptions import (
    AgentError,
    CypherSanitizationError,
    InvalidIdentifierError,
    InvalidLimitError,
    NegativeLimitError,
)
from src.shared.knowledge_graph.cypher_sanitizer import (
    MAX_IDENTIFIER_LENGTH,
    escape_cypher_identifier,
    is_valid_cypher_identifier,
    sanitize_cypher_identifier,
    sanitize_cypher_limit,
)

KEYWORDS = [
    "MATCH", "DELETE", "CREATE", "MERGE", "SET", "REMOVE",
    "DETACH", "RETURN", "WHERE", "WITH", "CALL", "YIELD",
]


class TestIsValidIdentifier:

    @pytest.mark.parametrize(
        "identifier", ["name", "firstName", "_private", "node123", "Person", "KNOWS", "first name"],
    )
    def test_accepts_plain_identifiers(self, identifier):
        assert is_valid_cypher_identifier(identifier) is True

    @pytest.mark.parametrize("identifier", [") DELETE n //", "name)", "(name", "name[0]", "{name}"])
    def test_rejects_brackets(self, identifier):
        assert is_valid_cypher_identifier(identifier) is False

    @pytest.mark.parametrize("identifier", ["name--comment", "name/*comment*/", "/* */ name"])
    def test_rejects_comments(self, identifier):
        assert is_valid_cypher_identifier(identifier) is False

    @pytest.mark.parametrize("keyword", KEYWORDS)
    def test_rejects_keywords_any_case(self, keyword):
        assert is_valid_cypher_identifier(keyword) is False
        assert is_valid_cypher_identifier(keyword.lower()) is False
        assert is_valid_cypher_identifier(keyword.title()) is False

    @pytest.mark.parametrize("identifier", ["offset", "without", "callback", "Settings", "rematch"])
    def test_rejects_keyword_substrings(self, identifier):
        assert is_valid_cypher_identifier(identifier) is False

    @pytest.mark.parametrize("identifier", ["name;", "name\nDELETE", "name\r\n", "a\rb"])
    def test_rejects_terminators_and_newlines(self, identifier):
        assert is_valid_cypher_identifier(identifier) is False

    @pytest.mark.parametrize("identifier", ["", "   ", None, 42, b"name"])
    def test_rejects_empty_and_non_strings(self, identifier):
        assert is_valid_cypher_identifier(identifier) is False

    def test_length_boundary(self):
        assert is_valid_cypher_identifier("a" * MAX_IDENTIFIER_LENGTH) is True
        assert is_valid_cypher_identifier("a" * (MAX_IDENTIFIER_LENGTH + 1)) is False
        assert is_valid_cypher_identifier("a" * 70000) is False


class TestEscapeIdentifier:

    @pytest.mark.parametrize("identifier", ["name", "firstName", "_private", "Person"])
    def test_bare_identifiers_unchanged(self, identifier):
        assert escape_cypher_identifier(identifier) == identifier
        assert escape_cypher_identifier(escape_cypher_identifier(identifier)) == identifier

    def test_wraps_spaces(self):
        assert escape_cypher_identifier("first name") == "`first name`"
        assert escape_cypher_identifier("some property") == "`some property`"

    def test_doubles_backticks(self):
        assert escape_cypher_identifier("has`tick") == "`has``tick`"
        assert escape_cypher_identifier("multiple`back`ticks") == "`multiple``back``ticks`"

    def test_wraps_leading_digit(self):
        assert escape_cypher_identifier("123name") == "`123name`"

    def test_wraps_non_ascii_letters(self):
        assert escape_cypher_identifier("café") == "`café`"


class TestSanitizeIdentifier:

    def test_returns_escaped_identifier(self):
        assert sanitize_cypher_identifier("name") == "name"
        assert sanitize_cypher_identifier("first name") == "`first name`"
        assert sanitize_cypher_identifier("Person", "label") == "Person"

    def test_label_error(self):
        with pytest.raises(InvalidIdentifierError, match="Invalid Cypher label"):
            sanitize_cypher_identifier(") DELETE n", "label")

    def test_property_error(self):
        with pytest.raises(InvalidIdentifierError, match="Invalid Cypher property"):
            sanitize_cypher_identifier("MATCH (n) RETURN n", "property")

    def test_relationship_error(self):
        with pytest.raises(InvalidIdentifierError, match="Invalid Cypher relationship"):
            sanitize_cypher_identifier("KNOWS]->() DELETE", "relationship")

    def test_error_message_and_attributes(self):
        with pytest.raises(InvalidIdentifierError) as exc_info:
            sanitize_cypher_identifier("bad;input", "label")
        err = exc_info.value
        assert err.message == (
            'Invalid Cypher label: "bad;input". '
            "Cannot contain special characters, keywords, or comments."
        )
        assert err.identifier_kind == "label"
        assert err.value == "bad;input"
        assert isinstance(err, CypherSanitizationError)
        assert isinstance(err, AgentError)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            sanitize_cypher_identifier("name", "index")

    @pytest.mark.parametrize(
        "payload",
        [
            "Person`) DELETE (n) //",
            "Person) DELETE (n) //",
            "KNOWS]->(x) SET x.admin=true WITH x MATCH (y)-[r:",
            "name} RETURN n.password, n.{",
            "name UNION MATCH (m:Admin) RETURN m.password AS",
        ],
    )
    def test_real_world_injections(self, payload):
        with pytest.raises(InvalidIdentifierError):
            sanitize_cypher_identifier(payload, "label")


class TestSanitizeLimit:

    @pytest.mark.parametrize("value, expected", [(10, 10), (100, 100), (0, 0), (10000, 10000)])
    def test_integers(self, value, expected):
        assert sanitize_cypher_limit(value) == expected

    def test_strings(self):
        assert sanitize_cypher_limit("50") == 50
        assert sanitize_cypher_limit(" 100 ") == 100

    def test_integral_float(self):
        assert sanitize_cypher_limit(5.0) == 5

    def test_caps_at_max(self):
        assert sanitize_cypher_limit(999999) == 10000
        assert sanitize_cypher_limit(50000) == 10000

    def test_custom_max(self):
        assert sanitize_cypher_limit(500, 100) == 100
        assert sanitize_cypher_limit(50, 100) == 50

    def test_none_returns_max(self):
        assert sanitize_cypher_limit(None) == 10000
        assert sanitize_cypher_limit(None, 500) == 500

    @pytest.mark.parametrize(
        "value", ["abc", "12.5", 12.5, math.nan, math.inf, "", "1_000", True, [10], "10; DELETE n", "10 MATCH"],
    )
    def test_rejects_non_integers(self, value):
        with pytest.raises(InvalidLimitError, match="Invalid LIMIT") as exc_info:
            sanitize_cypher_limit(value)
        assert not isinstance(exc_info.value, NegativeLimitError)
        assert "Must be an integer." in str(exc_info.value)

    @pytest.mark.parametrize("value", [-1, "-5", -3.0])
    def test_rejects_negative(self, value):
        with pytest.raises(NegativeLimitError, match="Must be non-negative"):
            sanitize_cypher_limit(value)
