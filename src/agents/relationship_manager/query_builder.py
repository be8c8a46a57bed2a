"""
Operation Query Builder — Cypher rendering for extracted operations.

Sanitizes every string of an ``ExtractedOperation`` and renders the
Cypher statement for its kind.  Entity names and values are bound as
parameters; property keys, the node label and the name property are
interpolated only after ``sanitize_cypher_identifier`` accepts them.
A single rejected string aborts the whole build.
"""

from dataclasses import dataclass, field
from typing import Any

from src.agents.relationship_manager.config import RelationshipManagerSettings
from src.shared.exceptions import OperationBuildError
from src.shared.knowledge_graph import (
    sanitize_cypher_identifier,
    sanitize_cypher_limit,
)
from src.shared.logging import setup_logging
from src.shared.models.operations import (
    EntityRefs,
    ExtractedOperation,
    OperationKind,
    RelationshipChange,
)

logger = setup_logging("relationship_manager.query_builder")

# Fields each kind needs, as (section, attribute) pairs.
REQUIRED_FIELDS: dict[OperationKind, tuple[tuple[str, str], ...]] = {
    OperationKind.REPLACE_ENTITY: (("entities", "source"), ("entities", "target")),
    OperationKind.UPDATE_RELATIONSHIP: (
        ("entities", "source"),
        ("relationship", "property"),
        ("relationship", "value"),
    ),
    OperationKind.MERGE_ENTITIES: (("entities", "source"), ("entities", "target")),
    OperationKind.DELETE_RELATIONSHIPS: (("entities", "source"), ("entities", "target")),
    OperationKind.BULK_UPDATE: (
        ("entities", "source"),
        ("relationship", "property"),
        ("relationship", "value"),
    ),
    OperationKind.CONDITIONAL_UPDATE: (
        ("entities", "source"),
        ("relationship", "property"),
        ("relationship", "value"),
    ),
}


@dataclass
class CypherQuery:
    """A rendered statement plus the parameters to bind when executing it."""

    text: str
    params: dict[str, Any] = field(default_factory=dict)
    operation: ExtractedOperation | None = None


def _field(op: ExtractedOperation, section: str, name: str) -> str | None:
    part = getattr(op, section)
    return getattr(part, name) if part is not None else None


class OperationQueryBuilder:
    """Builds parameterised Cypher for extracted relationship operations."""

    def __init__(self, settings: RelationshipManagerSettings | None = None) -> None:
        self._settings = settings or RelationshipManagerSettings()
        self._renderers = {
            OperationKind.REPLACE_ENTITY: self._render_replace,
            OperationKind.UPDATE_RELATIONSHIP: self._render_update,
            OperationKind.MERGE_ENTITIES: self._render_merge,
            OperationKind.DELETE_RELATIONSHIPS: self._render_delete,
            OperationKind.BULK_UPDATE: self._render_bulk_update,
            OperationKind.CONDITIONAL_UPDATE: self._render_conditional_update,
        }

    @property
    def supported_kinds(self) -> frozenset[OperationKind]:
        return frozenset(self._renderers)

    # ─── Sanitization ─────────────────────────────────────

    def sanitize_operation(self, op: ExtractedOperation) -> ExtractedOperation:
        """Return a copy of ``op`` with every string sanitized.

        Entity names are checked as labels, the relationship property
        and value as property keys.

        Raises:
            InvalidIdentifierError: On the first string that fails validation.
        """
        entities = None
        if op.entities is not None:
            entities = EntityRefs(
                source=self._sanitize_optional(op.entities.source, "label"),
                target=self._sanitize_optional(op.entities.target, "label"),
            )
        relationship = None
        if op.relationship is not None:
            relationship = RelationshipChange(
                property=self._sanitize_optional(op.relationship.property, "property"),
                value=self._sanitize_optional(op.relationship.value, "property"),
            )
        return ExtractedOperation(kind=op.kind, entities=entities, relationship=relationship)

    @staticmethod
    def _sanitize_optional(value: str | None, kind: str) -> str | None:
        if value is None:
            return None
        return sanitize_cypher_identifier(value, kind)

    # ─── Building ─────────────────────────────────────────

    def build(self, op: ExtractedOperation, limit: Any = None) -> CypherQuery:
        """Render the Cypher statement for ``op``.

        Args:
            op: Operation from the instruction parser.
            limit: Optional row bound; capped at ``settings.max_limit``.

        Raises:
            OperationBuildError: If ``op`` lacks a field its kind needs.
            InvalidIdentifierError: If any string fails sanitization.
            InvalidLimitError: If ``limit`` is not a non-negative integer.
        """
        missing = [
            f"{section}.{name}"
            for section, name in REQUIRED_FIELDS[op.kind]
            if _field(op, section, name) is None
        ]
        if missing:
            raise OperationBuildError(
                f"{op.kind.value} requires {', '.join(missing)}"
            )

        sanitized = self.sanitize_operation(op)
        row_limit = sanitize_cypher_limit(limit, self._settings.max_limit)

        params: dict[str, Any] = {"source": op.entities.source}
        if op.entities.target is not None:
            params["target"] = op.entities.target
        if op.relationship is not None and op.relationship.value is not None:
            params["value"] = op.relationship.value

        text = self._renderers[op.kind](sanitized, row_limit)
        logger.info("Built %s query (limit=%d)", op.kind.value, row_limit)
        logger.debug("Cypher: %s", text)
        return CypherQuery(text=text, params=params, operation=sanitized)

    def _node(self, var: str, param: str) -> str:
        label = sanitize_cypher_identifier(self._settings.entity_label, "label")
        key = sanitize_cypher_identifier(self._settings.name_property, "property")
        return f"({var}:{label} {{{key}: ${param}}})"

    def _name_key(self) -> str:
        return sanitize_cypher_identifier(self._settings.name_property, "property")

    def _render_replace(self, op: ExtractedOperation, limit: int) -> str:
        # Reuse an existing target node so names stay unique; a new target
        # inherits the source's properties.  Source relationships move onto it.
        key = self._name_key()
        return (
            f"MATCH {self._node('e', 'source')} "
            f"WITH e LIMIT {limit} "
            f"MERGE {self._node('t', 'target')} "
            f"ON CREATE SET t += properties(e), t.{key} = $target "
            f"WITH e, t WHERE e <> t "
            f"CALL apoc.refactor.mergeNodes([t, e], "
            f"{{properties: 'discard', mergeRels: true}}) "
            f"YIELD node "
            f"RETURN count(node) AS updated"
        )

    def _render_update(self, op: ExtractedOperation, limit: int) -> str:
        other = self._node("t", "target") if op.entities.target is not None else "()"
        return (
            f"MATCH {self._node('s', 'source')}-[r]->{other} "
            f"WITH r LIMIT {limit} "
            f"SET r.{op.relationship.property} = $value "
            f"RETURN count(r) AS updated"
        )

    def _render_merge(self, op: ExtractedOperation, limit: int) -> str:
        # Target survives; source's relationships are moved onto it.
        key = self._name_key()
        return (
            f"MATCH {self._node('s', 'source')}, {self._node('t', 'target')} "
            f"WITH s, t LIMIT 1 "
            f"CALL apoc.refactor.mergeNodes([t, s], "
            f"{{properties: 'discard', mergeRels: true}}) "
            f"YIELD node RETURN node.{key} AS name"
        )

    def _render_delete(self, op: ExtractedOperation, limit: int) -> str:
        return (
            f"MATCH {self._node('s', 'source')}-[r]-{self._node('t', 'target')} "
            f"WITH r LIMIT {limit} "
            f"DELETE r "
            f"RETURN count(*) AS deleted"
        )

    def _render_bulk_update(self, op: ExtractedOperation, limit: int) -> str:
        return (
            f"MATCH {self._node('s', 'source')}-[r]-() "
            f"WITH r LIMIT {limit} "
            f"SET r.{op.relationship.property} = $value "
            f"RETURN count(r) AS updated"
        )

    def _render_conditional_update(self, op: ExtractedOperation, limit: int) -> str:
        prop = op.relationship.property
        other = self._node("t", "target") if op.entities.target is not None else "()"
        return (
            f"MATCH {self._node('s', 'source')}-[r]-{other} "
            f"WHERE r.{prop} IS NOT NULL AND r.{prop} <> $value "
            f"WITH r LIMIT {limit} "
            f"SET r.{prop} = $value "
            f"RETURN count(r) AS updated"
        )
