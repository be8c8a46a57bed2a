from enum import Enum

from pydantic import BaseModel, Field, model_validator


class OperationKind(str, Enum):
    """Closed set of relationship edit operations."""

    REPLACE_ENTITY = "replace_entity"
    UPDATE_RELATIONSHIP = "update_relationship"
    MERGE_ENTITIES = "merge_entities"
    DELETE_RELATIONSHIPS = "delete_relationships"
    # Only reachable from the LLM parser; no fallback pattern emits these.
    BULK_UPDATE = "bulk_update"
    CONDITIONAL_UPDATE = "conditional_update"


class EntityRefs(BaseModel):
    """Surface text of the entities an instruction names."""

    source: str | None = Field(
        default=None,
        description="Entity being replaced, merged away, or updated",
    )
    target: str | None = Field(
        default=None,
        description="Entity that replaces or absorbs the source",
    )


class RelationshipChange(BaseModel):
    """Property assignment on the relationships of the source entity."""

    property: str | None = Field(
        default=None,
        description="Relationship property key, e.g. role",
    )
    value: str | None = Field(
        default=None,
        description="New value for the property, e.g. admin",
    )


class ExtractedOperation(BaseModel):
    """Structured edit operation recovered from a natural-language instruction.

    Doubles as the structured-output schema for the LLM parser.
    """

    kind: OperationKind = Field(description="Which graph edit to perform")
    entities: EntityRefs | None = Field(
        default=None,
        description="Source and target entity names as written in the instruction",
    )
    relationship: RelationshipChange | None = Field(
        default=None,
        description="Relationship property and value to set, if any",
    )

    @model_validator(mode="after")
    def _require_payload(self) -> "ExtractedOperation":
        if self.entities is None and self.relationship is None:
            raise ValueError("operation needs entities or relationship")
        return self
