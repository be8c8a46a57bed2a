"""
Instruction Parser — LLM-first parsing of edit instructions.

Turns a natural-language edit instruction into an ``ExtractedOperation``.
Chain: LLM structured output → regex fallback cascade → rejection.
"""

from pydantic import ValidationError

from src.agents.relationship_manager.config import RelationshipManagerSettings
from src.agents.relationship_manager.fallback_patterns import match_rule
from src.shared.exceptions import InstructionParseError
from src.shared.llms.models import get_openai_model
from src.shared.logging import generate_correlation_id, setup_logging
from src.shared.models.operations import ExtractedOperation, OperationKind

logger = setup_logging("relationship_manager.instruction_parser")

PARSE_PROMPT = """\
You convert knowledge-graph edit instructions into a structured operation.

Pick exactly one kind from: {kinds}

- replace_entity: "not X but Y", "replace X with Y", "Y instead of X", \
"rename X to Y". source is the entity being replaced, target its replacement.
- update_relationship: "update X's role to admin". source is X, \
relationship.property is role, relationship.value is admin.
- merge_entities: "merge X and Y". source is merged into target.
- delete_relationships: "delete the link between X and Y".
- bulk_update: the same relationship change applied to every relationship \
of source.
- conditional_update: a relationship change applied only where the property \
is already set, optionally limited to relationships with target.

Copy entity names exactly as written, without surrounding quotes.
"""


class InstructionParser:
    """Parses edit instructions, falling back to regex rules when the LLM fails."""

    def __init__(
        self,
        settings: RelationshipManagerSettings | None = None,
        model=None,
    ) -> None:
        self._settings = settings or RelationshipManagerSettings()
        self._model = model

    def _structured_model(self):
        if self._model is None:
            self._model = get_openai_model(
                self._settings.parser_model,
                api_key=self._settings.openai_api_key or None,
            )
        return self._model.with_structured_output(ExtractedOperation)

    async def _parse_with_llm(self, instruction: str) -> ExtractedOperation | None:
        prompt = PARSE_PROMPT.format(
            kinds=", ".join(kind.value for kind in OperationKind),
        )
        try:
            logger.info("Invoking LLM for instruction parsing...")
            result = await self._structured_model().ainvoke(
                [
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": instruction},
                ]
            )
        except Exception as exc:
            logger.warning("LLM parse failed (%s: %s), using fallback", type(exc).__name__, exc)
            return None

        if isinstance(result, dict):
            try:
                result = ExtractedOperation.model_validate(result)
            except ValidationError as exc:
                logger.warning("LLM returned an invalid operation (%s), using fallback", exc)
                return None
        if not isinstance(result, ExtractedOperation):
            logger.warning("LLM returned %s, using fallback", type(result).__name__)
            return None
        return result

    async def parse(self, instruction: str) -> ExtractedOperation:
        """Parse an instruction into a structured operation.

        Args:
            instruction: Raw instruction text from a user or upstream model.

        Returns:
            The extracted operation.

        Raises:
            InstructionParseError: If neither strategy understood the text.
        """
        correlation_id = generate_correlation_id()
        logger.info("[%s] InstructionParser.parse called", correlation_id)
        logger.debug("[%s] Instruction: %s", correlation_id, instruction)

        if self._settings.use_llm_parser:
            operation = await self._parse_with_llm(instruction)
            if operation is not None:
                logger.info(
                    "[%s] Parsed via llm: kind=%s", correlation_id, operation.kind.value,
                )
                return operation

        matched = None
        if len(instruction) > self._settings.max_instruction_length:
            logger.warning(
                "[%s] Instruction is %d chars (max %d), skipping fallback patterns",
                correlation_id, len(instruction), self._settings.max_instruction_length,
            )
        else:
            matched = match_rule(instruction)
        if matched is not None:
            rule, operation = matched
            logger.info(
                "[%s] Parsed via fallback rule %s: kind=%s",
                correlation_id, rule.name, operation.kind.value,
            )
            return operation

        logger.warning("[%s] Instruction not understood", correlation_id)
        raise InstructionParseError(instruction)
