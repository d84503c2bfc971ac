"""ConversationProcessor — estado final da conversa → dados de submissão.

Passos:
1. Resolver schema (custom > template > inline)
2. Mapear extrações parciais para os campos do formulário
3. Validar dados mapeados (obrigatórios, tipos, limites, regex)
4. Calcular duração e razão de encerramento
5. Montar metadados (_meta)

Contrato: nunca propaga exceção. Qualquer falha vira success=False com a
mensagem de erro.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from convoform.application.mapping import (
    MappingReportEntry,
    map_extracted_data_to_form_fields,
    validate_mapped_data,
)
from convoform.config.settings import get_settings
from convoform.domain.conversation import ConversationState, Message, utcnow
from convoform.domain.enums import (
    CompletionReason,
    ConversationStatus,
    FieldType,
    TopicPriority,
)
from convoform.domain.models import (
    AuthenticatedUser,
    ConversationalFormConfig,
    ExtractionField,
    FormField,
)
from convoform.observability.context import bind_conversation_id
from convoform.observability.logging import get_logger
from convoform.templates.registry import TemplateRegistry, get_template_registry

logger: logging.Logger = get_logger(__name__)

DEFAULT_PROCESSING_ERROR = "Falha ao processar conversa"


class TopicSnapshot(BaseModel):
    """Cobertura de um tópico no momento da submissão."""

    topic_id: str
    name: str
    priority: TopicPriority
    covered: bool
    depth: float


class SchemaFieldSummary(BaseModel):
    """Campo do schema efetivamente usado (field/type/required)."""

    field: str
    type: FieldType  # noqa: A003
    required: bool


class ConversationMetadata(BaseModel):
    """Registro de auditoria anexado à submissão (_meta)."""

    submission_type: Literal["conversational"] = "conversational"
    conversation_id: str
    transcript: list[Message] = Field(default_factory=list)
    turn_count: int
    confidence: float
    completion_reason: CompletionReason
    duration: int  # segundos
    topics_covered: list[TopicSnapshot] = Field(default_factory=list)
    extraction_schema: list[SchemaFieldSummary] = Field(default_factory=list)
    mapping_report: list[MappingReportEntry] = Field(default_factory=list)
    validation_warnings: list[str] = Field(default_factory=list)
    missing_required_fields: list[str] = Field(default_factory=list)
    unmapped_fields: dict[str, Any] | None = None
    authenticated_user: AuthenticatedUser | None = None


class ConversationalSubmissionData(BaseModel):
    """Dados da submissão: `data` mapeado + `_meta`."""

    model_config = ConfigDict(populate_by_name=True)

    data: dict[str, Any] = Field(default_factory=dict)
    meta: ConversationMetadata = Field(alias="_meta")

    def to_document(self) -> dict[str, Any]:
        """Documento serializável; chaves opcionais vazias são omitidas."""
        document = self.model_dump(mode="json", by_alias=True)
        meta = document["_meta"]
        for key in ("unmapped_fields", "authenticated_user"):
            if meta.get(key) is None:
                meta.pop(key, None)
        return document


@dataclass(slots=True)
class ProcessorResult:
    """Resultado de `ConversationProcessor.process`."""

    success: bool
    submission_data: ConversationalSubmissionData | None = None
    error: str | None = None
    warnings: list[str] = field(default_factory=list)
    missing_required_fields: list[str] = field(default_factory=list)


StateInput = ConversationState | Mapping[str, Any] | str | bytes


def _coerce_state(state: StateInput) -> ConversationState:
    if isinstance(state, ConversationState):
        return state
    if isinstance(state, (str, bytes, bytearray)):
        try:
            payload = json.loads(state)
        except json.JSONDecodeError as exc:
            msg = f"JSON inválido no estado da conversa: {exc.msg}"
            raise ValueError(msg) from exc
        return ConversationState.model_validate(payload)
    return ConversationState.model_validate(state)


def _coerce_config(config: ConversationalFormConfig | Mapping[str, Any]) -> ConversationalFormConfig:
    if isinstance(config, ConversationalFormConfig):
        return config
    return ConversationalFormConfig.model_validate(config)


def _coerce_fields(fields: Iterable[FormField | Mapping[str, Any]]) -> list[FormField]:
    return [f if isinstance(f, FormField) else FormField.model_validate(f) for f in fields]


class ConversationProcessor:
    """Processa o estado da conversa em dados de submissão."""

    def __init__(
        self,
        include_transcript: bool | None = None,
        include_mapping_report: bool | None = None,
        custom_schema: Sequence[ExtractionField] | None = None,
        registry: TemplateRegistry | None = None,
    ) -> None:
        settings = get_settings()
        self.include_transcript = (
            settings.processor_include_transcript
            if include_transcript is None
            else include_transcript
        )
        self.include_mapping_report = (
            settings.processor_include_mapping_report
            if include_mapping_report is None
            else include_mapping_report
        )
        self.custom_schema = list(custom_schema) if custom_schema is not None else None
        self._registry = registry

    @property
    def registry(self) -> TemplateRegistry:
        return self._registry or get_template_registry()

    def process(
        self,
        conversation_state: StateInput,
        form_config: ConversationalFormConfig | Mapping[str, Any],
        form_fields: Iterable[FormField | Mapping[str, Any]],
        authenticated_user: AuthenticatedUser | None = None,
        *,
        now: datetime | None = None,
    ) -> ProcessorResult:
        """Converte o estado em dados de submissão (nunca lança)."""
        try:
            state = _coerce_state(conversation_state)
            config = _coerce_config(form_config)
            fields = _coerce_fields(form_fields)

            with bind_conversation_id(state.conversation_id):
                return self._process(state, config, fields, authenticated_user, now)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "conversation_processing_failed",
                extra={"error_type": type(exc).__name__},
            )
            return ProcessorResult(success=False, error=str(exc) or DEFAULT_PROCESSING_ERROR)

    def _process(
        self,
        state: ConversationState,
        config: ConversationalFormConfig,
        fields: list[FormField],
        authenticated_user: AuthenticatedUser | None,
        now: datetime | None,
    ) -> ProcessorResult:
        schema = self.resolve_schema(config)
        mapping = map_extracted_data_to_form_fields(state.partial_extractions, schema, fields)
        validation = validate_mapped_data(mapping.mapped_data, fields)

        metadata = ConversationMetadata(
            conversation_id=state.conversation_id,
            transcript=list(state.messages) if self.include_transcript else [],
            turn_count=state.turn_count,
            confidence=state.confidence,
            completion_reason=determine_completion_reason(state),
            duration=calculate_duration(state, now=now),
            topics_covered=[
                TopicSnapshot(
                    topic_id=t.topic_id,
                    name=t.name,
                    priority=t.priority,
                    covered=t.covered,
                    depth=t.depth,
                )
                for t in state.topics
            ],
            extraction_schema=[
                SchemaFieldSummary(field=f.field, type=f.type, required=f.required)
                for f in schema
            ],
            mapping_report=mapping.mapping_report if self.include_mapping_report else [],
            validation_warnings=validation.warnings,
            missing_required_fields=validation.missing_required_fields,
            unmapped_fields=dict(mapping.unmapped_fields) or None,
            authenticated_user=authenticated_user,
        )

        logger.info(
            "conversation_processed",
            extra={
                "conversation_id": state.conversation_id,
                "mapped_count": sum(1 for e in mapping.mapping_report if e.matched),
                "unmapped_count": len(mapping.unmapped_fields),
                "missing_required_count": len(validation.missing_required_fields),
                "completion_reason": metadata.completion_reason,
            },
        )

        return ProcessorResult(
            success=True,
            submission_data=ConversationalSubmissionData(
                data=mapping.mapped_data, meta=metadata
            ),
            warnings=list(validation.warnings),
            missing_required_fields=list(validation.missing_required_fields),
        )

    def resolve_schema(self, config: ConversationalFormConfig) -> list[ExtractionField]:
        """Schema efetivo: custom do processor > template > inline da config."""
        if self.custom_schema is not None:
            return self.custom_schema

        if config.template_id:
            template = self.registry.get(config.template_id)
            if template is not None:
                return list(template.default_schema)

        return list(config.extraction_schema)


def calculate_duration(state: ConversationState, *, now: datetime | None = None) -> int:
    """Duração em segundos inteiros (completed_at ou agora − started_at)."""
    end = state.completed_at or now or utcnow()
    return max(0, round((end - state.started_at).total_seconds()))


def determine_completion_reason(state: ConversationState) -> CompletionReason:
    """Razão armazenada > completed > turn_limit > user_confirmed."""
    if state.completion_reason is not None:
        return state.completion_reason
    if state.status == ConversationStatus.COMPLETED:
        return CompletionReason.COMPLETED
    if state.turn_count >= state.max_turns:
        return CompletionReason.TURN_LIMIT
    return CompletionReason.USER_CONFIRMED


def create_processor(**options: Any) -> ConversationProcessor:
    return ConversationProcessor(**options)


def process_conversation(
    conversation_state: StateInput,
    form_config: ConversationalFormConfig | Mapping[str, Any],
    form_fields: Iterable[FormField | Mapping[str, Any]],
    authenticated_user: AuthenticatedUser | None = None,
) -> ProcessorResult:
    """Atalho para processamento avulso com configuração padrão."""
    return ConversationProcessor().process(
        conversation_state, form_config, form_fields, authenticated_user
    )
