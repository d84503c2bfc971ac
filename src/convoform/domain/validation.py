"""Validações de autoria para tópicos, schema, configs e templates.

Contrato:
- Nunca lança exceção para erros recuperáveis de autoria
- Retorna lista de erros legíveis (vazia = OK)
- Quem chama decide se bloqueia o salvamento
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from convoform.domain.enums import FieldType, StrategyType
from convoform.domain.models import (
    ConversationalFormConfig,
    ConversationLimits,
    ConversationTopic,
    ExtractionField,
)
from convoform.domain.stored_template import StoredTemplate

MAX_TEMPLATE_NAME_LENGTH = 100
MAX_TEMPLATE_DESCRIPTION_LENGTH = 500


def validate_topics(topics: Iterable[ConversationTopic]) -> list[str]:
    """Valida lista de tópicos (ids únicos, id e nome presentes)."""
    errors: list[str] = []
    seen: set[str] = set()

    for topic in topics:
        if not topic.id or not topic.name:
            errors.append("Cada tópico deve ter id e nome")
        if topic.id in seen:
            errors.append(f"ID de tópico duplicado: {topic.id}")
        seen.add(topic.id)

    return errors


def validate_extraction_schema(schema: Iterable[ExtractionField]) -> list[str]:
    """Valida schema de extração.

    Regras:
    - Nomes de campo únicos e não vazios
    - Campo enum exige lista de opções não vazia
    - Regex de validação deve compilar
    - min_length <= max_length e min <= max
    """
    errors: list[str] = []
    seen: set[str] = set()

    for item in schema:
        if not item.field:
            errors.append("Cada campo de extração deve ter nome")
        if item.field in seen:
            errors.append(f"Nome de campo duplicado: {item.field}")
        seen.add(item.field)

        if item.type == FieldType.ENUM and not item.options:
            errors.append(f"Campo enum '{item.field}' exige lista de opções não vazia")

        rules = item.validation
        if rules is None:
            continue

        if rules.pattern:
            try:
                re.compile(rules.pattern)
            except re.error:
                errors.append(f"Padrão regex inválido no campo '{item.field}'")

        if (
            rules.min_length is not None
            and rules.max_length is not None
            and rules.min_length > rules.max_length
        ):
            errors.append(f"Campo '{item.field}': min_length maior que max_length")

        if rules.min is not None and rules.max is not None and rules.min > rules.max:
            errors.append(f"Campo '{item.field}': min maior que max")

    return errors


def validate_conversation_limits(limits: ConversationLimits) -> list[str]:
    """Valida limites de conversa."""
    errors: list[str] = []
    if limits.max_turns < 1:
        errors.append("max_turns deve ser >= 1")
    if limits.max_duration <= 0:
        errors.append("max_duration deve ser > 0")
    if not 0.0 <= limits.min_confidence <= 1.0:
        errors.append("min_confidence deve estar entre 0 e 1")
    return errors


def _validate_topic_links(
    topics: list[ConversationTopic], schema: list[ExtractionField]
) -> list[str]:
    topic_ids = {t.id for t in topics}
    return [
        f"Campo '{item.field}' referencia tópico inexistente: {item.topic_id}"
        for item in schema
        if item.topic_id and item.topic_id not in topic_ids
    ]


def validate_form_config(config: ConversationalFormConfig) -> list[str]:
    """Valida uma configuração completa de formulário conversacional."""
    errors: list[str] = []
    errors.extend(validate_topics(config.topics))
    errors.extend(validate_extraction_schema(config.extraction_schema))
    errors.extend(validate_conversation_limits(config.conversation_limits))
    errors.extend(_validate_topic_links(config.topics, config.extraction_schema))
    return errors


def validate_stored_template(template: StoredTemplate) -> list[str]:
    """Valida template de organização antes de salvar."""
    errors: list[str] = []

    if not template.name or not template.name.strip():
        errors.append("Nome é obrigatório")
    elif len(template.name) > MAX_TEMPLATE_NAME_LENGTH:
        errors.append(f"Nome deve ter no máximo {MAX_TEMPLATE_NAME_LENGTH} caracteres")

    if len(template.description) > MAX_TEMPLATE_DESCRIPTION_LENGTH:
        errors.append(
            f"Descrição deve ter no máximo {MAX_TEMPLATE_DESCRIPTION_LENGTH} caracteres"
        )

    if not template.topics:
        errors.append("Pelo menos um tópico é obrigatório")

    errors.extend(validate_topics(template.topics))
    errors.extend(validate_extraction_schema(template.extraction_schema))
    errors.extend(validate_conversation_limits(template.default_config.conversation_limits))
    errors.extend(_validate_topic_links(template.topics, template.extraction_schema))

    prompt_config = template.prompt_config
    if prompt_config.strategy_type == StrategyType.CUSTOM and not (
        prompt_config.system_prompt_template or prompt_config.wrap_up_prompt_template
    ):
        errors.append("Estratégia custom exige ao menos um template de prompt")

    return errors
