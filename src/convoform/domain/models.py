"""Modelos de configuração: tópicos, schema de extração, persona e limites.

Contratos de dados compartilhados entre estratégias de prompt, máquina de
estados, registry de templates e processor. Sem comportamento além da
validação de tipos do pydantic; invariantes de autoria (ids duplicados,
enum sem opções) ficam em `convoform.domain.validation`, que retorna
listas de erros em vez de lançar exceção.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from convoform.config.settings import get_settings
from convoform.domain.enums import FieldType, PersonaStyle, TopicDepth, TopicPriority


class ConversationTopic(BaseModel):
    """Objetivo informacional que a conversa deve (ou deveria) cobrir.

    Imutável após a definição do template.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    priority: TopicPriority = TopicPriority.IMPORTANT
    depth: TopicDepth = TopicDepth.MODERATE
    extraction_field: str | None = None


class ExtractionFieldValidation(BaseModel):
    """Regras opcionais de validação de um campo extraído."""

    min_length: int | None = None
    max_length: int | None = None
    min: float | None = None  # noqa: A003
    max: float | None = None  # noqa: A003
    pattern: str | None = None


class ExtractionField(BaseModel):
    """Campo tipado do schema de extração."""

    field: str
    type: FieldType = FieldType.STRING  # noqa: A003
    required: bool = False
    description: str = ""
    options: list[str] | None = None
    validation: ExtractionFieldValidation | None = None
    topic_id: str | None = None


class ConversationPersona(BaseModel):
    """Persona do assistente (estilo, tom, comportamentos, restrições)."""

    style: PersonaStyle = PersonaStyle.FRIENDLY
    tone: str | None = None
    behaviors: list[str] = Field(default_factory=list)
    restrictions: list[str] = Field(default_factory=list)
    custom_prompt: str | None = None


class ConversationLimits(BaseModel):
    """Limites que forçam o encerramento da conversa."""

    max_turns: int = Field(default_factory=lambda: get_settings().default_max_turns)
    max_duration: float = Field(
        default_factory=lambda: get_settings().default_max_duration_minutes
    )  # minutos
    min_confidence: float = Field(
        default_factory=lambda: get_settings().default_min_confidence
    )


class ConversationalFormConfig(BaseModel):
    """Configuração completa de um formulário conversacional."""

    form_type: Literal["conversational"] = "conversational"
    template_id: str | None = None
    objective: str = ""
    context: str | None = None
    topics: list[ConversationTopic] = Field(default_factory=list)
    persona: ConversationPersona = Field(default_factory=ConversationPersona)
    extraction_schema: list[ExtractionField] = Field(default_factory=list)
    conversation_limits: ConversationLimits = Field(default_factory=ConversationLimits)

    # Deprecated: usar template_id="it-helpdesk"
    use_it_helpdesk_template: bool = False

    def get_topic(self, topic_id: str) -> ConversationTopic | None:
        """Retorna o tópico configurado com o id informado."""
        return next((t for t in self.topics if t.id == topic_id), None)


def linked_schema_field(
    topic: ConversationTopic, schema: Iterable[ExtractionField]
) -> ExtractionField | None:
    """Campo do schema ligado ao tópico (topic_id, extraction_field ou mesmo nome)."""
    candidates = list(schema)
    for field in candidates:
        if field.topic_id == topic.id:
            return field
    for field in candidates:
        if field.field in (topic.extraction_field, topic.id):
            return field
    return None


class FormFieldValidation(BaseModel):
    """Regras de validação do campo do formulário de destino."""

    model_config = ConfigDict(extra="allow")

    min: float | None = None  # noqa: A003
    max: float | None = None  # noqa: A003
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None


class FormField(BaseModel):
    """Definição de campo do formulário de destino (form builder)."""

    model_config = ConfigDict(extra="allow")

    path: str
    label: str = ""
    type: str = "short_text"  # noqa: A003
    included: bool = True
    required: bool = False
    default_value: Any = None
    validation: FormFieldValidation | None = None


class AuthenticatedUser(BaseModel):
    """Identidade do usuário autenticado (quando disponível)."""

    user_id: str
    email: str | None = None
    display_name: str | None = None
