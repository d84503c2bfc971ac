"""Tipos de templates de conversa.

Um template é uma definição autocontida de um caso de uso: estratégia de
prompt, tópicos, schema, persona e limites padrão.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from convoform.ai.strategies.base import PromptStrategy
from convoform.domain.enums import TemplateCategory
from convoform.domain.models import (
    ConversationalFormConfig,
    ConversationLimits,
    ConversationPersona,
    ConversationTopic,
    ExtractionField,
)


class TemplateDefaultConfig(BaseModel):
    """Valores padrão aplicados ao instanciar o template."""

    objective: str
    context: str | None = None
    persona: ConversationPersona = Field(default_factory=ConversationPersona)
    conversation_limits: ConversationLimits = Field(default_factory=ConversationLimits)


class TemplateMetadata(BaseModel):
    """Metadados para UI e descoberta."""

    preview_description: str | None = None
    use_cases: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    estimated_duration: int | None = None  # minutos
    author: str | None = None
    updated_at: datetime | None = None


class ConversationTemplate(BaseModel):
    """Template registrado (built-in ou de organização)."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str  # noqa: A003
    name: str
    description: str = ""
    category: TemplateCategory = TemplateCategory.GENERAL
    icon: str | None = None
    version: str = "1.0.0"
    is_built_in: bool = False
    prompt_strategy: PromptStrategy
    default_config: TemplateDefaultConfig
    default_topics: list[ConversationTopic] = Field(default_factory=list)
    default_schema: list[ExtractionField] = Field(default_factory=list)
    metadata: TemplateMetadata = Field(default_factory=TemplateMetadata)


@dataclass(slots=True)
class TemplateRegistration:
    """Entrada do registry: template + prioridade + habilitado."""

    template: ConversationTemplate
    priority: int = 0
    enabled: bool = True


class AppliedTemplate(BaseModel):
    """Resultado de `apply_template`.

    has_customizations indica apenas presença de overrides não vazios;
    não é um diff estrutural contra a configuração base.
    """

    template_id: str
    config: ConversationalFormConfig
    has_customizations: bool = False
