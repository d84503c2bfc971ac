"""Documento de template de organização (contrato de leitura do storage).

PromptStrategy é um objeto com comportamento; no storage guardamos apenas
a configuração que permite reconstruí-lo (`TemplatePromptConfig`).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from convoform.domain.conversation import utcnow
from convoform.domain.enums import (
    StrategyType,
    TemplateCategory,
    TemplateScope,
    TemplateStatus,
)
from convoform.domain.models import (
    ConversationLimits,
    ConversationPersona,
    ConversationTopic,
    ExtractionField,
)


class TemplatePromptConfig(BaseModel):
    """Configuração de prompt de um template armazenado.

    Templates suportam variáveis estilo mustache: {{variable}}.
    """

    strategy_type: StrategyType = StrategyType.DEFAULT
    system_prompt_template: str | None = None
    context_prompt_template: str | None = None
    wrap_up_prompt_template: str | None = None
    template_variables: dict[str, str] = Field(default_factory=dict)


class StoredTemplateDefaultConfig(BaseModel):
    """Valores padrão de configuração de um template armazenado."""

    objective: str
    context: str | None = None
    persona: ConversationPersona = Field(default_factory=ConversationPersona)
    conversation_limits: ConversationLimits = Field(default_factory=ConversationLimits)


class StoredTemplateMetadata(BaseModel):
    """Metadados de UI/descoberta."""

    preview_description: str | None = None
    use_cases: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    estimated_duration: int | None = None
    author: str | None = None


class StoredTemplate(BaseModel):
    """Template persistido por organização (editável no portal admin)."""

    template_id: str
    organization_id: str | None = None
    name: str
    description: str = ""
    category: TemplateCategory = TemplateCategory.GENERAL
    icon: str | None = None
    version: str = "1.0.0"
    status: TemplateStatus = TemplateStatus.DRAFT
    scope: TemplateScope = TemplateScope.ORGANIZATION
    priority: int = 0
    enabled: bool = True
    prompt_config: TemplatePromptConfig = Field(default_factory=TemplatePromptConfig)
    default_config: StoredTemplateDefaultConfig
    topics: list[ConversationTopic] = Field(default_factory=list)
    extraction_schema: list[ExtractionField] = Field(default_factory=list)
    metadata: StoredTemplateMetadata = Field(default_factory=StoredTemplateMetadata)
    created_by: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_by: str = ""
    updated_at: datetime = Field(default_factory=utcnow)
    cloned_from: str | None = None
