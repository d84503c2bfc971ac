"""Enums de domínio para tópicos, schema de extração, persona e templates."""

from __future__ import annotations

from enum import StrEnum


class TopicPriority(StrEnum):
    """Prioridade de um tópico na conversa."""

    REQUIRED = "required"
    IMPORTANT = "important"
    OPTIONAL = "optional"


class TopicDepth(StrEnum):
    """Profundidade-alvo de exploração (surface < moderate < deep)."""

    SURFACE = "surface"
    MODERATE = "moderate"
    DEEP = "deep"


class FieldType(StrEnum):
    """Tipos suportados no schema de extração."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"


class PersonaStyle(StrEnum):
    """Estilo de comunicação da persona.

    - custom: usa `custom_prompt` literalmente
    """

    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    CASUAL = "casual"
    EMPATHETIC = "empathetic"
    CUSTOM = "custom"


class MessageRole(StrEnum):
    """Papel de uma mensagem no histórico."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ConversationStatus(StrEnum):
    """Status do ciclo de vida da conversa.

    Terminal: completed, abandoned, error.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    ERROR = "error"


class CompletionReason(StrEnum):
    """Razões canônicas de encerramento."""

    COMPLETED = "completed"
    USER_CONFIRMED = "user_confirmed"
    TURN_LIMIT = "turn_limit"
    DURATION_LIMIT = "duration_limit"


class TemplateCategory(StrEnum):
    """Categorias de template."""

    SUPPORT = "support"
    FEEDBACK = "feedback"
    INTAKE = "intake"
    APPLICATION = "application"
    GENERAL = "general"


class TemplateStatus(StrEnum):
    """Status de publicação de templates de organização."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class TemplateScope(StrEnum):
    """Escopo de visibilidade de templates armazenados."""

    ORGANIZATION = "organization"
    PLATFORM = "platform"


class StrategyType(StrEnum):
    """Tipos de estratégia de prompt configuráveis em templates armazenados."""

    DEFAULT = "default"
    IT_HELPDESK = "it-helpdesk"
    CUSTOM = "custom"


TERMINAL_STATUSES = frozenset({
    ConversationStatus.COMPLETED,
    ConversationStatus.ABANDONED,
    ConversationStatus.ERROR,
})
"""Status sem transições posteriores."""

PRIORITY_WEIGHTS: dict[TopicPriority, int] = {
    TopicPriority.REQUIRED: 3,
    TopicPriority.IMPORTANT: 2,
    TopicPriority.OPTIONAL: 1,
}
"""Peso de cada prioridade no cálculo de confiança."""
