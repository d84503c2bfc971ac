"""Modelos de runtime da conversa — Message, TopicCoverage, ConversationState.

ConversationState é o agregado central:
- Uma conversa = um conversation_id único
- Cada turno produz um novo objeto (transições puras em application/state.py)
- Serializável para rascunho (draft) e restaurável sem perdas
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from convoform.domain.enums import (
    TERMINAL_STATUSES,
    CompletionReason,
    ConversationStatus,
    MessageRole,
    TopicPriority,
)


def utcnow() -> datetime:
    """Datetime atual com timezone UTC."""
    return datetime.now(tz=UTC)


def coerce_timestamp(value: Any) -> datetime:
    """Converte timestamps serializados em datetime com timezone.

    Aceita datetime, string ISO-8601 (inclusive sufixo "Z"), epoch em
    segundos ou milissegundos e None (vira agora). Datetimes sem timezone
    são tratados como UTC.
    """
    if value is None or value == "":
        return utcnow()

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        # Epoch em milissegundos quando grande demais para segundos
        seconds = value / 1000 if value > 1e11 else value
        parsed = datetime.fromtimestamp(seconds, tz=UTC)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        msg = f"timestamp inválido: {type(value).__name__}"
        raise ValueError(msg)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class Message(BaseModel):
    """Mensagem do histórico (system, user ou assistant)."""

    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utcnow)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime:
        return coerce_timestamp(value)


class TopicCoverage(BaseModel):
    """Cobertura de um tópico durante a conversa (uma por tópico)."""

    topic_id: str
    name: str = ""
    priority: TopicPriority = TopicPriority.IMPORTANT
    covered: bool = False
    depth: float = Field(default=0.0, ge=0.0, le=1.0)
    turn_count: int = 0
    last_mentioned_turn: int | None = None


class ConversationState(BaseModel):
    """Estado completo da conversa com suporte a persistência.

    Responsabilidades:
    - Histórico ordenado de mensagens
    - Cobertura por tópico e confiança geral
    - Extrações parciais (campo → melhor palpite)
    - Status e razão de encerramento
    """

    conversation_id: str
    form_id: str
    messages: list[Message] = Field(default_factory=list)
    topics: list[TopicCoverage] = Field(default_factory=list)
    partial_extractions: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    turn_count: int = 0
    max_turns: int = 15
    status: ConversationStatus = ConversationStatus.ACTIVE
    started_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None
    completion_reason: CompletionReason | None = None
    error: str | None = None

    @field_validator("started_at", "updated_at", mode="before")
    @classmethod
    def _coerce_required_dates(cls, value: Any) -> datetime:
        return coerce_timestamp(value)

    @field_validator("completed_at", mode="before")
    @classmethod
    def _coerce_optional_date(cls, value: Any) -> datetime | None:
        if value is None or value == "":
            return None
        return coerce_timestamp(value)

    @property
    def is_terminal(self) -> bool:
        """True se o status não admite novos turnos."""
        return self.status in TERMINAL_STATUSES

    def get_topic(self, topic_id: str) -> TopicCoverage | None:
        """Retorna a cobertura do tópico (ou None)."""
        return next((t for t in self.topics if t.topic_id == topic_id), None)
