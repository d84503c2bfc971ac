"""Contrato das estratégias de prompt.

Estratégias são políticas puras: recebem (estado, config) e devolvem
instruções em linguagem natural para o LLM. Nenhuma operação faz I/O ou
altera o estado recebido.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from convoform.domain.conversation import ConversationState
from convoform.domain.models import ConversationalFormConfig, ConversationTopic


@dataclass(slots=True, frozen=True)
class TopicGuidance:
    """Próximo tópico a conduzir (None quando é hora de encerrar)."""

    topic: ConversationTopic | None
    guidance: str


class PromptStrategy(ABC):
    """Política que transforma configuração e estado em prompts."""

    strategy_id: str = "abstract"

    @abstractmethod
    def build_system_prompt(self, config: ConversationalFormConfig) -> str:
        """Prompt de sistema (objetivo, tópicos, persona, diretrizes)."""

    @abstractmethod
    def build_conversation_context(
        self, state: ConversationState, config: ConversationalFormConfig
    ) -> str:
        """Resumo do progresso da conversa para o próximo turno."""

    @abstractmethod
    def get_next_topic_guidance(
        self, state: ConversationState, config: ConversationalFormConfig
    ) -> TopicGuidance:
        """Escolhe o próximo tópico (required → important → encerramento)."""

    @abstractmethod
    def build_wrap_up_prompt(
        self, state: ConversationState, config: ConversationalFormConfig
    ) -> str:
        """Instrução de encerramento (ou de continuar coletando required)."""

    @abstractmethod
    def build_extraction_guidance(
        self, topic: ConversationTopic, config: ConversationalFormConfig
    ) -> str:
        """Orientação de extração do campo ligado ao tópico."""
