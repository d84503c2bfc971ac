"""Protocolo de domínio para persistência de estado de conversa.

A conversa é gravada como rascunho (draft) chaveado por conversation_id;
ao concluir, o documento vira submissão (status draft → submitted).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from convoform.domain.conversation import ConversationState


class ConversationStoreProtocol(ABC):
    """Contrato mínimo síncrono para armazenamento de ConversationState."""

    @abstractmethod
    def load_conversation_state(
        self, org_id: str, conversation_id: str, form_id: str | None = None
    ) -> ConversationState | None:
        """Carrega rascunho; None significa "sem estado anterior"."""

    @abstractmethod
    def save_conversation_state(self, org_id: str, state: ConversationState) -> None:
        """Upsert do rascunho pelo conversation_id."""

    @abstractmethod
    def delete_conversation_state(self, org_id: str, conversation_id: str) -> bool: ...

    @abstractmethod
    def list_active_conversations(
        self, org_id: str, form_id: str
    ) -> list[ConversationState]: ...

    @abstractmethod
    def cleanup_abandoned_conversations(self, org_id: str, hours_old: int = 24) -> int:
        """Remove rascunhos mais antigos que `hours_old`; retorna quantidade."""
