"""ConversationStore em memória (apenas dev/testes).

Guarda os documentos de rascunho por (org_id, conversation_id), do mesmo
jeito que um backend documental faria, para exercitar a conversão
draft ↔ ConversationState.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from pydantic import ValidationError

from convoform.config.settings import get_settings
from convoform.domain.conversation import ConversationState, coerce_timestamp, utcnow
from convoform.domain.errors import ConversationStoreError
from convoform.domain.protocols.conversation_store import ConversationStoreProtocol
from convoform.infra.draft_documents import (
    DRAFT_STATUS,
    draft_document_to_state,
    state_to_draft_document,
)
from convoform.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class InMemoryConversationStore(ConversationStoreProtocol):
    """Armazenamento em memória (não usar em produção)."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._documents: dict[tuple[str, str], dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def save_conversation_state(self, org_id: str, state: ConversationState) -> None:
        document = state_to_draft_document(org_id, state)
        with self._lock:
            self._documents[(org_id, state.conversation_id)] = document
        logger.debug(
            "conversation_state_saved",
            extra={
                "conversation_id": state.conversation_id,
                "status": document["status"],
                "turn_count": state.turn_count,
            },
        )

    def load_conversation_state(
        self, org_id: str, conversation_id: str, form_id: str | None = None
    ) -> ConversationState | None:
        with self._lock:
            document = self._documents.get((org_id, conversation_id))

        if document is None or document["status"] != DRAFT_STATUS:
            return None
        if form_id is not None and document["form_id"] != form_id:
            return None

        return self._to_state(document)

    def delete_conversation_state(self, org_id: str, conversation_id: str) -> bool:
        """Remove apenas rascunhos; submissões concluídas são preservadas."""
        key = (org_id, conversation_id)
        with self._lock:
            document = self._documents.get(key)
            if document is None or document["status"] != DRAFT_STATUS:
                return False
            del self._documents[key]

        logger.debug(
            "conversation_state_deleted",
            extra={"conversation_id": conversation_id},
        )
        return True

    def list_active_conversations(
        self, org_id: str, form_id: str
    ) -> list[ConversationState]:
        """Rascunhos do formulário, mais recentes primeiro."""
        with self._lock:
            drafts = [
                doc
                for (doc_org, _), doc in self._documents.items()
                if doc_org == org_id
                and doc["form_id"] == form_id
                and doc["status"] == DRAFT_STATUS
            ]

        states = [self._to_state(doc) for doc in drafts]
        states.sort(key=lambda s: s.updated_at, reverse=True)
        return states

    def cleanup_abandoned_conversations(
        self, org_id: str, hours_old: int | None = None
    ) -> int:
        """Remove rascunhos sem atualização há mais de `hours_old` horas."""
        if hours_old is None:
            hours_old = get_settings().abandoned_conversation_hours
        cutoff = self._clock() - timedelta(hours=hours_old)

        with self._lock:
            stale = [
                key
                for key, doc in self._documents.items()
                if key[0] == org_id
                and doc["status"] == DRAFT_STATUS
                and coerce_timestamp(doc["submitted_at"]) < cutoff
            ]
            for key in stale:
                del self._documents[key]

        logger.info(
            "abandoned_conversations_cleaned",
            extra={"removed_count": len(stale), "hours_old": hours_old},
        )
        return len(stale)

    def count(self) -> int:
        with self._lock:
            return len(self._documents)

    @staticmethod
    def _to_state(document: dict[str, Any]) -> ConversationState:
        try:
            return draft_document_to_state(document)
        except (KeyError, ValueError, ValidationError) as exc:
            logger.error(
                "conversation_state_load_failed",
                extra={
                    "conversation_id": document.get("conversation_id"),
                    "error_type": type(exc).__name__,
                },
            )
            msg = "Documento de rascunho inválido"
            raise ConversationStoreError(msg) from exc
