"""Conversão ConversationState ↔ documento de rascunho (draft).

O rascunho é a própria submissão em construção, chaveada por
conversation_id. Ao concluir a conversa o status passa de "draft" para
"submitted"; o documento é a mesma linha (upsert).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from convoform.domain.conversation import (
    ConversationState,
    Message,
    TopicCoverage,
    coerce_timestamp,
    utcnow,
)
from convoform.domain.enums import ConversationStatus
from convoform.utils.ids import draft_document_id

DRAFT_STATUS = "draft"
SUBMITTED_STATUS = "submitted"


def state_to_draft_document(org_id: str, state: ConversationState) -> dict[str, Any]:
    """Serializa o estado como documento de rascunho (JSON-safe)."""
    completed_at = state.completed_at
    end = completed_at or utcnow()
    duration = max(0, int((end - state.started_at).total_seconds()))

    return {
        "id": draft_document_id(state.conversation_id),
        "form_id": state.form_id,
        "conversation_id": state.conversation_id,
        "organization_id": org_id,
        "transcript": [m.model_dump(mode="json") for m in state.messages],
        "extracted_data": dict(state.partial_extractions),
        "overall_confidence": state.confidence,
        "topics_covered": [t.model_dump(mode="json") for t in state.topics],
        "metadata": {
            "started_at": state.started_at.isoformat(),
            "completed_at": completed_at.isoformat() if completed_at else None,
            "turn_count": state.turn_count,
            "max_turns": state.max_turns,
            "duration": duration,
            "completion_reason": state.completion_reason,
            "conversation_status": state.status,
            "error": state.error,
        },
        "submitted_at": state.updated_at.isoformat(),
        "status": (
            SUBMITTED_STATUS
            if state.status == ConversationStatus.COMPLETED
            else DRAFT_STATUS
        ),
    }


def draft_document_to_state(document: Mapping[str, Any]) -> ConversationState:
    """Reconstrói o estado a partir do documento de rascunho.

    Timestamps podem chegar como datetime, ISO-8601 ou epoch; todos são
    normalizados. O status da conversa vem de `metadata.conversation_status`;
    documentos sem ele seguem o status do documento ("submitted" → concluída,
    demais → ativa).
    """
    metadata = document.get("metadata") or {}
    submitted = document.get("status") == SUBMITTED_STATUS
    stored_status = metadata.get("conversation_status")
    if stored_status:
        status = ConversationStatus(stored_status)
    else:
        status = ConversationStatus.COMPLETED if submitted else ConversationStatus.ACTIVE
    closed = status != ConversationStatus.ACTIVE

    completed_at = metadata.get("completed_at")
    started_at = coerce_timestamp(metadata.get("started_at"))

    return ConversationState(
        conversation_id=document["conversation_id"],
        form_id=document.get("form_id", ""),
        messages=[
            Message.model_validate(m) for m in document.get("transcript") or ()
        ],
        topics=[
            TopicCoverage.model_validate(t) for t in document.get("topics_covered") or ()
        ],
        partial_extractions=dict(document.get("extracted_data") or {}),
        confidence=document.get("overall_confidence") or 0.0,
        turn_count=metadata.get("turn_count") or 0,
        max_turns=metadata.get("max_turns") or ConversationState.model_fields["max_turns"].default,
        status=status,
        started_at=started_at,
        updated_at=coerce_timestamp(document.get("submitted_at") or started_at),
        completed_at=coerce_timestamp(completed_at) if closed and completed_at else None,
        completion_reason=metadata.get("completion_reason") if closed else None,
        error=metadata.get("error"),
    )
