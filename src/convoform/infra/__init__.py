"""Camada de infraestrutura — persistência de conversas e templates.

- Conversas: InMemoryConversationStore (rascunho draft → submitted)
- Templates de organização: InMemoryTemplateStore
- Conversão de documentos: state_to_draft_document, draft_document_to_state

Infraestrutura não decide regra de negócio; logs estruturados sem PII.
"""

from convoform.infra.conversation_store_memory import InMemoryConversationStore
from convoform.infra.draft_documents import (
    DRAFT_STATUS,
    SUBMITTED_STATUS,
    draft_document_to_state,
    state_to_draft_document,
)
from convoform.infra.template_store_memory import InMemoryTemplateStore

__all__ = [
    "DRAFT_STATUS",
    "SUBMITTED_STATUS",
    "InMemoryConversationStore",
    "InMemoryTemplateStore",
    "draft_document_to_state",
    "state_to_draft_document",
]
