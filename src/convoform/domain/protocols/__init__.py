"""Re-exports dos Protocolos de domínio para uso por Application."""

from __future__ import annotations

from convoform.domain.protocols.conversation_store import ConversationStoreProtocol
from convoform.domain.protocols.coverage_analyzer import CoverageAnalyzer
from convoform.domain.protocols.template_store import TemplateStoreProtocol

__all__ = [
    "ConversationStoreProtocol",
    "CoverageAnalyzer",
    "TemplateStoreProtocol",
]
