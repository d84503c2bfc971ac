"""Protocolo do analisador de cobertura de tópicos.

O analisador apenas observa a última mensagem e estima a profundidade
alcançada por tópico; aplicar a regra de monotonicidade e os thresholds
é responsabilidade da máquina de estados.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from convoform.domain.conversation import ConversationState
    from convoform.domain.models import ConversationTopic, ExtractionField


@runtime_checkable
class CoverageAnalyzer(Protocol):
    """Estimador plugável (heurística por palavras-chave ou LLM)."""

    def analyze(
        self,
        topics: Sequence[ConversationTopic],
        message: str,
        state: ConversationState,
        schema: Sequence[ExtractionField] = (),
    ) -> dict[str, float]:
        """Retorna {topic_id: profundidade observada} para tópicos mencionados."""
        ...
