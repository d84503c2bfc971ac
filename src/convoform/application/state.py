"""Máquina de estados da conversa — transições puras.

Conforme contrato do motor conversacional:
- Toda transição retorna um novo ConversationState (model_copy)
- O estado recebido nunca é mutado
- Profundidade por tópico nunca diminui (regra do máximo) e um tópico
  coberto não volta a ficar descoberto
- Confiança geral é monotônica: max(anterior, calculada)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from convoform.application.coverage import KeywordCoverageAnalyzer
from convoform.config.settings import get_settings
from convoform.domain.conversation import (
    ConversationState,
    Message,
    TopicCoverage,
    utcnow,
)
from convoform.domain.enums import (
    PRIORITY_WEIGHTS,
    CompletionReason,
    ConversationStatus,
    MessageRole,
    TopicDepth,
    TopicPriority,
)
from convoform.domain.models import (
    ConversationalFormConfig,
    ConversationTopic,
    ExtractionField,
)
from convoform.domain.protocols.coverage_analyzer import CoverageAnalyzer
from convoform.observability.logging import get_logger
from convoform.utils.ids import new_conversation_id

logger: logging.Logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class CompletionCheck:
    """Resultado de `should_complete_conversation`."""

    should_complete: bool
    reason: CompletionReason | None = None


@dataclass(slots=True, frozen=True)
class CoverageSummary:
    """Totais de cobertura e profundidade média."""

    total_topics: int
    covered_topics: int
    required_topics: int
    covered_required_topics: int
    average_depth: float


def coverage_threshold(depth: TopicDepth | str) -> float:
    """Threshold de cobertura para a profundidade-alvo (via Settings)."""
    thresholds = get_settings().coverage_thresholds()
    return thresholds.get(str(depth), thresholds[TopicDepth.MODERATE.value])


def create_conversation_state(
    form_id: str,
    config: ConversationalFormConfig,
    *,
    conversation_id: str | None = None,
    now: datetime | None = None,
) -> ConversationState:
    """Cria o estado inicial: uma TopicCoverage zerada por tópico configurado."""
    timestamp = now or utcnow()
    topics = [
        TopicCoverage(topic_id=t.id, name=t.name, priority=t.priority) for t in config.topics
    ]
    return ConversationState(
        conversation_id=conversation_id or new_conversation_id(),
        form_id=form_id,
        topics=topics,
        max_turns=config.conversation_limits.max_turns,
        started_at=timestamp,
        updated_at=timestamp,
    )


def add_message_to_state(
    state: ConversationState,
    role: MessageRole | str,
    content: str,
    *,
    now: datetime | None = None,
) -> ConversationState:
    """Anexa mensagem; apenas mensagens do usuário incrementam turn_count."""
    timestamp = now or utcnow()
    message = Message(role=MessageRole(role), content=content, timestamp=timestamp)
    is_user = message.role == MessageRole.USER
    return state.model_copy(
        update={
            "messages": [*state.messages, message],
            "turn_count": state.turn_count + 1 if is_user else state.turn_count,
            "updated_at": timestamp,
        }
    )


def update_topic_coverage(
    state: ConversationState,
    topic_id: str,
    depth: float,
    threshold: float | None = None,
    *,
    now: datetime | None = None,
) -> ConversationState:
    """Registra uma observação de profundidade para um tópico.

    - depth final = max(anterior, observada), limitada a [0, 1]
    - covered = já coberto OU depth >= threshold
    - turn_count do tópico += 1; last_mentioned_turn = turno atual

    Tópico desconhecido: estado retornado sem alterações.
    """
    if state.get_topic(topic_id) is None:
        logger.debug(
            "coverage_topic_not_found",
            extra={"conversation_id": state.conversation_id, "topic_id": topic_id},
        )
        return state

    limit = coverage_threshold(TopicDepth.SURFACE) if threshold is None else threshold
    observed = max(0.0, min(1.0, depth))

    topics: list[TopicCoverage] = []
    for coverage in state.topics:
        if coverage.topic_id != topic_id:
            topics.append(coverage)
            continue
        new_depth = max(coverage.depth, observed)
        topics.append(
            coverage.model_copy(
                update={
                    "depth": new_depth,
                    "covered": coverage.covered or new_depth >= limit,
                    "turn_count": coverage.turn_count + 1,
                    "last_mentioned_turn": state.turn_count,
                }
            )
        )

    return state.model_copy(update={"topics": topics, "updated_at": now or utcnow()})


def compute_confidence(
    state: ConversationState, topics: Sequence[ConversationTopic] = ()
) -> float:
    """Cobertura ponderada por prioridade (required 3, important 2, optional 1).

    Cada tópico contribui min(1, depth / threshold) da sua profundidade-alvo;
    tópicos sem definição em `topics` usam o threshold moderate. Sem tópicos,
    a confiança é 0.0.
    """
    if not state.topics:
        return 0.0

    targets = {t.id: t.depth for t in topics}
    weighted = 0.0
    total_weight = 0
    for coverage in state.topics:
        weight = PRIORITY_WEIGHTS.get(coverage.priority, 1)
        threshold = coverage_threshold(targets.get(coverage.topic_id, TopicDepth.MODERATE))
        progress = 1.0 if coverage.covered else min(1.0, coverage.depth / threshold)
        weighted += weight * progress
        total_weight += weight

    return round(weighted / total_weight, 4) if total_weight else 0.0


def analyze_and_update_topic_coverage(
    state: ConversationState,
    message: str,
    topics: Sequence[ConversationTopic],
    *,
    analyzer: CoverageAnalyzer | None = None,
    schema: Sequence[ExtractionField] | None = None,
    now: datetime | None = None,
) -> ConversationState:
    """Aplica a análise de cobertura da última mensagem do usuário.

    O analisador só estima profundidades observadas; monotonicidade e
    thresholds são aplicados aqui. A confiança é recalculada ao final.
    """
    engine = analyzer or KeywordCoverageAnalyzer()
    observed = engine.analyze(topics, message, state, tuple(schema or ()))

    updated = state
    for topic in topics:
        if topic.id not in observed:
            continue
        updated = update_topic_coverage(
            updated,
            topic.id,
            observed[topic.id],
            coverage_threshold(topic.depth),
            now=now,
        )

    confidence = max(updated.confidence, compute_confidence(updated, topics))
    return updated.model_copy(update={"confidence": confidence})


def update_partial_extractions(
    state: ConversationState,
    extractions: Mapping[str, Any],
    confidence: float,
    *,
    now: datetime | None = None,
) -> ConversationState:
    """Mescla extrações parciais; confiança = max(anterior, nova)."""
    merged = {**state.partial_extractions, **dict(extractions)}
    return state.model_copy(
        update={
            "partial_extractions": merged,
            "confidence": max(state.confidence, max(0.0, min(1.0, confidence))),
            "updated_at": now or utcnow(),
        }
    )


def _depth_from_value(value: Any) -> float:
    """Estimativa de profundidade pelo formato do valor extraído."""
    if isinstance(value, bool):
        return 0.3
    if isinstance(value, str):
        if len(value) > 100:
            return 1.0
        if len(value) > 50:
            return 0.7
        if len(value) > 20:
            return 0.5
        return 0.3
    if isinstance(value, (int, float)):
        return 0.3
    if isinstance(value, (list, tuple)):
        return 0.6 if value else 0.5
    if isinstance(value, Mapping):
        return 0.7
    return 0.5


def update_topic_coverage_from_extractions(
    state: ConversationState,
    extractions: Mapping[str, Any],
    schema: Iterable[ExtractionField],
    *,
    now: datetime | None = None,
) -> ConversationState:
    """Marca como cobertos os tópicos ligados (topic_id) a campos extraídos.

    Extração é sinal mais confiável que palavras-chave: o tópico é marcado
    coberto independentemente do threshold. Valores vazios são ignorados.
    """
    field_to_topic = {f.field: f.topic_id for f in schema if f.topic_id}
    updated = state

    for field, value in extractions.items():
        if value is None or value == "":
            continue
        topic_id = field_to_topic.get(field)
        if topic_id is None:
            continue
        if updated.get_topic(topic_id) is None:
            logger.warning(
                "extraction_topic_not_found",
                extra={
                    "conversation_id": state.conversation_id,
                    "topic_id": topic_id,
                    "field": field,
                },
            )
            continue
        updated = update_topic_coverage(
            updated, topic_id, _depth_from_value(value), threshold=0.0, now=now
        )

    return updated


def should_complete_conversation(
    state: ConversationState,
    config: ConversationalFormConfig,
    *,
    now: datetime | None = None,
) -> CompletionCheck:
    """Decide se a conversa deve encerrar.

    Prioridade:
    1. Já encerrada → razão armazenada
    2. Todos os required cobertos e confiança >= min_confidence → completed
    3. turn_count >= max_turns → turn_limit (não mascarado por cobertura)
    4. Duração >= max_duration (minutos) → duration_limit
    5. Caso contrário, não encerra
    """
    if state.status == ConversationStatus.COMPLETED:
        return CompletionCheck(True, state.completion_reason or CompletionReason.COMPLETED)

    limits = config.conversation_limits
    required = [t for t in state.topics if t.priority == TopicPriority.REQUIRED]
    if all(t.covered for t in required) and state.confidence >= limits.min_confidence:
        return CompletionCheck(True, CompletionReason.COMPLETED)

    if state.turn_count >= limits.max_turns:
        return CompletionCheck(True, CompletionReason.TURN_LIMIT)

    elapsed_minutes = ((now or utcnow()) - state.started_at).total_seconds() / 60
    if elapsed_minutes >= limits.max_duration:
        return CompletionCheck(True, CompletionReason.DURATION_LIMIT)

    return CompletionCheck(False)


def complete_conversation(
    state: ConversationState,
    reason: CompletionReason = CompletionReason.COMPLETED,
    *,
    now: datetime | None = None,
) -> ConversationState:
    """Marca a conversa como concluída, registrando a razão."""
    timestamp = now or utcnow()
    return state.model_copy(
        update={
            "status": ConversationStatus.COMPLETED,
            "completion_reason": reason,
            "completed_at": timestamp,
            "updated_at": timestamp,
        }
    )


def abandon_conversation(
    state: ConversationState,
    reason: str | None = None,
    *,
    now: datetime | None = None,
) -> ConversationState:
    """Marca a conversa como abandonada."""
    timestamp = now or utcnow()
    return state.model_copy(
        update={
            "status": ConversationStatus.ABANDONED,
            "completed_at": timestamp,
            "updated_at": timestamp,
            "error": reason,
        }
    )


def mark_conversation_error(
    state: ConversationState,
    error: str,
    *,
    now: datetime | None = None,
) -> ConversationState:
    """Marca a conversa com erro."""
    return state.model_copy(
        update={
            "status": ConversationStatus.ERROR,
            "updated_at": now or utcnow(),
            "error": error,
        }
    )


def get_coverage_summary(state: ConversationState) -> CoverageSummary:
    required = [t for t in state.topics if t.priority == TopicPriority.REQUIRED]
    average = (
        sum(t.depth for t in state.topics) / len(state.topics) if state.topics else 0.0
    )
    return CoverageSummary(
        total_topics=len(state.topics),
        covered_topics=sum(1 for t in state.topics if t.covered),
        required_topics=len(required),
        covered_required_topics=sum(1 for t in required if t.covered),
        average_depth=average,
    )
