"""ConversationEngine — orquestra um formulário conversacional.

Responsabilidades:
- Resolver a estratégia de prompt (template_id → flag legada → default)
- Conduzir um turno por vez sobre a máquina de estados
- Detectar encerramento e expor mensagens para a camada de transporte

Estados: não inicializado → ativo (initialize) → concluído. O engine não faz
I/O; chamadas concorrentes na mesma instância devem ser serializadas pelo
chamador (uma instância por conversa em andamento).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from convoform.ai.strategies.base import PromptStrategy
from convoform.ai.strategies.default import DefaultPromptStrategy
from convoform.application.state import (
    CompletionCheck,
    add_message_to_state,
    analyze_and_update_topic_coverage,
    complete_conversation,
    compute_confidence,
    create_conversation_state,
    should_complete_conversation,
    update_partial_extractions,
    update_topic_coverage_from_extractions,
)
from convoform.domain.conversation import (
    ConversationState,
    Message,
    coerce_timestamp,
    utcnow,
)
from convoform.domain.enums import (
    CompletionReason,
    MessageRole,
    TopicPriority,
)
from convoform.domain.models import ConversationalFormConfig, ConversationTopic
from convoform.domain.protocols.coverage_analyzer import CoverageAnalyzer
from convoform.observability.context import bind_conversation_id
from convoform.observability.logging import get_logger, log_fallback
from convoform.templates.registry import TemplateRegistry, get_template_registry

logger: logging.Logger = get_logger(__name__)

IT_HELPDESK_TEMPLATE_ID = "it-helpdesk"
DEFAULT_FORM_ID = "temp"


@dataclass(slots=True)
class TurnResult:
    """Saída de `process_user_message` consumida pelo transporte."""

    messages: list[Message]
    state: ConversationState
    guidance: str
    should_complete: bool


@dataclass(slots=True, frozen=True)
class TopicCoverageSummary:
    """Contagens de cobertura por prioridade."""

    total: int
    covered: int
    required: int
    required_covered: int
    important: int
    important_covered: int


def resolve_prompt_strategy(
    config: ConversationalFormConfig, registry: TemplateRegistry
) -> PromptStrategy:
    """Resolve a estratégia: template_id explícito > flag legada > default.

    Template inexistente ou desabilitado degrada para a estratégia padrão.
    """
    if config.template_id:
        template = registry.get(config.template_id)
        if template is not None:
            return template.prompt_strategy
        log_fallback(
            logger,
            "prompt_strategy",
            reason="template_not_found",
            template_id=config.template_id,
        )

    if config.use_it_helpdesk_template:
        template = registry.get(IT_HELPDESK_TEMPLATE_ID)
        if template is not None:
            return template.prompt_strategy
        log_fallback(logger, "prompt_strategy", reason="it_helpdesk_template_unavailable")

    return DefaultPromptStrategy()


class ConversationEngine:
    """Engine de uma única conversa."""

    def __init__(
        self,
        config: ConversationalFormConfig,
        form_id: str | None = None,
        *,
        registry: TemplateRegistry | None = None,
        analyzer: CoverageAnalyzer | None = None,
        conversation_id: str | None = None,
    ) -> None:
        self._config = config
        self._registry = registry or get_template_registry()
        self._analyzer = analyzer
        self._state = create_conversation_state(
            form_id or DEFAULT_FORM_ID, config, conversation_id=conversation_id
        )
        self._messages: list[Message] = []
        self._strategy = resolve_prompt_strategy(config, self._registry)
        self._initialized = False

    @property
    def config(self) -> ConversationalFormConfig:
        return self._config

    @property
    def prompt_strategy(self) -> PromptStrategy:
        return self._strategy

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _system_prompt(self) -> str:
        return self._strategy.build_system_prompt(self._config)

    def initialize(self) -> list[Message]:
        """Insere ou atualiza a mensagem de sistema.

        Idempotente: histórico já carregado (rascunho retomado) é preservado;
        apenas o conteúdo da mensagem de sistema é renovado.
        """
        system_message = Message(role=MessageRole.SYSTEM, content=self._system_prompt())

        index = next(
            (i for i, m in enumerate(self._messages) if m.role == MessageRole.SYSTEM), None
        )
        if index is None:
            self._messages.insert(0, system_message)
        else:
            self._messages[index] = system_message

        self._initialized = True
        logger.debug(
            "engine_initialized",
            extra={
                "conversation_id": self._state.conversation_id,
                "strategy": self._strategy.strategy_id,
                "message_count": len(self._messages),
            },
        )
        return list(self._messages)

    def process_user_message(self, text: str, *, now: datetime | None = None) -> TurnResult:
        """Processa um turno do usuário.

        guidance = contexto + (guidance do próximo tópico | wrap-up), nunca
        ambos. Quando o turno encerra a conversa, o estado vai para
        `completed` com a razão registrada. Em conversa já concluída a
        chamada não altera nada e devolve o snapshot atual com wrap-up.
        """
        with bind_conversation_id(self._state.conversation_id):
            if self._state.is_terminal:
                logger.info(
                    "turn_ignored_conversation_closed",
                    extra={
                        "conversation_id": self._state.conversation_id,
                        "turn_count": self._state.turn_count,
                    },
                )
                return self._snapshot(should_complete=True)

            if not self._initialized:
                self.initialize()

            timestamp = now or utcnow()
            self._messages.append(
                Message(role=MessageRole.USER, content=text, timestamp=timestamp)
            )
            self._state = add_message_to_state(
                self._state, MessageRole.USER, text, now=timestamp
            )
            self._state = analyze_and_update_topic_coverage(
                self._state,
                text,
                self._config.topics,
                analyzer=self._analyzer,
                schema=self._config.extraction_schema,
                now=timestamp,
            )

            check = should_complete_conversation(self._state, self._config, now=timestamp)
            if check.should_complete:
                self._state = complete_conversation(
                    self._state, check.reason or CompletionReason.COMPLETED, now=timestamp
                )

            logger.info(
                "turn_processed",
                extra={
                    "conversation_id": self._state.conversation_id,
                    "turn_count": self._state.turn_count,
                    "confidence": self._state.confidence,
                    "should_complete": check.should_complete,
                    "completion_reason": check.reason,
                },
            )
            return self._snapshot(should_complete=check.should_complete)

    def _snapshot(self, *, should_complete: bool) -> TurnResult:
        context = self._strategy.build_conversation_context(self._state, self._config)
        if should_complete:
            follow_up = self._strategy.build_wrap_up_prompt(self._state, self._config)
        else:
            follow_up = self._strategy.get_next_topic_guidance(self._state, self._config).guidance
        return TurnResult(
            messages=list(self._messages),
            state=self._state,
            guidance=f"{context}\n\n{follow_up}",
            should_complete=should_complete,
        )

    def add_assistant_response(self, text: str, *, now: datetime | None = None) -> list[Message]:
        """Anexa a resposta do assistente à lista de mensagens e ao estado."""
        timestamp = now or utcnow()
        self._messages.append(
            Message(role=MessageRole.ASSISTANT, content=text, timestamp=timestamp)
        )
        self._state = add_message_to_state(
            self._state, MessageRole.ASSISTANT, text, now=timestamp
        )
        return list(self._messages)

    def update_extractions(
        self,
        extractions: Mapping[str, Any],
        confidence: float,
        *,
        now: datetime | None = None,
    ) -> ConversationState:
        """Incorpora uma extração do LLM ao estado e à cobertura dos tópicos."""
        state = update_partial_extractions(self._state, extractions, confidence, now=now)
        state = update_topic_coverage_from_extractions(
            state, extractions, self._config.extraction_schema, now=now
        )
        computed = compute_confidence(state, self._config.topics)
        self._state = state.model_copy(update={"confidence": max(state.confidence, computed)})
        return self._state

    def set_state(self, state: ConversationState | Mapping[str, Any]) -> None:
        """Restaura o estado persistido e reconstrói as mensagens a partir dele.

        O estado não guarda a mensagem de sistema; em engine já inicializada
        ela é recolocada no índice 0.
        """
        restored = (
            state
            if isinstance(state, ConversationState)
            else ConversationState.model_validate(state)
        )
        self._state = restored
        self._messages = [
            Message(role=m.role, content=m.content, timestamp=coerce_timestamp(m.timestamp))
            for m in restored.messages
        ]
        if self._initialized:
            self.initialize()

    def set_messages(self, messages: Iterable[Message | Mapping[str, Any]]) -> None:
        self._messages = [
            m if isinstance(m, Message) else Message.model_validate(m) for m in messages
        ]

    def get_state(self) -> ConversationState:
        return self._state.model_copy(deep=True)

    def get_messages(self) -> list[Message]:
        return list(self._messages)

    def get_messages_for_llm(self) -> list[dict[str, str]]:
        """Mensagens no formato role/content esperado por clientes de LLM."""
        return [{"role": str(m.role), "content": m.content} for m in self._messages]

    def completion_check(self, *, now: datetime | None = None) -> CompletionCheck:
        return should_complete_conversation(self._state, self._config, now=now)

    def is_complete(self, *, now: datetime | None = None) -> bool:
        return self.completion_check(now=now).should_complete

    def get_completion_reason(self, *, now: datetime | None = None) -> CompletionReason | None:
        check = self.completion_check(now=now)
        return check.reason if check.should_complete else None

    def get_uncovered_required_topics(self) -> list[ConversationTopic]:
        uncovered: list[ConversationTopic] = []
        for coverage in self._state.topics:
            if coverage.covered or coverage.priority != TopicPriority.REQUIRED:
                continue
            topic = self._config.get_topic(coverage.topic_id)
            if topic is not None:
                uncovered.append(topic)
        return uncovered

    def get_topic_coverage_summary(self) -> TopicCoverageSummary:
        topics = self._state.topics
        required = [t for t in topics if t.priority == TopicPriority.REQUIRED]
        important = [t for t in topics if t.priority == TopicPriority.IMPORTANT]
        return TopicCoverageSummary(
            total=len(topics),
            covered=sum(1 for t in topics if t.covered),
            required=len(required),
            required_covered=sum(1 for t in required if t.covered),
            important=len(important),
            important_covered=sum(1 for t in important if t.covered),
        )


def create_conversation_engine(
    config: ConversationalFormConfig,
    form_id: str | None = None,
    **kwargs: Any,
) -> ConversationEngine:
    """Atalho para criar e inicializar um engine."""
    engine = ConversationEngine(config, form_id, **kwargs)
    engine.initialize()
    return engine
