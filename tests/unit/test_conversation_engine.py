"""Testes do ConversationEngine (um turno por vez)."""

from __future__ import annotations

import logging
from datetime import timedelta

from convoform.ai.strategies import DefaultPromptStrategy, ITHelpdeskPromptStrategy
from convoform.ai.strategies.default import WRAP_UP_COMPLETE
from convoform.application.engine import (
    ConversationEngine,
    create_conversation_engine,
    resolve_prompt_strategy,
)
from convoform.domain.conversation import utcnow
from convoform.domain.enums import CompletionReason, ConversationStatus, MessageRole


class TestStrategyResolution:
    """template_id > flag legada > default."""

    def test_template_id(self, feedback_config, registry) -> None:
        config = feedback_config.model_copy(update={"template_id": "it-helpdesk"})
        assert isinstance(resolve_prompt_strategy(config, registry), ITHelpdeskPromptStrategy)

    def test_legacy_flag(self, feedback_config, registry) -> None:
        config = feedback_config.model_copy(update={"use_it_helpdesk_template": True})
        assert isinstance(resolve_prompt_strategy(config, registry), ITHelpdeskPromptStrategy)

    def test_unknown_template_falls_back(self, feedback_config, registry, caplog) -> None:
        """Template inexistente degrada para default com log de fallback."""
        config = feedback_config.model_copy(update={"template_id": "ghost"})

        with caplog.at_level(logging.INFO):
            strategy = resolve_prompt_strategy(config, registry)

        assert type(strategy) is DefaultPromptStrategy
        record = next(r for r in caplog.records if getattr(r, "fallback_used", False))
        assert record.reason == "template_not_found"  # type: ignore[attr-defined]
        assert record.template_id == "ghost"  # type: ignore[attr-defined]

    def test_disabled_template_falls_back(self, feedback_config, registry) -> None:
        registry.set_enabled("it-helpdesk", False)
        config = feedback_config.model_copy(update={"template_id": "it-helpdesk"})
        assert type(resolve_prompt_strategy(config, registry)) is DefaultPromptStrategy


class TestInitialize:
    def test_system_message_first(self, feedback_config, registry) -> None:
        engine = ConversationEngine(feedback_config, "form_1", registry=registry)
        messages = engine.initialize()

        assert engine.initialized is True
        assert messages[0].role == MessageRole.SYSTEM
        assert "Coletar feedback" in messages[0].content

    def test_idempotent(self, feedback_config, registry) -> None:
        """Reinicializar não duplica a mensagem de sistema."""
        engine = create_conversation_engine(feedback_config, registry=registry)
        engine.initialize()

        roles = [m.role for m in engine.get_messages()]
        assert roles.count(MessageRole.SYSTEM) == 1

    def test_auto_initialize_on_first_turn(self, feedback_config, registry) -> None:
        engine = ConversationEngine(feedback_config, registry=registry)
        result = engine.process_user_message("olá")
        assert result.messages[0].role == MessageRole.SYSTEM


class TestProcessUserMessage:
    """Turnos do usuário."""

    def test_turns_and_messages_grow(self, feedback_config, registry) -> None:
        """n turnos → turn_count == n; cada troca adiciona 2 mensagens ao estado."""
        engine = create_conversation_engine(feedback_config, registry=registry)

        for n in range(1, 4):
            result = engine.process_user_message(f"mensagem {n}")
            engine.add_assistant_response(f"resposta {n}")

            state = engine.get_state()
            assert state.turn_count == n
            assert len(state.messages) == 2 * n
            assert result.should_complete is False

        # Lista do engine inclui a mensagem de sistema
        assert len(engine.get_messages()) == 7

    def test_guidance_has_context_and_next_topic(self, feedback_config, registry) -> None:
        engine = create_conversation_engine(feedback_config, registry=registry)
        result = engine.process_user_message("olá")

        assert result.guidance.startswith("## Conversation Progress")
        assert "Ask about Rating. This is a required topic" in result.guidance
        assert WRAP_UP_COMPLETE not in result.guidance

    def test_completes_when_required_covered(self, category_config, registry) -> None:
        """Cobertura suficiente encerra e registra a razão."""
        engine = create_conversation_engine(category_config, registry=registry)
        result = engine.process_user_message("my laptop won't turn on")

        assert result.should_complete is True
        assert result.state.status == ConversationStatus.COMPLETED
        assert result.state.completion_reason == CompletionReason.COMPLETED
        assert WRAP_UP_COMPLETE in result.guidance
        assert engine.is_complete() is True
        assert engine.get_completion_reason() == CompletionReason.COMPLETED

    def test_closed_conversation_ignores_turns(self, category_config, registry) -> None:
        """Conversa concluída não aceita novos turnos."""
        engine = create_conversation_engine(category_config, registry=registry)
        engine.process_user_message("my laptop won't turn on")
        before = engine.get_state()

        result = engine.process_user_message("mais uma coisa")

        assert result.should_complete is True
        assert result.state.turn_count == before.turn_count
        assert len(result.messages) == len(engine.get_messages())
        assert all(m.content != "mais uma coisa" for m in engine.get_messages())

    def test_duration_limit_reason_is_stored(self, feedback_config, registry) -> None:
        engine = create_conversation_engine(feedback_config, registry=registry)
        result = engine.process_user_message("olá", now=utcnow() + timedelta(minutes=31))

        assert result.should_complete is True
        assert result.state.completion_reason == CompletionReason.DURATION_LIMIT

    def test_turn_processed_log_has_no_content(self, feedback_config, registry, caplog) -> None:
        engine = create_conversation_engine(feedback_config, registry=registry)

        with caplog.at_level(logging.INFO):
            engine.process_user_message("meu cpf é 123")

        record = next(r for r in caplog.records if r.message == "turn_processed")
        assert record.turn_count == 1  # type: ignore[attr-defined]
        assert all("cpf" not in str(v) for v in record.__dict__.values() if isinstance(v, str))


class TestExtractionsAndState:
    def test_update_extractions_covers_linked_topic(self, feedback_config, registry) -> None:
        engine = create_conversation_engine(feedback_config, registry=registry)
        state = engine.update_extractions({"rating": 9}, 0.6)

        assert state.partial_extractions == {"rating": 9}
        assert state.get_topic("rating").covered is True
        assert state.confidence >= 0.6
        assert [t.id for t in engine.get_uncovered_required_topics()] == ["improvements"]

    def test_set_state_restores_messages(self, feedback_config, registry) -> None:
        """Estado persistido (dict) é restaurado com as mensagens."""
        source = create_conversation_engine(feedback_config, registry=registry)
        source.process_user_message("primeira")
        source.add_assistant_response("ok")
        payload = source.get_state().model_dump(mode="json")

        engine = ConversationEngine(feedback_config, registry=registry)
        engine.set_state(payload)
        engine.initialize()

        assert engine.get_state().turn_count == 1
        assert [m["role"] for m in engine.get_messages_for_llm()] == [
            "system",
            "user",
            "assistant",
        ]

    def test_set_state_on_initialized_engine_keeps_system_prompt(
        self, feedback_config, registry
    ) -> None:
        """Restaurar em engine já inicializada mantém o prompt de sistema."""
        source = create_conversation_engine(feedback_config, registry=registry)
        source.process_user_message("primeira")
        source.add_assistant_response("ok")

        engine = create_conversation_engine(feedback_config, registry=registry)
        engine.set_state(source.get_state())
        result = engine.process_user_message("de novo")

        roles = [m.role for m in result.messages]
        assert roles == [
            MessageRole.SYSTEM,
            MessageRole.USER,
            MessageRole.ASSISTANT,
            MessageRole.USER,
        ]
        assert "Coletar feedback" in result.messages[0].content
        assert engine.get_state().turn_count == 2

    def test_get_state_is_a_copy(self, feedback_config, registry) -> None:
        engine = create_conversation_engine(feedback_config, registry=registry)
        engine.get_state().partial_extractions["x"] = 1
        assert engine.get_state().partial_extractions == {}

    def test_topic_coverage_summary(self, feedback_config, registry) -> None:
        engine = create_conversation_engine(feedback_config, registry=registry)
        engine.update_extractions({"rating": 9}, 0.1)

        summary = engine.get_topic_coverage_summary()

        assert (summary.total, summary.covered) == (3, 1)
        assert (summary.required, summary.required_covered) == (2, 1)
        assert (summary.important, summary.important_covered) == (1, 0)
