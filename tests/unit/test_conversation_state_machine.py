"""Testes da máquina de estados (transições puras)."""

from __future__ import annotations

from datetime import timedelta

import pytest

from convoform.application.state import (
    abandon_conversation,
    add_message_to_state,
    analyze_and_update_topic_coverage,
    complete_conversation,
    compute_confidence,
    coverage_threshold,
    create_conversation_state,
    get_coverage_summary,
    mark_conversation_error,
    should_complete_conversation,
    update_partial_extractions,
    update_topic_coverage,
    update_topic_coverage_from_extractions,
)
from convoform.domain.enums import (
    CompletionReason,
    ConversationStatus,
    MessageRole,
    TopicDepth,
)


class TestCreateAndMessages:
    """Estado inicial e mensagens."""

    def test_initial_state(self, feedback_config, t0) -> None:
        state = create_conversation_state("form_1", feedback_config, now=t0)

        assert state.conversation_id.startswith("conv_")
        assert state.form_id == "form_1"
        assert [t.topic_id for t in state.topics] == ["rating", "improvements", "recommend"]
        assert all(t.depth == 0.0 and not t.covered for t in state.topics)
        assert state.max_turns == 5
        assert state.status == ConversationStatus.ACTIVE
        assert state.started_at == t0

    def test_explicit_conversation_id(self, feedback_config) -> None:
        state = create_conversation_state("f", feedback_config, conversation_id="conv_x")
        assert state.conversation_id == "conv_x"

    def test_only_user_messages_count_turns(self, feedback_config, t0) -> None:
        """Turno só avança com mensagem do usuário."""
        state = create_conversation_state("f", feedback_config, now=t0)
        state = add_message_to_state(state, MessageRole.USER, "oi", now=t0)
        state = add_message_to_state(state, "assistant", "olá!", now=t0)

        assert state.turn_count == 1
        assert [m.role for m in state.messages] == [MessageRole.USER, MessageRole.ASSISTANT]

    def test_transitions_do_not_mutate_input(self, feedback_config, t0) -> None:
        original = create_conversation_state("f", feedback_config, now=t0)
        add_message_to_state(original, MessageRole.USER, "oi", now=t0)
        update_topic_coverage(original, "rating", 0.9, now=t0)

        assert original.messages == []
        assert original.get_topic("rating").depth == 0.0


class TestTopicCoverage:
    """Regra do máximo e thresholds."""

    def test_depth_never_decreases(self, feedback_config, t0) -> None:
        """Observação menor não reduz profundidade nem descobre o tópico."""
        state = create_conversation_state("f", feedback_config, now=t0)
        state = update_topic_coverage(state, "rating", 0.7, 0.5, now=t0)
        state = update_topic_coverage(state, "rating", 0.2, 0.5, now=t0)

        topic = state.get_topic("rating")
        assert topic.depth == 0.7
        assert topic.covered is True
        assert topic.turn_count == 2

    def test_below_threshold_not_covered(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        state = update_topic_coverage(state, "improvements", 0.4, 0.5, now=t0)
        assert state.get_topic("improvements").covered is False

    def test_last_mentioned_turn(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        state = add_message_to_state(state, MessageRole.USER, "a", now=t0)
        state = add_message_to_state(state, MessageRole.USER, "b", now=t0)
        state = update_topic_coverage(state, "rating", 0.3, now=t0)
        assert state.get_topic("rating").last_mentioned_turn == 2

    def test_depth_is_clamped(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        state = update_topic_coverage(state, "rating", 3.0, now=t0)
        assert state.get_topic("rating").depth == 1.0

    def test_unknown_topic_is_noop(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        assert update_topic_coverage(state, "ghost", 1.0, now=t0) is state

    def test_threshold_per_depth(self) -> None:
        assert coverage_threshold(TopicDepth.SURFACE) == 0.3
        assert coverage_threshold("moderate") == 0.5
        assert coverage_threshold(TopicDepth.DEEP) == 0.7

    def test_depth_monotonic_across_analyses(self, feedback_config, t0) -> None:
        """Profundidade não diminui em análises sucessivas."""
        messages = [
            "The improvements I would suggest " + "x" * 100,
            "improvements",
            "ok",
            "rating 9",
        ]
        state = create_conversation_state("f", feedback_config, now=t0)
        previous = {t.topic_id: t.depth for t in state.topics}

        for text in messages:
            state = add_message_to_state(state, MessageRole.USER, text, now=t0)
            state = analyze_and_update_topic_coverage(
                state, text, feedback_config.topics, now=t0
            )
            for topic in state.topics:
                assert topic.depth >= previous[topic.topic_id]
                previous[topic.topic_id] = topic.depth


class TestConfidence:
    """Confiança ponderada por prioridade."""

    def test_no_topics_is_zero(self, feedback_config, t0) -> None:
        config = feedback_config.model_copy(update={"topics": []})
        state = create_conversation_state("f", config, now=t0)
        assert compute_confidence(state) == 0.0

    def test_partial_progress(self, feedback_config, t0) -> None:
        """Tópico não coberto contribui depth/threshold."""
        state = create_conversation_state("f", feedback_config, now=t0)
        state = update_topic_coverage(state, "rating", 0.15, 0.3, now=t0)

        # rating (peso 3) em 50% do threshold surface; total de pesos 8
        assert compute_confidence(state, feedback_config.topics) == 0.1875

    def test_all_covered_is_one(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        for topic_id in ("rating", "improvements", "recommend"):
            state = update_topic_coverage(state, topic_id, 1.0, now=t0)
        assert compute_confidence(state, feedback_config.topics) == 1.0

    def test_partial_extractions_keep_max_confidence(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        state = update_partial_extractions(state, {"rating": 9}, 0.8, now=t0)
        state = update_partial_extractions(state, {"improvements": "faster"}, 0.4, now=t0)

        assert state.confidence == 0.8
        assert state.partial_extractions == {"rating": 9, "improvements": "faster"}


class TestCoverageFromExtractions:
    """Extração marca tópicos ligados como cobertos."""

    def test_marks_linked_topic(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        state = update_topic_coverage_from_extractions(
            state, {"rating": 9, "improvements": ""}, feedback_config.extraction_schema, now=t0
        )

        assert state.get_topic("rating").covered is True
        assert state.get_topic("rating").depth == 0.3
        assert state.get_topic("improvements").covered is False

    def test_long_text_is_deep(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        state = update_topic_coverage_from_extractions(
            state, {"improvements": "y" * 120}, feedback_config.extraction_schema, now=t0
        )
        assert state.get_topic("improvements").depth == 1.0


class TestShouldComplete:
    """Prioridade de encerramento."""

    def test_all_required_with_confidence(self, category_config, t0) -> None:
        """Cenário: 'my laptop won't turn on' cobre a categoria e encerra."""
        state = create_conversation_state("f", category_config, now=t0)
        message = "my laptop won't turn on"
        state = add_message_to_state(state, MessageRole.USER, message, now=t0)
        state = analyze_and_update_topic_coverage(
            state,
            message,
            category_config.topics,
            schema=category_config.extraction_schema,
            now=t0,
        )

        topic = state.get_topic("cat")
        assert topic.covered is True
        assert topic.depth > 0
        assert state.confidence >= 0.7

        check = should_complete_conversation(state, category_config, now=t0)
        assert check.should_complete is True
        assert check.reason == CompletionReason.COMPLETED

    def test_turn_limit_with_nothing_covered(self, category_config, t0) -> None:
        """Cenário: max_turns=2, dois turnos sem cobertura → turn_limit."""
        config = category_config.model_copy(
            update={
                "conversation_limits": category_config.conversation_limits.model_copy(
                    update={"max_turns": 2}
                )
            }
        )
        state = create_conversation_state("f", config, now=t0)
        for text in ("bom dia", "ok"):
            state = add_message_to_state(state, MessageRole.USER, text, now=t0)
            state = analyze_and_update_topic_coverage(state, text, config.topics, now=t0)

        check = should_complete_conversation(state, config, now=t0)
        assert (check.should_complete, check.reason) == (True, CompletionReason.TURN_LIMIT)

    def test_turn_limit_not_masked_by_missing_coverage(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        state = state.model_copy(update={"turn_count": 5})
        check = should_complete_conversation(state, feedback_config, now=t0)
        assert check.reason == CompletionReason.TURN_LIMIT

    def test_low_confidence_does_not_complete(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        for topic_id in ("rating", "improvements"):
            state = update_topic_coverage(state, topic_id, 1.0, now=t0)
        state = state.model_copy(update={"confidence": 0.5})

        assert should_complete_conversation(state, feedback_config, now=t0).should_complete is False

    def test_duration_limit(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        check = should_complete_conversation(
            state, feedback_config, now=t0 + timedelta(minutes=31)
        )
        assert check.reason == CompletionReason.DURATION_LIMIT

    def test_already_completed_keeps_reason(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        state = complete_conversation(state, CompletionReason.DURATION_LIMIT, now=t0)

        check = should_complete_conversation(state, feedback_config, now=t0)
        assert check.reason == CompletionReason.DURATION_LIMIT

    def test_nothing_to_complete(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        assert should_complete_conversation(state, feedback_config, now=t0).should_complete is False


class TestTerminalTransitions:
    def test_complete(self, feedback_config, t0) -> None:
        state = complete_conversation(
            create_conversation_state("f", feedback_config, now=t0), now=t0
        )
        assert state.status == ConversationStatus.COMPLETED
        assert state.completion_reason == CompletionReason.COMPLETED
        assert state.completed_at == t0

    def test_abandon(self, feedback_config, t0) -> None:
        state = abandon_conversation(
            create_conversation_state("f", feedback_config, now=t0), "timeout", now=t0
        )
        assert state.status == ConversationStatus.ABANDONED
        assert state.error == "timeout"
        assert state.is_terminal is True

    def test_error(self, feedback_config, t0) -> None:
        state = mark_conversation_error(
            create_conversation_state("f", feedback_config, now=t0), "llm_timeout", now=t0
        )
        assert state.status == ConversationStatus.ERROR
        assert state.completed_at is None


class TestCoverageSummary:
    def test_counts(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        state = update_topic_coverage(state, "rating", 0.6, now=t0)

        summary = get_coverage_summary(state)

        assert summary.total_topics == 3
        assert summary.covered_topics == 1
        assert summary.required_topics == 2
        assert summary.covered_required_topics == 1
        assert summary.average_depth == pytest.approx(0.2)
