"""Testes das estratégias de prompt (default, it-helpdesk, custom, factory)."""

from __future__ import annotations

import logging

from convoform.ai.strategies import (
    CustomPromptStrategy,
    DefaultPromptStrategy,
    ITHelpdeskPromptStrategy,
    create_prompt_strategy,
)
from convoform.ai.strategies.default import ALL_TOPICS_COVERED, WRAP_UP_COMPLETE
from convoform.ai.strategies.it_helpdesk import IT_HELPDESK_SYSTEM_PROMPT
from convoform.ai.strategies.persona import build_persona_section
from convoform.application.state import (
    add_message_to_state,
    create_conversation_state,
    update_topic_coverage,
)
from convoform.domain.enums import MessageRole, PersonaStyle, StrategyType
from convoform.domain.models import ConversationPersona
from convoform.domain.stored_template import TemplatePromptConfig


class TestPersonaSection:
    """Renderização da persona."""

    def test_custom_prompt_used_verbatim(self) -> None:
        persona = ConversationPersona(style=PersonaStyle.CUSTOM, custom_prompt="Seja breve.")
        assert build_persona_section(persona) == "Seja breve."

    def test_tone_behaviors_restrictions(self) -> None:
        persona = ConversationPersona(
            style=PersonaStyle.PROFESSIONAL,
            tone="calmo",
            behaviors=["confirmar dados"],
            restrictions=["pedir senha"],
        )
        section = build_persona_section(persona)

        assert section.startswith("Maintain a professional")
        assert "Tone: calmo" in section
        assert "- confirmar dados" in section
        assert "Things to avoid:\n- pedir senha" in section


class TestDefaultPromptStrategy:
    """Estratégia padrão."""

    def test_system_prompt_sections(self, feedback_config) -> None:
        prompt = DefaultPromptStrategy().build_system_prompt(feedback_config)

        assert "## Objective\nColetar feedback" in prompt
        assert "- **Rating** (required priority, surface depth)" in prompt
        assert "## Your Role" in prompt
        assert "## Context" not in prompt

    def test_context_lists_progress(self, feedback_config, t0) -> None:
        """Contexto mostra turno, tópicos cobertos e próximos passos."""
        state = create_conversation_state("f", feedback_config, now=t0)
        state = add_message_to_state(state, MessageRole.USER, "nota 9", now=t0)
        state = update_topic_coverage(state, "rating", 0.5, 0.3, now=t0)

        context = DefaultPromptStrategy().build_conversation_context(state, feedback_config)

        assert "Turn: 1 / 5" in context
        assert "User: nota 9" in context
        assert "- Rating (50% depth, 1 mentions)" in context
        assert "- Improvements: Suggestions to improve the product" in context
        assert "Ask about: Improvements" in context

    def test_history_window(self, feedback_config, t0) -> None:
        """Apenas as N mensagens mais recentes entram no contexto."""
        state = create_conversation_state("f", feedback_config, now=t0)
        for text in ("primeira", "segunda", "terceira"):
            state = add_message_to_state(state, MessageRole.USER, text, now=t0)

        context = DefaultPromptStrategy(history_window=2).build_conversation_context(
            state, feedback_config
        )

        assert "primeira" not in context
        assert "segunda" in context and "terceira" in context

    def test_next_topic_prefers_required(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        guidance = DefaultPromptStrategy().get_next_topic_guidance(state, feedback_config)

        assert guidance.topic.id == "rating"
        assert "required topic" in guidance.guidance

    def test_next_topic_all_covered(self, feedback_config, t0) -> None:
        state = create_conversation_state("f", feedback_config, now=t0)
        for topic_id in ("rating", "improvements", "recommend"):
            state = update_topic_coverage(state, topic_id, 1.0, now=t0)

        guidance = DefaultPromptStrategy().get_next_topic_guidance(state, feedback_config)

        assert guidance.topic is None
        assert guidance.guidance == ALL_TOPICS_COVERED

    def test_wrap_up(self, feedback_config, t0) -> None:
        """Wrap-up lista obrigatórios faltantes ou confirma conclusão."""
        strategy = DefaultPromptStrategy()
        state = create_conversation_state("f", feedback_config, now=t0)

        assert "Rating, Improvements" in strategy.build_wrap_up_prompt(state, feedback_config)

        for topic_id in ("rating", "improvements"):
            state = update_topic_coverage(state, topic_id, 1.0, now=t0)
        assert strategy.build_wrap_up_prompt(state, feedback_config) == WRAP_UP_COMPLETE

    def test_extraction_guidance(self, category_config) -> None:
        topic = category_config.topics[0]
        guidance = DefaultPromptStrategy().build_extraction_guidance(topic, category_config)

        assert guidance.startswith("Extract the cat field (enum)")
        assert "Valid values: hardware, software." in guidance
        assert "This field is required." in guidance

    def test_extraction_guidance_without_linked_field(self, feedback_config) -> None:
        """Tópico sem campo ligado recebe orientação genérica."""
        topic = feedback_config.get_topic("recommend")
        guidance = DefaultPromptStrategy().build_extraction_guidance(topic, feedback_config)

        assert guidance == "Extract information about Recommendation from the conversation."


class TestITHelpdeskPromptStrategy:
    def test_fixed_prompt_with_context(self, feedback_config) -> None:
        config = feedback_config.model_copy(update={"context": "Empresa ACME"})
        prompt = ITHelpdeskPromptStrategy().build_system_prompt(config)

        assert prompt.startswith(IT_HELPDESK_SYSTEM_PROMPT)
        assert prompt.endswith("## Additional Context\nEmpresa ACME")


class TestCustomPromptStrategy:
    """Templates do autor com interpolação."""

    def test_system_prompt_interpolation(self, feedback_config) -> None:
        strategy = CustomPromptStrategy(
            system_prompt_template="Objetivo: {{objective}} | Org: {{org}} | {{unknown}}",
            template_variables={"org": "ACME"},
        )
        prompt = strategy.build_system_prompt(feedback_config)

        assert prompt == "Objetivo: Coletar feedback | Org: ACME | {{unknown}}"

    def test_author_variables_override_builtins(self, feedback_config) -> None:
        strategy = CustomPromptStrategy(
            system_prompt_template="{{objective}}",
            template_variables={"objective": "sobrescrito"},
        )
        assert strategy.build_system_prompt(feedback_config) == "sobrescrito"

    def test_missing_slots_delegate_to_default(self, feedback_config, t0) -> None:
        """Sem template, wrap-up e system prompt vêm da estratégia padrão."""
        strategy = CustomPromptStrategy()
        default = DefaultPromptStrategy()
        state = create_conversation_state("f", feedback_config, now=t0)

        assert strategy.build_system_prompt(feedback_config) == default.build_system_prompt(
            feedback_config
        )
        assert strategy.build_wrap_up_prompt(state, feedback_config) == (
            default.build_wrap_up_prompt(state, feedback_config)
        )


class TestCreatePromptStrategy:
    """Factory a partir da configuração armazenada."""

    def test_none_is_default(self) -> None:
        assert isinstance(create_prompt_strategy(None), DefaultPromptStrategy)

    def test_it_helpdesk(self) -> None:
        strategy = create_prompt_strategy({"strategy_type": "it-helpdesk"})
        assert isinstance(strategy, ITHelpdeskPromptStrategy)

    def test_custom(self) -> None:
        strategy = create_prompt_strategy(
            TemplatePromptConfig(
                strategy_type=StrategyType.CUSTOM,
                system_prompt_template="Oi {{objective}}",
            )
        )
        assert isinstance(strategy, CustomPromptStrategy)
        assert strategy.system_prompt_template == "Oi {{objective}}"

    def test_unknown_type_falls_back(self, caplog) -> None:
        """Tipo desconhecido degrada para default e registra fallback."""
        with caplog.at_level(logging.INFO):
            strategy = create_prompt_strategy({"strategy_type": "quantum"})

        assert type(strategy) is DefaultPromptStrategy
        fallback = [r for r in caplog.records if getattr(r, "fallback_used", False)]
        assert fallback[0].reason == "invalid_prompt_config"  # type: ignore[attr-defined]

    def test_custom_without_templates_warns(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            strategy = create_prompt_strategy({"strategy_type": "custom"})

        assert isinstance(strategy, CustomPromptStrategy)
        assert any(r.message == "custom_strategy_without_templates" for r in caplog.records)
