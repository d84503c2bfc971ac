"""Estratégia com templates do autor e interpolação {{variable}}.

Variáveis embutidas: objective, context, persona (seção renderizada) e
topics (lista renderizada). Variáveis do autor sobrescrevem as embutidas.
Slots sem template e o contexto dinâmico delegam à estratégia padrão.
"""

from __future__ import annotations

from collections.abc import Mapping

from convoform.ai.interpolation import interpolate
from convoform.ai.strategies.base import PromptStrategy, TopicGuidance
from convoform.ai.strategies.default import DefaultPromptStrategy
from convoform.ai.strategies.persona import build_persona_section, build_topics_section
from convoform.domain.conversation import ConversationState
from convoform.domain.models import ConversationalFormConfig, ConversationTopic


class CustomPromptStrategy(PromptStrategy):
    """Estratégia definida por strings de template armazenadas."""

    strategy_id = "custom"

    def __init__(
        self,
        system_prompt_template: str | None = None,
        wrap_up_prompt_template: str | None = None,
        context_prompt_template: str | None = None,
        template_variables: Mapping[str, str] | None = None,
        base: PromptStrategy | None = None,
    ) -> None:
        self.system_prompt_template = system_prompt_template
        self.wrap_up_prompt_template = wrap_up_prompt_template
        # Mantido para round-trip do documento; o contexto depende do estado
        # de runtime e sempre usa a estratégia base.
        self.context_prompt_template = context_prompt_template
        self.template_variables = dict(template_variables or {})
        self._base = base or DefaultPromptStrategy()

    def variables_for(self, config: ConversationalFormConfig) -> dict[str, str]:
        """Variáveis disponíveis para interpolação com esta configuração."""
        variables = {
            "objective": config.objective or "",
            "context": config.context or "",
            "persona": build_persona_section(config.persona),
            "topics": build_topics_section(config.topics),
        }
        variables.update(self.template_variables)
        return variables

    def build_system_prompt(self, config: ConversationalFormConfig) -> str:
        if self.system_prompt_template:
            return interpolate(self.system_prompt_template, self.variables_for(config))
        return self._base.build_system_prompt(config)

    def build_conversation_context(
        self, state: ConversationState, config: ConversationalFormConfig
    ) -> str:
        return self._base.build_conversation_context(state, config)

    def get_next_topic_guidance(
        self, state: ConversationState, config: ConversationalFormConfig
    ) -> TopicGuidance:
        return self._base.get_next_topic_guidance(state, config)

    def build_wrap_up_prompt(
        self, state: ConversationState, config: ConversationalFormConfig
    ) -> str:
        if self.wrap_up_prompt_template:
            return interpolate(self.wrap_up_prompt_template, self.variables_for(config))
        return self._base.build_wrap_up_prompt(state, config)

    def build_extraction_guidance(
        self, topic: ConversationTopic, config: ConversationalFormConfig
    ) -> str:
        return self._base.build_extraction_guidance(topic, config)
