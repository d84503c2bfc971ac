"""Estratégia de prompt genérica, guiada pela persona."""

from __future__ import annotations

from convoform.ai.strategies.base import PromptStrategy, TopicGuidance
from convoform.ai.strategies.persona import build_persona_section, build_topics_section
from convoform.config.settings import get_settings
from convoform.domain.conversation import ConversationState, TopicCoverage
from convoform.domain.enums import FieldType, MessageRole, TopicPriority
from convoform.domain.models import (
    ConversationalFormConfig,
    ConversationTopic,
    linked_schema_field,
)

_ROLE_LABELS = {
    MessageRole.USER: "User",
    MessageRole.ASSISTANT: "You",
    MessageRole.SYSTEM: "System",
}

_GUIDELINES = """## Guidelines
- Ask questions naturally and conversationally
- Probe deeper when needed, especially for required topics
- Be empathetic and helpful
- Keep the conversation focused on gathering the required information
- When you have enough information, summarize what you've learned and confirm completion
- If the user provides information for multiple topics in one response, acknowledge all of them
- Don't repeat questions you've already asked unless clarification is needed

## Conversation Flow
1. Start with a friendly greeting
2. Begin exploring topics in order of priority (required first, then important, then optional)
3. For each topic, ask follow-up questions to reach the desired depth
4. When all required topics are covered with sufficient depth, summarize and confirm"""

WRAP_UP_COMPLETE = (
    "You have gathered all required information. Summarize what you've learned in a "
    "clear, concise way, and confirm with the user that everything is correct. Then "
    "thank them and let them know their ticket/request has been submitted."
)

ALL_TOPICS_COVERED = (
    "All required and important topics are covered. Summarize what you've learned "
    "and confirm if the user has anything else to add before completing."
)


def _uncovered(state: ConversationState, priority: TopicPriority) -> list[TopicCoverage]:
    return [t for t in state.topics if not t.covered and t.priority == priority]


def _description_of(config: ConversationalFormConfig, topic_id: str) -> str:
    topic = config.get_topic(topic_id)
    return topic.description if topic else ""


class DefaultPromptStrategy(PromptStrategy):
    """Estratégia padrão: prompt genérico com seção de persona."""

    strategy_id = "default"

    def __init__(self, history_window: int | None = None) -> None:
        self._history_window = history_window

    @property
    def history_window(self) -> int:
        if self._history_window is not None:
            return self._history_window
        return get_settings().context_history_window

    def build_system_prompt(self, config: ConversationalFormConfig) -> str:
        context = f"## Context\n{config.context}\n" if config.context else ""
        return (
            "You are a helpful AI assistant conducting a conversation to gather "
            "information for a form.\n\n"
            f"## Objective\n{config.objective}\n\n"
            f"{context}\n"
            f"## Topics to Explore\n{build_topics_section(config.topics)}\n\n"
            f"## Your Role\n{build_persona_section(config.persona)}\n\n"
            f"{_GUIDELINES}"
        )

    def build_conversation_context(
        self, state: ConversationState, config: ConversationalFormConfig
    ) -> str:
        covered = [t for t in state.topics if t.covered]
        required = _uncovered(state, TopicPriority.REQUIRED)
        important = _uncovered(state, TopicPriority.IMPORTANT)

        history = ""
        recent = state.messages[-self.history_window :] if self.history_window > 0 else []
        if recent:
            lines = "\n".join(f"{_ROLE_LABELS[m.role]}: {m.content}" for m in recent)
            history = f"\n### Recent Conversation History:\n{lines}"

        if covered:
            covered_section = "\n".join(
                f"- {t.name} ({round(t.depth * 100)}% depth, {t.turn_count} mentions)"
                for t in covered
            )
        else:
            covered_section = "None yet"

        needed: list[str] = []
        if required:
            items = "\n".join(f"- {t.name}: {_description_of(config, t.topic_id)}" for t in required)
            needed.append(f"**Required (must cover):**\n{items}")
        if important:
            items = "\n".join(
                f"- {t.name}: {_description_of(config, t.topic_id)}" for t in important
            )
            needed.append(f"**Important (should cover):**\n{items}")

        if required:
            next_steps = f"Focus on required topics first. Ask about: {required[0].name}"
        elif important:
            next_steps = f"Move to important topics. Ask about: {important[0].name}"
        else:
            next_steps = "All required topics covered. Summarize and confirm completion."

        return (
            "## Conversation Progress\n\n"
            f"Turn: {state.turn_count} / {state.max_turns}\n"
            f"Confidence: {round(state.confidence * 100)}%\n"
            f"{history}\n\n"
            f"### Topics Covered\n{covered_section}\n\n"
            f"### Topics Still Needed\n{chr(10).join(needed) if needed else 'None'}\n\n"
            f"### Next Steps\n{next_steps}\n\n"
            "**CRITICAL**: Reference what the user has already told you in the "
            "conversation history above. Don't ask questions about information they've "
            "already provided. Build on what they've said, don't repeat yourself."
        )

    def get_next_topic_guidance(
        self, state: ConversationState, config: ConversationalFormConfig
    ) -> TopicGuidance:
        for coverage in _uncovered(state, TopicPriority.REQUIRED):
            topic = config.get_topic(coverage.topic_id)
            if topic is not None:
                return TopicGuidance(
                    topic=topic,
                    guidance=(
                        f"Ask about {topic.name}. This is a required topic with "
                        f"{topic.depth} depth. {topic.description}"
                    ),
                )

        for coverage in _uncovered(state, TopicPriority.IMPORTANT):
            topic = config.get_topic(coverage.topic_id)
            if topic is not None:
                return TopicGuidance(
                    topic=topic,
                    guidance=(
                        f"Ask about {topic.name}. This is an important topic with "
                        f"{topic.depth} depth. {topic.description}"
                    ),
                )

        return TopicGuidance(topic=None, guidance=ALL_TOPICS_COVERED)

    def build_wrap_up_prompt(
        self, state: ConversationState, config: ConversationalFormConfig
    ) -> str:
        missing = _uncovered(state, TopicPriority.REQUIRED)
        if missing:
            names = ", ".join(t.name for t in missing)
            return (
                f"You still need to cover these required topics: {names}. "
                "Continue the conversation to gather this information."
            )
        return WRAP_UP_COMPLETE

    def build_extraction_guidance(
        self, topic: ConversationTopic, config: ConversationalFormConfig
    ) -> str:
        field = linked_schema_field(topic, config.extraction_schema)
        if field is None:
            return f"Extract information about {topic.name} from the conversation."

        guidance = (
            f"Extract the {field.field} field ({field.type}) from the conversation "
            f"about {topic.name}."
        )
        if field.type == FieldType.ENUM and field.options:
            guidance += f" Valid values: {', '.join(field.options)}."
        if field.required:
            guidance += " This field is required."
        if field.description:
            guidance += f" {field.description}"
        return guidance
