"""Estratégias de prompt (default, it-helpdesk, custom)."""

from convoform.ai.strategies.base import PromptStrategy, TopicGuidance
from convoform.ai.strategies.custom import CustomPromptStrategy
from convoform.ai.strategies.default import DefaultPromptStrategy
from convoform.ai.strategies.factory import create_prompt_strategy
from convoform.ai.strategies.it_helpdesk import ITHelpdeskPromptStrategy
from convoform.ai.strategies.persona import build_persona_section, build_topics_section

__all__ = [
    "CustomPromptStrategy",
    "DefaultPromptStrategy",
    "ITHelpdeskPromptStrategy",
    "PromptStrategy",
    "TopicGuidance",
    "build_persona_section",
    "build_topics_section",
    "create_prompt_strategy",
]
