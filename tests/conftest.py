from __future__ import annotations

from datetime import UTC, datetime

import pytest

from convoform.config.settings import get_settings
from convoform.domain.enums import FieldType, TopicDepth, TopicPriority
from convoform.domain.models import (
    ConversationalFormConfig,
    ConversationLimits,
    ConversationTopic,
    ExtractionField,
)
from convoform.templates.registry import TemplateRegistry, initialize_built_in_templates

T0 = datetime(2026, 1, 7, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def t0() -> datetime:
    return T0


@pytest.fixture()
def registry() -> TemplateRegistry:
    """Registry isolado já com os built-ins."""
    reg = TemplateRegistry()
    initialize_built_in_templates(reg)
    return reg


@pytest.fixture()
def empty_registry() -> TemplateRegistry:
    return TemplateRegistry()


@pytest.fixture()
def category_config() -> ConversationalFormConfig:
    """Um único tópico obrigatório de categoria (surface) ligado a um enum."""
    return ConversationalFormConfig(
        objective="Classificar o chamado",
        topics=[
            ConversationTopic(
                id="cat",
                name="Category",
                priority=TopicPriority.REQUIRED,
                depth=TopicDepth.SURFACE,
            )
        ],
        extraction_schema=[
            ExtractionField(
                field="cat",
                type=FieldType.ENUM,
                options=["hardware", "software"],
                required=True,
            )
        ],
        conversation_limits=ConversationLimits(
            max_turns=10, max_duration=30, min_confidence=0.7
        ),
    )


@pytest.fixture()
def feedback_config() -> ConversationalFormConfig:
    """Dois tópicos obrigatórios e um importante, sem relação com TI."""
    return ConversationalFormConfig(
        objective="Coletar feedback",
        topics=[
            ConversationTopic(
                id="rating",
                name="Rating",
                description="Overall satisfaction score",
                priority=TopicPriority.REQUIRED,
                depth=TopicDepth.SURFACE,
                extraction_field="rating",
            ),
            ConversationTopic(
                id="improvements",
                name="Improvements",
                description="Suggestions to improve the product",
                priority=TopicPriority.REQUIRED,
                depth=TopicDepth.MODERATE,
                extraction_field="improvements",
            ),
            ConversationTopic(
                id="recommend",
                name="Recommendation",
                description="Would recommend to a friend",
                priority=TopicPriority.IMPORTANT,
                depth=TopicDepth.SURFACE,
            ),
        ],
        extraction_schema=[
            ExtractionField(
                field="rating", type=FieldType.NUMBER, required=True, topic_id="rating"
            ),
            ExtractionField(
                field="improvements",
                type=FieldType.STRING,
                required=True,
                topic_id="improvements",
            ),
        ],
        conversation_limits=ConversationLimits(
            max_turns=5, max_duration=30, min_confidence=0.7
        ),
    )
