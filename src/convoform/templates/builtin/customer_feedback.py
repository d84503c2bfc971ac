"""Template built-in: feedback de clientes."""

from __future__ import annotations

from datetime import UTC, datetime

from convoform.ai.strategies.default import DefaultPromptStrategy
from convoform.domain.enums import (
    FieldType,
    PersonaStyle,
    TemplateCategory,
    TopicDepth,
    TopicPriority,
)
from convoform.domain.models import (
    ConversationLimits,
    ConversationPersona,
    ConversationTopic,
    ExtractionField,
    ExtractionFieldValidation,
)
from convoform.templates.types import (
    ConversationTemplate,
    TemplateDefaultConfig,
    TemplateMetadata,
)

CUSTOMER_FEEDBACK_TOPICS: list[ConversationTopic] = [
    ConversationTopic(
        id="satisfaction",
        name="Overall Satisfaction",
        description="Determine overall satisfaction level with the product or service",
        priority=TopicPriority.REQUIRED,
        depth=TopicDepth.MODERATE,
        extraction_field="satisfactionRating",
    ),
    ConversationTopic(
        id="experience",
        name="Experience Details",
        description=(
            "Get specific details about their experience - what worked well and what "
            "could be improved"
        ),
        priority=TopicPriority.REQUIRED,
        depth=TopicDepth.DEEP,
        extraction_field="experienceDetails",
    ),
    ConversationTopic(
        id="recommendation",
        name="Likelihood to Recommend",
        description="Determine how likely they are to recommend to others (NPS-style)",
        priority=TopicPriority.IMPORTANT,
        depth=TopicDepth.SURFACE,
        extraction_field="npsScore",
    ),
    ConversationTopic(
        id="suggestions",
        name="Improvement Suggestions",
        description="Gather specific suggestions for how to improve the product or service",
        priority=TopicPriority.IMPORTANT,
        depth=TopicDepth.MODERATE,
        extraction_field="suggestions",
    ),
]

CUSTOMER_FEEDBACK_SCHEMA: list[ExtractionField] = [
    ExtractionField(
        field="satisfactionRating",
        type=FieldType.ENUM,
        required=True,
        description="Overall satisfaction level",
        options=["very_satisfied", "satisfied", "neutral", "dissatisfied", "very_dissatisfied"],
        topic_id="satisfaction",
    ),
    ExtractionField(
        field="experienceDetails",
        type=FieldType.STRING,
        required=True,
        description="Detailed feedback about their experience",
        validation=ExtractionFieldValidation(min_length=20),
        topic_id="experience",
    ),
    ExtractionField(
        field="positiveAspects",
        type=FieldType.ARRAY,
        description="Things they liked or found valuable",
    ),
    ExtractionField(
        field="negativeAspects",
        type=FieldType.ARRAY,
        description="Things they disliked or found frustrating",
    ),
    ExtractionField(
        field="npsScore",
        type=FieldType.NUMBER,
        description="Likelihood to recommend on a scale of 0-10",
        validation=ExtractionFieldValidation(min=0, max=10),
        topic_id="recommendation",
    ),
    ExtractionField(
        field="suggestions",
        type=FieldType.STRING,
        description="Specific improvement suggestions",
        topic_id="suggestions",
    ),
    ExtractionField(
        field="wouldUseAgain",
        type=FieldType.BOOLEAN,
        description="Whether they would use the product/service again",
    ),
]

CUSTOMER_FEEDBACK_TEMPLATE = ConversationTemplate(
    id="customer-feedback",
    name="Customer Feedback",
    description="Gather detailed customer feedback through friendly conversation",
    category=TemplateCategory.FEEDBACK,
    icon="RateReview",
    is_built_in=True,
    prompt_strategy=DefaultPromptStrategy(),
    default_config=TemplateDefaultConfig(
        objective=(
            "Gather meaningful feedback about the customer experience to help improve "
            "our products and services."
        ),
        context=(
            "This is a customer feedback conversation. Be friendly, appreciative, and "
            "genuinely interested in their perspective."
        ),
        persona=ConversationPersona(
            style=PersonaStyle.FRIENDLY,
            tone="warm and appreciative",
            behaviors=[
                "Thank them for taking the time to share feedback",
                "Show genuine interest in their experience",
                "Ask follow-up questions to understand their perspective",
                "Acknowledge both positive and negative feedback gracefully",
            ],
            restrictions=[
                "Do not be defensive about negative feedback",
                "Do not make promises about changes",
                "Keep the conversation focused on their experience",
            ],
        ),
        conversation_limits=ConversationLimits(max_turns=12, max_duration=20, min_confidence=0.7),
    ),
    default_topics=CUSTOMER_FEEDBACK_TOPICS,
    default_schema=CUSTOMER_FEEDBACK_SCHEMA,
    metadata=TemplateMetadata(
        preview_description=(
            "Perfect for gathering customer insights. Collects satisfaction rating, "
            "detailed feedback, NPS score, and improvement suggestions."
        ),
        use_cases=[
            "Post-purchase feedback",
            "Service satisfaction surveys",
            "Product feedback collection",
            "Customer experience research",
        ],
        tags=["feedback", "customer", "survey", "nps"],
        estimated_duration=4,
        author="NetPad",
        updated_at=datetime(2026, 1, 7, tzinfo=UTC),
    ),
)
