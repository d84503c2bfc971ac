"""Template built-in: abertura de chamados de TI."""

from __future__ import annotations

from datetime import UTC, datetime

from convoform.ai.strategies.it_helpdesk import ITHelpdeskPromptStrategy
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

IT_HELPDESK_TOPICS: list[ConversationTopic] = [
    ConversationTopic(
        id="issue-category",
        name="Issue Category",
        description=(
            "Determine the type of IT issue: Hardware, Software, Network, "
            "Access & Permissions, or Other"
        ),
        priority=TopicPriority.REQUIRED,
        depth=TopicDepth.MODERATE,
        extraction_field="issueCategory",
    ),
    ConversationTopic(
        id="urgency",
        name="Urgency Level",
        description="Determine how urgent this issue is: Low, Medium, High, or Critical",
        priority=TopicPriority.REQUIRED,
        depth=TopicDepth.SURFACE,
        extraction_field="urgency",
    ),
    ConversationTopic(
        id="description",
        name="Issue Description",
        description=(
            "Get a detailed description of the issue including what happened, "
            "when it started, and any error messages"
        ),
        priority=TopicPriority.REQUIRED,
        depth=TopicDepth.DEEP,
        extraction_field="description",
    ),
    ConversationTopic(
        id="affected-system",
        name="Affected System",
        description="Identify the specific device, application, or system affected",
        priority=TopicPriority.IMPORTANT,
        depth=TopicDepth.MODERATE,
        extraction_field="affectedSystem",
    ),
    ConversationTopic(
        id="contact-preferences",
        name="Contact Preferences",
        description=(
            "How to reach the requester: email, phone, or chat, and best time to contact"
        ),
        priority=TopicPriority.IMPORTANT,
        depth=TopicDepth.SURFACE,
        extraction_field="contactMethod",
    ),
]

IT_HELPDESK_SCHEMA: list[ExtractionField] = [
    ExtractionField(
        field="issueCategory",
        type=FieldType.ENUM,
        required=True,
        description="Category of IT issue",
        options=["hardware", "software", "network", "access", "other"],
        topic_id="issue-category",
    ),
    ExtractionField(
        field="urgency",
        type=FieldType.ENUM,
        required=True,
        description="Urgency level of the issue",
        options=["low", "medium", "high", "critical"],
        topic_id="urgency",
    ),
    ExtractionField(
        field="subject",
        type=FieldType.STRING,
        required=True,
        description="Brief subject line for the ticket (auto-generated from issue)",
        validation=ExtractionFieldValidation(min_length=5, max_length=100),
    ),
    ExtractionField(
        field="description",
        type=FieldType.STRING,
        required=True,
        description="Detailed description of the issue",
        validation=ExtractionFieldValidation(min_length=20),
        topic_id="description",
    ),
    ExtractionField(
        field="affectedSystem",
        type=FieldType.STRING,
        description="The device, application, or system affected",
        topic_id="affected-system",
    ),
    ExtractionField(
        field="contactMethod",
        type=FieldType.ENUM,
        description="Preferred contact method",
        options=["email", "phone", "chat"],
        topic_id="contact-preferences",
    ),
    ExtractionField(
        field="additionalContext",
        type=FieldType.STRING,
        description="Any additional context or troubleshooting already attempted",
    ),
]

IT_HELPDESK_TEMPLATE = ConversationTemplate(
    id="it-helpdesk",
    name="IT Helpdesk",
    description="Collect IT support ticket information through natural conversation",
    category=TemplateCategory.SUPPORT,
    icon="SupportAgent",
    version="1.0.0",
    is_built_in=True,
    prompt_strategy=ITHelpdeskPromptStrategy(),
    default_config=TemplateDefaultConfig(
        objective=(
            "Collect all necessary information to create an IT support ticket that can "
            "be properly triaged and assigned to the appropriate team."
        ),
        context=(
            "This is an internal IT helpdesk for company employees. Be helpful, "
            "professional, and efficient."
        ),
        persona=ConversationPersona(
            style=PersonaStyle.PROFESSIONAL,
            tone="helpful and empathetic",
            behaviors=[
                "Ask clarifying questions when the issue is unclear",
                "Probe for specific details about technical issues",
                "Be empathetic about urgent problems",
                "Reference previous conversation details",
            ],
            restrictions=[
                "Do not ask for sensitive passwords or credentials",
                "Keep conversation focused on IT support",
                "Do not make promises about resolution times",
            ],
        ),
        conversation_limits=ConversationLimits(max_turns=15, max_duration=30, min_confidence=0.75),
    ),
    default_topics=IT_HELPDESK_TOPICS,
    default_schema=IT_HELPDESK_SCHEMA,
    metadata=TemplateMetadata(
        preview_description=(
            "Perfect for IT support portals. Gathers issue category, urgency, detailed "
            "description, and contact preferences."
        ),
        use_cases=[
            "Internal IT support tickets",
            "Help desk ticket intake",
            "Technical support requests",
        ],
        tags=["support", "it", "helpdesk", "tickets"],
        estimated_duration=3,
        author="NetPad",
        updated_at=datetime(2026, 1, 7, tzinfo=UTC),
    ),
)
