"""Template built-in: triagem de pacientes (healthcare)."""

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

PATIENT_INTAKE_TOPICS: list[ConversationTopic] = [
    ConversationTopic(
        id="chief-complaint",
        name="Chief Complaint",
        description="Understand the main reason for the visit - primary symptoms or concerns",
        priority=TopicPriority.REQUIRED,
        depth=TopicDepth.DEEP,
        extraction_field="chiefComplaint",
    ),
    ConversationTopic(
        id="symptom-details",
        name="Symptom Details",
        description=(
            "Get detailed information about symptoms: duration, severity, triggers, "
            "what makes it better or worse"
        ),
        priority=TopicPriority.REQUIRED,
        depth=TopicDepth.DEEP,
        extraction_field="symptomDetails",
    ),
    ConversationTopic(
        id="medical-history",
        name="Relevant Medical History",
        description="Any relevant medical history, current medications, or allergies",
        priority=TopicPriority.IMPORTANT,
        depth=TopicDepth.MODERATE,
        extraction_field="medicalHistory",
    ),
    ConversationTopic(
        id="urgency-assessment",
        name="Urgency Assessment",
        description="Assess the urgency of the situation to prioritize care appropriately",
        priority=TopicPriority.REQUIRED,
        depth=TopicDepth.SURFACE,
        extraction_field="urgencyLevel",
    ),
    ConversationTopic(
        id="appointment-preferences",
        name="Appointment Preferences",
        description="Preferred appointment times and any scheduling constraints",
        priority=TopicPriority.OPTIONAL,
        depth=TopicDepth.SURFACE,
        extraction_field="appointmentPreferences",
    ),
]

PATIENT_INTAKE_SCHEMA: list[ExtractionField] = [
    ExtractionField(
        field="chiefComplaint",
        type=FieldType.STRING,
        required=True,
        description="Primary reason for the visit",
        validation=ExtractionFieldValidation(min_length=10),
        topic_id="chief-complaint",
    ),
    ExtractionField(
        field="symptomDetails",
        type=FieldType.STRING,
        required=True,
        description="Detailed description of symptoms",
        validation=ExtractionFieldValidation(min_length=30),
        topic_id="symptom-details",
    ),
    ExtractionField(
        field="symptomDuration",
        type=FieldType.STRING,
        description="How long symptoms have been present",
    ),
    ExtractionField(
        field="symptomSeverity",
        type=FieldType.ENUM,
        description="Severity of symptoms",
        options=["mild", "moderate", "severe"],
    ),
    ExtractionField(
        field="medicalHistory",
        type=FieldType.STRING,
        description="Relevant medical history",
        topic_id="medical-history",
    ),
    ExtractionField(
        field="currentMedications",
        type=FieldType.ARRAY,
        description="List of current medications",
    ),
    ExtractionField(field="allergies", type=FieldType.ARRAY, description="Known allergies"),
    ExtractionField(
        field="urgencyLevel",
        type=FieldType.ENUM,
        required=True,
        description="How urgent the situation appears",
        options=["routine", "soon", "urgent", "emergency"],
        topic_id="urgency-assessment",
    ),
    ExtractionField(
        field="appointmentPreferences",
        type=FieldType.STRING,
        description="Preferred appointment times",
        topic_id="appointment-preferences",
    ),
]

PATIENT_INTAKE_TEMPLATE = ConversationTemplate(
    id="patient-intake",
    name="Patient Intake",
    description="Gather patient information for healthcare appointments",
    category=TemplateCategory.INTAKE,
    icon="MedicalServices",
    is_built_in=True,
    prompt_strategy=DefaultPromptStrategy(),
    default_config=TemplateDefaultConfig(
        objective=(
            "Gather preliminary patient information to help healthcare providers "
            "prepare for the appointment and assess urgency."
        ),
        context=(
            "This is a healthcare patient intake conversation. Be empathetic, thorough, "
            "and respectful of patient privacy."
        ),
        persona=ConversationPersona(
            style=PersonaStyle.EMPATHETIC,
            tone="caring and professional",
            behaviors=[
                "Show empathy for health concerns",
                "Ask clarifying questions about symptoms",
                "Be thorough but not overwhelming",
                "Reassure patients while gathering information",
            ],
            restrictions=[
                "Do not provide medical advice or diagnoses",
                "Do not ask for sensitive information beyond what is needed",
                "Do not minimize patient concerns",
                "Recommend emergency services for severe symptoms",
            ],
        ),
        conversation_limits=ConversationLimits(max_turns=15, max_duration=25, min_confidence=0.8),
    ),
    default_topics=PATIENT_INTAKE_TOPICS,
    default_schema=PATIENT_INTAKE_SCHEMA,
    metadata=TemplateMetadata(
        preview_description=(
            "Ideal for healthcare settings. Gathers chief complaint, symptom details, "
            "medical history, and urgency assessment."
        ),
        use_cases=[
            "Medical appointment intake",
            "Telehealth pre-screening",
            "Clinic check-in",
            "Healthcare surveys",
        ],
        tags=["healthcare", "medical", "intake", "patient"],
        estimated_duration=5,
        author="NetPad",
        updated_at=datetime(2026, 1, 7, tzinfo=UTC),
    ),
)
