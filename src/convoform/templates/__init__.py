"""Registry de templates de conversa (built-in e de organização)."""

from convoform.templates.registry import (
    TemplateRegistry,
    get_template_registry,
    initialize_built_in_templates,
)
from convoform.templates.stored import (
    OrgTemplateLoadResult,
    load_org_templates,
    stored_template_to_conversation_template,
    unload_org_templates,
)
from convoform.templates.types import (
    AppliedTemplate,
    ConversationTemplate,
    TemplateDefaultConfig,
    TemplateMetadata,
    TemplateRegistration,
)

__all__ = [
    "AppliedTemplate",
    "ConversationTemplate",
    "OrgTemplateLoadResult",
    "TemplateDefaultConfig",
    "TemplateMetadata",
    "TemplateRegistration",
    "TemplateRegistry",
    "get_template_registry",
    "initialize_built_in_templates",
    "load_org_templates",
    "stored_template_to_conversation_template",
    "unload_org_templates",
]
