"""Templates de organização: conversão do documento armazenado e ciclo de vida.

- `stored_template_to_conversation_template`: documento → ConversationTemplate
- `load_org_templates`: carrega templates ativos da organização no registry
  (built-in com o mesmo id sempre vence; o template é reportado como pulado)
- `unload_org_templates`: remove tudo que não é built-in
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from convoform.ai.strategies.factory import create_prompt_strategy
from convoform.domain.protocols.template_store import TemplateStoreProtocol
from convoform.domain.stored_template import StoredTemplate
from convoform.observability.logging import get_logger
from convoform.templates.registry import TemplateRegistry
from convoform.templates.types import (
    ConversationTemplate,
    TemplateDefaultConfig,
    TemplateMetadata,
)

logger: logging.Logger = get_logger(__name__)


@dataclass(slots=True)
class OrgTemplateLoadResult:
    """Resultado de `load_org_templates`."""

    loaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def loaded_count(self) -> int:
        return len(self.loaded)


def stored_template_to_conversation_template(stored: StoredTemplate) -> ConversationTemplate:
    """Converte o documento armazenado em template executável (nunca built-in)."""
    return ConversationTemplate(
        id=stored.template_id,
        name=stored.name,
        description=stored.description,
        category=stored.category,
        icon=stored.icon,
        version=stored.version,
        is_built_in=False,
        prompt_strategy=create_prompt_strategy(stored.prompt_config),
        default_config=TemplateDefaultConfig(
            objective=stored.default_config.objective,
            context=stored.default_config.context,
            persona=stored.default_config.persona.model_copy(deep=True),
            conversation_limits=stored.default_config.conversation_limits.model_copy(deep=True),
        ),
        default_topics=[t.model_copy(deep=True) for t in stored.topics],
        default_schema=[f.model_copy(deep=True) for f in stored.extraction_schema],
        metadata=TemplateMetadata(
            preview_description=stored.metadata.preview_description,
            use_cases=list(stored.metadata.use_cases),
            tags=list(stored.metadata.tags),
            estimated_duration=stored.metadata.estimated_duration,
            author=stored.metadata.author,
            updated_at=stored.updated_at,
        ),
    )


def load_org_templates(
    registry: TemplateRegistry,
    org_id: str,
    store: TemplateStoreProtocol,
) -> OrgTemplateLoadResult:
    """Carrega os templates ativos da organização no registry.

    Falha do store não propaga: o resultado traz `error` e nenhum template
    é carregado.
    """
    result = OrgTemplateLoadResult()

    try:
        stored_templates = store.get_active_templates(org_id)
    except Exception as exc:  # noqa: BLE001
        logger.error(
            "org_templates_load_failed",
            extra={"org_id": org_id, "error_type": type(exc).__name__},
        )
        result.error = type(exc).__name__
        return result

    with registry.lock:
        for stored in stored_templates:
            registration = registry.get_registration(stored.template_id)
            if registration is not None and registration.template.is_built_in:
                logger.info(
                    "org_template_skipped_built_in_exists",
                    extra={"org_id": org_id, "template_id": stored.template_id},
                )
                result.skipped.append(stored.template_id)
                continue

            registry.register(
                stored_template_to_conversation_template(stored),
                stored.priority,
                stored.enabled,
            )
            result.loaded.append(stored.template_id)

    if result.loaded:
        logger.info(
            "org_templates_loaded",
            extra={
                "org_id": org_id,
                "loaded_count": len(result.loaded),
                "skipped_count": len(result.skipped),
            },
        )
    return result


def unload_org_templates(registry: TemplateRegistry) -> list[str]:
    """Remove todos os templates que não são built-in; retorna os ids removidos."""
    removed: list[str] = []
    with registry.lock:
        for template_id in registry.template_ids():
            registration = registry.get_registration(template_id)
            if registration is not None and not registration.template.is_built_in:
                registry.unregister(template_id)
                removed.append(template_id)

    if removed:
        logger.info("org_templates_unloaded", extra={"removed_count": len(removed)})
    return removed
