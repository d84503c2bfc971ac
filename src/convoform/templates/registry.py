"""Registry de templates de conversa.

Responsabilidades:
- Registro/consulta de templates por id (built-in e de organização)
- Ordenação por prioridade (desc, estável pela ordem de inserção)
- Instanciar um template em ConversationalFormConfig (apply_template)

Mutações são serializadas por RLock. Para hosts multi-tenant, prefira
`fork()` por requisição: a cópia compartilha apenas os built-ins.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any

from convoform.domain.enums import TemplateCategory
from convoform.domain.errors import TemplateNotFoundError
from convoform.domain.models import ConversationalFormConfig
from convoform.observability.logging import get_logger
from convoform.templates.builtin import BUILT_IN_TEMPLATES
from convoform.templates.types import (
    AppliedTemplate,
    ConversationTemplate,
    TemplateRegistration,
)

logger: logging.Logger = get_logger(__name__)


class TemplateRegistry:
    """Tabela de templates indexada por id."""

    def __init__(self) -> None:
        self._templates: dict[str, TemplateRegistration] = {}
        self._lock = threading.RLock()
        self.initialized = False

    @property
    def lock(self) -> threading.RLock:
        """Lock reentrante que serializa mutações (load/unload em bloco)."""
        return self._lock

    def register(
        self,
        template: ConversationTemplate,
        priority: int = 0,
        enabled: bool = True,
    ) -> None:
        """Registra (ou sobrescreve, com warning) um template."""
        with self._lock:
            if template.id in self._templates:
                logger.warning(
                    "template_overwritten",
                    extra={"template_id": template.id},
                )
            self._templates[template.id] = TemplateRegistration(
                template=template, priority=priority, enabled=enabled
            )

    def unregister(self, template_id: str) -> bool:
        with self._lock:
            return self._templates.pop(template_id, None) is not None

    def get(self, template_id: str) -> ConversationTemplate | None:
        """Template habilitado com o id (desabilitado/inexistente → None)."""
        with self._lock:
            registration = self._templates.get(template_id)
        if registration is None or not registration.enabled:
            return None
        return registration.template

    def require(self, template_id: str) -> ConversationTemplate:
        """Como `get`, mas lança TemplateNotFoundError."""
        template = self.get(template_id)
        if template is None:
            raise TemplateNotFoundError(f"Template '{template_id}' não encontrado")
        return template

    def get_registration(self, template_id: str) -> TemplateRegistration | None:
        """Registro bruto, inclusive de templates desabilitados."""
        with self._lock:
            return self._templates.get(template_id)

    def has(self, template_id: str) -> bool:
        return self.get(template_id) is not None

    def get_all(
        self,
        category: TemplateCategory | str | None = None,
        tags: Iterable[str] | None = None,
        built_in_only: bool = False,
        include_disabled: bool = False,
    ) -> list[ConversationTemplate]:
        """Templates filtrados, ordenados por prioridade desc.

        Filtros:
        - category: categoria exata
        - tags: ao menos uma tag em comum
        - built_in_only: apenas built-ins
        - include_disabled: inclui desabilitados
        """
        wanted_tags = set(tags or ())
        with self._lock:
            registrations = list(self._templates.values())

        results: list[TemplateRegistration] = []
        for registration in registrations:
            template = registration.template
            if not registration.enabled and not include_disabled:
                continue
            if category is not None and template.category != category:
                continue
            if built_in_only and not template.is_built_in:
                continue
            if wanted_tags and not wanted_tags.intersection(template.metadata.tags):
                continue
            results.append(registration)

        results.sort(key=lambda r: r.priority, reverse=True)
        return [r.template for r in results]

    def get_by_category(
        self, **options: Any
    ) -> dict[TemplateCategory, list[ConversationTemplate]]:
        """Templates agrupados por categoria (mesmos filtros de get_all)."""
        grouped: dict[TemplateCategory, list[ConversationTemplate]] = {}
        for template in self.get_all(**options):
            grouped.setdefault(template.category, []).append(template)
        return grouped

    def apply_template(
        self,
        template_id: str,
        overrides: Mapping[str, Any] | None = None,
    ) -> AppliedTemplate | None:
        """Instancia o template em uma ConversationalFormConfig.

        Os defaults do template são copiados em profundidade; overrides são
        mesclados de forma rasa (chave a chave) por cima. Template ausente
        ou desabilitado → None.
        """
        template = self.get(template_id)
        if template is None:
            return None

        defaults = template.default_config
        config = ConversationalFormConfig(
            template_id=template.id,
            objective=defaults.objective,
            context=defaults.context,
            persona=defaults.persona.model_copy(deep=True),
            conversation_limits=defaults.conversation_limits.model_copy(deep=True),
            topics=[t.model_copy(deep=True) for t in template.default_topics],
            extraction_schema=[f.model_copy(deep=True) for f in template.default_schema],
        )

        has_customizations = bool(overrides)
        if overrides:
            config = ConversationalFormConfig.model_validate(
                {**config.model_dump(), **copy.deepcopy(dict(overrides))}
            )

        return AppliedTemplate(
            template_id=template.id,
            config=config,
            has_customizations=has_customizations,
        )

    def set_enabled(self, template_id: str, enabled: bool) -> bool:
        with self._lock:
            registration = self._templates.get(template_id)
            if registration is None:
                return False
            registration.enabled = enabled
            return True

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._templates)

    @property
    def enabled_count(self) -> int:
        with self._lock:
            return sum(1 for r in self._templates.values() if r.enabled)

    def template_ids(self) -> list[str]:
        with self._lock:
            return list(self._templates)

    def clear(self) -> None:
        """Remove tudo e reseta a flag de inicialização (uso em testes)."""
        with self._lock:
            self._templates.clear()
            self.initialized = False

    def fork(self) -> TemplateRegistry:
        """Nova instância contendo apenas os registros built-in."""
        forked = TemplateRegistry()
        with self._lock:
            for template_id, registration in self._templates.items():
                if registration.template.is_built_in:
                    forked._templates[template_id] = TemplateRegistration(
                        template=registration.template,
                        priority=registration.priority,
                        enabled=registration.enabled,
                    )
            forked.initialized = self.initialized
        return forked


def initialize_built_in_templates(registry: TemplateRegistry) -> None:
    """Registra os templates built-in uma única vez (idempotente)."""
    with registry.lock:
        if registry.initialized:
            return
        for template, priority in BUILT_IN_TEMPLATES:
            registry.register(template, priority)
        registry.initialized = True

    logger.info(
        "built_in_templates_registered",
        extra={"template_count": len(BUILT_IN_TEMPLATES)},
    )


@lru_cache(maxsize=1)
def get_template_registry() -> TemplateRegistry:
    """Registry global do processo, já com os built-ins."""
    registry = TemplateRegistry()
    initialize_built_in_templates(registry)
    return registry
