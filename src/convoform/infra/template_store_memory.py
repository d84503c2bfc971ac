"""TemplateStore em memória (apenas dev/testes)."""

from __future__ import annotations

import logging
import threading

from convoform.domain.enums import TemplateStatus
from convoform.domain.protocols.template_store import TemplateStoreProtocol
from convoform.domain.stored_template import StoredTemplate
from convoform.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class InMemoryTemplateStore(TemplateStoreProtocol):
    """Templates de organização indexados por (org_id, template_id)."""

    def __init__(self) -> None:
        self._templates: dict[tuple[str, str], StoredTemplate] = {}
        self._lock = threading.Lock()

    def add(self, org_id: str, template: StoredTemplate) -> None:
        """Insere ou substitui um template da organização."""
        with self._lock:
            self._templates[(org_id, template.template_id)] = template
        logger.debug(
            "stored_template_saved",
            extra={"template_id": template.template_id, "status": template.status},
        )

    def remove(self, org_id: str, template_id: str) -> bool:
        with self._lock:
            return self._templates.pop((org_id, template_id), None) is not None

    def get_active_templates(self, org_id: str) -> list[StoredTemplate]:
        """Habilitados e publicados, por prioridade desc."""
        with self._lock:
            candidates = [
                t for (t_org, _), t in self._templates.items() if t_org == org_id
            ]

        active = [
            t
            for t in candidates
            if t.enabled and t.status == TemplateStatus.PUBLISHED
        ]
        active.sort(key=lambda t: t.priority, reverse=True)
        return active
