"""Protocolo de domínio para leitura de templates de organização."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from convoform.domain.stored_template import StoredTemplate


class TemplateStoreProtocol(ABC):
    """Contrato de leitura consumido por `load_org_templates`."""

    @abstractmethod
    def get_active_templates(self, org_id: str) -> list[StoredTemplate]:
        """Retorna templates habilitados e publicados, por prioridade desc."""
