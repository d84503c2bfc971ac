"""Testes do InMemoryTemplateStore."""

from __future__ import annotations

from convoform.domain.enums import TemplateStatus
from convoform.domain.stored_template import StoredTemplate, StoredTemplateDefaultConfig
from convoform.infra.template_store_memory import InMemoryTemplateStore


def _stored(template_id: str, **overrides) -> StoredTemplate:
    data = {
        "template_id": template_id,
        "name": template_id,
        "status": TemplateStatus.PUBLISHED,
        "default_config": StoredTemplateDefaultConfig(objective="x"),
    }
    data.update(overrides)
    return StoredTemplate(**data)


class TestInMemoryTemplateStore:
    """Apenas habilitados e publicados, por prioridade desc."""

    def test_filters_and_sorts(self) -> None:
        store = InMemoryTemplateStore()
        store.add("org", _stored("low", priority=1))
        store.add("org", _stored("high", priority=9))
        store.add("org", _stored("disabled", enabled=False))
        store.add("org", _stored("archived", status=TemplateStatus.ARCHIVED))
        store.add("other", _stored("foreign"))

        assert [t.template_id for t in store.get_active_templates("org")] == ["high", "low"]

    def test_add_replaces(self) -> None:
        store = InMemoryTemplateStore()
        store.add("org", _stored("a", name="v1"))
        store.add("org", _stored("a", name="v2"))

        assert [t.name for t in store.get_active_templates("org")] == ["v2"]

    def test_remove(self) -> None:
        store = InMemoryTemplateStore()
        store.add("org", _stored("a"))
        assert store.remove("org", "a") is True
        assert store.remove("org", "a") is False
        assert store.get_active_templates("org") == []
