"""Testes do TemplateRegistry e dos templates built-in."""

from __future__ import annotations

import logging

import pytest

from convoform.ai.strategies import DefaultPromptStrategy, ITHelpdeskPromptStrategy
from convoform.domain.enums import TemplateCategory
from convoform.domain.errors import TemplateNotFoundError
from convoform.domain.validation import validate_extraction_schema, validate_topics
from convoform.templates import (
    ConversationTemplate,
    TemplateDefaultConfig,
    TemplateMetadata,
    get_template_registry,
    initialize_built_in_templates,
)
from convoform.templates.builtin import BUILT_IN_TEMPLATE_IDS, BUILT_IN_TEMPLATES


def _template(template_id: str, **overrides) -> ConversationTemplate:
    data = {
        "id": template_id,
        "name": template_id.upper(),
        "prompt_strategy": DefaultPromptStrategy(),
        "default_config": TemplateDefaultConfig(objective=f"objetivo {template_id}"),
    }
    data.update(overrides)
    return ConversationTemplate(**data)


class TestRegistryBasics:
    """Registro, consulta e ordenação."""

    def test_get_all_sorted_by_priority(self, empty_registry) -> None:
        """Maior prioridade primeiro."""
        tpl_a, tpl_b = _template("a"), _template("b")
        empty_registry.register(tpl_a, priority=10)
        empty_registry.register(tpl_b, priority=20)

        assert [t.id for t in empty_registry.get_all()] == ["b", "a"]

    def test_equal_priority_keeps_insertion_order(self, empty_registry) -> None:
        for template_id in ("x", "y", "z"):
            empty_registry.register(_template(template_id), priority=5)
        assert [t.id for t in empty_registry.get_all()] == ["x", "y", "z"]

    def test_overwrite_logs_warning(self, empty_registry, caplog) -> None:
        empty_registry.register(_template("a"))
        with caplog.at_level(logging.WARNING):
            empty_registry.register(_template("a", name="novo"))

        assert empty_registry.get("a").name == "novo"
        assert any(r.message == "template_overwritten" for r in caplog.records)

    def test_disabled_is_hidden(self, empty_registry) -> None:
        """Template desabilitado some de get/has/get_all."""
        empty_registry.register(_template("a"), enabled=False)

        assert empty_registry.get("a") is None
        assert empty_registry.has("a") is False
        assert empty_registry.get_all() == []
        assert [t.id for t in empty_registry.get_all(include_disabled=True)] == ["a"]
        assert empty_registry.count == 1
        assert empty_registry.enabled_count == 0

    def test_filters(self, empty_registry) -> None:
        empty_registry.register(
            _template(
                "s",
                category=TemplateCategory.SUPPORT,
                metadata=TemplateMetadata(tags=["ti"]),
            )
        )
        empty_registry.register(_template("f", category=TemplateCategory.FEEDBACK))

        assert [t.id for t in empty_registry.get_all(category="support")] == ["s"]
        assert [t.id for t in empty_registry.get_all(tags=["ti", "x"])] == ["s"]
        grouped = empty_registry.get_by_category()
        assert set(grouped) == {TemplateCategory.SUPPORT, TemplateCategory.FEEDBACK}

    def test_unregister_and_set_enabled(self, empty_registry) -> None:
        empty_registry.register(_template("a"))
        assert empty_registry.set_enabled("ghost", True) is False
        assert empty_registry.unregister("a") is True
        assert empty_registry.unregister("a") is False

    def test_require_raises_for_missing_or_disabled(self, empty_registry) -> None:
        empty_registry.register(_template("a"))
        assert empty_registry.require("a").id == "a"
        empty_registry.set_enabled("a", False)
        with pytest.raises(TemplateNotFoundError):
            empty_registry.require("a")
        with pytest.raises(TemplateNotFoundError):
            empty_registry.require("ghost")


class TestBuiltInTemplates:
    """Catálogo built-in."""

    def test_initialize_is_idempotent(self, registry) -> None:
        initialize_built_in_templates(registry)
        assert registry.count == len(BUILT_IN_TEMPLATES)

    def test_priority_order(self, registry) -> None:
        assert [t.id for t in registry.get_all()] == [
            "it-helpdesk",
            "customer-feedback",
            "patient-intake",
            "general-intake",
        ]

    @pytest.mark.parametrize("template_id", sorted(BUILT_IN_TEMPLATE_IDS))
    def test_built_ins_are_valid(self, registry, template_id) -> None:
        """Tópicos e schemas built-in passam nas validações de autoria."""
        template = registry.get(template_id)
        assert template.is_built_in is True
        assert validate_topics(template.default_topics) == []
        assert validate_extraction_schema(template.default_schema) == []

    def test_it_helpdesk_strategy(self, registry) -> None:
        template = registry.get("it-helpdesk")
        assert isinstance(template.prompt_strategy, ITHelpdeskPromptStrategy)
        assert template.category == TemplateCategory.SUPPORT

    def test_global_registry_is_cached(self) -> None:
        assert get_template_registry() is get_template_registry()
        assert get_template_registry().has("it-helpdesk")


class TestApplyTemplate:
    """Instanciação de templates em configuração."""

    def test_unknown_template(self, registry) -> None:
        assert registry.apply_template("ghost") is None

    def test_defaults_copied(self, registry) -> None:
        applied = registry.apply_template("it-helpdesk")
        template = registry.get("it-helpdesk")

        assert applied.template_id == "it-helpdesk"
        assert applied.config.template_id == "it-helpdesk"
        assert applied.config.topics == template.default_topics
        assert applied.config.extraction_schema == template.default_schema
        assert applied.has_customizations is False

    def test_apply_twice_is_idempotent(self, registry) -> None:
        """Duas aplicações sem overrides são iguais e não mutam o template."""
        template = registry.get("customer-feedback")
        snapshot = template.default_config.model_dump()

        first = registry.apply_template("customer-feedback")
        second = registry.apply_template("customer-feedback")
        first.config.persona.behaviors.append("mutado")
        first.config.extraction_schema[0].description = "mutado"

        assert second.config.persona.behaviors != first.config.persona.behaviors
        assert template.default_config.model_dump() == snapshot
        assert template.default_schema[0].description != "mutado"
        assert registry.apply_template("customer-feedback").config == second.config

    def test_overrides(self, registry) -> None:
        applied = registry.apply_template(
            "general-intake",
            {"objective": "Cadastro de fornecedores", "context": "ACME"},
        )

        assert applied.has_customizations is True
        assert applied.config.objective == "Cadastro de fornecedores"
        assert applied.config.context == "ACME"
        assert applied.config.template_id == "general-intake"


class TestFork:
    def test_fork_keeps_only_built_ins(self, registry) -> None:
        registry.register(_template("org-a"), priority=1)

        forked = registry.fork()

        assert forked.has("it-helpdesk")
        assert not forked.has("org-a")
        forked.register(_template("org-b"))
        assert not registry.has("org-b")

    def test_clear(self, registry) -> None:
        registry.clear()
        assert registry.count == 0
        assert registry.initialized is False
