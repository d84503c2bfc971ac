"""Mapeamento de dados extraídos para os campos do formulário de destino.

Estratégias determinísticas, nesta ordem de preferência:
1. exact: nome == path
2. case-insensitive: nome.lower() == path.lower()
3. case-conversion: camelCase/snake_case do nome == path
4. label-match: nome == label (ignorando caixa e espaços)
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from convoform.domain.models import ExtractionField, FormField

NUMBER_FIELD_TYPES = frozenset({"number", "rating", "slider", "scale", "nps", "currency"})
BOOLEAN_FIELD_TYPES = frozenset({"checkbox", "switch", "yes_no", "boolean"})
LIST_FIELD_TYPES = frozenset({"multiple_choice", "checkbox_group", "tags", "array"})

_MISSING = object()


class MatchStrategy(StrEnum):
    """Estratégia que casou o campo extraído com o campo do formulário."""

    EXACT = "exact"
    CASE_INSENSITIVE = "case-insensitive"
    CASE_CONVERSION = "case-conversion"
    LABEL_MATCH = "label-match"


class MappingReportEntry(BaseModel):
    """Linha do relatório de mapeamento (auditoria)."""

    extraction_field: str
    form_field_path: str | None = None
    matched: bool = False
    strategy: MatchStrategy | None = None


@dataclass(slots=True)
class MappingResult:
    """Dados mapeados por path, extras sem destino e relatório."""

    mapped_data: dict[str, Any] = field(default_factory=dict)
    unmapped_fields: dict[str, Any] = field(default_factory=dict)
    mapping_report: list[MappingReportEntry] = field(default_factory=list)


@dataclass(slots=True)
class MappedDataValidation:
    """Warnings de validação e paths obrigatórios ausentes."""

    warnings: list[str] = field(default_factory=list)
    missing_required_fields: list[str] = field(default_factory=list)


def to_camel_case(name: str) -> str:
    """issue_category / issue-category / Issue Category → issueCategory."""
    words = [w for w in re.split(r"[\s_\-]+", name.strip()) if w]
    if not words:
        return ""
    head = words[0][:1].lower() + words[0][1:]
    return head + "".join(w[:1].upper() + w[1:] for w in words[1:])


def to_snake_case(name: str) -> str:
    """issueCategory / issue-category → issue_category."""
    snake = re.sub(r"([A-Z])", r"_\1", name.strip()).lower()
    snake = re.sub(r"[\-\s]+", "_", snake)
    return re.sub(r"_+", "_", snake).lstrip("_")


def _squash(text: str) -> str:
    return re.sub(r"\s+", "", text).lower()


def find_matching_form_field(
    name: str, form_fields: Sequence[FormField]
) -> tuple[FormField, MatchStrategy] | None:
    """Primeiro campo do formulário que casa com `name` (ou None)."""
    for form_field in form_fields:
        if form_field.path == name:
            return form_field, MatchStrategy.EXACT

    lowered = name.lower()
    for form_field in form_fields:
        if form_field.path.lower() == lowered:
            return form_field, MatchStrategy.CASE_INSENSITIVE

    conversions = {to_camel_case(name), to_snake_case(name)}
    for form_field in form_fields:
        if form_field.path in conversions:
            return form_field, MatchStrategy.CASE_CONVERSION

    squashed = _squash(name)
    for form_field in form_fields:
        label = form_field.label or ""
        if label and (label.lower() == lowered or _squash(label) == squashed):
            return form_field, MatchStrategy.LABEL_MATCH

    return None


def set_nested_value(target: dict[str, Any], path: str, value: Any) -> None:
    """Escreve `value` em `target` seguindo o path com pontos (a.b.c)."""
    *parents, last = path.split(".")
    node = target
    for key in parents:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[last] = value


def get_nested_value(data: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Lê um valor por path com pontos; ausente → default."""
    node: Any = data
    for key in path.split("."):
        if not isinstance(node, Mapping) or key not in node:
            return default
        node = node[key]
    return node


def map_extracted_data_to_form_fields(
    extracted: Mapping[str, Any],
    schema: Iterable[ExtractionField],
    form_fields: Sequence[FormField],
) -> MappingResult:
    """Mapeia extrações para paths do formulário.

    Itera primeiro os campos do schema (na ordem do schema) e depois as
    chaves extraídas fora do schema. Valores None são ignorados.
    """
    result = MappingResult()
    schema_names = list(dict.fromkeys(f.field for f in schema))
    known = set(schema_names)
    extra_names = [k for k in extracted if k not in known]

    for name in [*schema_names, *extra_names]:
        value = extracted.get(name)
        if value is None:
            continue

        match = find_matching_form_field(name, form_fields)
        if match is None:
            result.unmapped_fields[name] = value
            result.mapping_report.append(MappingReportEntry(extraction_field=name))
            continue

        form_field, strategy = match
        set_nested_value(result.mapped_data, form_field.path, value)
        result.mapping_report.append(
            MappingReportEntry(
                extraction_field=name,
                form_field_path=form_field.path,
                matched=True,
                strategy=strategy,
            )
        )

    return result


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_rules(form_field: FormField, value: Any, label: str) -> list[str]:
    warnings: list[str] = []
    field_type = (form_field.type or "").lower()

    if field_type in NUMBER_FIELD_TYPES and not _is_number(value):
        warnings.append(f"Campo '{label}' deve ser numérico")
        return warnings
    if field_type in BOOLEAN_FIELD_TYPES and not isinstance(value, bool):
        warnings.append(f"Campo '{label}' deve ser booleano")
        return warnings
    if field_type in LIST_FIELD_TYPES and not isinstance(value, (list, tuple)):
        warnings.append(f"Campo '{label}' deve ser uma lista")
        return warnings

    rules = form_field.validation
    if rules is None:
        return warnings

    if _is_number(value):
        if rules.min is not None and value < rules.min:
            warnings.append(f"Campo '{label}' deve ser >= {rules.min:g}")
        if rules.max is not None and value > rules.max:
            warnings.append(f"Campo '{label}' deve ser <= {rules.max:g}")

    if isinstance(value, str):
        if rules.min_length is not None and len(value) < rules.min_length:
            warnings.append(f"Campo '{label}' deve ter ao menos {rules.min_length} caracteres")
        if rules.max_length is not None and len(value) > rules.max_length:
            warnings.append(f"Campo '{label}' deve ter no máximo {rules.max_length} caracteres")
        if rules.pattern:
            try:
                if re.search(rules.pattern, value) is None:
                    warnings.append(f"Campo '{label}' não corresponde ao formato esperado")
            except re.error:
                warnings.append(f"Campo '{label}' tem regex de validação inválida")

    return warnings


def validate_mapped_data(
    mapped_data: Mapping[str, Any], form_fields: Sequence[FormField]
) -> MappedDataValidation:
    """Valida os dados mapeados contra as regras dos campos incluídos.

    Obrigatório ausente (None, ausente ou string vazia) entra em
    missing_required_fields; tipo, limites e regex geram warnings.
    """
    result = MappedDataValidation()

    for form_field in form_fields:
        if not form_field.included:
            continue
        label = form_field.label or form_field.path
        value = get_nested_value(mapped_data, form_field.path, _MISSING)

        if value is _MISSING or value is None or value == "":
            if form_field.required:
                result.missing_required_fields.append(form_field.path)
                result.warnings.append(f"Campo obrigatório '{label}' ausente")
            continue

        result.warnings.extend(_check_rules(form_field, value, label))

    return result
