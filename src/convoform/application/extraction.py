"""Fronteira de extração estruturada (saída do LLM).

A qualidade da extração pertence ao LLM; aqui ficam apenas funções puras
para validar o resultado contra o schema, calcular confiança agregada e
mesclar extrações parciais com a extração final.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from convoform.domain.enums import FieldType
from convoform.domain.models import ExtractionField

LOW_CONFIDENCE_THRESHOLD = 0.7
PARTIAL_EXTRACTION_CONFIDENCE = 0.5
REQUIRED_FIELD_WEIGHT = 2
OPTIONAL_FIELD_WEIGHT = 1


class ExtractedData(BaseModel):
    """Extração estruturada retornada pelo LLM."""

    data: dict[str, Any] = Field(default_factory=dict)
    confidence: dict[str, float] = Field(default_factory=dict)
    overall_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    missing_fields: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


@dataclass(slots=True)
class ExtractionValidation:
    """Resultado de `validate_extracted_data`."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _type_errors(spec: ExtractionField, value: Any) -> list[str]:
    name = spec.field
    rules = spec.validation

    if spec.type == FieldType.STRING:
        if not isinstance(value, str):
            return [f"Campo '{name}' deve ser texto"]
        errors: list[str] = []
        if rules is not None:
            if rules.min_length is not None and len(value) < rules.min_length:
                errors.append(f"Campo '{name}' deve ter ao menos {rules.min_length} caracteres")
            if rules.max_length is not None and len(value) > rules.max_length:
                errors.append(f"Campo '{name}' deve ter no máximo {rules.max_length} caracteres")
            if rules.pattern:
                try:
                    if re.search(rules.pattern, value) is None:
                        errors.append(f"Campo '{name}' não corresponde ao formato esperado")
                except re.error:
                    errors.append(f"Campo '{name}' tem regex de validação inválida")
        return errors

    if spec.type == FieldType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return [f"Campo '{name}' deve ser numérico"]
        errors = []
        if rules is not None:
            if rules.min is not None and value < rules.min:
                errors.append(f"Campo '{name}' deve ser >= {rules.min:g}")
            if rules.max is not None and value > rules.max:
                errors.append(f"Campo '{name}' deve ser <= {rules.max:g}")
        return errors

    if spec.type == FieldType.BOOLEAN and not isinstance(value, bool):
        return [f"Campo '{name}' deve ser booleano"]

    if spec.type == FieldType.ENUM:
        if not spec.options:
            return [f"Campo enum '{name}' sem opções definidas"]
        if value not in spec.options:
            return [f"Campo '{name}' deve ser um de: {', '.join(spec.options)}"]

    if spec.type == FieldType.ARRAY and not isinstance(value, (list, tuple)):
        return [f"Campo '{name}' deve ser uma lista"]

    if spec.type == FieldType.OBJECT and not isinstance(value, Mapping):
        return [f"Campo '{name}' deve ser um objeto"]

    return []


def validate_extracted_data(
    extracted: ExtractedData, schema: Iterable[ExtractionField]
) -> ExtractionValidation:
    """Valida uma extração contra o schema (obrigatórios, tipos, regras).

    Campos com confiança abaixo de 70% geram warning, não erro.
    """
    errors: list[str] = []
    warnings: list[str] = []
    fields = list(schema)

    for spec in fields:
        value = extracted.data.get(spec.field)
        if spec.required and (value is None or value == ""):
            errors.append(f"Campo obrigatório '{spec.field}' ausente")

    for spec in fields:
        value = extracted.data.get(spec.field)
        if value is None:
            continue
        errors.extend(_type_errors(spec, value))

        confidence = extracted.confidence.get(spec.field)
        if confidence is not None and confidence < LOW_CONFIDENCE_THRESHOLD:
            warnings.append(
                f"Baixa confiança ({round(confidence * 100)}%) no campo '{spec.field}'"
            )

    return ExtractionValidation(
        is_valid=not errors,
        errors=errors,
        warnings=[*warnings, *extracted.warnings],
    )


def calculate_overall_confidence(
    field_confidences: Mapping[str, float], schema: Sequence[ExtractionField]
) -> float:
    """Média ponderada das confianças (obrigatórios peso 2, opcionais peso 1)."""
    if not field_confidences:
        return 0.0

    weighted = 0.0
    total = 0
    for spec in schema:
        confidence = field_confidences.get(spec.field)
        if confidence is None:
            continue
        weight = REQUIRED_FIELD_WEIGHT if spec.required else OPTIONAL_FIELD_WEIGHT
        weighted += confidence * weight
        total += weight

    return weighted / total if total else 0.0


def merge_extractions(
    partial_extractions: Mapping[str, Any], final: ExtractedData
) -> ExtractedData:
    """Mescla parciais da conversa com a extração final.

    Valores da extração final prevalecem; parciais não presentes na final
    são mantidos com confiança reduzida (0.5).
    """
    merged: dict[str, Any] = dict(partial_extractions)
    confidences: dict[str, float] = {}

    for name, value in final.data.items():
        merged[name] = value
        confidences[name] = final.confidence.get(name) or PARTIAL_EXTRACTION_CONFIDENCE

    for name in partial_extractions:
        if name not in final.data:
            confidences[name] = PARTIAL_EXTRACTION_CONFIDENCE

    overall = sum(confidences.values()) / len(confidences) if confidences else 0.0
    return ExtractedData(
        data=merged,
        confidence=confidences,
        overall_confidence=overall,
        missing_fields=list(final.missing_fields),
        warnings=list(final.warnings),
    )
