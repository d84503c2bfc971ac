"""Interpolação de variáveis estilo mustache ({{variable}}) em templates de prompt."""

from __future__ import annotations

import re
from collections.abc import Mapping

_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z_][\w.-]*)\s*\}\}")


def interpolate(template: str, variables: Mapping[str, str]) -> str:
    """Substitui {{nome}} pelo valor correspondente.

    Placeholders sem variável conhecida permanecem intactos. A substituição
    é feita em uma única passada: valores que contenham {{...}} não são
    reinterpretados.
    """

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        return str(variables[key])

    return _PLACEHOLDER.sub(_replace, template)


def find_placeholders(template: str) -> list[str]:
    """Lista os nomes de variáveis referenciados no template (ordem de aparição)."""

    seen: list[str] = []
    for match in _PLACEHOLDER.finditer(template):
        name = match.group(1)
        if name not in seen:
            seen.append(name)
    return seen
