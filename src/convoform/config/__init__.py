"""Configurações centralizadas do convoform.

Este módulo exporta:
- Settings: classe de configuração via variáveis de ambiente
- get_settings: função cacheada para obter instância única
- Thresholds padrão de cobertura por profundidade

Uso típico:
    from convoform.config import get_settings
"""

from convoform.config.settings import (
    DEFAULT_DEEP_THRESHOLD,
    DEFAULT_MODERATE_THRESHOLD,
    DEFAULT_SURFACE_THRESHOLD,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_SURFACE_THRESHOLD",
    "DEFAULT_MODERATE_THRESHOLD",
    "DEFAULT_DEEP_THRESHOLD",
]
