"""Configurações do motor conversacional via variáveis de ambiente.

Todas as configurações são carregadas de env vars. O motor não faz I/O;
aqui ficam apenas limites padrão, thresholds e flags de observabilidade.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# -----------------------------------------------------------------------------
# Thresholds de cobertura por profundidade-alvo (surface < moderate < deep)
# -----------------------------------------------------------------------------
DEFAULT_SURFACE_THRESHOLD: float = 0.3
DEFAULT_MODERATE_THRESHOLD: float = 0.5
DEFAULT_DEEP_THRESHOLD: float = 0.7


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    # Aplicação
    service_name: str = "convoform"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"  # json | text

    # Limites padrão de conversa (usados quando a config não define)
    default_max_turns: int = 15
    default_max_duration_minutes: int = 30
    default_min_confidence: float = 0.7

    # Cobertura de tópicos
    coverage_surface_threshold: float = DEFAULT_SURFACE_THRESHOLD
    coverage_moderate_threshold: float = DEFAULT_MODERATE_THRESHOLD
    coverage_deep_threshold: float = DEFAULT_DEEP_THRESHOLD

    # Prompt de contexto: quantidade de mensagens recentes incluídas
    context_history_window: int = 10

    # Processor (metadados da submissão)
    processor_include_transcript: bool = True
    processor_include_mapping_report: bool = True

    # Persistência de rascunhos (limpeza de conversas abandonadas)
    abandoned_conversation_hours: int = 24

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    def coverage_thresholds(self) -> dict[str, float]:
        """Thresholds por profundidade-alvo (chave = valor de TopicDepth)."""
        return {
            "surface": self.coverage_surface_threshold,
            "moderate": self.coverage_moderate_threshold,
            "deep": self.coverage_deep_threshold,
        }

    def validate_coverage_config(self) -> list[str]:
        """Valida thresholds de cobertura.

        Retorna lista de erros (vazia = OK).
        """
        errors: list[str] = []
        thresholds = [
            self.coverage_surface_threshold,
            self.coverage_moderate_threshold,
            self.coverage_deep_threshold,
        ]
        if any(not 0.0 < t <= 1.0 for t in thresholds):
            errors.append("COVERAGE_*_THRESHOLD deve estar no intervalo (0, 1]")
        if not (
            self.coverage_surface_threshold
            <= self.coverage_moderate_threshold
            <= self.coverage_deep_threshold
        ):
            errors.append("Thresholds devem respeitar surface <= moderate <= deep")
        return errors

    def validate_limits_config(self) -> list[str]:
        """Valida limites padrão de conversa."""
        errors: list[str] = []
        if self.default_max_turns < 1:
            errors.append("DEFAULT_MAX_TURNS deve ser >= 1")
        if self.default_max_duration_minutes <= 0:
            errors.append("DEFAULT_MAX_DURATION_MINUTES deve ser > 0")
        if not 0.0 <= self.default_min_confidence <= 1.0:
            errors.append("DEFAULT_MIN_CONFIDENCE deve estar entre 0 e 1")
        if self.context_history_window < 1:
            errors.append("CONTEXT_HISTORY_WINDOW deve ser >= 1")
        return errors

    def validate_all(self) -> list[str]:
        """Agrega todas as validações."""
        return self.validate_coverage_config() + self.validate_limits_config()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings.

    A cache garante que mesmo múltiplas injeções não criam novos objetos.
    """
    return Settings()
