"""Configuração de logging estruturado (JSON)."""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

from convoform.observability.context import get_conversation_id


class ConversationIdFilter(logging.Filter):
    """Insere conversation_id e service no record de log.

    Importante: nunca adicionar conteúdo de mensagens (PII) nos logs.
    """

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        # conversation_id explícito em `extra` tem precedência sobre o contexto.
        existing = getattr(record, "conversation_id", None)
        record.conversation_id = existing if existing else get_conversation_id()
        record.service = self._service_name
        return True


def configure_logging(level: str, service_name: str, log_format: str = "json") -> None:
    """Configura logging com campos padrão do serviço (json | text)."""

    if log_format == "text":
        formatter: logging.Formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(conversation_id)s] %(message)s"
        )
    else:
        formatter = JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(conversation_id)s %(service)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ConversationIdFilter(service_name))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger simples; o filtro injeta service/conversation_id."""

    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    **fields: object,
) -> None:
    """Log observável de fallback usado (sem PII).

    Args:
        logger: Logger instance
        component: Nome do componente (ex: "prompt_strategy", "processor")
        reason: Razão do fallback, sem PII (ex: "template_not_found")
        fields: Campos adicionais seguros (ids, contagens)

    Exemplo:
        log_fallback(logger, "prompt_strategy", reason="template_not_found", template_id="x")
    """
    extra: dict[str, object] = {
        "fallback_used": True,
        "component": component,
    }
    if reason:
        extra["reason"] = reason
    extra.update(fields)

    logger.info(
        f"Fallback applied for {component}",
        extra=extra,
    )
