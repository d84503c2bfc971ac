"""Contexto de observabilidade por conversa."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_conversation_id: ContextVar[str] = ContextVar("conversation_id", default="")


def get_conversation_id() -> str:
    """Retorna o conversation_id corrente (ou vazio)."""

    return _conversation_id.get()


@contextmanager
def bind_conversation_id(conversation_id: str) -> Iterator[str]:
    """Associa conversation_id aos logs emitidos dentro do bloco."""

    token = _conversation_id.set(conversation_id)
    try:
        yield conversation_id
    finally:
        _conversation_id.reset(token)
