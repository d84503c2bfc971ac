"""Geradores de identificadores."""

from __future__ import annotations

import uuid


def new_conversation_id() -> str:
    """Gera um conversation_id único (prefixo conv_)."""

    return f"conv_{uuid.uuid4().hex}"


def new_template_id() -> str:
    """Gera um template_id único para templates de organização."""

    return f"tpl_{uuid.uuid4().hex[:16]}"


def draft_document_id(conversation_id: str) -> str:
    """Id do documento de rascunho de uma conversa."""

    return f"draft_{conversation_id}"
