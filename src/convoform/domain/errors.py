"""Exceções do convoform."""

from __future__ import annotations


class ConvoformError(Exception):
    """Base para erros do motor conversacional."""


class ConversationStoreError(ConvoformError):
    """Erro ao persistir ou recuperar estado de conversa."""


class TemplateNotFoundError(ConvoformError):
    """Template inexistente ou desabilitado no registry."""
