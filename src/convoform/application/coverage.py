"""Analisador de cobertura por palavras-chave (heurística determinística).

Para cada tópico monta um vocabulário a partir de nome, descrição, campo
de extração e opções de enum do campo ligado no schema (expandidas com
sinônimos conhecidos). A profundidade observada cresce com o número de
termos distintos encontrados e com o tamanho da mensagem.

Implementações baseadas em LLM podem substituir esta classe sem tocar na
máquina de estados (ver `CoverageAnalyzer`).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence

from convoform.domain.conversation import ConversationState
from convoform.domain.models import ConversationTopic, ExtractionField, linked_schema_field
from convoform.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

BASE_DEPTH = 0.3
DEPTH_PER_MATCH = 0.2
MAX_COUNTED_MATCHES = 3
LONG_MESSAGE_CHARS = 100
LONG_MESSAGE_BONUS = 0.3

_WORD = re.compile(r"[a-z0-9]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

STOPWORDS = frozenset({
    "a", "about", "an", "and", "any", "are", "as", "at", "be", "by", "can",
    "did", "do", "does", "for", "from", "get", "has", "have", "how", "i",
    "if", "in", "including", "info", "information", "into", "is", "it",
    "its", "me", "my", "no", "not", "of", "on", "or", "our", "so", "that",
    "the", "their", "them", "there", "they", "this", "to", "type", "up",
    "was", "we", "were", "what", "when", "where", "which", "who", "why",
    "will", "with", "won", "would", "you", "your",
})

# Sinônimos por opção de enum comum; permite reconhecer "laptop" como
# menção à categoria hardware mesmo sem a palavra literal.
DEFAULT_OPTION_HINTS: dict[str, tuple[str, ...]] = {
    "hardware": (
        "laptop", "computer", "desktop", "monitor", "screen", "printer",
        "keyboard", "mouse", "device", "battery", "power", "charger",
        "broken", "lost", "stolen", "turn", "boot",
    ),
    "software": (
        "application", "app", "program", "crash", "crashing", "install",
        "update", "error", "excel", "outlook", "browser",
    ),
    "network": (
        "wifi", "internet", "vpn", "connection", "connect", "network",
        "offline", "slow", "ethernet",
    ),
    "access": (
        "login", "log", "password", "account", "permission", "locked",
        "access", "reset", "sign",
    ),
    "low": ("minor", "whenever", "wait"),
    "medium": ("soon", "affecting"),
    "high": ("urgent", "asap", "important", "blocking"),
    "critical": ("emergency", "outage", "everyone", "down"),
    "email": ("mail", "inbox"),
    "phone": ("call", "mobile", "cell"),
    "chat": ("slack", "teams", "message"),
}

_SUFFIXES = ("ing", "ed", "s")


def _stem(word: str) -> str:
    for suffix in _SUFFIXES:
        if word.endswith(suffix) and len(word) - len(suffix) >= 3:
            return word[: -len(suffix)]
    return word


def tokenize(text: str) -> set[str]:
    """Tokens normalizados (minúsculos, sem stopwords, com stem simples)."""
    spaced = _CAMEL_BOUNDARY.sub(" ", text)
    return {
        _stem(word)
        for word in _WORD.findall(spaced.lower().replace("'", ""))
        if len(word) >= 2 and word not in STOPWORDS
    }


class KeywordCoverageAnalyzer:
    """Heurística de cobertura baseada em vocabulário por tópico."""

    def __init__(self, option_hints: Mapping[str, Sequence[str]] | None = None) -> None:
        self._option_hints = dict(DEFAULT_OPTION_HINTS if option_hints is None else option_hints)

    def keywords_for(
        self, topic: ConversationTopic, schema: Sequence[ExtractionField] = ()
    ) -> set[str]:
        """Vocabulário (já tokenizado) que indica menção ao tópico."""
        words = tokenize(topic.name) | tokenize(topic.description)
        if topic.extraction_field:
            words |= tokenize(topic.extraction_field)

        field = linked_schema_field(topic, schema)
        if field is not None:
            words |= tokenize(field.field)
            for option in field.options or []:
                words |= tokenize(option)
                for hint in self._option_hints.get(option.lower(), ()):
                    words |= tokenize(hint)
        return words

    def analyze(
        self,
        topics: Sequence[ConversationTopic],
        message: str,
        state: ConversationState,
        schema: Sequence[ExtractionField] = (),
    ) -> dict[str, float]:
        """Retorna {topic_id: profundidade} apenas para tópicos mencionados."""
        message_tokens = tokenize(message)
        if not message_tokens:
            return {}

        observed: dict[str, float] = {}
        for topic in topics:
            matched = len(self.keywords_for(topic, schema) & message_tokens)
            if matched == 0:
                continue
            depth = BASE_DEPTH + DEPTH_PER_MATCH * min(matched, MAX_COUNTED_MATCHES)
            if len(message) > LONG_MESSAGE_CHARS:
                depth += LONG_MESSAGE_BONUS
            observed[topic.id] = min(1.0, depth)

        logger.debug(
            "coverage_analyzed",
            extra={
                "conversation_id": state.conversation_id,
                "topics_mentioned": len(observed),
                "topics_total": len(topics),
            },
        )
        return observed
