"""Seções reutilizáveis de prompt: persona e lista de tópicos."""

from __future__ import annotations

from collections.abc import Sequence

from convoform.domain.enums import PersonaStyle
from convoform.domain.models import ConversationPersona, ConversationTopic

STYLE_DESCRIPTIONS: dict[PersonaStyle, str] = {
    PersonaStyle.PROFESSIONAL: (
        "Maintain a professional, courteous tone. Use clear, formal language. "
        "Be efficient and respectful."
    ),
    PersonaStyle.FRIENDLY: (
        "Be warm, approachable, and conversational. Use friendly language and show "
        "genuine interest. Make the conversation feel natural and comfortable."
    ),
    PersonaStyle.CASUAL: (
        "Keep it relaxed and informal. Use everyday language and be conversational. "
        "Do not be overly formal."
    ),
    PersonaStyle.EMPATHETIC: (
        "Show empathy and understanding. Be sensitive to the respondent's situation "
        "and feelings. Acknowledge their concerns and be supportive."
    ),
}


def build_persona_section(persona: ConversationPersona) -> str:
    """Renderiza a seção "Your Role" a partir da persona.

    Estilo custom com custom_prompt usa o texto literalmente; caso contrário
    aplica o boilerplate do estilo (friendly como padrão) acrescido de tom,
    comportamentos e restrições quando presentes.
    """
    if persona.style == PersonaStyle.CUSTOM and persona.custom_prompt:
        return persona.custom_prompt

    section = STYLE_DESCRIPTIONS.get(persona.style, STYLE_DESCRIPTIONS[PersonaStyle.FRIENDLY])

    if persona.tone:
        section += f"\n\nTone: {persona.tone}"

    if persona.behaviors:
        items = "\n".join(f"- {b}" for b in persona.behaviors)
        section += f"\n\nBehaviors you should exhibit:\n{items}"

    if persona.restrictions:
        items = "\n".join(f"- {r}" for r in persona.restrictions)
        section += f"\n\nThings to avoid:\n{items}"

    return section


def build_topics_section(topics: Sequence[ConversationTopic]) -> str:
    """Lista de tópicos no formato `- **Nome** (prioridade, profundidade): descrição`."""
    return "\n".join(
        f"- **{t.name}** ({t.priority} priority, {t.depth} depth): {t.description}"
        for t in topics
    )
