"""Factory de PromptStrategy a partir da configuração armazenada.

Configuração inválida nunca lança: degrada para a estratégia padrão e
registra o fallback.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from convoform.ai.strategies.base import PromptStrategy
from convoform.ai.strategies.custom import CustomPromptStrategy
from convoform.ai.strategies.default import DefaultPromptStrategy
from convoform.ai.strategies.it_helpdesk import ITHelpdeskPromptStrategy
from convoform.domain.enums import StrategyType
from convoform.domain.stored_template import TemplatePromptConfig
from convoform.observability.logging import get_logger, log_fallback

logger: logging.Logger = get_logger(__name__)


def create_prompt_strategy(
    prompt_config: TemplatePromptConfig | Mapping[str, Any] | None,
) -> PromptStrategy:
    """Cria a estratégia descrita por `prompt_config`.

    Args:
        prompt_config: TemplatePromptConfig ou dict equivalente (documento bruto)

    Returns:
        Estratégia it-helpdesk, custom ou default (fallback)
    """
    if prompt_config is None:
        return DefaultPromptStrategy()

    if not isinstance(prompt_config, TemplatePromptConfig):
        try:
            prompt_config = TemplatePromptConfig.model_validate(prompt_config)
        except ValidationError as exc:
            log_fallback(
                logger,
                "prompt_strategy",
                reason="invalid_prompt_config",
                error_count=exc.error_count(),
            )
            return DefaultPromptStrategy()

    if prompt_config.strategy_type == StrategyType.IT_HELPDESK:
        return ITHelpdeskPromptStrategy()

    if prompt_config.strategy_type == StrategyType.CUSTOM:
        if not (prompt_config.system_prompt_template or prompt_config.wrap_up_prompt_template):
            logger.warning(
                "custom_strategy_without_templates",
                extra={"strategy_type": str(prompt_config.strategy_type)},
            )
        return CustomPromptStrategy(
            system_prompt_template=prompt_config.system_prompt_template,
            wrap_up_prompt_template=prompt_config.wrap_up_prompt_template,
            context_prompt_template=prompt_config.context_prompt_template,
            template_variables=prompt_config.template_variables,
        )

    return DefaultPromptStrategy()
