from __future__ import annotations

import logging

from mcpchat.llm.config import LLMConfig
from mcpchat.llm.driver import ToolCallingDriver
from mcpchat.llm.openai_chat_completions_driver import OpenAIChatCompletionsDriver

_logger = logging.getLogger(__name__)


def build_tool_driver(cfg: LLMConfig) -> ToolCallingDriver:
    """Build the chat-completions driver; raises ConfigError without an API key."""
    api_key = cfg.require_api_key()
    _logger.info("Using provider=%s model=%s base_url=%s", cfg.provider, cfg.model, cfg.base_url)
    return OpenAIChatCompletionsDriver(
        model=cfg.model,
        api_key=api_key,
        base_url=cfg.base_url,
        default_headers=cfg.default_headers or None,
        timeout_s=cfg.timeout_s,
        max_retries=cfg.max_retries,
        max_tokens=cfg.max_tokens,
        temperature=cfg.temperature,
    )


__all__ = ["build_tool_driver"]
