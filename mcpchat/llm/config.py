from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Literal
import logging
import os

import yaml

from mcpchat.errors import ConfigError

Provider = Literal["deepseek", "openai", "openrouter", "oai_compatible"]

_DEFAULT_CONFIG_PATH = Path("configs/llm.yaml")
_DEFAULT_PROVIDER = "deepseek"
_DEFAULT_MODELS = {
    "deepseek": "deepseek-chat",
    "openai": "gpt-4o-mini",
    "openrouter": "deepseek/deepseek-chat",
}
_DEFAULT_BASE_URLS = {
    "deepseek": "https://api.deepseek.com",
    "openrouter": "https://openrouter.ai/api/v1",
}
_DEFAULT_MAX_TOKENS = 1000
_logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    provider: Optional[Provider] = None
    model: str = ""

    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    api_key_env: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None

    default_headers: Dict[str, str] = field(default_factory=dict)

    timeout_s: Optional[float] = None
    max_retries: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LLMConfig":
        if not isinstance(data, dict):
            return cls()
        default_headers = data.get("default_headers") or {}
        provider = _to_str_or_none(data.get("provider"))
        if provider:
            provider = provider.lower()
        max_retries = _to_int(data.get("max_retries"))
        return cls(
            provider=provider or None,  # type: ignore[arg-type]
            model=_to_str_or_none(data.get("model")) or "",
            temperature=_to_float(data.get("temperature")),
            max_tokens=_to_int(data.get("max_tokens")),
            api_key_env=_to_str_or_none(data.get("api_key_env")),
            api_key=_to_str_or_none(data.get("api_key")),
            base_url=_to_str_or_none(data.get("base_url")),
            default_headers=dict(default_headers) if isinstance(default_headers, dict) else {},
            timeout_s=_to_float(data.get("timeout_s")),
            max_retries=max_retries if max_retries is not None else 0,
        )

    @classmethod
    def from_env(cls) -> "LLMConfig":
        cfg = cls()
        cfg.apply_env_fallbacks()
        return cfg

    @classmethod
    def from_env_or_file(cls, path: Optional[str] = None) -> "LLMConfig":
        config_path = Path(path) if path else Path(os.getenv("MCPCHAT_LLM_CONFIG", str(_DEFAULT_CONFIG_PATH)))
        if not config_path.exists():
            if path:
                raise ConfigError(f"LLM config not found: {config_path}")
            return cls.from_env()
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in LLM config {config_path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"LLM config must be a mapping: {config_path}")
        _logger.info("Loaded LLM config from %s", config_path)
        cfg = cls.from_dict(raw)
        cfg.apply_env_fallbacks()
        return cfg

    def apply_env_fallbacks(self) -> None:
        if not self.provider:
            env_provider = os.getenv("MCPCHAT_LLM_PROVIDER", "").strip().lower()
            self.provider = (env_provider or _DEFAULT_PROVIDER)  # type: ignore[assignment]
        provider = self.provider or _DEFAULT_PROVIDER
        if not self.model:
            model = os.getenv("MCPCHAT_LLM_MODEL", "").strip()
            self.model = model or _DEFAULT_MODELS.get(provider, "")
        if self.api_key_env is None:
            env_name = os.getenv("MCPCHAT_API_KEY_ENV", "").strip()
            self.api_key_env = env_name or _default_api_key_env(provider)
        if self.base_url is None:
            env_base = os.getenv("MCPCHAT_BASE_URL", "").strip()
            self.base_url = env_base or _DEFAULT_BASE_URLS.get(provider)
        if self.max_tokens is None:
            max_tokens = _to_int(os.getenv("MCPCHAT_MAX_TOKENS", ""))
            self.max_tokens = max_tokens if max_tokens is not None else _DEFAULT_MAX_TOKENS
        if self.temperature is None:
            self.temperature = _to_float(os.getenv("MCPCHAT_TEMPERATURE", ""))

    def require_api_key(self) -> str:
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            key = os.getenv(self.api_key_env, "").strip()
            if key:
                return key
        raise ConfigError(f"{self.api_key_env or 'API key'} is not set")


def _default_api_key_env(provider: str) -> str:
    if provider == "openrouter":
        return "OPENROUTER_API_KEY"
    if provider == "deepseek":
        return "DEEPSEEK_API_KEY"
    return "OPENAI_API_KEY"


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _to_str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = [
    "LLMConfig",
    "Provider",
]
