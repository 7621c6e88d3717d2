from __future__ import annotations

import pytest

from mcpchat.errors import ConfigError
from mcpchat.llm.config import LLMConfig
from mcpchat.llm.factory import build_tool_driver
from mcpchat.llm.openai_chat_completions_driver import OpenAIChatCompletionsDriver

_ENV_VARS = [
    "MCPCHAT_LLM_PROVIDER",
    "MCPCHAT_LLM_MODEL",
    "MCPCHAT_BASE_URL",
    "MCPCHAT_API_KEY_ENV",
    "MCPCHAT_MAX_TOKENS",
    "MCPCHAT_TEMPERATURE",
    "MCPCHAT_LLM_CONFIG",
    "DEEPSEEK_API_KEY",
    "OPENAI_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_target_deepseek() -> None:
    cfg = LLMConfig.from_env()
    assert cfg.provider == "deepseek"
    assert cfg.model == "deepseek-chat"
    assert cfg.base_url == "https://api.deepseek.com"
    assert cfg.api_key_env == "DEEPSEEK_API_KEY"
    assert cfg.max_tokens == 1000
    assert cfg.max_retries == 0


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("MCPCHAT_LLM_PROVIDER", "openai")
    monkeypatch.setenv("MCPCHAT_LLM_MODEL", "gpt-4.1")
    monkeypatch.setenv("MCPCHAT_MAX_TOKENS", "256")
    monkeypatch.setenv("MCPCHAT_TEMPERATURE", "0.2")

    cfg = LLMConfig.from_env()

    assert cfg.provider == "openai"
    assert cfg.model == "gpt-4.1"
    assert cfg.base_url is None
    assert cfg.api_key_env == "OPENAI_API_KEY"
    assert cfg.max_tokens == 256
    assert cfg.temperature == pytest.approx(0.2)


def test_missing_api_key_is_config_error() -> None:
    cfg = LLMConfig.from_env()
    with pytest.raises(ConfigError, match="DEEPSEEK_API_KEY"):
        cfg.require_api_key()
    with pytest.raises(ConfigError):
        build_tool_driver(cfg)


def test_build_driver_with_key(monkeypatch) -> None:
    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-test")
    driver = build_tool_driver(LLMConfig.from_env())
    assert isinstance(driver, OpenAIChatCompletionsDriver)
    assert driver.model == "deepseek-chat"
    assert driver.max_tokens == 1000


def test_yaml_file_with_env_fallbacks(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "llm.yaml"
    config_path.write_text(
        "provider: openrouter\nmodel: some/model\nmax_tokens: 500\ntimeout_s: 12\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("MCPCHAT_LLM_CONFIG", str(config_path))

    cfg = LLMConfig.from_env_or_file()

    assert cfg.provider == "openrouter"
    assert cfg.model == "some/model"
    assert cfg.max_tokens == 500
    assert cfg.timeout_s == 12.0
    assert cfg.base_url == "https://openrouter.ai/api/v1"
    assert cfg.api_key_env == "OPENROUTER_API_KEY"


def test_default_config_file_is_picked_up(tmp_path) -> None:
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "llm.yaml").write_text("model: deepseek-reasoner\n", encoding="utf-8")

    cfg = LLMConfig.from_env_or_file()

    assert cfg.model == "deepseek-reasoner"
    assert cfg.provider == "deepseek"


def test_invalid_config_file(tmp_path) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        LLMConfig.from_env_or_file(str(bad))
    with pytest.raises(ConfigError):
        LLMConfig.from_env_or_file(str(tmp_path / "missing.yaml"))
