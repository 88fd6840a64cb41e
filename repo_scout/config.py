"""Configuration loading: Hydra composition, env interpolation, typed settings."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from attrs import define, field
from dotenv import load_dotenv
from hydra import compose, initialize_config_dir
from omegaconf import DictConfig, OmegaConf

CONF_DIR = Path(__file__).resolve().parent / "conf"
API_KEY_ENV_VARS = ("LLM_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY")


def _as_tuple(values: Iterable[Any]) -> Tuple[str, ...]:
    return tuple(str(value) for value in values)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@define(slots=True, frozen=True)
class RunnerSettings:
    priority: int = 5
    max_retries: int = 3
    timeout_ms: int = 30_000
    backoff_ms: int = 1_000
    history_limit: Optional[int] = field(default=1_000, converter=_optional_int)


@define(slots=True, frozen=True)
class CacheSettings:
    ttl_seconds: float = 300.0


@define(slots=True, frozen=True)
class ScannerSettings:
    interval_ms: int = 3_600_000
    auto_fix: bool = False
    analyze_limit: int = 5
    source_extensions: Tuple[str, ...] = field(
        default=(".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".go"), converter=_as_tuple
    )
    required_files: Tuple[str, ...] = field(
        default=("package.json", "README.md", "Dockerfile"), converter=_as_tuple
    )
    forbidden_files: Tuple[str, ...] = field(default=(".env",), converter=_as_tuple)


@define(slots=True, frozen=True)
class ChatSettings:
    max_sessions: Optional[int] = field(default=1_000, converter=_optional_int)
    context_messages: int = 6


@define(slots=True, frozen=True)
class GitHubSettings:
    repository: str = "NLarchive/my-webapp-hf"
    branch: str = "main"
    api_url: str = "https://api.github.com"
    token: Optional[str] = field(default=None, repr=False)
    timeout: float = 15.0


@define(slots=True, frozen=True)
class LLMSettings:
    model: str = "gemini-2.0-flash"
    base_url: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)
    temperature: float = 0.7
    history_window: int = 20


@define(slots=True, frozen=True)
class Settings:
    log_level: str = "INFO"
    runner: RunnerSettings = field(factory=RunnerSettings)
    cache: CacheSettings = field(factory=CacheSettings)
    scanner: ScannerSettings = field(factory=ScannerSettings)
    chat: ChatSettings = field(factory=ChatSettings)
    github: GitHubSettings = field(factory=GitHubSettings)
    llm: LLMSettings = field(factory=LLMSettings)

    @classmethod
    def from_config(cls, cfg: Any) -> "Settings":
        data = _to_dict(cfg)
        llm = dict(data.get("llm") or {})
        if not llm.get("api_key"):
            llm["api_key"] = _resolve_api_key()
        return cls(
            log_level=str(data.get("log_level", "INFO")),
            runner=RunnerSettings(**(data.get("runner") or {})),
            cache=CacheSettings(**(data.get("cache") or {})),
            scanner=ScannerSettings(**(data.get("scanner") or {})),
            chat=ChatSettings(**(data.get("chat") or {})),
            github=GitHubSettings(**(data.get("github") or {})),
            llm=LLMSettings(**llm),
        )


def _to_dict(data: Any) -> Dict[str, Any]:
    if data is None:
        return {}
    if isinstance(data, DictConfig):
        return OmegaConf.to_container(data, resolve=True)  # type: ignore[return-value]
    if isinstance(data, dict):
        return data
    raise TypeError(f"unsupported config type: {type(data).__name__}")


def _resolve_api_key() -> Optional[str]:
    for name in API_KEY_ENV_VARS:
        value = os.getenv(name)
        if value:
            return value
    return None


def load_env(env_file: Optional[Path] = None) -> None:
    load_dotenv()
    if env_file is not None:
        load_dotenv(env_file, override=True)


def load_config(overrides: Sequence[str] = (), env_file: Optional[Path] = None) -> DictConfig:
    """Compose ``conf/config.yaml`` with Hydra overrides such as ``scanner.auto_fix=true``."""
    load_env(env_file)
    with initialize_config_dir(version_base=None, config_dir=str(CONF_DIR)):
        return compose(config_name="config", overrides=list(overrides))


def load_settings(overrides: Sequence[str] = (), env_file: Optional[Path] = None) -> Settings:
    return Settings.from_config(load_config(overrides, env_file))


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


__all__ = [
    "CONF_DIR",
    "CacheSettings",
    "ChatSettings",
    "GitHubSettings",
    "LLMSettings",
    "RunnerSettings",
    "ScannerSettings",
    "Settings",
    "configure_logging",
    "load_config",
    "load_settings",
]
