
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping


DEFAULT_CONFIG_PATH = Path("data/config.json")
DEFAULT_APP_ENV = "tst"
DEFAULT_BASE_URL = "https://example.com"

TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Fatal setup problem: raised before any browser session exists."""


def env_flag(value, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def load_config_document(path: Path) -> dict:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return document


def resolve(env_name: str, document: dict) -> dict:
    """Merge the ``common`` block with the block named by ``env_name``.

    Environment keys win on conflict. A missing environment block is fatal.
    """
    env_block = document.get(env_name)
    if not isinstance(env_block, dict):
        raise ConfigError(f"Config for environment '{env_name}' not found")
    return {**(document.get("common") or {}), **env_block}


def resolve_app_env(environ: Mapping[str, str]) -> tuple[str, str | None]:
    app_env = environ.get("ENV") or DEFAULT_APP_ENV
    base_url = environ.get(f"BASE_URL_{app_env}") or environ.get("BASE_URL")
    return app_env, base_url


@dataclass(frozen=True)
class AppConfig:
    app_env: str
    base_url: str
    settings: Mapping[str, object] = field(default_factory=dict)
    config_path: Path = DEFAULT_CONFIG_PATH
    verbose: bool = False

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None, path: Path | str | None = None, verbose: bool | None = None) -> "AppConfig":
        environ = os.environ if environ is None else environ
        config_path = Path(path or environ.get("APP_CONFIG_PATH") or DEFAULT_CONFIG_PATH)
        app_env, base_url = resolve_app_env(environ)
        merged = resolve(app_env, load_config_document(config_path))
        if verbose is None:
            verbose = env_flag(environ.get("VERBOSE"))
        return cls(
            app_env=app_env,
            base_url=base_url or merged.get("url") or DEFAULT_BASE_URL,
            settings=MappingProxyType(merged),
            config_path=config_path,
            verbose=verbose,
        )

    def get(self, key: str, default=None):
        return self.settings.get(key, default)
