"""Configuration loading from YAML and environment.

The GitHub token is taken from the environment (GITHUB_TOKEN or GH_TOKEN)
or from a file named by GITHUB_TOKEN_FILE / GH_TOKEN_FILE. Never put real
tokens in config files committed to the repo.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path("vulcan-prd.yaml")

# Injected by load_config so token resolution can read env/file
_current_env: dict[str, str] = {}


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


class RegistryConfig(BaseSettings):
    """Central PRD registry repository and layout."""

    model_config = SettingsConfigDict(env_prefix="PRD_", extra="ignore")

    default_repo: str = Field(
        default="gnyanee97/vulcan-prds",
        description='Central PRD repo when none is given ("owner/repo" or URL)',
    )
    base_branch: str = Field(default="main", description="Branch the PR targets")
    registry_path: str = Field(default="registry.json", description="Registry index path in the repo")
    prds_dir: str = Field(default="prds", description="Directory holding prds/{domain}/{slug}.md")
    default_file: str = Field(default="docs/prd.md", description="Local PRD file when --file is omitted")
    known_domains: list[str] = Field(
        default_factory=lambda: ["analytics", "platform", "marketing", "finance", "operations"],
        description="Standard business domains; others are accepted with a warning",
    )


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    timeout: int = Field(default=30, ge=1, description="Per-request timeout in seconds")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="WARNING", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE") or _read_secret("GH_TOKEN", "GH_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    A missing file is not an error: defaults and PRD_* / GITHUB_* /
    LOGGING_* environment variables apply.
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or DEFAULT_CONFIG_PATH
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        registry=RegistryConfig(**(raw.get("registry") or {})),
        github=GitHubConfig(**(raw.get("github") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
