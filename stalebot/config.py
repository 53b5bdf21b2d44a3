"""Configuration loading from YAML and environment.

Secrets (tokens) are taken from environment variables or from files
(Docker secrets). Never put real tokens in config files committed to the
repo.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from stalebot.utils import is_true


class ConfigurationError(ValueError):
    """Raised when a required input is missing or fails to parse."""

    pass


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        try:
            return Path(file_path).read_text().strip()
        except OSError as e:
            raise ConfigurationError(f"cannot read {file_env_key}={file_path}: {e}") from e
    return None


# Injected by load_config so validators can read env/file
_current_env: dict[str, str] = {}


class _EnvFirstSettings(BaseSettings):
    """Settings section where environment variables override the YAML file."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs
        return env_settings, init_settings, dotenv_settings, file_secret_settings


class GitHubConfig(_EnvFirstSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or Actions token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    timeout: int = Field(default=30, ge=1, description="HTTP timeout in seconds")


class StaleConfig(_EnvFirstSettings):
    """Per-run staleness policy (env: STALE_*)."""

    model_config = SettingsConfigDict(env_prefix="STALE_", extra="ignore", frozen=True)

    repository: str = Field(default="", description="Target repo e.g. octo-org/octo-repo")
    dry_run: bool = Field(default=False, description="Log mutations instead of performing them")
    # Empty message disables the bot for that kind of item
    stale_issue_message: str = Field(default="", description="Comment posted when an issue goes stale")
    stale_pr_message: str = Field(default="", description="Comment posted when a PR goes stale")
    # Empty close message falls back to the stale message of the same kind
    close_issue_message: str = Field(default="", description="Comment posted when closing a stale issue")
    close_pr_message: str = Field(default="", description="Comment posted when closing a stale PR")
    stale_issue_label: str = Field(min_length=1, description="Label marking stale issues")
    stale_pr_label: str = Field(min_length=1, description="Label marking stale PRs")
    exempt_issue_label: str = Field(default="", description="Issues with this label are never touched")
    exempt_pr_label: str = Field(default="", description="PRs with this label are never touched")
    days_before_stale: int = Field(ge=0, description="Idle days before an item is marked stale")
    days_before_close: int = Field(ge=0, description="Days after marking stale before closing")
    operations_per_run: int = Field(ge=1, description="Max API operations per run (rate limit)")

    @field_validator("dry_run", mode="before")
    @classmethod
    def _parse_dry_run(cls, value: Any) -> bool:
        return is_true(value)

    @field_validator(
        "stale_issue_message",
        "stale_pr_message",
        "close_issue_message",
        "close_pr_message",
        "exempt_issue_label",
        "exempt_pr_label",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        # YAML "key:" with no value loads as None
        return "" if value is None else value

    def stale_message_for(self, is_pr: bool) -> str:
        return self.stale_pr_message if is_pr else self.stale_issue_message

    def close_message_for(self, is_pr: bool) -> str:
        close = self.close_pr_message if is_pr else self.close_issue_message
        return close or self.stale_message_for(is_pr)

    def stale_label_for(self, is_pr: bool) -> str:
        return self.stale_pr_label if is_pr else self.stale_issue_label

    def exempt_label_for(self, is_pr: bool) -> str:
        return self.exempt_pr_label if is_pr else self.exempt_issue_label


class LoggingConfig(_EnvFirstSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    stale: StaleConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        # Simple $VAR
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def _format_validation_error(section: str, err: ValidationError) -> str:
    problems = []
    for item in err.errors():
        field = ".".join(str(p) for p in item["loc"]) or section
        name = f"{section}.{field}"
        if item["type"] == "missing":
            problems.append(f"input {name} is required")
        elif item["type"].startswith("int_"):
            problems.append(f"input {name} did not parse to a valid integer")
        else:
            problems.append(f"input {name}: {item['msg']}")
    return "; ".join(problems)


def _build(section: str, model: type[BaseSettings], raw: dict[str, Any]) -> Any:
    try:
        return model(**raw)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(section, e)) from e


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment, then validate it.

    A missing file is not an error: every value can come from the
    environment (GITHUB_*, STALE_*, LOGGING_*), and an environment value
    overrides the same key in the file. GITHUB_REPOSITORY, as set
    by GitHub Actions, fills stale.repository when it is not configured.

    Raises:
        ConfigurationError: token or repository missing, a required stale
            setting missing, or a numeric setting that is not an integer.
    """
    global _current_env
    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    raw: dict[str, Any] = {}
    if path.is_file():
        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid YAML in {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"{path} must contain a mapping")
        raw = _substitute_env(raw)

    stale_raw = raw.get("stale") or {}
    if not stale_raw.get("repository") and not _current_env.get("STALE_REPOSITORY"):
        if _current_env.get("GITHUB_REPOSITORY"):
            stale_raw = {**stale_raw, "repository": _current_env["GITHUB_REPOSITORY"]}

    github = _build("github", GitHubConfig, raw.get("github") or {})
    stale = _build("stale", StaleConfig, stale_raw)
    logging = _build("logging", LoggingConfig, raw.get("logging") or {})

    config = AppConfig(github=github, stale=stale, logging=logging)

    if not config.github_token_resolved:
        raise ConfigurationError("input github.token is required (or set GITHUB_TOKEN)")
    if "/" not in config.stale.repository.strip("/"):
        raise ConfigurationError("input stale.repository is required as owner/repo (or set GITHUB_REPOSITORY)")
    return config
