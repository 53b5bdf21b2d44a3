"""Tests for stalebot.config (YAML + env loading and validation)."""

import os
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from stalebot.config import ConfigurationError, StaleConfig, load_config

BASE_STALE = {
    "repository": "owner/repo",
    "stale_issue_message": "This issue is stale",
    "stale_pr_message": "This PR is stale",
    "stale_issue_label": "stale",
    "stale_pr_label": "stale",
    "days_before_stale": 60,
    "days_before_close": 7,
    "operations_per_run": 30,
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop GITHUB_*, STALE_* and LOGGING_* from the environment."""
    for key in list(os.environ):
        if key.startswith(("GITHUB_", "STALE_", "LOGGING_")):
            monkeypatch.delenv(key, raising=False)


def write_config(tmp_path: Path, stale: dict | None = None, **sections) -> Path:
    raw = {"github": {"token": "ghp_test"}, "stale": dict(BASE_STALE if stale is None else stale)}
    raw.update(sections)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(raw), encoding="utf-8")
    return path


def test_load_valid_config(tmp_path: Path) -> None:
    config = load_config(write_config(tmp_path))

    assert config.github_token_resolved == "ghp_test"
    assert config.github.api_url == "https://api.github.com"
    assert config.stale.repository == "owner/repo"
    assert config.stale.days_before_stale == 60
    assert config.stale.days_before_close == 7
    assert config.stale.operations_per_run == 30
    assert config.stale.dry_run is False
    assert config.stale.exempt_issue_label == ""
    assert config.logging.level == "INFO"


def test_numeric_strings_are_parsed(tmp_path: Path) -> None:
    stale = {**BASE_STALE, "days_before_stale": "45", "operations_per_run": "10"}
    config = load_config(write_config(tmp_path, stale=stale))
    assert config.stale.days_before_stale == 45
    assert config.stale.operations_per_run == 10


@pytest.mark.parametrize("field", ["days_before_stale", "days_before_close", "operations_per_run"])
def test_non_numeric_input_is_rejected(tmp_path: Path, field: str) -> None:
    stale = {**BASE_STALE, field: "soon"}
    with pytest.raises(ConfigurationError, match=f"stale.{field} did not parse to a valid integer"):
        load_config(write_config(tmp_path, stale=stale))


@pytest.mark.parametrize("field", ["days_before_stale", "stale_issue_label", "stale_pr_label"])
def test_missing_required_input_is_rejected(tmp_path: Path, field: str) -> None:
    stale = {k: v for k, v in BASE_STALE.items() if k != field}
    with pytest.raises(ConfigurationError, match=f"stale.{field} is required"):
        load_config(write_config(tmp_path, stale=stale))


def test_empty_stale_label_is_rejected(tmp_path: Path) -> None:
    stale = {**BASE_STALE, "stale_pr_label": ""}
    with pytest.raises(ConfigurationError, match="stale_pr_label"):
        load_config(write_config(tmp_path, stale=stale))


def test_zero_operations_is_rejected(tmp_path: Path) -> None:
    stale = {**BASE_STALE, "operations_per_run": 0}
    with pytest.raises(ConfigurationError, match="operations_per_run"):
        load_config(write_config(tmp_path, stale=stale))


def test_missing_token_is_rejected(tmp_path: Path) -> None:
    path = write_config(tmp_path, github={})
    with pytest.raises(ConfigurationError, match="token is required"):
        load_config(path)


def test_token_from_env_placeholder(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_from_env")
    path = write_config(tmp_path, github={"token": "${GITHUB_TOKEN}"})
    assert load_config(path).github_token_resolved == "ghp_from_env"


def test_token_from_secret_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    secret = tmp_path / "token"
    secret.write_text("ghp_from_file\n", encoding="utf-8")
    monkeypatch.setenv("GITHUB_TOKEN_FILE", str(secret))
    path = write_config(tmp_path, github={})
    assert load_config(path).github_token_resolved == "ghp_from_file"


def test_repository_from_github_actions_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_REPOSITORY", "octo-org/octo-repo")
    stale = {k: v for k, v in BASE_STALE.items() if k != "repository"}
    assert load_config(write_config(tmp_path, stale=stale)).stale.repository == "octo-org/octo-repo"


def test_missing_repository_is_rejected(tmp_path: Path) -> None:
    stale = {k: v for k, v in BASE_STALE.items() if k != "repository"}
    with pytest.raises(ConfigurationError, match="repository"):
        load_config(write_config(tmp_path, stale=stale))


def test_env_only_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Without a YAML file every value can come from the environment."""
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
    monkeypatch.setenv("GITHUB_REPOSITORY", "owner/repo")
    monkeypatch.setenv("STALE_STALE_ISSUE_LABEL", "stale")
    monkeypatch.setenv("STALE_STALE_PR_LABEL", "stale-pr")
    monkeypatch.setenv("STALE_DAYS_BEFORE_STALE", "30")
    monkeypatch.setenv("STALE_DAYS_BEFORE_CLOSE", "5")
    monkeypatch.setenv("STALE_OPERATIONS_PER_RUN", "50")
    monkeypatch.setenv("STALE_DRY_RUN", "True")

    config = load_config(tmp_path / "missing.yaml")

    assert config.stale.stale_pr_label == "stale-pr"
    assert config.stale.days_before_stale == 30
    assert config.stale.operations_per_run == 50
    assert config.stale.dry_run is True


def test_invalid_env_number_is_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STALE_DAYS_BEFORE_CLOSE", "a week")
    stale = {k: v for k, v in BASE_STALE.items() if k != "days_before_close"}
    with pytest.raises(ConfigurationError, match="days_before_close did not parse"):
        load_config(write_config(tmp_path, stale=stale))


def test_invalid_yaml_is_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("stale: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="invalid YAML"):
        load_config(path)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("TRUE", True), ("yes", True), ("1", True), ("false", False), ("", False), ("nope", False)],
)
def test_dry_run_text_values(tmp_path: Path, raw: str, expected: bool) -> None:
    stale = {**BASE_STALE, "dry_run": raw}
    assert load_config(write_config(tmp_path, stale=stale)).stale.dry_run is expected


def test_null_optional_values_become_empty(tmp_path: Path) -> None:
    stale = {**BASE_STALE, "stale_pr_message": None, "exempt_issue_label": None}
    config = load_config(write_config(tmp_path, stale=stale))
    assert config.stale.stale_pr_message == ""
    assert config.stale.exempt_issue_label == ""


class TestRoleSelection:
    def _config(self, **overrides) -> StaleConfig:
        return StaleConfig(
            **{
                **BASE_STALE,
                "stale_pr_label": "stale-pr",
                "exempt_issue_label": "pinned",
                "exempt_pr_label": "wip",
                **overrides,
            }
        )

    def test_labels_per_kind(self) -> None:
        cfg = self._config()
        assert cfg.stale_label_for(is_pr=False) == "stale"
        assert cfg.stale_label_for(is_pr=True) == "stale-pr"
        assert cfg.exempt_label_for(is_pr=False) == "pinned"
        assert cfg.exempt_label_for(is_pr=True) == "wip"

    def test_close_message_falls_back_to_stale_message_of_same_kind(self) -> None:
        cfg = self._config(close_pr_message="Closing this PR")
        assert cfg.close_message_for(is_pr=True) == "Closing this PR"
        assert cfg.close_message_for(is_pr=False) == "This issue is stale"

    def test_config_is_immutable(self) -> None:
        cfg = self._config()
        with pytest.raises(ValidationError):
            cfg.days_before_stale = 1


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """An environment value wins over the same key in the YAML file."""
    monkeypatch.setenv("STALE_DAYS_BEFORE_STALE", "5")
    monkeypatch.setenv("STALE_DRY_RUN", "true")
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")
    monkeypatch.setenv("LOGGING_LEVEL", "DEBUG")
    path = write_config(tmp_path, github={"token": "ghp_test", "api_url": "https://api.github.com"}, logging={"level": "ERROR"})

    config = load_config(path)

    assert config.stale.days_before_stale == 5
    assert config.stale.dry_run is True
    assert config.stale.days_before_close == 7
    assert config.github.api_url == "https://ghe.example.com/api/v3"
    assert config.logging.level == "DEBUG"


def test_unreadable_token_file_is_configuration_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN_FILE", str(tmp_path / "no-such-secret"))
    path = write_config(tmp_path, github={})
    with pytest.raises(ConfigurationError, match="GITHUB_TOKEN_FILE"):
        load_config(path)
