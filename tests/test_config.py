"""Tests for configuration parsing."""

import pytest

from event_calendar.config import DEFAULT_APP_NAMESPACE, AppConfig
from event_calendar.utils.exceptions import ConfigurationError


def test_no_firebase_config():
    assert AppConfig.model_construct().firebase is None


def test_blank_blob_counts_as_missing():
    assert AppConfig.model_construct(firebase_config="   ").firebase is None


def test_inline_blob():
    config = AppConfig.model_construct(
        firebase_config='{"apiKey": "k", "projectId": "p", "authDomain": "p.firebaseapp.com", "appId": "x"}'
    )
    firebase = config.firebase
    assert firebase.api_key == "k"
    assert firebase.project_id == "p"
    assert firebase.auth_domain == "p.firebaseapp.com"
    assert firebase.database_id == "(default)"


def test_yaml_file_wins_over_blob(tmp_path):
    path = tmp_path / "firebase.yaml"
    path.write_text("apiKey: file-key\nprojectId: file-project\n")
    config = AppConfig.model_construct(
        firebase_config='{"apiKey": "blob-key", "projectId": "blob-project"}',
        firebase_config_file=path,
    )
    assert config.firebase.api_key == "file-key"


@pytest.mark.parametrize(
    "blob",
    ["{not json", '["apiKey"]', '{"projectId": "p"}', '{"apiKey": "", "projectId": "p"}'],
)
def test_unusable_blob(blob):
    with pytest.raises(ConfigurationError):
        AppConfig.model_construct(firebase_config=blob).firebase


def test_missing_file(tmp_path):
    config = AppConfig.model_construct(firebase_config_file=tmp_path / "nope.yaml")
    with pytest.raises(ConfigurationError, match="not found"):
        config.firebase


def test_environment(monkeypatch):
    monkeypatch.setenv("APP_ID", "my-app")
    monkeypatch.setenv("INITIAL_AUTH_TOKEN", "tok")
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "5")
    config = AppConfig(_env_file=None)
    assert config.app_namespace == "my-app"
    assert config.initial_auth_token == "tok"
    assert config.poll_interval_seconds == 5.0


def test_defaults(monkeypatch):
    for name in ("APP_ID", "FIREBASE_CONFIG", "INITIAL_AUTH_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    config = AppConfig(_env_file=None)
    assert config.app_namespace == DEFAULT_APP_NAMESPACE
    assert config.initial_auth_token is None
