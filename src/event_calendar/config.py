"""Configuration management for the Event Calendar application."""

import json
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.exceptions import ConfigurationError

load_dotenv()

DEFAULT_APP_NAMESPACE = "default-app-id"


class FirebaseConfig(BaseModel):
    """Firebase web app configuration blob (as copied from the Firebase console)."""

    api_key: str = Field(alias="apiKey", min_length=1)
    project_id: str = Field(alias="projectId", min_length=1)
    auth_domain: Optional[str] = Field(None, alias="authDomain")
    # Not part of the console blob; Firestore databases other than "(default)"
    database_id: str = Field("(default)", alias="databaseId")

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class AppConfig(BaseSettings):
    """Application configuration."""

    # The three injected values: namespace id, provider config blob, pre-issued token
    app_namespace: str = Field(default=DEFAULT_APP_NAMESPACE, validation_alias="APP_ID")
    firebase_config: Optional[str] = Field(None, validation_alias="FIREBASE_CONFIG")
    initial_auth_token: Optional[str] = Field(None, validation_alias="INITIAL_AUTH_TOKEN")

    # Alternative to the inline blob: a YAML or JSON file
    firebase_config_file: Optional[Path] = Field(
        None, validation_alias="FIREBASE_CONFIG_FILE"
    )

    # Persisted identity
    session_cache_path: Path = Field(
        default=Path(".session_cache"), validation_alias="SESSION_CACHE_PATH"
    )
    session_cache_encrypted: bool = Field(
        default=True, validation_alias="SESSION_CACHE_ENCRYPTED"
    )

    # Live subscription
    poll_interval_seconds: float = Field(
        default=2.0, gt=0, validation_alias="POLL_INTERVAL_SECONDS"
    )

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, validation_alias="LOG_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_parse_none_str="",  # Treat empty string as None
    )

    @property
    def firebase(self) -> Optional[FirebaseConfig]:
        """
        Parse the provider configuration.

        The config file wins over the inline blob.

        Returns:
            FirebaseConfig, or None if no configuration was supplied

        Raises:
            ConfigurationError: If the configuration is present but unusable
        """
        data = self._load_firebase_blob()
        if not data:
            return None
        try:
            return FirebaseConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Firebase configuration: {e}") from e

    def _load_firebase_blob(self) -> Optional[dict]:
        if self.firebase_config_file:
            if not self.firebase_config_file.exists():
                raise ConfigurationError(
                    f"Firebase config file not found: {self.firebase_config_file}"
                )
            try:
                with open(self.firebase_config_file) as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to parse {self.firebase_config_file}: {e}") from e
        elif self.firebase_config and self.firebase_config.strip():
            try:
                data = json.loads(self.firebase_config)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"FIREBASE_CONFIG is not valid JSON: {e}") from e
        else:
            return None

        if not isinstance(data, dict):
            raise ConfigurationError("Firebase configuration must be a mapping")
        return data
