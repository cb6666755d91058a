"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'openai' in data:
            flattened['tutor_model'] = data['openai'].get('tutor_model')
            flattened['lookup_model'] = data['openai'].get('lookup_model')
        if 'tutor' in data:
            tutor = data['tutor']
            flattened['native_language'] = tutor.get('native_language')
            flattened['target_language'] = tutor.get('target_language')
            flattened['history_window'] = tutor.get('history_window')
        if 'activity' in data:
            activity = data['activity']
            flattened['heartbeat_interval_seconds'] = (
                activity.get('heartbeat_interval_seconds')
            )
            flattened['heartbeat_increment_seconds'] = (
                activity.get('heartbeat_increment_seconds')
            )
        if 'storage' in data:
            flattened['data_dir'] = data['storage'].get('data_dir')

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI (an empty key surfaces as a tutor service error on first call)
    openai_api_key: str = Field(default="", description="OpenAI API key")
    tutor_model: str = Field(default="gpt-4o-mini")
    lookup_model: str = Field(default="gpt-4o-mini")

    # Tutoring
    native_language: str = Field(default="Chinese")
    target_language: str = Field(default="English")
    history_window: int = Field(default=6, ge=1)

    # Activity heartbeat
    heartbeat_interval_seconds: float = Field(default=10.0, gt=0)
    heartbeat_increment_seconds: int = Field(default=10, ge=0)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)
    data_dir: Path | None = Field(default=None)

    @property
    def store_dir(self) -> Path:
        """Directory holding the per-user JSON blobs."""
        d = self.data_dir or self.project_root / "data" / "store"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
