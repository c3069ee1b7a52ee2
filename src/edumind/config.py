"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from edumind.assessment.aggregator import STRONG_TOPIC_THRESHOLD, WEAK_TOPIC_THRESHOLD
from edumind.modules.chat import CHAT_AUTOSAVE_INTERVAL
from edumind.modules.quiz import MAX_QUIZ_QUESTIONS


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from config/settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested sections to match Settings field names
        flattened = {}
        if "server" in data:
            flattened["host"] = data["server"].get("host")
            flattened["port"] = data["server"].get("port")
        if "openai" in data:
            flattened["chat_model"] = data["openai"].get("chat_model")
            flattened["generation_model"] = data["openai"].get("generation_model")
        if "storage" in data:
            flattened["data_dir"] = data["storage"].get("data_dir")
        if "study" in data:
            study = data["study"]
            flattened["weak_topic_threshold"] = study.get("weak_topic_threshold")
            flattened["strong_topic_threshold"] = study.get("strong_topic_threshold")
            flattened["chat_autosave_interval"] = study.get("chat_autosave_interval")
            flattened["max_quiz_questions"] = study.get("max_quiz_questions")

        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str = Field(description="OpenAI API key")
    chat_model: str = Field(default="gpt-4o-mini")
    generation_model: str = Field(default="gpt-4o-mini")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Study rules
    weak_topic_threshold: float = Field(default=WEAK_TOPIC_THRESHOLD, ge=0, le=100)
    strong_topic_threshold: float = Field(default=STRONG_TOPIC_THRESHOLD, ge=0, le=100)
    chat_autosave_interval: int = Field(default=CHAT_AUTOSAVE_INTERVAL, ge=2)
    max_quiz_questions: int = Field(default=MAX_QUIZ_QUESTIONS, ge=1)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)
    data_dir: Path | None = Field(default=None)

    @property
    def store_dir(self) -> Path:
        """Directory of the key-value store (one directory per user)."""
        d = self.data_dir or self.project_root / "data" / "store"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def prompts_path(self) -> Path:
        return self.project_root / "config" / "prompts" / "gateway.yaml"

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
