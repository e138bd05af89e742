"""Configuration management for the field mapper."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables from .env file in ops folder
env_path = Path(__file__).parent.parent / "ops" / ".env"
load_dotenv(dotenv_path=env_path)


class OpenAIConfig(BaseSettings):
    """OpenAI API configuration."""

    api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    model: str = Field(default="gpt-4o", alias="OPENAI_MODEL")
    base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class AnthropicConfig(BaseSettings):
    """Anthropic API configuration."""

    api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    model: str = Field(default="claude-3-5-sonnet-20241022", alias="ANTHROPIC_MODEL")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class OracleConfig(BaseSettings):
    """Settings for the mapping suggestion call."""

    temperature: float = Field(default=0.3, alias="ORACLE_TEMPERATURE")
    max_output_tokens: int = Field(default=1000, alias="ORACLE_MAX_OUTPUT_TOKENS")
    force_json_output: bool = Field(default=True, alias="ORACLE_FORCE_JSON")
    timeout: float = Field(default=60.0, alias="ORACLE_TIMEOUT")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class MLflowConfig(BaseSettings):
    """MLflow tracking configuration."""

    tracking_uri: Optional[str] = Field(
        default="sqlite:///mlflow.db", alias="MLFLOW_TRACKING_URI"
    )
    experiment_name: str = Field(default="field-mapper", alias="MLFLOW_EXPERIMENT_NAME")
    run_name: Optional[str] = Field(default=None, alias="MLFLOW_RUN_NAME")
    enabled: bool = Field(default=False, alias="MLFLOW_ENABLED")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class AppConfig(BaseSettings):
    """Main application configuration."""

    app_name: str = Field(default="zoro-field-mapper", alias="APP_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Field sources
    target_fields_path: Path = Field(
        default=Path("config/zoro_fields.yaml"), alias="TARGET_FIELDS_PATH"
    )
    hints_path: Optional[Path] = Field(default=None, alias="HINTS_PATH")
    results_dir: Path = Field(default=Path("results"), alias="RESULTS_DIR")

    # Batch processing
    max_workers: int = Field(default=1, alias="MAX_WORKERS")

    # Provider used by the field mapping agent: openai | anthropic
    field_mapping_llm: str = Field(default="openai", alias="FIELD_MAPPING_LLM")

    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    mlflow: MLflowConfig = Field(default_factory=MLflowConfig)

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    return config


def reload_config() -> AppConfig:
    """Reload configuration from environment variables."""
    global config
    config = AppConfig()
    return config
