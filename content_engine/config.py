"""Configuration management for the content engine"""

import os
from typing import Optional, List
from pathlib import Path
import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class ProviderConfig(BaseModel):
    """Provider-specific configuration"""
    api_key_env: Optional[str] = None
    base_url: Optional[str] = None
    model: Optional[str] = None
    max_tokens: int = 4000
    temperature: float = 0.7
    request_timeout: Optional[float] = None  # Seconds; None disables the deadline


class ModelConfig(BaseModel):
    """Model configuration"""
    primary: str = "claude"
    fallback: str = "gemini"
    secondary_only: bool = False  # Skip the primary provider entirely
    claude: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(
            api_key_env="ANTHROPIC_API_KEY",
            model="claude-3-7-sonnet-20250219",
        )
    )
    gemini: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(
            api_key_env="GEMINI_API_KEY",
            model="gemini-2.5-flash",
        )
    )
    deepseek: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(
            api_key_env="DEEPSEEK_API_KEY",
            base_url="https://api.deepseek.com",
            model="deepseek-chat",
        )
    )


class WriterConfig(BaseModel):
    """Writer persona configuration"""
    persona: str
    # Provider name to call directly instead of the dispatcher
    provider: Optional[str] = None


def _default_writers() -> List[WriterConfig]:
    return [
        WriterConfig(persona="clinical"),
        WriterConfig(persona="empathetic"),
        WriterConfig(persona="practical"),
        WriterConfig(persona="innovative", provider="deepseek"),
    ]


class PipelineConfig(BaseModel):
    """Orchestrator configuration"""
    max_revisions: int = Field(default=3, ge=0)
    min_drafts: int = Field(default=2, ge=2)
    judge_excerpt_chars: int = 2000
    synthesis_excerpt_chars: int = 1500
    critic_excerpt_chars: int = 8000
    quality_threshold: float = 7.0
    batch_size: int = 5
    batch_delay_seconds: float = 3.0


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Config(BaseModel):
    """Main configuration"""
    model: ModelConfig = Field(default_factory=ModelConfig)
    writers: List[WriterConfig] = Field(default_factory=_default_writers)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: str = "config.yaml") -> "Config":
        """Load configuration from YAML file"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    def get_provider(self, provider: str) -> ProviderConfig:
        """
        Get configuration block for a provider.

        Args:
            provider: Provider name ("claude", "gemini", "deepseek")

        Returns:
            ProviderConfig for the requested provider

        Raises:
            ValueError: If the provider is unknown
        """
        provider_config = getattr(self.model, provider, None)
        if not isinstance(provider_config, ProviderConfig):
            raise ValueError(
                f"Unknown provider '{provider}'. Supported: claude, gemini, deepseek"
            )
        return provider_config

    def get_api_key(self, provider: str) -> Optional[str]:
        """Get API key for specific provider"""
        provider_config = getattr(self.model, provider, None)
        if isinstance(provider_config, ProviderConfig) and provider_config.api_key_env:
            return os.getenv(provider_config.api_key_env)
        return None

    def apply_overrides(self, settings: "RuntimeSettings") -> "Config":
        """Apply environment overrides on top of the file configuration"""
        if settings.secondary_only is not None:
            self.model.secondary_only = settings.secondary_only
        if settings.log_level:
            self.logging.level = settings.log_level.upper()
        return self


class RuntimeSettings(BaseSettings):
    """Deployment-time switches read from CONTENT_ENGINE_* environment variables"""
    model_config = SettingsConfigDict(env_prefix="CONTENT_ENGINE_")

    config_path: str = "config.yaml"
    secondary_only: Optional[bool] = None
    log_level: Optional[str] = None


# Global config instance
_config: Optional[Config] = None


def _load(config_path: Optional[str]) -> Config:
    settings = RuntimeSettings()
    path = config_path or settings.config_path
    return Config.from_yaml(path).apply_overrides(settings)


def get_config(config_path: Optional[str] = None) -> Config:
    """Get or create global configuration instance"""
    global _config
    if _config is None:
        _config = _load(config_path)
    return _config


def reload_config(config_path: Optional[str] = None) -> Config:
    """Reload configuration from file"""
    global _config
    _config = _load(config_path)
    return _config
