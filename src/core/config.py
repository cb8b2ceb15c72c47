#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for all application configuration,
including environment variables, defaults, and validation.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional

from core.env_loader import load_env_file

logger = logging.getLogger(__name__)

VALID_STORAGE_BACKENDS = ('file', 'memory', 'none')
VALID_TIME_WINDOWS = ('24h', '7d', '30d')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class StorageConfig:
    """Where stored runs and the workflow order live."""
    backend: str = 'file'
    data_dir: str = '~/.actions_reporter'


@dataclass
class GitHubConfig:
    """GitHub API access configuration."""
    token: Optional[str] = field(default=None, repr=False)
    api_url: str = 'https://api.github.com'
    request_timeout: int = 30
    page_size: int = 100
    batch_size: int = 5


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    default_time_window: str = '24h'
    short_run_ratio: float = 0.05
    main_branch: str = 'main'

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False


@dataclass
class Config:
    """Master configuration container."""
    storage: StorageConfig
    github: GitHubConfig
    app: ApplicationConfig

    environment: str = field(default_factory=lambda: os.getenv('ENVIRONMENT', 'development'))
    is_ci: bool = field(default_factory=lambda: bool(os.getenv('CI') or os.getenv('GITHUB_ACTIONS')))

    def has_github_token(self) -> bool:
        """Check if a GitHub token is configured."""
        return bool(self.github.token)


class ConfigManager:
    """Manages application configuration with validation and environment loading."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file relative to project root
        """
        self._config: Optional[Config] = None
        load_env_file(env_file_path)

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""
        try:
            storage_config = StorageConfig(
                backend=os.getenv('ACTIONS_REPORTER_STORAGE', 'file').lower(),
                data_dir=os.getenv('ACTIONS_REPORTER_DATA_DIR', '~/.actions_reporter')
            )

            github_config = GitHubConfig(
                token=os.getenv('GITHUB_TOKEN') or None,
                api_url=os.getenv('GITHUB_API_URL', 'https://api.github.com'),
                request_timeout=int(os.getenv('GITHUB_REQUEST_TIMEOUT', '30')),
                page_size=int(os.getenv('GITHUB_PAGE_SIZE', '100')),
                batch_size=int(os.getenv('GITHUB_BATCH_SIZE', '5'))
            )

            app_config = ApplicationConfig(
                default_time_window=os.getenv('DEFAULT_TIME_WINDOW', '24h'),
                short_run_ratio=float(os.getenv('SHORT_RUN_RATIO', '0.05')),
                main_branch=os.getenv('MAIN_BRANCH', 'main'),
                log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
                verbose_logging=os.getenv('VERBOSE_LOGGING', 'false').lower() == 'true'
            )
        except ValueError as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

        config = Config(storage=storage_config, github=github_config, app=app_config)

        self._validate_config(config)
        return config

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        errors = []

        if config.storage.backend not in VALID_STORAGE_BACKENDS:
            errors.append(f"ACTIONS_REPORTER_STORAGE must be one of: {', '.join(VALID_STORAGE_BACKENDS)}")

        if not config.github.api_url.startswith(('https://', 'http://')):
            errors.append("GITHUB_API_URL must be an http(s) URL")

        if config.github.request_timeout < 1:
            errors.append("GITHUB_REQUEST_TIMEOUT must be at least 1 second")

        if config.github.page_size < 1 or config.github.page_size > 100:
            errors.append("GITHUB_PAGE_SIZE must be between 1 and 100")

        if config.github.batch_size < 1 or config.github.batch_size > 20:
            errors.append("GITHUB_BATCH_SIZE must be between 1 and 20")

        if config.app.default_time_window not in VALID_TIME_WINDOWS:
            errors.append(f"DEFAULT_TIME_WINDOW must be one of: {', '.join(VALID_TIME_WINDOWS)}")

        if config.app.short_run_ratio < 0 or config.app.short_run_ratio > 1:
            errors.append("SHORT_RUN_RATIO must be between 0 and 1")

        if not config.app.main_branch:
            errors.append("MAIN_BRANCH must not be empty")

        if config.app.log_level not in VALID_LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(VALID_LOG_LEVELS)}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        logger.debug("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S'))


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
