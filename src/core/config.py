#!/usr/bin/env python3
"""
Feedback insights configuration.

Settings come from environment variables (optionally seeded from a .env
file) and are checked in one pass so every problem is reported together.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional, Dict, List

from .env_loader import load_env_file

logger = logging.getLogger(__name__)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
CACHE_BACKENDS = ('memory', 'redis')


@dataclass
class DatabaseConfig:
    """PostgreSQL store settings."""
    database_url: str
    connection_timeout: int = 30


@dataclass
class IntegrationConfig:
    """Inference and cache endpoints."""
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    redis_url: Optional[str] = None


@dataclass
class ApplicationConfig:
    """Analysis, cache and logging behaviour."""
    analysis_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 1200
    llm_temperature: float = 0.2
    llm_timeout: int = 60

    cache_backend: str = "memory"
    analysis_cache_ttl_seconds: int = 21600  # 6 hours
    digest_cache_ttl_seconds: int = 600      # 10 minutes
    similar_cache_ttl_seconds: int = 1800    # 30 minutes

    similarity_pool_size: int = 50

    log_level: str = "INFO"
    verbose_logging: bool = False

    def cache_ttls(self) -> Dict[str, int]:
        """TTLs keyed by cache family."""
        return {
            'analysis': self.analysis_cache_ttl_seconds,
            'digest': self.digest_cache_ttl_seconds,
            'similar': self.similar_cache_ttl_seconds
        }


@dataclass
class Config:
    database: DatabaseConfig
    integrations: IntegrationConfig
    app: ApplicationConfig

    def has_openai(self) -> bool:
        return bool(self.integrations.openai_api_key)

    def has_redis(self) -> bool:
        return self.app.cache_backend == 'redis' and bool(self.integrations.redis_url)


class _EnvReader:
    """Typed environment lookups that collect conversion errors."""

    def __init__(self):
        self.errors: List[str] = []

    def text(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return os.getenv(key, default)

    def required(self, key: str) -> str:
        value = os.getenv(key)
        if not value:
            self.errors.append(f"{key} is required")
            return ''
        return value

    def integer(self, key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            self.errors.append(f"{key} must be an integer, got {raw!r}")
            return default

    def number(self, key: str, default: float) -> float:
        raw = os.getenv(key)
        if raw is None:
            return default
        try:
            return float(raw)
        except ValueError:
            self.errors.append(f"{key} must be a number, got {raw!r}")
            return default

    def flag(self, key: str, default: bool = False) -> bool:
        raw = os.getenv(key)
        if raw is None:
            return default
        return raw.strip().lower() in ('1', 'true', 'yes', 'on')


class ConfigManager:
    """Loads, validates and caches the process configuration."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Args:
            env_file_path: .env file relative to the project root; variables
                already set in the environment win
        """
        self._config: Optional[Config] = None
        load_env_file(env_file_path)

    def get_config(self) -> Config:
        """
        Configuration built on first call.

        Raises:
            ValueError: Listing every missing or invalid setting
        """
        if self._config is None:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        env = _EnvReader()

        config = Config(
            database=DatabaseConfig(
                database_url=env.required('DATABASE_URL'),
                connection_timeout=env.integer('DB_CONNECTION_TIMEOUT', 30)
            ),
            integrations=IntegrationConfig(
                openai_api_key=env.text('OPENAI_API_KEY'),
                openai_base_url=env.text('OPENAI_BASE_URL'),
                redis_url=env.text('REDIS_URL')
            ),
            app=ApplicationConfig(
                analysis_model=env.text('ANALYSIS_MODEL', 'gpt-4o-mini'),
                llm_max_tokens=env.integer('LLM_MAX_TOKENS', 1200),
                llm_temperature=env.number('LLM_TEMPERATURE', 0.2),
                llm_timeout=env.integer('LLM_TIMEOUT', 60),
                cache_backend=env.text('CACHE_BACKEND', 'memory').lower(),
                analysis_cache_ttl_seconds=env.integer('ANALYSIS_CACHE_TTL', 21600),
                digest_cache_ttl_seconds=env.integer('DIGEST_CACHE_TTL', 600),
                similar_cache_ttl_seconds=env.integer('SIMILAR_CACHE_TTL', 1800),
                similarity_pool_size=env.integer('SIMILARITY_POOL_SIZE', 50),
                log_level=env.text('LOG_LEVEL', 'INFO').upper(),
                verbose_logging=env.flag('VERBOSE_LOGGING')
            )
        )

        errors = env.errors + self._check(config)
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        logger.debug("Configuration loaded")
        return config

    @staticmethod
    def _check(config: Config) -> List[str]:
        """Range and consistency checks on converted values."""
        problems = []
        database, integrations, app = config.database, config.integrations, config.app

        if database.database_url and not database.database_url.startswith(('postgresql://', 'postgres://')):
            problems.append("DATABASE_URL must start with postgresql:// or postgres://")
        if database.connection_timeout < 1:
            problems.append("DB_CONNECTION_TIMEOUT must be at least 1 second")

        if not 0 <= app.llm_temperature <= 2:
            problems.append("LLM_TEMPERATURE must be between 0 and 2")
        if app.llm_max_tokens < 1:
            problems.append("LLM_MAX_TOKENS must be at least 1")

        if app.cache_backend not in CACHE_BACKENDS:
            problems.append(f"CACHE_BACKEND must be one of: {', '.join(CACHE_BACKENDS)}")
        elif app.cache_backend == 'redis' and not integrations.redis_url:
            problems.append("REDIS_URL is required when CACHE_BACKEND=redis")

        for family, ttl in app.cache_ttls().items():
            if ttl < 1:
                problems.append(f"{family.upper()}_CACHE_TTL must be at least 1 second")

        if app.similarity_pool_size < 1:
            problems.append("SIMILARITY_POOL_SIZE must be at least 1")

        if app.log_level not in LOG_LEVELS:
            problems.append(f"LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}")

        return problems

    def update_logging(self) -> None:
        """Apply LOG_LEVEL and VERBOSE_LOGGING to the root logger's handlers."""
        app = self.get_config().app
        level = getattr(logging, app.log_level)

        if app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        formatter = logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S')

        root = logging.getLogger()
        root.setLevel(level)
        for handler in root.handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)


_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Process-wide configuration manager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    return get_config_manager().get_config()
