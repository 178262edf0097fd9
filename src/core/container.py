#!/usr/bin/env python3
"""
Service container for the feedback insights commands.

Commands ask the container for the store, cache, inference client and the
three analysis engines by name; the default wiring builds them from the
environment configuration.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class Container:
    """
    Name -> service registry.

    Shared services are built once on first use; the rest are built on every
    get(). Factories receive the container so they can resolve their own
    dependencies.
    """

    def __init__(self):
        self._factories: Dict[str, Callable[['Container'], Any]] = {}
        self._shared: Dict[str, bool] = {}
        self._instances: Dict[str, Any] = {}
        # Factories call get() while the lock is held
        self._lock = threading.RLock()

    def register(self, name: str, factory: Callable[['Container'], Any], shared: bool = False) -> None:
        """
        Register a service factory.

        Args:
            name: Service name used by get()
            factory: Called with this container, returns the service
            shared: Build once and reuse
        """
        with self._lock:
            self._factories[name] = factory
            self._shared[name] = shared
            self._instances.pop(name, None)

    def register_instance(self, name: str, instance: Any) -> None:
        """Register a ready-built service (used to swap in fakes)."""
        with self._lock:
            self._instances[name] = instance

    def get(self, name: str) -> Any:
        """
        Resolve a service.

        Raises:
            KeyError: If nothing is registered under name
        """
        with self._lock:
            if name in self._instances:
                return self._instances[name]

            if name not in self._factories:
                raise KeyError(f"Service '{name}' not registered")

            instance = self._factories[name](self)
            if self._shared[name]:
                self._instances[name] = instance
                logger.debug(f"Built shared service '{name}'")
            return instance


def _build_cache_manager(container: Container):
    from core.caching import CacheManager, create_cache_store
    config = container.get('config')
    store = create_cache_store(
        backend=config.app.cache_backend,
        redis_url=config.integrations.redis_url
    )
    return CacheManager(store, ttls=config.app.cache_ttls())


def _build_openai_client(container: Container):
    from integrations.openai_client import OpenAIClient
    config = container.get('config')
    if not config.has_openai():
        raise ValueError("OpenAI API key not configured")
    return OpenAIClient(
        api_key=config.integrations.openai_api_key,
        base_url=config.integrations.openai_base_url,
        max_tokens=config.app.llm_max_tokens,
        temperature=config.app.llm_temperature,
        timeout=config.app.llm_timeout
    )


def _build_orchestrator(container: Container):
    from core.analysis import AnalysisOrchestrator
    database = container.get('database')
    return AnalysisOrchestrator(
        database.feedback,
        database.analyses,
        container.get('cache_manager'),
        container.get('openai_client'),
        model=container.get('config').app.analysis_model
    )


def _build_similarity_engine(container: Container):
    from core.similarity import SimilarityEngine
    return SimilarityEngine(
        container.get('database').analyses,
        container.get('cache_manager'),
        pool_size=container.get('config').app.similarity_pool_size
    )


def _build_digest_aggregator(container: Container):
    from core.analysis import DigestAggregator
    database = container.get('database')
    return DigestAggregator(database.feedback, database.analyses, container.get('cache_manager'))


def _build_database(container: Container):
    from core.database import DatabaseFacade
    return DatabaseFacade(container.get('config'))


def _load_config(container: Container):
    from core.config import get_config
    return get_config()


def build_default_container() -> Container:
    """Container wired from the environment configuration."""
    container = Container()

    container.register('config', _load_config, shared=True)
    container.register('database', _build_database, shared=True)
    container.register('cache_manager', _build_cache_manager, shared=True)

    container.register('openai_client', _build_openai_client)
    container.register('analysis_orchestrator', _build_orchestrator)
    container.register('similarity_engine', _build_similarity_engine)
    container.register('digest_aggregator', _build_digest_aggregator)

    logger.debug("Default services registered")
    return container


_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Process-wide default container."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = build_default_container()
    return _container
