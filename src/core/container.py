#!/usr/bin/env python3
"""
Dependency Injection Container

Central place where the configuration, storage backend, run store and
workflow order are built, so commands and tests share one wiring.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        """Initialize empty container."""
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._singleton_names: Set[str] = set()
        self._lock = threading.RLock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a service created once on first use and then reused."""
        with self._lock:
            self._factories[service_name] = factory
            self._singleton_names.add(service_name)
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a service created anew on every lookup."""
        with self._lock:
            self._factories[service_name] = factory
            self._singleton_names.discard(service_name)

    def register_instance(self, service_name: str, instance: T) -> None:
        """Register an existing instance as singleton."""
        with self._lock:
            self._singletons[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        if service_name in self._singletons:
            return self._singletons[service_name]

        if service_name not in self._factories:
            raise KeyError(f"Service '{service_name}' not registered")

        factory = self._factories[service_name]
        if service_name not in self._singleton_names:
            logger.debug(f"Created new instance for '{service_name}'")
            return factory()

        with self._lock:
            if service_name not in self._singletons:
                self._singletons[service_name] = factory()
                logger.debug(f"Created singleton instance for '{service_name}'")
            return self._singletons[service_name]

    def has(self, service_name: str) -> bool:
        """Check if service is registered."""
        return service_name in self._factories or service_name in self._singletons

    def clear(self) -> None:
        """Clear all registered services and instances."""
        with self._lock:
            self._factories.clear()
            self._singleton_names.clear()
            self._singletons.clear()


# Global container instance
_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = Container()
                setup_default_services(_container)
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None


def setup_default_services(container: Container) -> None:
    """Register the default services; each one resolves its dependencies through the container."""

    def create_config():
        from core.config import get_config
        return get_config()

    def create_kv_store():
        from core.kv_store import create_kv_store as build_store
        config = container.get('config')
        return build_store(config.storage.backend, config.storage.data_dir)

    def create_run_store():
        from core.run_store import RunStore
        return RunStore(container.get('kv_store'))

    def create_global_order():
        from core.ordering import GlobalOrder
        return GlobalOrder(container.get('kv_store'))

    container.register_singleton('config', create_config)
    container.register_singleton('kv_store', create_kv_store)
    container.register_singleton('run_store', create_run_store)
    container.register_singleton('global_order', create_global_order)

    logger.debug("Default services registered in container")
