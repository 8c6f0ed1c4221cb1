"""Typed per-build service registry.

Build-wide singletons (the root publishing coordinator, publishing settings,
the release-override policy) are registered here by type so that project
plugins resolve them explicitly instead of searching the project tree.
"""

from __future__ import annotations

from typing import cast

from extpub.build.errors import ConfigurationError

__all__ = ["ServiceRegistry"]


class ServiceRegistry:
    """Maps a type to the single instance registered for it."""

    def __init__(self) -> None:
        self._services: dict[type, object] = {}

    def register[T](self, service: T, as_type: type[T] | None = None) -> T:
        key = as_type if as_type is not None else type(service)
        existing = self._services.get(key)
        if existing is not None and existing is not service:
            raise ConfigurationError(f"A {key.__name__} is already registered for this build")
        self._services[key] = service
        return service

    def get[T](self, service_type: type[T]) -> T | None:
        service = self._services.get(service_type)
        if service is None:
            return None
        return cast(T, service)

    def require[T](self, service_type: type[T], message: str | None = None) -> T:
        """Return the registered instance or raise ``ConfigurationError``."""
        service = self.get(service_type)
        if service is None:
            raise ConfigurationError(
                message or f"No {service_type.__name__} has been registered for this build"
            )
        return service

    def __contains__(self, service_type: object) -> bool:
        return service_type in self._services
