"""Plugins, the plugin manager and project extensions.

A plugin is a class with an ``apply(project)`` method. Each project applies a
plugin type at most once; applying it again returns the existing instance, so
plugins can freely apply the plugins they build on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, ClassVar, cast

from extpub.build.errors import ConfigurationError

if TYPE_CHECKING:
    from extpub.build.project import Project

__all__ = ["ExtensionContainer", "Plugin", "PluginManager"]


class Plugin(ABC):
    """Base class for plugins."""

    id: ClassVar[str]

    @abstractmethod
    def apply(self, project: Project) -> None: ...


class PluginManager:
    """Applies plugins to one project and tracks which are present."""

    def __init__(self, project: Project) -> None:
        self._project = project
        self._plugins: dict[type[Plugin], Plugin] = {}
        self._pending: dict[type[Plugin], list[Callable[[Plugin], None]]] = {}

    def apply[P: Plugin](self, plugin_type: type[P]) -> P:
        existing = self._plugins.get(plugin_type)
        if existing is not None:
            return cast(P, existing)

        plugin = plugin_type()
        plugin.apply(self._project)
        self._plugins[plugin_type] = plugin

        for action in self._pending.pop(plugin_type, []):
            action(plugin)
        return plugin

    def find_plugin[P: Plugin](self, plugin_type: type[P]) -> P | None:
        plugin = self._plugins.get(plugin_type)
        if plugin is None:
            return None
        return cast(P, plugin)

    def has_plugin(self, plugin_type: type[Plugin]) -> bool:
        return plugin_type in self._plugins

    def with_plugin[P: Plugin](self, plugin_type: type[P], action: Callable[[P], None]) -> None:
        """Run ``action`` once ``plugin_type`` is applied (immediately if it already is)."""
        plugin = self._plugins.get(plugin_type)
        if plugin is not None:
            action(cast(P, plugin))
            return
        self._pending.setdefault(plugin_type, []).append(cast(Callable[[Plugin], None], action))

    def __iter__(self) -> Iterator[Plugin]:
        return iter(list(self._plugins.values()))


class ExtensionContainer:
    """Named configuration objects contributed by plugins."""

    def __init__(self, project: Project) -> None:
        self._project = project
        self._extensions: dict[str, object] = {}

    def add[T](self, name: str, extension: T) -> T:
        if name in self._extensions:
            raise ConfigurationError(
                f"Cannot add extension '{name}' to project '{self._project.path}': "
                "an extension with that name already exists"
            )
        self._extensions[name] = extension
        return extension

    def find_by_name(self, name: str) -> object | None:
        return self._extensions.get(name)

    def find_by_type[T](self, extension_type: type[T]) -> T | None:
        for extension in self._extensions.values():
            if isinstance(extension, extension_type):
                return extension
        return None

    def get_by_type[T](self, extension_type: type[T]) -> T:
        extension = self.find_by_type(extension_type)
        if extension is None:
            raise ConfigurationError(
                f"Extension of type '{extension_type.__name__}' does not exist "
                f"in project '{self._project.path}'"
            )
        return extension
