"""Auto-configuration — register marked classes from named modules.

Nothing is discovered implicitly: ``configure()`` imports exactly the
modules (and, for packages, their submodules) added with ``add_module``,
and registers every concrete ``@component`` / ``@injectable`` class
defined at their top level.

Usage::

    auto = AutoConfiguration(container).add_module("myapp.services")
    registered = auto.configure()
"""

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType

from lyven.di.container import Container
from lyven.errors import ConfigurationError
from lyven.markers import component_meta
from lyven.summary import render_auto_configuration

logger = logging.getLogger("lyven.config")


def _import(name: str) -> ModuleType:
    try:
        return importlib.import_module(name)
    except ImportError as exc:
        msg = f"Auto-configuration could not import {name!r}: {exc}"
        raise ConfigurationError(msg) from exc


def _modules_under(name: str) -> list[ModuleType]:
    """*name* and, for packages, every submodule beneath it."""
    root = _import(name)
    found = [root]
    search_path = getattr(root, "__path__", None)
    if search_path is not None:
        for info in pkgutil.walk_packages(search_path, prefix=f"{name}."):
            found.append(_import(info.name))
    return found


def _is_candidate(obj: object, module: ModuleType) -> bool:
    return (
        isinstance(obj, type)
        and obj.__module__ == module.__name__
        and "." not in obj.__qualname__
        and not inspect.isabstract(obj)
        and component_meta(obj) is not None
    )


class AutoConfiguration:
    """Registers marked classes found in explicitly named modules."""

    __slots__ = ("_auto_scan", "_container", "_modules")

    def __init__(self, container: Container, modules: tuple[str, ...] = ()) -> None:
        self._container = container
        self._modules: list[str] = []
        self._auto_scan = True
        for name in modules:
            self.add_module(name)

    # -- Scan list --

    def add_module(self, name: str) -> AutoConfiguration:
        if name and name not in self._modules:
            self._modules.append(name)
        return self

    def remove_module(self, name: str) -> AutoConfiguration:
        if name in self._modules:
            self._modules.remove(name)
        return self

    @property
    def modules(self) -> tuple[str, ...]:
        return tuple(self._modules)

    def enable_auto_scan(self, enabled: bool) -> AutoConfiguration:
        self._auto_scan = enabled
        return self

    @property
    def auto_scan_enabled(self) -> bool:
        return self._auto_scan

    # -- Registration --

    def configure(self) -> list[type]:
        """Import the scan modules and register their marked classes.

        Returns the registered classes in discovery order. Returns an
        empty list when auto-scan is disabled. Raises
        ``ConfigurationError`` when a module cannot be imported.
        """
        if not self._auto_scan:
            logger.debug("Auto-scan disabled; skipping %d modules", len(self._modules))
            return []

        logger.info("Starting auto-configuration of %s", ", ".join(self._modules) or "(none)")
        discovered: list[type] = []
        for name in self._modules:
            for module in _modules_under(name):
                for obj in vars(module).values():
                    if _is_candidate(obj, module) and obj not in discovered:
                        discovered.append(obj)

        for cls in discovered:
            self._container.register(cls)
            logger.debug("Registered component: %s", cls.__name__)
        logger.info("Auto-configuration completed. Registered %d components", len(discovered))
        return discovered

    def register_component(
        self, cls: type, implementation: type | None = None
    ) -> AutoConfiguration:
        """Register directly, bypassing the scan."""
        self._container.register(cls, implementation)
        return self

    def summary(self) -> str:
        return render_auto_configuration(
            self._auto_scan,
            self._modules,
            self._container.registry.registration_count,
        )
