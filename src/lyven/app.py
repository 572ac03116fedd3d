"""Lyven App — registration surface and dispatch entry point.

Mutable during setup (``register``, ``scan``). Freezes on first dispatch
or first access to ``router``: auto-configuration runs, components are
instantiated, and the route table is built. After that, registration
raises ``RuntimeError``.

Usage::

    app = App(AppConfig(log_level="DEBUG"))
    app.register(UserService).register(UserController)

    users = app.handle("GET", "/users?page=2")
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any

from lyven.autoconfig import AutoConfiguration
from lyven.config import AppConfig
from lyven.context import RequestContext
from lyven.di.container import Container
from lyven.errors import RouteNotFoundError
from lyven.properties import Properties
from lyven.routing.codec import BodyCodec
from lyven.routing.router import Router
from lyven.summary import render_configuration

logger = logging.getLogger("lyven.app")


class App:
    """The lyven application.

    Args:
        config: Application configuration. Loaded from
            ``application.properties`` and ``LYVEN_*`` environment
            variables when omitted (or from *properties* when given).
        properties: The property store to expose through the container.
        codec: Body codec for ``Body``-marked handler parameters.
    """

    __slots__ = (
        "_auto_config",
        "_codec",
        "_container",
        "_freeze_lock",
        "_frozen",
        "_properties",
        "_router",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        properties: Properties | None = None,
        codec: BodyCodec | None = None,
    ) -> None:
        if config is None:
            if properties is None:
                properties = Properties()
                config = AppConfig.load(properties=properties)
            else:
                config = AppConfig.from_properties(properties)
        self.config: AppConfig = config
        self._properties: Properties = properties if properties is not None else Properties()
        self._codec = codec
        self._frozen = False
        self._freeze_lock = threading.Lock()
        self._router: Router | None = None

        logging.getLogger("lyven").setLevel(config.log_level)

        self._container = Container(strict=config.strict_constructors)
        self._container.register_instance(AppConfig, config)
        self._container.register_instance(Properties, self._properties)

        self._auto_config = AutoConfiguration(self._container)
        self._auto_config.enable_auto_scan(
            self._properties.get_bool("lyven.auto-scan.enabled", True)
        )
        packages = self._properties.get_string("lyven.auto-scan.packages") or ""
        for name in packages.split(","):
            self._auto_config.add_module(name.strip())

    # -- Setup --

    def register(self, cls: type, implementation: type | None = None) -> App:
        """Register a marked class, or bind *cls* to *implementation*. Chainable."""
        self._check_not_frozen()
        self._container.register(cls, implementation)
        return self

    def scan(self, *modules: str) -> App:
        """Add modules for auto-configuration at freeze time. Chainable."""
        self._check_not_frozen()
        for name in modules:
            self._auto_config.add_module(name)
        return self

    @property
    def container(self) -> Container:
        return self._container

    @property
    def properties(self) -> Properties:
        return self._properties

    @property
    def auto_configuration(self) -> AutoConfiguration:
        return self._auto_config

    @property
    def router(self) -> Router:
        """The route table. Accessing it freezes the app."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router

    # -- Dispatch --

    def handle(
        self,
        method: str,
        target: str,
        body: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Dispatch a request target such as ``/users?page=2``.

        The configured context path is stripped before matching.
        """
        context = RequestContext.from_target(method, target, body=body, headers=headers)
        path = self._strip_context_path(context)
        return self.router.execute_route(path, context.method, context)

    def _strip_context_path(self, context: RequestContext) -> str:
        prefix = self.config.context_path.rstrip("/")
        if not prefix:
            return context.path
        if context.path == prefix:
            return "/"
        if context.path.startswith(prefix + "/"):
            return context.path[len(prefix) :]
        raise RouteNotFoundError(context.method, context.path)

    def configuration_summary(self) -> str:
        routes: list[str] = []
        if self._router is not None:
            routes = [r.description for r in self._router.all_routes()]
        return render_configuration(self.config, self._container, routes)

    # -- Freezing --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking.

        Exactly one thread scans modules and builds the router.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """MUST only be called while holding _freeze_lock."""
        self._auto_config.configure()
        self._router = Router(
            self._container,
            codec=self._codec,
            strict_binding=self.config.strict_binding,
        )
        self._frozen = True
        if self.config.dev_mode:
            logger.info("%s", self.configuration_summary())

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started dispatching. "
                "Register components before the first request."
            )
            raise RuntimeError(msg)
