"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, no string-key
lookups. Build one directly, or from ``Properties``::

    config = AppConfig(port=3000, dev_mode=True)
    config = AppConfig.load("application.properties")
    config = dataclasses.replace(config, strict_binding=True)
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from lyven.properties import Properties

logger = logging.getLogger("lyven.config")

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation."""

    # Server
    host: str = "localhost"
    port: int = 8080
    context_path: str = ""
    cors_enabled: bool = True

    # Development
    dev_mode: bool = False
    log_level: str = "INFO"

    # DI and dispatch policy
    strict_constructors: bool = False  # ambiguous constructors raise instead of falling back
    strict_binding: bool = False  # unbindable handler parameters raise instead of binding None

    @classmethod
    def from_properties(cls, props: Properties) -> AppConfig:
        """Read the ``server.*``, ``lyven.*`` and ``logging.level`` keys."""
        defaults = cls()
        level = (props.get_string("logging.level") or defaults.log_level).upper()
        if level not in _LOG_LEVELS:
            logger.warning("Unknown logging.level %r; using %s", level, defaults.log_level)
            level = defaults.log_level
        return cls(
            host=props.get_string("server.host") or defaults.host,
            port=props.get_int("server.port", defaults.port),
            context_path=props.get_string("server.context-path") or "",
            cors_enabled=props.get_bool("server.cors.enabled", defaults.cors_enabled),
            dev_mode=props.get_bool("lyven.dev-mode", defaults.dev_mode),
            log_level="WARNING" if level == "WARN" else level,
            strict_constructors=props.get_bool("lyven.strict-constructors"),
            strict_binding=props.get_bool("lyven.strict-binding"),
        )

    @classmethod
    def load(
        cls,
        path: str | Path | None = "application.properties",
        *,
        env_prefix: str = "LYVEN_",
        environ: Mapping[str, str] | None = None,
        properties: Properties | None = None,
    ) -> AppConfig:
        """Load defaults, then *path* (if it exists), then environment overrides."""
        props = properties if properties is not None else Properties()
        if path is not None:
            props.load_from_file(path)
        props.load_from_environment(env_prefix, environ)
        return cls.from_properties(props)
