"""Printable summaries rendered with kida.

Used by ``App.configuration_summary()``, ``AutoConfiguration.summary()``
and the ``lyven config`` command. Values are formatted here and the
templates only lay them out.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING

from kida import Environment

if TYPE_CHECKING:
    from lyven.config import AppConfig
    from lyven.di.container import Container
    from lyven.properties import Properties

CONFIGURATION = """\
Lyven Configuration:
  Server: http://{{ host }}:{{ port }}{{ context_path }}
  CORS: {{ cors }}
  Dev Mode: {{ dev_mode }}
  Log Level: {{ log_level }}
  Constructor selection: {{ constructors }}
  Parameter binding: {{ binding }}
  Registered components: {{ registered }}
{% for line in components %}
    - {{ line }}
{% end %}
{% if routes %}
  Routes: {{ route_count }}
{% for line in routes %}
    {{ line }}
{% end %}
{% end %}
"""

PROPERTIES = """\
Current Lyven Properties:
{% for line in lines %}
  {{ line }}
{% end %}
"""

AUTO_CONFIGURATION = """\
Auto-Configuration Summary:
  Auto-scan: {{ auto_scan }}
  Scan modules: {{ modules }}
  Registered components: {{ registered }}
"""


def _environment() -> Environment:
    """Plain-text kida Environment: no escaping, block tags leave no blank lines."""
    return Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)


def _render(source: str, **context: object) -> str:
    return _environment().from_string(source).render(context)


def _enabled(flag: bool) -> str:
    return "enabled" if flag else "disabled"


def render_configuration(
    config: AppConfig,
    container: Container,
    routes: Iterable[str] = (),
) -> str:
    """Server, policy, registered components and (optionally) route descriptions."""
    registry = container.registry
    route_lines = list(routes)
    components = [
        f"{descriptor.token} ({descriptor.kind.value})"
        for cls in registry.all_registered()
        if (descriptor := registry.descriptor(cls)) is not None
    ]
    return _render(
        CONFIGURATION,
        host=config.host,
        port=config.port,
        context_path=config.context_path,
        cors=_enabled(config.cors_enabled),
        dev_mode=_enabled(config.dev_mode),
        log_level=config.log_level,
        constructors="strict" if config.strict_constructors else "permissive",
        binding="strict" if config.strict_binding else "permissive",
        registered=registry.registration_count,
        components=components,
        routes=route_lines,
        route_count=len(route_lines),
    )


def render_properties(props: Properties) -> str:
    """All properties, sorted by key."""
    lines = [f"{key} = {value}" for key, value in sorted(props.all_properties().items())]
    return _render(PROPERTIES, lines=lines)


def render_auto_configuration(
    auto_scan: bool,
    modules: Iterable[str],
    registered: int,
) -> str:
    return _render(
        AUTO_CONFIGURATION,
        auto_scan=_enabled(auto_scan),
        modules=", ".join(modules) or "(none)",
        registered=registered,
    )
