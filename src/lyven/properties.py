"""Key/value properties with built-in defaults.

Values come from three places, later ones winning over defaults:

- a ``.properties`` file (``key=value``, ``key: value`` or ``key value``;
  ``#`` and ``!`` comments; a trailing backslash continues the line)
- environment variables with a prefix (``LYVEN_SERVER_PORT`` → ``server.port``)
- ``set_property()``

Every key in ``DEFAULTS`` is always present. Typed getters fall back to
the given default and log a warning when a stored value is malformed.
"""

import logging
import os
import threading
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger("lyven.config")

DEFAULTS: Mapping[str, str] = {
    # Server
    "server.port": "8080",
    "server.host": "localhost",
    "server.context-path": "",
    # CORS
    "server.cors.enabled": "true",
    "server.cors.allowed-origins": "*",
    "server.cors.allowed-methods": "GET,POST,PUT,DELETE,OPTIONS",
    "server.cors.allowed-headers": "*",
    # Framework
    "lyven.dev-mode": "false",
    "lyven.auto-scan.enabled": "true",
    "lyven.auto-scan.packages": "",
    "lyven.strict-constructors": "false",
    "lyven.strict-binding": "false",
    # Logging
    "logging.level": "INFO",
    "logging.pattern": "%(asctime)s [%(threadName)s] %(levelname)-5s %(name)s - %(message)s",
    # JSON
    "json.fail-on-unknown-properties": "false",
    "json.fail-on-empty-beans": "false",
}

_TRUE = frozenset({"true", "1", "yes", "on"})
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _unescape(text: str) -> str:
    out: list[str] = []
    chars = iter(text)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, "")
        if nxt == "u":
            digits = "".join(next(chars, "") for _ in range(4))
            out.append(chr(int(digits, 16)))
        else:
            out.append(_ESCAPES.get(nxt, nxt))
    return "".join(out)


def _logical_lines(text: str) -> list[str]:
    """Join backslash-continued lines and drop comments and blanks."""
    lines: list[str] = []
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        lines.append(pending + line)
        pending = ""
    if pending:
        lines.append(pending)
    return lines


def _split_entry(line: str) -> tuple[str, str]:
    """Split at the first unescaped ``=``, ``:`` or whitespace."""
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in "=:" or ch.isspace():
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip()
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip()
    return _unescape(key), _unescape(rest)


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``.properties`` text into a dict."""
    return dict(_split_entry(line) for line in _logical_lines(text))


class Properties:
    """Mutable property store layered over ``DEFAULTS``.

    Thread-safe: reads and writes of the custom layer go through a Lock.
    """

    __slots__ = ("_defaults", "_lock", "_values")

    def __init__(self, defaults: Mapping[str, str] | None = None) -> None:
        self._defaults: dict[str, str] = dict(DEFAULTS if defaults is None else defaults)
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    # -- Loading --

    def load_from_file(self, path: str | Path) -> bool:
        """Merge entries from a ``.properties`` file.

        Returns ``False`` (and keeps the current values) when the file
        does not exist.
        """
        file = Path(path)
        if not file.is_file():
            logger.info("Properties file not found: %s (using defaults)", file)
            return False
        entries = parse_properties(file.read_text(encoding="utf-8"))
        with self._lock:
            self._values.update(entries)
        logger.info("Loaded %d properties from %s", len(entries), file)
        return True

    def load_from_environment(
        self,
        prefix: str = "LYVEN_",
        environ: Mapping[str, str] | None = None,
    ) -> int:
        """Merge environment variables starting with *prefix*.

        ``LYVEN_SERVER_PORT`` becomes ``server.port``: the prefix is
        stripped, the rest lower-cased, and underscores become dots, so
        hyphenated keys such as ``server.context-path`` are not reachable
        this way. Returns the number of variables loaded.
        """
        env = os.environ if environ is None else environ
        loaded = {
            key[len(prefix) :].lower().replace("_", "."): value
            for key, value in env.items()
            if key.startswith(prefix) and len(key) > len(prefix)
        }
        with self._lock:
            self._values.update(loaded)
        logger.debug("Loaded %d environment variables with prefix %s", len(loaded), prefix)
        return len(loaded)

    # -- Typed access --

    def get_string(self, key: str, default: str | None = None) -> str | None:
        with self._lock:
            value = self._values.get(key)
        if value is not None:
            return value
        return self._defaults.get(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get_string(key)
        if value is None:
            return default
        try:
            return int(value.strip())
        except ValueError:
            logger.warning("Invalid integer value for %s: %r", key, value)
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get_string(key)
        if value is None:
            return default
        try:
            return float(value.strip())
        except ValueError:
            logger.warning("Invalid float value for %s: %r", key, value)
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get_string(key)
        if value is None:
            return default
        return value.strip().lower() in _TRUE

    # -- Mutation --

    def set_property(self, key: str, value: object) -> None:
        with self._lock:
            self._values[key] = str(value)

    def clear(self) -> None:
        """Drop custom values; defaults remain."""
        with self._lock:
            self._values.clear()

    # -- Views --

    def has_property(self, key: str) -> bool:
        with self._lock:
            return key in self._values or key in self._defaults

    def all_properties(self) -> dict[str, str]:
        """Defaults overlaid with custom values."""
        with self._lock:
            return {**self._defaults, **self._values}

    def custom_properties(self) -> dict[str, str]:
        with self._lock:
            return dict(self._values)

    def save_to_file(self, path: str | Path) -> None:
        """Write custom values (not defaults) as a ``.properties`` file."""
        lines = ["# Lyven configuration properties"]
        lines.extend(
            f"{_escape(key, is_key=True)}={_escape(value)}"
            for key, value in sorted(self.custom_properties().items())
        )
        Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.info("Properties saved to %s", path)

    def __len__(self) -> int:
        return len(self.all_properties())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has_property(key)


def _escape(text: str, *, is_key: bool = False) -> str:
    out = text.replace("\\", "\\\\").replace("\n", "\\n").replace("\t", "\\t")
    if is_key:
        out = out.replace("=", "\\=").replace(":", "\\:").replace(" ", "\\ ")
    elif out.startswith(" "):
        out = "\\" + out
    return out
