"""Check configuration.

Options are merged from, lowest precedence first:

1. built-in defaults;
2. a config file: ``notelinks.toml`` in the note directory (top-level
   keys) or ``[tool.notelinks]`` in its ``pyproject.toml``, or the file
   given with ``--config``::

       include-orphans = true
       strict          = false
       extensions      = [".md"]
       format          = "text"
       output          = "link-report.txt"   # relative to the config file

3. environment variables ``NOTELINKS_INCLUDE_ORPHANS``,
   ``NOTELINKS_STRICT``, ``NOTELINKS_FORMAT``;
4. command-line flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from notelinks.errors import ConfigError
from notelinks.index import DEFAULT_EXTENSIONS
from notelinks.report import RENDERERS

log = logging.getLogger(__name__)

CONFIG_FILENAME = "notelinks.toml"
_KEYS = {"include_orphans", "strict", "extensions", "format", "output"}
_ENV = {
    "NOTELINKS_INCLUDE_ORPHANS": "include_orphans",
    "NOTELINKS_STRICT": "strict",
    "NOTELINKS_FORMAT": "format",
}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class CheckConfig:
    directory: Path
    include_orphans: bool = False
    strict: bool = False
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    format: str = "text"
    #: ``None`` writes the report to stdout
    output: Path | None = None

    def merge(self, options: Mapping[str, Any], *, base_dir: Path | None = None) -> "CheckConfig":
        """Return a copy with validated *options* applied."""
        changes: dict[str, Any] = {}
        for raw_key, value in options.items():
            key = raw_key.replace("-", "_")
            if key not in _KEYS:
                raise ConfigError(f"Unknown option {raw_key!r}")
            changes[key] = _coerce(key, value, base_dir)
        return replace(self, **changes)


def _coerce(key: str, value: Any, base_dir: Path | None) -> Any:  # noqa: ANN401
    if key in {"include_orphans", "strict"}:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
            return value.strip().lower() in _TRUE
        raise ConfigError(f"Option {key!r} must be a boolean, got {value!r}")
    if key == "format":
        if value not in RENDERERS:
            raise ConfigError(f"Option 'format' must be one of {sorted(RENDERERS)}, got {value!r}")
        return value
    if key == "extensions":
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) and v.strip() for v in value):
            raise ConfigError(f"Option 'extensions' must be a list of strings, got {value!r}")
        return tuple(v.strip() for v in value)
    # output
    if value is None:
        return None
    if not isinstance(value, (str, Path)):
        raise ConfigError(f"Option 'output' must be a path, got {value!r}")
    path = Path(value)
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


def find_config_file(directory: Path) -> Path | None:
    """Locate ``notelinks.toml`` or a ``pyproject.toml`` with ``[tool.notelinks]``."""
    candidate = directory / CONFIG_FILENAME
    if candidate.is_file():
        return candidate
    pyproject = directory / "pyproject.toml"
    if pyproject.is_file() and "notelinks" in _read_toml(pyproject).get("tool", {}):
        return pyproject
    return None


def load_config_file(path: Path) -> dict[str, Any]:
    data = _read_toml(path)
    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("notelinks", {})
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: notelinks settings must be a table")
    return data


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc.strerror or exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc


def env_options(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    environ = os.environ if environ is None else environ
    return {key: environ[name] for name, key in _ENV.items() if name in environ}


def load_config(
    directory: Path | str,
    *,
    config_file: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> CheckConfig:
    """Build the effective :class:`CheckConfig` for *directory*."""
    directory = Path(directory)
    config = CheckConfig(directory=directory)

    path = Path(config_file) if config_file is not None else None
    if path is None and directory.is_dir():
        path = find_config_file(directory)
    if path is not None:
        log.info("Loading config from %s", path)
        config = config.merge(load_config_file(path), base_dir=path.parent)

    config = config.merge(env_options(environ))
    config = config.merge({k: v for k, v in (overrides or {}).items() if v is not None})
    log.debug("Effective config: %s", config)
    return config
