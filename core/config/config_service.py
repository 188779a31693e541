"""Typed, layered configuration loader with precedence handling.

Layers (later wins):
  0. embedded defaults (``_DEFAULTS``)
  1. ``core/config/defaults.ini`` (optional, shipped with the project)
  2. user INI (``$XDG_CONFIG_HOME/signdesk/config.ini``) or an explicit path
  3. environment variables ``SIGNDESK_<SECTION>__<KEY>``
  4. in-code overrides (tests, embedding applications)
"""
from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple, get_type_hints

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

def _find_project_root() -> Path:
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "core").is_dir():
            return parent
    return here.parent

PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "core" / "config"
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
ENV_PREFIX = "SIGNDESK_"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Storage": {
        "db_path": (PROJECT_ROOT / "databases" / "signdesk.db").as_posix(),
        "blob_root": (PROJECT_ROOT / "data" / "documents").as_posix(),
        "db_timeout_seconds": "10",
    },
    "Signing": {
        "render_width": "600",
        "min_font_size": "12",
        "max_font_size": "60",
        "target_page": "0",
    },
    "Urls": {
        "secret": "change-me",
        "ttl_seconds": "60",
        "preview_ttl_seconds": "3600",
    },
    "Reconciliation": {
        "grace_seconds": "900",
        "discard_orphans": "false",
    },
    "Logging": {
        "level": "INFO",
        "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class StorageConfig:
    db_path: Path
    blob_root: Path
    db_timeout_seconds: float = 10.0


@dataclass
class SigningConfig:
    render_width: float = 600.0
    min_font_size: float = 12.0
    max_font_size: float = 60.0
    target_page: int = 0

    @property
    def font_bounds(self) -> Tuple[float, float]:
        return (self.min_font_size, self.max_font_size)


@dataclass
class UrlConfig:
    secret: str = "change-me"
    ttl_seconds: int = 60
    preview_ttl_seconds: int = 3600


@dataclass
class ReconciliationConfig:
    grace_seconds: int = 900
    discard_orphans: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section, raw=True)}
    return data


def _read_ini(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser(interpolation=None)
    cp.read(path, encoding="utf-8")
    return _cp_to_dict(cp)


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: Any) -> Any:
    if typ is Path:
        return Path(str(value)).expanduser()
    if typ is bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ is int:
        return int(value)
    if typ is float:
        return float(value)
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    hints = get_type_hints(cls)
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, hints[field.name])
    return cls(**kwargs)


def _env_overlays() -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        result.setdefault(section.title(), {})[key.lower()] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "SignDesk" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "signdesk" / "config.ini"


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety."""

    def __init__(
        self,
        *,
        ini_path: Optional[Path] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None,
        use_environment: bool = True,
    ) -> None:
        self._lock = RLock()
        self._ini_path = Path(ini_path) if ini_path else _user_config_path()
        self._overrides = overrides or {}
        self._use_environment = use_environment
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if DEFAULTS_INI.exists():
                _apply(merged, _read_ini(DEFAULTS_INI), "defaults.ini", str(DEFAULTS_INI), sources)

            # Layer 2: user / explicit INI
            if self._ini_path.exists():
                _apply(merged, _read_ini(self._ini_path), "ini", str(self._ini_path), sources)

            # Layer 3: environment variables
            if self._use_environment:
                _apply(merged, _env_overlays(), "env", "os.environ", sources)

            # Layer 4: overrides
            _apply(merged, self._overrides, "override", "code", sources)

            self._merged = merged
            self._sources = sources

            self.storage = _build_dataclass(StorageConfig, merged.get("Storage", {}))
            self.signing = _build_dataclass(SigningConfig, merged.get("Signing", {}))
            self.urls = _build_dataclass(UrlConfig, merged.get("Urls", {}))
            self.reconciliation = _build_dataclass(ReconciliationConfig, merged.get("Reconciliation", {}))
            self.logging = _build_dataclass(LoggingConfig, merged.get("Logging", {}))

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))
