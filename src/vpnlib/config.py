from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from rich.color import Color, ColorParseError


class ConfigError(RuntimeError):
    pass


@dataclass
class Colors:
    background: str = "black"
    connected: str = "green"
    disconnected: str = "red"
    normal_mode: str = "cyan"
    search_mode: str = "yellow"
    items: str = "white"
    items_selected: str = "magenta"
    connection_output: str = "white"


COLOR_ROLES = tuple(f.name for f in fields(Colors))


@dataclass
class Config:
    version: int = 1
    binary: str = "mullvad"
    timeout: float = 30.0
    colors: Colors = field(default_factory=Colors)
    source_path: Optional[Path] = None

    def to_json(self) -> str:
        out = asdict(self)
        out["source_path"] = str(self.source_path) if self.source_path else None
        return json.dumps(out, indent=2, sort_keys=True)


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        # Expand ${VAR} style
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _as_colors(raw: Dict[str, Any]) -> Colors:
    unknown = sorted(set(raw) - set(COLOR_ROLES))
    if unknown:
        raise ConfigError(
            f"Unknown color role(s): {', '.join(unknown)}. Recognized: {', '.join(COLOR_ROLES)}"
        )
    colors = Colors(**{k: str(v).strip() for k, v in raw.items() if v is not None})
    for role in COLOR_ROLES:
        value = getattr(colors, role)
        try:
            Color.parse(value)
        except ColorParseError as e:
            raise ConfigError(f"Invalid color for '{role}': {value!r}") from e
    return colors


def resolve_config_path() -> Optional[Path]:
    """Locate the config file, or return None to use built-in defaults."""
    # Highest priority: explicit override
    override = os.environ.get("VPNCTL_CONFIG")
    if override:
        p = Path(override).expanduser()
        if p.is_file():
            return p
        raise ConfigError(f"VPNCTL_CONFIG path not found: {p}")

    # XDG base dirs
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
    candidates = [xdg_home / "vpnctl" / "config.yaml"]

    xdg_dirs = os.environ.get("XDG_CONFIG_DIRS", "/etc/xdg")
    for d in xdg_dirs.split(":"):
        if d:
            candidates.append(Path(d) / "vpnctl" / "config.yaml")

    for c in candidates:
        if c.is_file():
            return c
    return None


def load_config(path: Optional[Path] = None) -> Config:
    cfg_path = path or resolve_config_path()
    if cfg_path is None:
        return Config()

    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except FileNotFoundError as e:
        raise ConfigError(str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse {cfg_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {cfg_path} must be a mapping")

    data = _expand_env(data)
    try:
        timeout = float(data.get("timeout", 30))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid timeout: {data.get('timeout')!r}") from e

    cfg = Config(
        version=int(data.get("version", 1)),
        binary=str(data.get("binary") or "mullvad"),
        timeout=timeout,
        colors=_as_colors(data.get("colors") or {}),
        source_path=cfg_path,
    )
    return cfg
