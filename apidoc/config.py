"""Configuration loading for apidoc (.apidoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".apidoc.yml"

MODE_STATIC = "static"
MODE_LIVE_NAV = "live-nav"
MODES = (MODE_STATIC, MODE_LIVE_NAV)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class SiteConfig:
    """Page chrome shared by every generated page."""

    title: str = "API Documentation"
    main_url: str = "index.html"
    search_engine_id: Optional[str] = None
    search_results_url: str = "results.html"
    footer_text: Optional[str] = None
    pre_footer_text: str = ""
    templates_dir: Optional[Path] = None


@dataclass
class ClientConfig:
    """How the client-side navigation script is produced."""

    compiler: List[str] = field(default_factory=list)


@dataclass
class ApidocConfig:
    """Represents the settings defined in .apidoc.yml."""

    root: Path
    output_dir: Path = Path("docs")
    mode: str = MODE_LIVE_NAV
    include_source: bool = True
    generate_app_cache: bool = False
    omit_generation_time: bool = False
    libraries: Optional[List[str]] = None
    site: SiteConfig = field(default_factory=SiteConfig)
    client: ClientConfig = field(default_factory=ClientConfig)


def load_config(config_path: Path) -> ApidocConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ApidocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = ApidocConfig(root=root)

    output_dir = _as_str(data.get("output_dir"))
    if output_dir:
        config.output_dir = root / output_dir

    mode = _as_str(data.get("mode"))
    if mode is not None:
        if mode not in MODES:
            raise ConfigError(f"Unknown mode '{mode}' (expected one of {', '.join(MODES)})")
        config.mode = mode

    for key in ("include_source", "generate_app_cache", "omit_generation_time"):
        value = _as_bool(data.get(key))
        if value is not None:
            setattr(config, key, value)

    if data.get("libraries") is not None:
        config.libraries = _as_str_list(data.get("libraries"))

    site_data = _as_dict(data.get("site"))
    if site_data:
        site = config.site
        site.title = _as_str(site_data.get("title")) or site.title
        site.main_url = _as_str(site_data.get("main_url")) or site.main_url
        site.search_engine_id = _as_str(site_data.get("search_engine_id"))
        site.search_results_url = (
            _as_str(site_data.get("search_results_url")) or site.search_results_url
        )
        site.footer_text = _as_str(site_data.get("footer_text"))
        site.pre_footer_text = _as_str(site_data.get("pre_footer_text")) or ""
        templates_dir = _as_str(site_data.get("templates_dir"))
        if templates_dir:
            site.templates_dir = root / templates_dir

    client_data = _as_dict(data.get("client"))
    if client_data:
        config.client.compiler = _as_str_list(client_data.get("compiler"))

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = Path(config_path).expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "ApidocConfig",
    "ClientConfig",
    "ConfigError",
    "CONFIG_FILENAME",
    "MODES",
    "MODE_LIVE_NAV",
    "MODE_STATIC",
    "SiteConfig",
    "load_config",
]
