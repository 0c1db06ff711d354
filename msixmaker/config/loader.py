# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Build configuration loading for msixmaker.

This module turns YAML build configuration files into an immutable
BuildConfig. A configuration can be layered on top of shared defaults so a
team can keep signing and tool settings in one place.

Configuration Layers
--------------------
1. **Shared defaults** (defaults/msix.yaml)
   - Found by walking upward from the config file, or passed explicitly
   - Typically holds tool paths, codesign and updater settings
2. **Build configuration** (e.g. packaging/msix.yaml)
   - Always required; defines the app icon and per-app toggles
   - Overrides the shared defaults

Merge Behavior
--------------
The loader performs deep merging with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Path Resolution
---------------
Relative paths are resolved against the CONFIG FILE location. Currently
resolved paths:
  - app_icon, wallpaper_icon
  - tools.makeappx, tools.makepri, tools.sigcheck, tools.signtool
  - codesign.certificate_file, codesign.signtool_path

Example
-------
    >>> from pathlib import Path
    >>> from msixmaker.config import load_build_config
    >>> config = load_build_config(Path("packaging/msix.yaml"))
    >>> config.app_icon.name
    'icon.png'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from msixmaker.exceptions import ConfigError

# Capabilities that map to a manifest capability element
APP_CAPABILITIES = ("GraphicsCapture", "Microphone", "Webcam")

COPILOT_KEY_ACTIONS = ("tap", "start", "stop")

DEFAULT_ASSET_WORKERS = 4


# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class ToolPaths:
    """Explicit locations of the native tools; None means search for them."""

    makeappx: Path | None = None
    makepri: Path | None = None
    sigcheck: Path | None = None
    signtool: Path | None = None


@dataclass(frozen=True)
class CodesignOptions:
    """Options passed to signtool.exe.

    Attributes:
        certificate_file: Path to a .pfx certificate.
        certificate_password: Password for the .pfx file.
        certificate_sha1: Thumbprint of a certificate in the store, used
            instead of a certificate file.
        timestamp_server: RFC 3161 timestamp server URL.
        description: Optional signed content description (/d).
        signtool_path: Explicit signtool.exe; overrides tools.signtool.
    """

    certificate_file: Path | None = None
    certificate_password: str | None = None
    certificate_sha1: str | None = None
    timestamp_server: str | None = None
    description: str | None = None
    signtool_path: Path | None = None


@dataclass(frozen=True)
class ProtocolSpec:
    """A named group of URI schemes the app registers for."""

    name: str
    schemes: tuple[str, ...]


@dataclass(frozen=True)
class CopilotKeyAction:
    url: str
    wparam: int | None = None


@dataclass(frozen=True)
class CopilotKeyConfig:
    """Copilot hardware key bindings. Each action is optional."""

    tap: CopilotKeyAction | None = None
    start: CopilotKeyAction | None = None
    stop: CopilotKeyAction | None = None


@dataclass(frozen=True)
class UpdaterOptions:
    """Generic-provider auto-update feed settings.

    Attributes:
        url: Base URL where the channel file is published.
        channel: Channel name; the channel file is "{channel}.yml".
        updater_cache_dir_name: Updater cache directory override.
        publisher_name: Publisher name the updater verifies.
    """

    url: str
    channel: str = "latest"
    updater_cache_dir_name: str | None = None
    publisher_name: str | None = None


@dataclass(frozen=True)
class BuildConfig:
    """Caller-supplied packaging configuration.

    Instances are immutable; optional values are resolved once by
    derive_metadata() and never re-read afterwards.
    """

    app_icon: Path
    wallpaper_icon: Path | None = None
    publisher: str | None = None
    internal_app_id: str | None = None
    app_description: str | None = None
    tools: ToolPaths = field(default_factory=ToolPaths)
    codesign: CodesignOptions | None = None
    base_download_url: str | None = None
    make_appinstaller: bool | None = None
    app_capabilities: tuple[str, ...] = ()
    protocols: tuple[ProtocolSpec, ...] = ()
    app_uri_handlers: tuple[str, ...] = ()
    allow_rollbacks: bool | None = None
    allow_external_content: bool = False
    run_at_startup: bool = False
    startup_params: str | None = None
    exe_alias: bool = False
    copilot_key: CopilotKeyConfig | None = None
    updater: UpdaterOptions | None = None
    pack_from_mapping: bool = False
    asset_workers: int = DEFAULT_ASSET_WORKERS
    tool_timeout: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildConfig:
        """Build a BuildConfig from a plain mapping (e.g. parsed YAML).

        Raises:
            ConfigError: If a required field is missing or a field has the
                wrong type.
        """
        if not isinstance(data, dict):
            raise ConfigError("Build configuration must be a mapping")

        app_icon = data.get("app_icon")
        if not app_icon:
            raise ConfigError("Missing required field: app_icon")

        capabilities = _str_tuple(data, "app_capabilities")
        unknown = [cap for cap in capabilities if cap not in APP_CAPABILITIES]
        if unknown:
            raise ConfigError(
                f"Unknown app_capabilities: {', '.join(unknown)}. "
                f"Supported: {', '.join(APP_CAPABILITIES)}"
            )

        asset_workers = data.get("asset_workers", DEFAULT_ASSET_WORKERS)
        if not isinstance(asset_workers, int) or isinstance(asset_workers, bool):
            raise ConfigError("asset_workers must be an integer")
        if asset_workers < 1:
            raise ConfigError("asset_workers must be at least 1")

        tool_timeout = data.get("tool_timeout")
        if tool_timeout is not None and (
            isinstance(tool_timeout, bool) or not isinstance(tool_timeout, (int, float))
        ):
            raise ConfigError("tool_timeout must be a number of seconds")

        return cls(
            app_icon=Path(app_icon),
            wallpaper_icon=_optional_path(data, "wallpaper_icon"),
            publisher=_optional_str(data, "publisher"),
            internal_app_id=_optional_str(data, "internal_app_id"),
            app_description=_optional_str(data, "app_description"),
            tools=_parse_tools(data.get("tools")),
            codesign=_parse_codesign(data.get("codesign")),
            base_download_url=_optional_str(data, "base_download_url"),
            make_appinstaller=_optional_bool(data, "make_appinstaller"),
            app_capabilities=capabilities,
            protocols=_parse_protocols(data.get("protocols")),
            app_uri_handlers=_str_tuple(data, "app_uri_handlers"),
            allow_rollbacks=_optional_bool(data, "allow_rollbacks"),
            allow_external_content=bool(_optional_bool(data, "allow_external_content")),
            run_at_startup=bool(_optional_bool(data, "run_at_startup")),
            startup_params=_optional_str(data, "startup_params"),
            exe_alias=bool(_optional_bool(data, "exe_alias")),
            copilot_key=_parse_copilot_key(data.get("copilot_key")),
            updater=_parse_updater(data.get("updater")),
            pack_from_mapping=bool(_optional_bool(data, "pack_from_mapping")),
            asset_workers=asset_workers,
            tool_timeout=float(tool_timeout) if tool_timeout is not None else None,
        )


# -------------------------------
# Field helpers
# -------------------------------


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ConfigError(f"{key} must be a string")
    return str(value)


def _optional_bool(data: dict[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false")
    return value


def _optional_path(data: dict[str, Any], key: str) -> Path | None:
    value = _optional_str(data, key)
    return Path(value) if value else None


def _str_tuple(data: dict[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of strings")
    return tuple(value)


def _section(value: Any, name: str) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ConfigError(f"{name} must be a mapping")
    return value


def _parse_tools(value: Any) -> ToolPaths:
    section = _section(value, "tools")
    if section is None:
        return ToolPaths()
    return ToolPaths(
        makeappx=_optional_path(section, "makeappx"),
        makepri=_optional_path(section, "makepri"),
        sigcheck=_optional_path(section, "sigcheck"),
        signtool=_optional_path(section, "signtool"),
    )


def _parse_codesign(value: Any) -> CodesignOptions | None:
    section = _section(value, "codesign")
    if section is None:
        return None
    return CodesignOptions(
        certificate_file=_optional_path(section, "certificate_file"),
        certificate_password=_optional_str(section, "certificate_password"),
        certificate_sha1=_optional_str(section, "certificate_sha1"),
        timestamp_server=_optional_str(section, "timestamp_server"),
        description=_optional_str(section, "description"),
        signtool_path=_optional_path(section, "signtool_path"),
    )


def _parse_protocols(value: Any) -> tuple[ProtocolSpec, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError("protocols must be a list")

    protocols = []
    for entry in value:
        section = _section(entry, "protocols entry") or {}
        name = _optional_str(section, "name")
        if not name:
            raise ConfigError("Each protocols entry needs a name")
        schemes = _str_tuple(section, "schemes")
        if not schemes:
            raise ConfigError(f"Protocol {name!r} has no schemes")
        protocols.append(ProtocolSpec(name=name, schemes=schemes))
    return tuple(protocols)


def _parse_copilot_key(value: Any) -> CopilotKeyConfig | None:
    section = _section(value, "copilot_key")
    if section is None:
        return None

    actions: dict[str, CopilotKeyAction] = {}
    for action in COPILOT_KEY_ACTIONS:
        entry = _section(section.get(action), f"copilot_key.{action}")
        if entry is None:
            continue
        url = _optional_str(entry, "url")
        if not url:
            raise ConfigError(f"copilot_key.{action} needs a url")
        wparam = entry.get("wparam")
        if wparam is not None and (
            isinstance(wparam, bool) or not isinstance(wparam, int)
        ):
            raise ConfigError(f"copilot_key.{action}.wparam must be an integer")
        actions[action] = CopilotKeyAction(url=url, wparam=wparam)
    return CopilotKeyConfig(**actions)


def _parse_updater(value: Any) -> UpdaterOptions | None:
    section = _section(value, "updater")
    if section is None:
        return None
    url = _optional_str(section, "url")
    if not url:
        raise ConfigError("updater.url is required when updater is configured")
    return UpdaterOptions(
        url=url,
        channel=_optional_str(section, "channel") or "latest",
        updater_cache_dir_name=_optional_str(section, "updater_cache_dir_name"),
        publisher_name=_optional_str(section, "publisher_name"),
    )


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      FileNotFoundError - when file does not exist
      ConfigError       - for invalid YAML or an empty document
    """
    if not p.exists():
        raise FileNotFoundError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


def _find_defaults_file(start_dir: Path) -> Path | None:
    """
    Walk upward from 'start_dir' looking for 'defaults/msix.yaml'.
    Returns the file path or None if not found.
    """
    for parent in [start_dir] + list(start_dir.parents):
        candidate = parent / "defaults" / "msix.yaml"
        if candidate.exists():
            return candidate
    return None


def _resolve(raw: Any, base_dir: Path) -> Any:
    if isinstance(raw, str) and raw:
        p = Path(raw)
        if not p.is_absolute():
            return str((base_dir / p).resolve())
    return raw


def _resolve_known_paths(cfg: dict[str, Any], base_dir: Path) -> None:
    """
    Resolve relative path fields inside the merged config.

    Relative values are resolved against 'base_dir'; absolute values and
    missing fields are left alone. Modifies cfg in place.
    """
    for key in ("app_icon", "wallpaper_icon"):
        if key in cfg:
            cfg[key] = _resolve(cfg[key], base_dir)

    tools = cfg.get("tools")
    if isinstance(tools, dict):
        for key in ("makeappx", "makepri", "sigcheck", "signtool"):
            if key in tools:
                tools[key] = _resolve(tools[key], base_dir)

    codesign = cfg.get("codesign")
    if isinstance(codesign, dict):
        for key in ("certificate_file", "signtool_path"):
            if key in codesign:
                codesign[key] = _resolve(codesign[key], base_dir)


# -------------------------------
# Public API
# -------------------------------


def load_config_dict(
    config_path: Path, *, defaults_path: Path | None = None
) -> dict[str, Any]:
    """Load and merge the raw configuration mapping for a config file.

    Steps
      1) Read the config YAML.
      2) Use 'defaults_path' or scan upwards for 'defaults/msix.yaml'.
      3) Merge: defaults -> config (dicts deep-merge, lists replace).
      4) Resolve known relative paths (relative to the config directory).

    Raises
      FileNotFoundError if the config file itself is missing,
      ConfigError on YAML errors or a non-mapping document.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    config_path = config_path.resolve()
    config_dir = config_path.parent

    logger.verbose("CONFIG", f"Loading config: {config_path}")
    config_obj = _load_yaml_file(config_path)
    if not isinstance(config_obj, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {config_path}")

    if defaults_path is None:
        defaults_path = _find_defaults_file(config_dir)

    merged: dict[str, Any] = {}
    if defaults_path is not None:
        defaults_path = defaults_path.resolve()
        logger.verbose("CONFIG", f"Loading defaults: {defaults_path}")
        defaults_obj = _load_yaml_file(defaults_path)
        if not isinstance(defaults_obj, dict):
            raise ConfigError(
                f"Top-level YAML must be a mapping (dict): {defaults_path}"
            )
        # Paths in the defaults file are relative to the defaults file
        _resolve_known_paths(defaults_obj, defaults_path.parent)
        merged = _deep_merge_dicts(merged, defaults_obj)

    _resolve_known_paths(config_obj, config_dir)
    merged = _deep_merge_dicts(merged, config_obj)

    logger.debug("CONFIG", f"Merged keys: {', '.join(merged.keys())}")

    return merged


def load_build_config(
    config_path: Path, *, defaults_path: Path | None = None
) -> BuildConfig:
    """Load a YAML build configuration into a BuildConfig.

    Args:
        config_path: Path to the build config YAML file.
        defaults_path: Explicit shared defaults file. When omitted, the
            nearest 'defaults/msix.yaml' above the config is used, if any.

    Returns:
        The immutable BuildConfig.

    Raises:
        FileNotFoundError: If the config file is missing.
        ConfigError: If the YAML is invalid or a field is malformed.
    """
    merged = load_config_dict(config_path, defaults_path=defaults_path)
    return BuildConfig.from_dict(merged)
