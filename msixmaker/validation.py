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

"""Build configuration validation module.

This module checks a build configuration file without building anything:
no staging, no external tools, no network calls. This is useful for quick
feedback while writing a config and in CI/CD pipelines.

Validation Checks:

- YAML syntax is valid and the document is a mapping
- Required fields are present and well-typed (app_icon, capabilities, ...)
- Icon files exist
- Install descriptor settings are consistent with base_download_url
- Configured tool paths exist

Example:
    Validate a config and handle results:
        ```python
        from pathlib import Path
        from msixmaker.validation import validate_config

        result = validate_config(Path("msix.yaml"))
        if result.status == "valid":
            print("Config is valid")
        else:
            for error in result.errors:
                print(f"Error: {error}")
        ```

"""

from __future__ import annotations

from pathlib import Path

from msixmaker.build.manifest import check_appinstaller_settings
from msixmaker.config import BuildConfig, load_config_dict
from msixmaker.exceptions import ConfigError
from msixmaker.results import ValidationResult

__all__ = ["validate_config"]


def _tool_paths(config: BuildConfig) -> list[tuple[str, Path | None]]:
    paths = [
        ("tools.makeappx", config.tools.makeappx),
        ("tools.makepri", config.tools.makepri),
        ("tools.sigcheck", config.tools.sigcheck),
        ("tools.signtool", config.tools.signtool),
    ]
    if config.codesign is not None:
        paths.append(("codesign.signtool_path", config.codesign.signtool_path))
        paths.append(("codesign.certificate_file", config.codesign.certificate_file))
    return paths


def validate_config(
    config_path: Path, *, defaults_path: Path | None = None
) -> ValidationResult:
    """Validate a build configuration file without building.

    Args:
        config_path: Path to the build config YAML file.
        defaults_path: Explicit shared defaults file. When omitted, the
            nearest 'defaults/msix.yaml' above the config is used, if any.

    Returns:
        ValidationResult with status "valid" or "invalid", the collected
        errors and warnings, and the config path.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    errors: list[str] = []
    warnings: list[str] = []

    def result() -> ValidationResult:
        return ValidationResult(
            status="valid" if not errors else "invalid",
            errors=errors,
            warnings=warnings,
            config_path=str(config_path),
        )

    logger.verbose("CONFIG", f"Validating config: {config_path}")

    if not config_path.exists():
        errors.append(f"Config file not found: {config_path}")
        return result()

    try:
        merged = load_config_dict(config_path, defaults_path=defaults_path)
        config = BuildConfig.from_dict(merged)
    except (ConfigError, FileNotFoundError) as err:
        errors.append(str(err))
        return result()

    logger.verbose("CONFIG", "[OK] Config parsed")

    if not config.app_icon.is_file():
        errors.append(f"app_icon not found: {config.app_icon}")
    if config.wallpaper_icon is not None and not config.wallpaper_icon.is_file():
        errors.append(f"wallpaper_icon not found: {config.wallpaper_icon}")

    try:
        check_appinstaller_settings(config)
    except ConfigError as err:
        errors.append(str(err))

    if config.base_download_url and config.make_appinstaller is False:
        warnings.append(
            "base_download_url is set but make_appinstaller is false; "
            "no install descriptor will be generated"
        )

    if not config.publisher:
        warnings.append(
            "publisher is not set; it will be read from the signed executable "
            "with sigcheck"
        )

    for name, path in _tool_paths(config):
        if path is not None and not path.exists():
            warnings.append(f"{name} not found: {path}")

    if errors:
        logger.verbose("CONFIG", f"[ERROR] Config has {len(errors)} error(s)")
    else:
        logger.verbose("CONFIG", "[OK] Config is valid")

    return result()
