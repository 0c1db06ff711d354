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

"""Configuration loading for msixmaker.

This module provides tools for loading YAML build configuration files with
a layered approach:

  - Shared defaults (defaults/msix.yaml)
  - Build configuration (any YAML file)

Dicts are merged recursively and lists/scalars are replaced (last wins).
Relative paths are resolved against the file that declares them.

Public API:

- load_build_config: Load a config file into an immutable BuildConfig
- BuildConfig and its option types

Example:
    Basic usage:

        from pathlib import Path
        from msixmaker.config import load_build_config

        config = load_build_config(Path("packaging/msix.yaml"))
        print(config.app_icon)

"""

from .loader import (
    APP_CAPABILITIES,
    BuildConfig,
    CodesignOptions,
    CopilotKeyAction,
    CopilotKeyConfig,
    ProtocolSpec,
    ToolPaths,
    UpdaterOptions,
    load_build_config,
    load_config_dict,
)

__all__ = [
    "APP_CAPABILITIES",
    "BuildConfig",
    "CodesignOptions",
    "CopilotKeyAction",
    "CopilotKeyConfig",
    "ProtocolSpec",
    "ToolPaths",
    "UpdaterOptions",
    "load_build_config",
    "load_config_dict",
]
